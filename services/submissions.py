"""
Submission intake: validates the upload, decides SUBMITTED vs LATE and
stores the file. One submission per student and assignment.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from datetime_helpers import utcnow
from errors import ConflictError, NotFoundError, ValidationError
from extensions import db
from models import Assignment, Submission

logger = logging.getLogger(__name__)


def resolve_status(due_date, now):
    """Status a new submission gets: LATE once the due date has passed."""
    if due_date is not None and now > due_date:
        return Submission.LATE
    return Submission.SUBMITTED


def check_upload(upload):
    """Reject missing files and declared types outside the allowlist."""
    if upload is None or not upload.filename:
        raise ValidationError('File is required')
    allowed = current_app.config['ALLOWED_UPLOAD_TYPES']
    if upload.mimetype not in allowed:
        raise ValidationError('Unsupported file type')


def _existing_submission(assignment_id, user_id):
    return Submission.query.filter_by(assignment_id=assignment_id, user_id=user_id).first()


def _conflict(existing):
    return ConflictError(
        'You have already submitted this assignment',
        payload={'submissionId': existing.id if existing else None},
    )


def submit_assignment(assignment_id, user_id, upload, now=None):
    """
    Create the submission for (assignment_id, user_id).

    Raises ValidationError when an argument or the file is missing,
    NotFoundError for an unknown assignment and ConflictError (carrying the
    existing submissionId) when the student already submitted.
    """
    if not assignment_id or not user_id or upload is None or not upload.filename:
        raise ValidationError(
            'Missing required fields',
            payload={'received': {
                'assignmentId': assignment_id,
                'userId': user_id,
                'fileExists': bool(upload and upload.filename),
            }},
        )
    check_upload(upload)

    assignment = db.session.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError('Assignment not found')

    existing = _existing_submission(assignment_id, user_id)
    if existing is not None:
        raise _conflict(existing)

    now = now or utcnow()
    status = resolve_status(assignment.due_date, now)

    submission = Submission(
        assignment_id=assignment_id,
        user_id=user_id,
        status=status,
        is_late=status == Submission.LATE,
        submitted_at=now,
    )
    submission.attach_file(upload)
    db.session.add(submission)
    try:
        db.session.commit()
    except IntegrityError:
        # Only a row for the same pair means a lost race; anything else
        # (e.g. an unknown userId under enforced foreign keys) propagates
        db.session.rollback()
        existing = _existing_submission(assignment_id, user_id)
        if existing is None:
            raise
        raise _conflict(existing)

    logger.info(f"Submission {submission.id} created for assignment {assignment_id} "
                f"by user {user_id} with status {status}")
    return submission


def list_submissions(assignment_id):
    """All submissions for an assignment, newest first."""
    submissions = Submission.query.filter_by(assignment_id=assignment_id) \
        .order_by(Submission.submitted_at.desc()).all()
    return {
        'total': len(submissions),
        'submissions': [s.to_dict() for s in submissions],
    }
