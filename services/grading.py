"""
Grading of submissions.
"""

import logging
import math

from datetime_helpers import utcnow
from errors import NotFoundError, ValidationError
from extensions import db
from models import Submission

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100


def validate_score(score):
    """Return score as a float or raise ValidationError."""
    # bool is an int subclass but never a valid score
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError('Invalid score (0-100 required)')
    if math.isnan(score) or score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError('Invalid score (0-100 required)')
    return float(score)


def grade_submission(submission_id, score, feedback=None, now=None):
    """
    Record a grade. Always moves the submission to GRADED and overwrites any
    earlier grade and feedback; is_late is left as it was.
    """
    score = validate_score(score)

    submission = db.session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError('Submission not found')

    if submission.status == Submission.GRADED:
        logger.info(f"Submission {submission_id} re-graded: {submission.grade} -> {score}")

    submission.grade = score
    submission.feedback = feedback or None
    submission.graded_at = now or utcnow()
    submission.status = Submission.GRADED
    db.session.commit()

    logger.info(f"Submission {submission_id} graded with score {score}")
    return submission
