"""
Assignment routes: publishing work, student submissions, grading and file
downloads.
"""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required

from datetime_helpers import isoformat, parse_datetime
from decorators import teacher_required
from errors import ForbiddenError, ValidationError
from extensions import db
from models import Assignment, Classroom, Submission
from services import check_upload, grade_submission, list_submissions, submit_assignment
from .utils import file_response, get_or_404, parse_id, request_data

bp = Blueprint('assignments', __name__)


def _assignment_summary(assignment):
    return {
        'id': assignment.id,
        'title': assignment.title,
        'description': assignment.description,
        'dueDate': isoformat(assignment.due_date),
        'status': assignment.status,
        'fileName': assignment.file_name,
    }


@bp.route('/assignments', methods=['POST'])
@login_required
@teacher_required
def create_assignment():
    data = request_data()

    title = (data.get('title') or '').strip()
    if not title or not data.get('classroomId'):
        raise ValidationError('Title and classroom ID are required')
    due_date = parse_datetime(data.get('dueDate'))
    if due_date is None:
        raise ValidationError('Valid due date is required')

    classroom_id = parse_id(data.get('classroomId'), 'classroomId')
    classroom = get_or_404(Classroom, classroom_id, 'Classroom not found')
    if classroom.teacher_id != current_user.id:
        raise ForbiddenError('Only the classroom teacher can create assignments')

    assignment = Assignment(
        title=title,
        description=(data.get('description') or '').strip() or None,
        due_date=due_date,
        classroom_id=classroom_id,
        user_id=current_user.id,
        status='published',
    )
    upload = request.files.get('file')
    if upload is not None and upload.filename:
        check_upload(upload)
        assignment.attach_file(upload)

    db.session.add(assignment)
    db.session.commit()
    current_app.logger.info(f"Assignment {assignment.id} published in classroom {classroom_id}")

    return jsonify(_assignment_summary(assignment)), 201


@bp.route('/assignments/<int:classroom_id>/assignments', methods=['GET'])
def list_classroom_assignments(classroom_id):
    assignments = Assignment.query.filter_by(classroom_id=classroom_id) \
        .order_by(Assignment.created_at.desc()).all()
    result = []
    for assignment in assignments:
        data = _assignment_summary(assignment)
        data.update({
            'fileType': assignment.file_type,
            'fileSize': assignment.file_size,
            'createdAt': isoformat(assignment.created_at),
            'classroom': {'name': assignment.classroom.name},
        })
        result.append(data)
    return jsonify(result)


@bp.route('/assignments/<int:classroom_id>/students/<int:user_id>/assignments', methods=['GET'])
def list_student_assignments(classroom_id, user_id):
    """A classroom's published assignments with this student's submission."""
    assignments = Assignment.query.filter_by(classroom_id=classroom_id, status='published') \
        .order_by(Assignment.due_date.asc()).all()

    result = []
    for assignment in assignments:
        submission = Submission.query.filter_by(assignment_id=assignment.id, user_id=user_id).first()
        result.append({
            'id': assignment.id,
            'title': assignment.title,
            'description': assignment.description,
            'dueDate': isoformat(assignment.due_date),
            'status': assignment.status,
            'fileInfo': assignment.file_info(),
            'createdAt': isoformat(assignment.created_at),
            'classroom': {'name': assignment.classroom.name},
            'submission': {
                'id': submission.id,
                'submittedAt': isoformat(submission.submitted_at),
                'fileInfo': submission.file_info(),
                'status': submission.status,
                'isLate': submission.is_late,
                'grade': submission.grade,
                'feedback': submission.feedback,
            } if submission else None,
            'isSubmitted': submission is not None,
            'isGraded': submission is not None and submission.status == Submission.GRADED,
        })
    return jsonify(result)


@bp.route('/assignments/<int:assignment_id>/file', methods=['GET'])
def download_assignment_file(assignment_id):
    assignment = get_or_404(Assignment, assignment_id, 'File not found')
    return file_response(assignment, 'assignment')


@bp.route('/assignments/<int:assignment_id>/submissions', methods=['POST'])
def create_submission(assignment_id):
    user_id = request.form.get('userId')
    submission = submit_assignment(
        assignment_id,
        parse_id(user_id, 'userId') if user_id else None,
        request.files.get('file'),
    )
    data = submission.to_dict()
    data['assignment'] = {
        'id': submission.assignment.id,
        'title': submission.assignment.title,
        'dueDate': isoformat(submission.assignment.due_date),
    }
    data['message'] = 'Assignment submitted successfully (late submission)' \
        if submission.is_late else 'Assignment submitted successfully'
    return jsonify(data), 201


@bp.route('/assignments/<int:assignment_id>/submissions', methods=['GET'])
def get_assignment_submissions(assignment_id):
    return jsonify(list_submissions(assignment_id))


@bp.route('/assignments/<int:submission_id>/file/download', methods=['GET'])
def download_submission_file(submission_id):
    submission = get_or_404(Submission, submission_id, 'File not found')
    return file_response(submission, f'submission-{submission_id}')


@bp.route('/assignments/<int:submission_id>/grade', methods=['PUT'])
def grade(submission_id):
    data = request.get_json(silent=True) or {}
    submission = grade_submission(submission_id, data.get('score'), data.get('feedback'))
    return jsonify({
        'id': submission.id,
        'grade': submission.grade,
        'feedback': submission.feedback,
    })
