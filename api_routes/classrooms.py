"""
Classroom routes: listing, creation, joining by code, archiving,
announcements and upcoming deadlines.
"""

import secrets
import string

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import IntegrityError

from datetime_helpers import isoformat, utcnow
from errors import ConflictError, ForbiddenError, NotFoundError
from extensions import db
from models import Announcement, Assignment, Classroom, Enrollment, User
from .utils import get_or_404, parse_id, request_data, require_fields

bp = Blueprint('classrooms', __name__)

CODE_ALPHABET = string.ascii_lowercase + string.digits
CODE_LENGTH = 6


def generate_class_code():
    """Random join code not used by any classroom yet."""
    while True:
        code = ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
        if not Classroom.query.filter_by(code=code).first():
            return code


@bp.route('/classrooms', methods=['GET'])
def list_classrooms():
    classrooms = Classroom.query.order_by(Classroom.created_at.desc()).all()
    return jsonify([c.to_dict() for c in classrooms])


@bp.route('/classrooms', methods=['POST'])
def create_classroom():
    data = request_data()
    require_fields(data, 'name', 'teacherId')

    teacher_id = parse_id(data.get('teacherId'), 'teacherId')
    get_or_404(User, teacher_id, 'Teacher not found')

    code = (data.get('code') or '').strip() or generate_class_code()
    if Classroom.query.filter_by(code=code).first():
        raise ConflictError('Classroom code already in use')

    classroom = Classroom(
        name=data['name'].strip(),
        code=code,
        subject=data.get('subject'),
        description=data.get('description'),
        teacher_id=teacher_id,
        status='active',
    )
    db.session.add(classroom)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('Classroom code already in use')

    current_app.logger.info(f"Classroom {classroom.id} created by teacher {teacher_id}")
    return jsonify(classroom.to_dict()), 201


@bp.route('/classrooms/<int:classroom_id>', methods=['GET'])
def get_classroom(classroom_id):
    classroom = get_or_404(Classroom, classroom_id, 'Classroom not found')
    data = classroom.to_dict()
    data['teacherName'] = classroom.teacher.name if classroom.teacher else None
    return jsonify(data)


@bp.route('/classrooms/teacher/<int:teacher_id>', methods=['GET'])
def list_teacher_classrooms(teacher_id):
    classrooms = Classroom.query.filter_by(teacher_id=teacher_id) \
        .order_by(Classroom.created_at.desc()).all()
    return jsonify([c.to_dict() for c in classrooms])


@bp.route('/classrooms/enrolled/<int:user_id>', methods=['GET'])
def list_enrolled_classrooms(user_id):
    enrollments = Enrollment.query.filter_by(user_id=user_id).all()
    classrooms = []
    for enrollment in enrollments:
        data = enrollment.classroom.to_dict()
        data['teacherName'] = enrollment.classroom.teacher.name if enrollment.classroom.teacher else None
        classrooms.append(data)
    return jsonify({
        'success': True,
        'message': 'Enrolled classrooms fetched successfully',
        'data': classrooms,
    })


@bp.route('/classrooms/<int:classroom_id>/students', methods=['GET'])
def list_classroom_students(classroom_id):
    classroom = get_or_404(Classroom, classroom_id, 'Classroom not found')
    return jsonify({
        'success': True,
        'data': {
            'teacher': classroom.teacher.summary() if classroom.teacher else None,
            'students': [e.user.summary() for e in classroom.enrollments if e.user],
        },
    })


@bp.route('/classrooms/join', methods=['POST'])
def join_classroom():
    data = request_data()
    require_fields(data, 'code', 'userId')
    user_id = parse_id(data.get('userId'), 'userId')

    classroom = Classroom.query.filter_by(code=data['code'].strip()).first()
    if classroom is None:
        raise NotFoundError('Classroom not found')

    if Enrollment.query.filter_by(classroom_id=classroom.id, user_id=user_id).first():
        raise ConflictError('User is already enrolled')

    db.session.add(Enrollment(classroom_id=classroom.id, user_id=user_id))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError('User is already enrolled')

    current_app.logger.info(f"User {user_id} joined classroom {classroom.id}")
    return jsonify(classroom.to_dict()), 201


@bp.route('/classrooms/<int:classroom_id>/archive', methods=['PATCH'])
def archive_classroom(classroom_id):
    """Toggle a classroom between active and archived."""
    data = request_data()
    require_fields(data, 'userId', 'userRole')
    user_id = parse_id(data.get('userId'), 'userId')
    user_role = data['userRole']

    classroom = get_or_404(Classroom, classroom_id, 'Classroom not found')

    if user_role == 'teacher' and classroom.teacher_id != user_id:
        raise ForbiddenError('Unauthorized to archive this classroom')
    if user_role == 'student':
        enrollment = Enrollment.query.filter_by(classroom_id=classroom_id, user_id=user_id).first()
        if enrollment is None:
            raise ForbiddenError('Unauthorized to archive this classroom')

    classroom.status = 'archived' if classroom.status == 'active' else 'active'
    db.session.commit()
    return jsonify(classroom.to_dict())


@bp.route('/classrooms/<int:classroom_id>/announcements', methods=['GET'])
def list_announcements(classroom_id):
    announcements = Announcement.query.filter_by(classroom_id=classroom_id) \
        .order_by(Announcement.date_posted.desc()).all()
    return jsonify([a.to_dict() for a in announcements])


@bp.route('/classrooms/<int:classroom_id>/announcements', methods=['POST'])
def create_announcement(classroom_id):
    data = request_data()
    require_fields(data, 'title', 'content', 'userId')
    get_or_404(Classroom, classroom_id, 'Classroom not found')

    announcement = Announcement(
        title=data['title'].strip(),
        content=data['content'],
        classroom_id=classroom_id,
        user_id=parse_id(data.get('userId'), 'userId'),
    )
    db.session.add(announcement)
    db.session.commit()
    return jsonify(announcement.to_dict()), 201


@bp.route('/classrooms/<int:classroom_id>/upcoming-assignments', methods=['GET'])
def upcoming_assignments(classroom_id):
    assignments = Assignment.query.filter(
        Assignment.classroom_id == classroom_id,
        Assignment.due_date >= utcnow(),
    ).order_by(Assignment.due_date.asc()).all()
    return jsonify({
        'success': True,
        'data': [{'title': a.title, 'dueDate': isoformat(a.due_date)} for a in assignments],
    })


@bp.route('/classrooms/<int:user_id>/deadline-assignments', methods=['GET'])
def deadline_assignments(user_id):
    """
    Deadlines for a user: the assignments a teacher created, or those of
    every classroom a student is enrolled in.
    """
    user = get_or_404(User, user_id, 'User not found')

    query = Assignment.query.join(Classroom, Assignment.classroom_id == Classroom.id)
    if user.role == 'teacher':
        query = query.filter(Assignment.user_id == user_id)
    else:
        enrolled = db.select(Enrollment.classroom_id).where(Enrollment.user_id == user_id)
        query = query.filter(Assignment.classroom_id.in_(enrolled))
    assignments = query.order_by(Assignment.due_date.asc()).all()

    return jsonify({
        'success': True,
        'data': [{
            'classroomName': a.classroom.name,
            'assignmentTitle': a.title,
            'dueDate': isoformat(a.due_date),
        } for a in assignments],
    })
