"""
Password registration and login. Both return a bearer token for the
Authorization header.
"""

import re

from flask import Blueprint, current_app, jsonify
from werkzeug.security import check_password_hash, generate_password_hash

from errors import ConflictError, Unauthorized, ValidationError
from extensions import db
from models import User
from services import issue_token
from .utils import request_data, require_fields

bp = Blueprint('auth', __name__)

ROLES = ('student', 'teacher', 'parent')
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 8


def _auth_response(user, message, status=200):
    return jsonify({
        'success': True,
        'message': message,
        'user': user.to_dict(),
        'token': issue_token(user),
    }), status


@bp.route('/auth/register', methods=['POST'])
def register():
    data = request_data()
    require_fields(data, 'name', 'email', 'password', 'role')

    name = data['name'].strip()
    email = data['email'].strip().lower()
    password = data['password']
    role = data['role']

    if len(name) > 50:
        raise ValidationError('Name is too long')
    if not EMAIL_PATTERN.match(email):
        raise ValidationError('Invalid email format')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")

    if User.query.filter_by(email=email).first():
        raise ConflictError('User already exists')

    user = User(name=name, email=email, role=role,
                password_hash=generate_password_hash(password))
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"Registered {role} account {user.id}")

    return _auth_response(user, 'Registration successful', 201)


@bp.route('/auth/login', methods=['POST'])
def login():
    data = request_data()
    require_fields(data, 'email', 'password')

    user = User.query.filter_by(email=data['email'].strip().lower()).first()
    if user is None or not check_password_hash(user.password_hash, data['password']):
        raise Unauthorized('Invalid credentials')

    return _auth_response(user, 'Login successful')
