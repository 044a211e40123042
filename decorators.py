from functools import wraps

from flask_login import current_user

from errors import ForbiddenError, Unauthorized

TEACHER_ROLES = ['teacher']


def is_teacher_role(role):
    """Check if a role is allowed to run a classroom."""
    if not role:
        return False
    return role.strip().lower() in TEACHER_ROLES


def teacher_required(f):
    """Restricts access to users with the 'teacher' role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized()
        if not is_teacher_role(current_user.role):
            raise ForbiddenError('Only teachers can perform this action')
        return f(*args, **kwargs)
    return decorated_function
