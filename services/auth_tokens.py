"""
Signed bearer tokens for the API. A token carries the user id and role and
expires after TOKEN_MAX_AGE seconds.
"""

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from errors import Unauthorized
from extensions import db
from models import User

TOKEN_SALT = 'classroom-auth-token'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user):
    return _serializer().dumps({'userId': user.id, 'role': user.role})


def load_token_user(token):
    """
    Resolve a token to its User. Raises Unauthorized for expired, tampered
    or orphaned tokens.
    """
    try:
        data = _serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])
    except SignatureExpired:
        raise Unauthorized('Token expired')
    except BadSignature:
        raise Unauthorized('Invalid token')

    user = db.session.get(User, data.get('userId'))
    if user is None:
        raise Unauthorized('Unauthorized')
    return user
