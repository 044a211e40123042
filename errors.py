"""
Error taxonomy for the classroom API and the handlers that render it as JSON.

Views and services raise ApiError subclasses; register_error_handlers() maps
them (and any stray exception) onto a {"error": message} response.
"""

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that are reported to the client."""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, payload=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.payload = payload or {}

    def to_dict(self):
        body = dict(self.payload)
        body['error'] = self.message
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request'


class Unauthorized(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(ApiError):
    status_code = 409
    default_message = 'Conflict'


class InternalError(ApiError):
    status_code = 500


def register_error_handlers(app):
    """Attach the JSON error handlers to the application."""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            logger.error(f"{error.__class__.__name__}: {error.message}")
        else:
            logger.warning(f"{error.__class__.__name__} ({error.status_code}): {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Unknown routes, wrong methods, oversized uploads and the like."""
        return jsonify({'error': error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception(f"Unexpected error: {error}")
        return jsonify({'error': 'Internal server error'}), 500
