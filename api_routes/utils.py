"""
Shared helpers for the API blueprints.
"""

from flask import Response, request

from errors import NotFoundError, ValidationError
from extensions import db


def request_data():
    """Body fields from a JSON request or a multipart/urlencoded form."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


def require_fields(data, *fields, message=None):
    """Raise ValidationError naming the first missing or blank field."""
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(message or f"Missing required field: {field}")


def parse_id(value, field):
    """Convert an id from a query string or form field to int."""
    if value is None or value == '':
        raise ValidationError(f"{field} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")


def get_or_404(model, object_id, message):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFoundError(message)
    return obj


def file_response(obj, default_name):
    """Send a stored attachment as a download."""
    if not obj.file_data:
        raise NotFoundError('File not found')
    response = Response(obj.file_data, content_type=obj.file_type or 'application/octet-stream')
    response.headers['Content-Disposition'] = f'attachment; filename="{obj.file_name or default_name}"'
    return response
