"""
API Routes Package

This package contains the JSON API, organized by functional area.
Each module owns one blueprint; all of them hang off api_blueprint.
"""

from flask import Blueprint

# Create the main API blueprint
api_blueprint = Blueprint('api', __name__)

# Import all route modules to register their routes
from . import (  # noqa: E402
    auth,
    classrooms,
    assignments,
    materials,
    notifications,
    reports,
)

# Register sub-blueprints with the main API blueprint
api_blueprint.register_blueprint(auth.bp, url_prefix='')
api_blueprint.register_blueprint(classrooms.bp, url_prefix='')
api_blueprint.register_blueprint(assignments.bp, url_prefix='')
api_blueprint.register_blueprint(materials.bp, url_prefix='')
api_blueprint.register_blueprint(notifications.bp, url_prefix='')
api_blueprint.register_blueprint(reports.bp, url_prefix='')
