"""
Business logic and services. Keeps app.py as glue-only (config, blueprints, extensions).
"""

from .submissions import submit_assignment, list_submissions, resolve_status, check_upload
from .grading import grade_submission, validate_score
from .notifications import get_notification_feed, mark_notifications_read
from .reports import build_grade_report, render_workbook, XLSX_MIMETYPE
from .auth_tokens import issue_token, load_token_user

__all__ = [
    'submit_assignment',
    'list_submissions',
    'resolve_status',
    'check_upload',
    'grade_submission',
    'validate_score',
    'get_notification_feed',
    'mark_notifications_read',
    'build_grade_report',
    'render_workbook',
    'XLSX_MIMETYPE',
    'issue_token',
    'load_token_user',
]
