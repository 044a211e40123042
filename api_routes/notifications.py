"""
Notification feed routes.
"""

from flask import Blueprint, jsonify, request

from services import get_notification_feed, mark_notifications_read
from .utils import parse_id

bp = Blueprint('notifications', __name__)


@bp.route('/notifications', methods=['GET'])
def get_notifications():
    user_id = parse_id(request.args.get('userId'), 'userId')
    return jsonify(get_notification_feed(user_id))


@bp.route('/notifications/read', methods=['POST'])
def mark_read():
    """Dismiss notifications; they never show up in the feed again."""
    user_id = parse_id(request.args.get('userId'), 'userId')
    data = request.get_json(silent=True) or {}
    mark_notifications_read(user_id, data.get('notificationIds'), data.get('type'))
    return jsonify({'success': True, 'message': 'Notifications marked as read'})
