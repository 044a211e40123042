"""
Notification feed. Notifications are not stored: they are built on read
from grades, announcements, assignments and materials in the user's
classrooms, minus whatever the user has dismissed.
"""

import logging
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from datetime_helpers import isoformat, utcnow
from errors import ValidationError
from extensions import db
from models import (
    Announcement, Assignment, Classroom, DismissedNotification, Enrollment,
    Material, Submission
)

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ('grade', 'announcement', 'assignment', 'material')


def truncate(text, length):
    """First `length` characters of text, with '...' when it was cut."""
    if text is None:
        return None
    if len(text) > length:
        return text[:length] + '...'
    return text


class FeedItem:
    """One entry of the notification feed."""
    type = None

    def __init__(self, id, course, timestamp):
        self.id = id
        self.course = course
        self.timestamp = timestamp

    def fields(self):
        return {}

    def to_dict(self):
        data = {
            'type': self.type,
            'id': self.id,
            'course': self.course,
            'timestamp': isoformat(self.timestamp),
            'isNew': True,
        }
        data.update(self.fields())
        return data


class GradeItem(FeedItem):
    type = 'grade'

    def __init__(self, submission, course, assignment_title):
        super().__init__(submission.id, course, submission.graded_at)
        self.assignment = assignment_title
        self.score = submission.grade
        self.feedback = submission.feedback

    def fields(self):
        return {'assignment': self.assignment, 'score': self.score, 'feedback': self.feedback}


class AnnouncementItem(FeedItem):
    type = 'announcement'

    def __init__(self, announcement, course, preview_length):
        super().__init__(announcement.id, course, announcement.date_posted)
        self.title = announcement.title
        self.content = truncate(announcement.content, preview_length)

    def fields(self):
        return {'title': self.title, 'content': self.content}


class AssignmentItem(FeedItem):
    type = 'assignment'

    def __init__(self, assignment, course, preview_length):
        super().__init__(assignment.id, course, assignment.created_at)
        self.title = assignment.title
        self.description = truncate(assignment.description, preview_length)
        self.due_date = assignment.due_date

    def fields(self):
        return {
            'title': self.title,
            'description': self.description,
            'dueDate': isoformat(self.due_date),
        }


class MaterialItem(FeedItem):
    type = 'material'

    def __init__(self, material, course, preview_length):
        super().__init__(material.id, course, material.created_at)
        self.title = material.title
        self.description = truncate(material.description, preview_length)

    def fields(self):
        return {'title': self.title, 'description': self.description}


def _dismissed_ids(user_id):
    """Map of notification type -> set of dismissed ids for the user."""
    dismissed = {kind: set() for kind in NOTIFICATION_TYPES}
    rows = DismissedNotification.query.filter_by(user_id=user_id).all()
    for row in rows:
        dismissed.setdefault(row.notification_type, set()).add(row.notification_id)
    return dismissed


def _exclude(query, column, ids):
    if ids:
        query = query.filter(~column.in_(ids))
    return query


def _grade_items(user_id, classroom_ids, dismissed):
    query = db.session.query(Submission, Assignment.title, Classroom.name) \
        .join(Assignment, Submission.assignment_id == Assignment.id) \
        .join(Classroom, Assignment.classroom_id == Classroom.id) \
        .filter(Submission.user_id == user_id, Submission.graded_at.isnot(None),
                Assignment.classroom_id.in_(classroom_ids))
    query = _exclude(query, Submission.id, dismissed)
    return [GradeItem(submission, course, title) for submission, title, course in query.all()]


def _recent_items(model, timestamp_column, item_class, classroom_ids, since, dismissed, preview_length):
    query = db.session.query(model, Classroom.name) \
        .join(Classroom, model.classroom_id == Classroom.id) \
        .filter(model.classroom_id.in_(classroom_ids), timestamp_column >= since)
    query = _exclude(query, model.id, dismissed)
    return [item_class(row, course, preview_length) for row, course in query.all()]


def get_notification_feed(user_id, now=None):
    """
    Build the feed for a user, newest first.

    Only enrolled classrooms contribute. Grades are not windowed;
    announcements, assignments and materials must be from the last
    NOTIFICATION_WINDOW_DAYS days.
    """
    enrollments = Enrollment.query.filter_by(user_id=user_id).all()
    classroom_ids = [e.classroom_id for e in enrollments]
    if not classroom_ids:
        return {'success': True, 'count': 0, 'unreadCount': 0, 'notifications': []}

    dismissed = _dismissed_ids(user_id)

    now = now or utcnow()
    since = now - timedelta(days=current_app.config['NOTIFICATION_WINDOW_DAYS'])
    preview_length = current_app.config['NOTIFICATION_PREVIEW_LENGTH']

    items = _grade_items(user_id, classroom_ids, dismissed['grade'])
    items += _recent_items(Announcement, Announcement.date_posted, AnnouncementItem,
                           classroom_ids, since, dismissed['announcement'], preview_length)
    items += _recent_items(Assignment, Assignment.created_at, AssignmentItem,
                           classroom_ids, since, dismissed['assignment'], preview_length)
    items += _recent_items(Material, Material.created_at, MaterialItem,
                           classroom_ids, since, dismissed['material'], preview_length)

    items.sort(key=lambda item: item.timestamp, reverse=True)

    notifications = [item.to_dict() for item in items]
    return {
        'success': True,
        'count': len(notifications),
        'unreadCount': len(notifications),
        'notifications': notifications,
    }


def _notification_id(value):
    # bool is an int subclass but never an id
    if isinstance(value, bool):
        raise ValidationError('notificationIds must be integers')
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ValidationError('notificationIds must be integers')


def _add_missing_dismissals(user_id, notification_ids, notification_type):
    """Stage a row for every id not dismissed yet; returns how many."""
    existing = {
        row.notification_id for row in DismissedNotification.query.filter(
            DismissedNotification.user_id == user_id,
            DismissedNotification.notification_type == notification_type,
            DismissedNotification.notification_id.in_(notification_ids),
        ).all()
    }
    missing = sorted(notification_ids - existing)
    for notification_id in missing:
        db.session.add(DismissedNotification(
            user_id=user_id,
            notification_id=notification_id,
            notification_type=notification_type,
            dismissed_at=utcnow(),
        ))
    return len(missing)


def mark_notifications_read(user_id, notification_ids, notification_type):
    """
    Dismiss notifications for a user. Dismissing an id twice is a no-op; all
    rows are written in one commit.
    """
    if not user_id or not notification_ids or not isinstance(notification_ids, list) \
            or not notification_type:
        raise ValidationError('userId, notificationIds (array), and type are required')
    if notification_type not in NOTIFICATION_TYPES:
        raise ValidationError(f"Unknown notification type: {notification_type}")
    wanted = {_notification_id(n) for n in notification_ids}

    added = _add_missing_dismissals(user_id, wanted, notification_type)
    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent request dismissed some of the same ids first
        db.session.rollback()
        added = _add_missing_dismissals(user_id, wanted, notification_type)
        db.session.commit()

    logger.info(f"User {user_id} dismissed {added} {notification_type} notification(s)")
    return added
