from flask_login import UserMixin

from extensions import db
from datetime_helpers import isoformat, utcnow


class User(db.Model, UserMixin):
    """
    Account for every person using the app. The role decides what they can do
    and is fixed once the account exists.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False)  # 'student', 'teacher' or 'parent'

    # Set for accounts created through an external identity provider
    provider = db.Column(db.String(20), nullable=True)
    provider_id = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def summary(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}

    def to_dict(self):
        data = self.summary()
        data['role'] = self.role
        return data

    def __repr__(self):
        return f"User('{self.email}', Role: '{self.role}')"


class Classroom(db.Model):
    """
    A class owned by one teacher. Students join it with the code; archiving
    only flips the status.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)
    subject = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text, nullable=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.String(20), default='active', nullable=False)  # 'active' or 'archived'
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    teacher = db.relationship('User', backref='classrooms_taught', lazy=True)
    enrollments = db.relationship('Enrollment', backref='classroom', lazy=True,
                                  order_by='Enrollment.id')
    assignments = db.relationship('Assignment', backref='classroom', lazy=True,
                                  order_by='Assignment.id')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'subject': self.subject,
            'description': self.description,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
            'teacherId': self.teacher_id,
            'status': self.status or 'active',
            'students': len(self.enrollments),
        }

    def __repr__(self):
        return f"Classroom('{self.name}', Code: '{self.code}')"


class Enrollment(db.Model):
    """
    Membership of a student in a classroom.
    """
    __table_args__ = (
        db.UniqueConstraint('classroom_id', 'user_id', name='uq_enrollment_classroom_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    enrolled_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    user = db.relationship('User', backref='enrollments', lazy=True)

    def __repr__(self):
        return f"Enrollment(User: {self.user_id}, Classroom: {self.classroom_id})"


class FileAttachmentMixin:
    """Uploaded file kept in the row itself, with its declared metadata."""
    file_data = db.Column(db.LargeBinary, nullable=True)
    file_name = db.Column(db.String(255), nullable=True)
    file_type = db.Column(db.String(255), nullable=True)
    file_size = db.Column(db.Integer, nullable=True)

    def attach_file(self, upload):
        data = upload.read()
        self.file_data = data
        self.file_name = upload.filename
        self.file_type = upload.mimetype
        self.file_size = len(data)

    def file_info(self):
        return {'name': self.file_name, 'type': self.file_type, 'size': self.file_size}


class Assignment(FileAttachmentMixin, db.Model):
    """
    Work published by the classroom's teacher, optionally with a handout file.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    due_date = db.Column(db.DateTime, nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)  # Creator
    status = db.Column(db.String(20), default='published', nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    creator = db.relationship('User', backref='assignments_created', lazy=True)
    submissions = db.relationship('Submission', backref='assignment', lazy=True)

    def __repr__(self):
        return f"Assignment('{self.title}', Due: {self.due_date})"


class Submission(FileAttachmentMixin, db.Model):
    """
    A student's uploaded answer to an assignment. One per student and
    assignment.

    status moves SUBMITTED/LATE -> GRADED. is_late is fixed when the row is
    created, so it still tells late work apart after grading.
    """
    __table_args__ = (
        db.UniqueConstraint('assignment_id', 'user_id', name='uq_submission_assignment_user'),
    )

    SUBMITTED = 'SUBMITTED'
    LATE = 'LATE'
    GRADED = 'GRADED'

    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False)
    is_late = db.Column(db.Boolean, default=False, nullable=False)
    submitted_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    grade = db.Column(db.Float, nullable=True)  # 0-100
    feedback = db.Column(db.Text, nullable=True)
    graded_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship('User', backref='submissions', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'assignmentId': self.assignment_id,
            'status': self.status,
            'isLate': self.is_late,
            'submittedAt': isoformat(self.submitted_at),
            'gradedAt': isoformat(self.graded_at),
            'grade': self.grade,
            'feedback': self.feedback,
            'fileInfo': self.file_info(),
            'user': self.user.summary() if self.user else None,
        }

    def __repr__(self):
        return f"Submission(User: {self.user_id}, Assignment: {self.assignment_id}, Status: {self.status})"


class Announcement(db.Model):
    """
    Post on a classroom's stream.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    date_posted = db.Column(db.DateTime, default=utcnow, nullable=False)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    classroom = db.relationship('Classroom', backref='announcements', lazy=True)
    user = db.relationship('User', backref='announcements', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'datePosted': isoformat(self.date_posted),
            'classroomId': self.classroom_id,
            'userId': self.user_id,
            'user': self.user.summary() if self.user else None,
        }

    def __repr__(self):
        return f"Announcement('{self.title}', Classroom: {self.classroom_id})"


class Material(FileAttachmentMixin, db.Model):
    """
    Course material: either an uploaded file or a link.
    """
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type = db.Column(db.String(10), nullable=False)  # 'file' or 'link'
    url = db.Column(db.String(500), nullable=True)
    classroom_id = db.Column(db.Integer, db.ForeignKey('classroom.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    classroom = db.relationship('Classroom', backref='materials', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'type': self.type,
            'url': self.url,
            'fileName': self.file_name,
            'fileType': self.file_type,
            'fileSize': self.file_size,
            'createdAt': isoformat(self.created_at),
        }

    def __repr__(self):
        return f"Material('{self.title}', Type: {self.type})"


class DismissedNotification(db.Model):
    """
    Tombstone hiding one synthesized notification from a user's feed.
    """
    __table_args__ = (
        db.UniqueConstraint('user_id', 'notification_id', 'notification_type',
                            name='uq_dismissed_notification'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    notification_id = db.Column(db.Integer, nullable=False)
    notification_type = db.Column(db.String(20), nullable=False)
    dismissed_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f"DismissedNotification(User: {self.user_id}, {self.notification_type}-{self.notification_id})"
