# tests/conftest.py

from datetime import timedelta
from io import BytesIO

import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from config import TestingConfig
from datetime_helpers import utcnow
from extensions import db
from models import Assignment, Classroom, Enrollment, User
from services import issue_token

# Fixtures hand out ids rather than model instances: every request runs in
# its own app context and session, so instances would come back detached.


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(app, name, email, role, password="password123"):
    with app.app_context():
        user = User(
            name=name,
            email=email,
            role=role,
            password_hash=generate_password_hash(password),
        )
        db.session.add(user)
        db.session.commit()
        return user.id


def auth_headers(app, user_id):
    with app.app_context():
        user = db.session.get(User, user_id)
        return {"Authorization": f"Bearer {issue_token(user)}"}


def pdf_upload(name="work.pdf", data=b"%PDF-1.4 homework"):
    return (BytesIO(data), name, "application/pdf")


def make_classroom(app, teacher_id, name, code, student_ids=()):
    with app.app_context():
        classroom = Classroom(name=name, code=code, subject="Science", teacher_id=teacher_id)
        db.session.add(classroom)
        db.session.commit()
        for student_id in student_ids:
            db.session.add(Enrollment(classroom_id=classroom.id, user_id=student_id))
        db.session.commit()
        return classroom.id


def make_assignment(app, classroom_id, title="Cell Structure", due_date=None, created_at=None,
                    description="Label the parts of a cell"):
    with app.app_context():
        classroom = db.session.get(Classroom, classroom_id)
        assignment = Assignment(
            title=title,
            description=description,
            due_date=due_date or utcnow() + timedelta(days=3),
            classroom_id=classroom_id,
            user_id=classroom.teacher_id,
            status="published",
        )
        if created_at is not None:
            assignment.created_at = created_at
        db.session.add(assignment)
        db.session.commit()
        return assignment.id


def submit(client, assignment_id, user_id, upload=None):
    data = {"userId": str(user_id), "file": upload or pdf_upload()}
    return client.post(
        f"/api/assignments/{assignment_id}/submissions",
        data=data,
        content_type="multipart/form-data",
    )


@pytest.fixture
def teacher(app):
    return make_user(app, "Ada Teacher", "ada@school.test", "teacher")


@pytest.fixture
def student_a(app):
    return make_user(app, "Student A", "a@school.test", "student")


@pytest.fixture
def student_b(app):
    return make_user(app, "Student B", "b@school.test", "student")


@pytest.fixture
def classroom(app, teacher, student_a, student_b):
    return make_classroom(app, teacher, "Biology 101", "bio101", [student_a, student_b])


@pytest.fixture
def other_classroom(app, teacher):
    return make_classroom(app, teacher, "Chemistry 201", "chem201")


@pytest.fixture
def overdue_assignment(app, classroom):
    return make_assignment(app, classroom, title="Overdue Lab", due_date=utcnow() - timedelta(days=1))


@pytest.fixture
def open_assignment(app, classroom):
    return make_assignment(app, classroom, title="Open Lab", due_date=utcnow() + timedelta(days=1))
