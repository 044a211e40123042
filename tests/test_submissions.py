# tests/test_submissions.py

from datetime import datetime, timedelta
from io import BytesIO

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from conftest import make_assignment, pdf_upload, submit
from extensions import db
from models import Submission
from services import resolve_status


def test_resolve_status_late_after_due_date():
    due = datetime(2025, 3, 1, 12, 0)
    assert resolve_status(due, due + timedelta(seconds=1)) == Submission.LATE


def test_resolve_status_on_time_up_to_due_date():
    due = datetime(2025, 3, 1, 12, 0)
    assert resolve_status(due, due) == Submission.SUBMITTED
    assert resolve_status(due, due - timedelta(days=2)) == Submission.SUBMITTED


def test_submission_after_due_date_is_late(client, student_a, overdue_assignment):
    response = submit(client, overdue_assignment, student_a)

    assert response.status_code == 201
    data = response.get_json()
    assert data["status"] == "LATE"
    assert data["isLate"] is True
    assert data["assignment"]["id"] == overdue_assignment
    assert "late submission" in data["message"]


def test_submission_before_due_date_is_submitted(client, student_a, open_assignment):
    response = submit(client, open_assignment, student_a)

    assert response.status_code == 201
    data = response.get_json()
    assert data["status"] == "SUBMITTED"
    assert data["isLate"] is False
    assert data["fileInfo"]["name"] == "work.pdf"
    assert data["fileInfo"]["type"] == "application/pdf"
    assert data["user"]["id"] == student_a


def test_second_submission_conflicts(app, client, student_a, open_assignment):
    first = submit(client, open_assignment, student_a)
    second = submit(client, open_assignment, student_a, pdf_upload("again.pdf"))

    assert second.status_code == 409
    assert second.get_json()["submissionId"] == first.get_json()["id"]
    with app.app_context():
        assert Submission.query.filter_by(assignment_id=open_assignment).count() == 1


def test_submission_for_unknown_assignment(client, student_a):
    response = submit(client, 9999, student_a)

    assert response.status_code == 404
    assert response.get_json()["error"] == "Assignment not found"


def test_submission_requires_file(client, student_a, open_assignment):
    response = client.post(
        f"/api/assignments/{open_assignment}/submissions",
        data={"userId": str(student_a)},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    data = response.get_json()
    assert data["error"] == "Missing required fields"
    assert data["received"]["fileExists"] is False


def test_submission_requires_user(client, open_assignment):
    response = client.post(
        f"/api/assignments/{open_assignment}/submissions",
        data={"file": pdf_upload()},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["received"]["userId"] is None


def test_submission_rejects_unsupported_file_type(client, student_a, open_assignment):
    upload = (BytesIO(b"MZ..."), "payload.exe", "application/x-msdownload")
    response = submit(client, open_assignment, student_a, upload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Unsupported file type"


def test_list_submissions_newest_first(app, client, student_a, student_b, classroom):
    assignment_id = make_assignment(app, classroom)
    submit(client, assignment_id, student_a)
    submit(client, assignment_id, student_b)
    with app.app_context():
        older = Submission.query.filter_by(user_id=student_a).one()
        older.submitted_at = older.submitted_at - timedelta(hours=1)
        db.session.commit()

    response = client.get(f"/api/assignments/{assignment_id}/submissions")

    assert response.status_code == 200
    data = response.get_json()
    assert data["total"] == 2
    assert [s["user"]["id"] for s in data["submissions"]] == [student_b, student_a]


def test_download_submission_file(client, student_a, open_assignment):
    submission_id = submit(client, open_assignment, student_a).get_json()["id"]

    response = client.get(f"/api/assignments/{submission_id}/file/download")

    assert response.status_code == 200
    assert response.data == b"%PDF-1.4 homework"
    assert response.headers["Content-Type"] == "application/pdf"
    assert response.headers["Content-Disposition"] == 'attachment; filename="work.pdf"'


def test_student_assignment_view_shows_submission(client, student_a, student_b, open_assignment, classroom):
    submit(client, open_assignment, student_a)

    mine = client.get(f"/api/assignments/{classroom}/students/{student_a}/assignments").get_json()
    theirs = client.get(f"/api/assignments/{classroom}/students/{student_b}/assignments").get_json()

    assert mine[0]["isSubmitted"] is True
    assert mine[0]["isGraded"] is False
    assert mine[0]["submission"]["status"] == "SUBMITTED"
    assert theirs[0]["isSubmitted"] is False
    assert theirs[0]["submission"] is None


def test_oversized_upload_is_rejected(app, client, student_a, open_assignment):
    app.config["MAX_CONTENT_LENGTH"] = 64

    response = submit(client, open_assignment, student_a, pdf_upload(data=b"x" * 1024))

    assert response.status_code == 413
    assert "error" in response.get_json()


def test_integrity_error_without_existing_submission_is_not_a_conflict(app, client, student_a,
                                                                         open_assignment):
    def reject_foreign_key(session, flush_context, instances):
        if any(isinstance(obj, Submission) for obj in session.new):
            raise IntegrityError("INSERT INTO submission", {}, Exception("FOREIGN KEY constraint failed"))

    event.listen(Session, "before_flush", reject_foreign_key)
    try:
        response = submit(client, open_assignment, student_a)
    finally:
        event.remove(Session, "before_flush", reject_foreign_key)

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}
    with app.app_context():
        assert Submission.query.count() == 0
