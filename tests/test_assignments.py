# tests/test_assignments.py

from conftest import auth_headers, make_classroom, make_user, pdf_upload


def create(client, headers, **fields):
    data = {
        "title": "Photosynthesis",
        "description": "Explain the light reactions",
        "dueDate": "2030-05-01T23:59:00Z",
    }
    data.update(fields)
    return client.post("/api/assignments", data=data, headers=headers,
                       content_type="multipart/form-data")


def test_teacher_creates_assignment(app, client, teacher, classroom):
    response = create(client, auth_headers(app, teacher), classroomId=str(classroom))

    assert response.status_code == 201
    data = response.get_json()
    assert data["title"] == "Photosynthesis"
    assert data["status"] == "published"
    assert data["dueDate"] == "2030-05-01T23:59:00+00:00"
    assert data["fileName"] is None


def test_assignment_with_handout(app, client, teacher, classroom):
    response = create(client, auth_headers(app, teacher), classroomId=str(classroom),
                      file=pdf_upload("handout.pdf", b"%PDF handout"))
    assignment_id = response.get_json()["id"]

    download = client.get(f"/api/assignments/{assignment_id}/file")

    assert response.get_json()["fileName"] == "handout.pdf"
    assert download.status_code == 200
    assert download.data == b"%PDF handout"
    assert download.headers["Content-Disposition"] == 'attachment; filename="handout.pdf"'


def test_assignment_without_file_has_nothing_to_download(app, client, teacher, classroom):
    assignment_id = create(client, auth_headers(app, teacher), classroomId=str(classroom)).get_json()["id"]

    response = client.get(f"/api/assignments/{assignment_id}/file")

    assert response.status_code == 404
    assert response.get_json()["error"] == "File not found"


def test_create_requires_token(client, classroom):
    response = create(client, {}, classroomId=str(classroom))

    assert response.status_code == 401


def test_student_cannot_create(app, client, student_a, classroom):
    response = create(client, auth_headers(app, student_a), classroomId=str(classroom))

    assert response.status_code == 403
    assert response.get_json()["error"] == "Only teachers can perform this action"


def test_only_owner_can_create(app, client, classroom):
    stranger = make_user(app, "Other Teacher", "other@school.test", "teacher")

    response = create(client, auth_headers(app, stranger), classroomId=str(classroom))

    assert response.status_code == 403


def test_create_requires_title_and_classroom(app, client, teacher, classroom):
    headers = auth_headers(app, teacher)

    no_title = create(client, headers, title="", classroomId=str(classroom))
    no_classroom = create(client, headers)

    assert no_title.status_code == 400
    assert no_title.get_json()["error"] == "Title and classroom ID are required"
    assert no_classroom.status_code == 400


def test_create_requires_valid_due_date(app, client, teacher, classroom):
    response = create(client, auth_headers(app, teacher), classroomId=str(classroom), dueDate="someday")

    assert response.status_code == 400
    assert response.get_json()["error"] == "Valid due date is required"


def test_create_in_unknown_classroom(app, client, teacher):
    response = create(client, auth_headers(app, teacher), classroomId="404")

    assert response.status_code == 404


def test_list_classroom_assignments(app, client, teacher, classroom):
    headers = auth_headers(app, teacher)
    create(client, headers, classroomId=str(classroom), title="First")
    create(client, headers, classroomId=str(classroom), title="Second")
    empty = make_classroom(app, teacher, "Empty", "empty1")

    listed = client.get(f"/api/assignments/{classroom}/assignments").get_json()

    assert sorted(a["title"] for a in listed) == ["First", "Second"]
    assert listed[0]["classroom"] == {"name": "Biology 101"}
    assert client.get(f"/api/assignments/{empty}/assignments").get_json() == []
