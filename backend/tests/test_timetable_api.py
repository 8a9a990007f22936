from sqlalchemy.exc import OperationalError

from app.services.slot_mutation import SlotMutationService


def register_user(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201
    return response.json()


def login_user(client, email, password, role):
    response = client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "role": role},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


def _headers(token):
    return {"Authorization": f"Bearer {token}"}


def _create(client, path, payload, headers):
    response = client.post(path, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _setup_campus(client):
    users = {
        "admin": {"name": "Grid Admin", "email": "grid-admin@example.com"},
        "faculty": {"name": "Dr. One", "email": "one@example.com"},
        "student": {"name": "Grid Student", "email": "grid-student@example.com"},
    }
    tokens = {}
    for role, user in users.items():
        register_user(client, {**user, "password": "password123", "role": role})
        tokens[role] = login_user(client, user["email"], "password123", role)
    admin = _headers(tokens["admin"])

    cse = _create(client, "/api/departments/", {"name": "Computer Science", "code": "CSE"}, admin)
    ece = _create(client, "/api/departments/", {"name": "Electronics", "code": "ECE"}, admin)
    c1 = _create(client, "/api/courses/", {"code": "BTCSE", "name": "B.Tech CSE", "department_id": cse}, admin)
    c2 = _create(client, "/api/courses/", {"code": "BTECE", "name": "B.Tech ECE", "department_id": ece}, admin)

    def subject(course_id, code, name, subject_type):
        return _create(
            client,
            f"/api/courses/{course_id}/subjects",
            {"code": code, "name": name, "semester": 1, "type": subject_type},
            admin,
        )

    ids = {
        "c1": c1,
        "c2": c2,
        "s1": subject(c1, "CS101", "Programming", "lecture"),
        "s2": subject(c2, "EC101", "Circuits", "lecture"),
        "s3": subject(c1, "CS102", "Discrete Maths", "lecture"),
        "lab": subject(c1, "CS151", "Programming Lab", "lab"),
        "lunch": subject(c1, "LUNCH", "Lunch", "lunch"),
        "f1": _create(client, "/api/faculty/", {"name": "Dr. One", "email": "one@example.com", "department_id": cse}, admin),
        "f2": _create(client, "/api/faculty/", {"name": "Dr. Two", "email": "two@example.com", "department_id": cse}, admin),
        "r1": _create(
            client, "/api/rooms/", {"name": "LH-101", "type": "lecture", "building": "Main", "capacity": 60}, admin
        ),
        "r2": _create(
            client, "/api/rooms/", {"name": "LH-102", "type": "lecture", "building": "Main", "capacity": 60}, admin
        ),
    }
    return tokens, ids


def _slot_payload(ids, **overrides):
    payload = {
        "course_id": ids["c1"],
        "semester": 1,
        "subject_id": ids["s1"],
        "faculty_id": ids["f1"],
        "room_id": ids["r1"],
        "day": 1,
        "start_time": "09:00",
    }
    payload.update(overrides)
    return payload


def test_assignment_walkthrough(client):
    tokens, ids = _setup_campus(client)
    admin = _headers(tokens["admin"])

    created = client.post("/api/timetable/slots", json=_slot_payload(ids), headers=admin)
    assert created.status_code == 200
    body = created.json()
    assert body["success"] is True
    assert body["slot"]["faculty_id"] == ids["f1"]
    assert body["slot"]["end_time"] == "10:00"
    assert body["faculty_source"] == "explicit"
    original_id = body["slot"]["id"]

    clash = client.post(
        "/api/timetable/slots",
        json=_slot_payload(ids, course_id=ids["c2"], subject_id=ids["s2"], room_id=ids["r2"]),
        headers=admin,
    )
    assert clash.status_code == 409
    assert clash.json()["success"] is False
    assert clash.json()["reasons"] == ["Faculty is already assigned to Programming for B.Tech CSE at this time."]

    edited = client.post(
        "/api/timetable/slots",
        json=_slot_payload(ids, subject_id=ids["s3"], editing_slot_id=original_id),
        headers=admin,
    )
    assert edited.status_code == 200
    assert edited.json()["slot"]["subject_id"] == ids["s3"]

    lab = client.post(
        "/api/timetable/slots",
        json=_slot_payload(ids, subject_id=ids["lab"], room_id=ids["r2"], day=2, start_time="10:00"),
        headers=admin,
    )
    assert lab.status_code == 200
    assert lab.json()["suggestions"] == ["Lecture room assigned for lab subject."]

    grid = client.get(
        f"/api/timetable/grid?course_id={ids['c1']}&semester=1",
        headers=_headers(tokens["student"]),
    )
    assert grid.status_code == 200
    monday = grid.json()["days"][0]
    assert monday["label"] == "Monday"
    assert [cell["start_time"] for cell in monday["cells"]] == ["09:00", "10:00", "11:00", "13:00", "14:00", "15:00"]
    assert monday["cells"][0]["slot"]["subject"]["name"] == "Discrete Maths"
    assert monday["cells"][1]["slot"] is None


def test_missing_faculty_falls_back_to_any_active_faculty(client):
    tokens, ids = _setup_campus(client)

    response = client.post(
        "/api/timetable/slots",
        json=_slot_payload(
            ids, course_id=ids["c2"], subject_id=ids["s2"], faculty_id=None, room_id=ids["r2"], day=3, start_time="14:00"
        ),
        headers=_headers(tokens["admin"]),
    )

    assert response.status_code == 200
    assert response.json()["faculty_source"] == "any_active"
    assert response.json()["slot"]["faculty_id"] == min(ids["f1"], ids["f2"])


def test_no_faculty_anywhere_returns_error_body(client):
    register_user(
        client, {"name": "Lonely Admin", "email": "lonely@example.com", "password": "password123", "role": "admin"}
    )
    admin = _headers(login_user(client, "lonely@example.com", "password123", "admin"))
    department = _create(client, "/api/departments/", {"name": "Physics", "code": "PHY"}, admin)
    course = _create(client, "/api/courses/", {"code": "BSPHY", "name": "B.Sc Physics", "department_id": department}, admin)
    subject = _create(
        client, f"/api/courses/{course}/subjects", {"code": "PH101", "name": "Mechanics", "semester": 1}, admin
    )
    room = _create(client, "/api/rooms/", {"name": "PH-1", "type": "lecture", "building": "Science", "capacity": 40}, admin)

    response = client.post(
        "/api/timetable/slots",
        json={"course_id": course, "semester": 1, "subject_id": subject, "room_id": room, "day": 1, "start_time": "09:00"},
        headers=admin,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "No faculty available to assign."


def test_delete_grid_and_count(client):
    tokens, ids = _setup_campus(client)
    admin = _headers(tokens["admin"])
    client.post("/api/timetable/slots", json=_slot_payload(ids), headers=admin)
    client.post("/api/timetable/slots", json=_slot_payload(ids, start_time="10:00", subject_id=ids["s3"]), headers=admin)
    client.post(
        "/api/timetable/slots",
        json=_slot_payload(ids, course_id=ids["c2"], subject_id=ids["s2"], faculty_id=ids["f2"], room_id=ids["r2"]),
        headers=admin,
    )
    assert client.get("/api/timetable/count", headers=admin).json() == {"count": 2}

    listing = client.get("/api/timetable", headers=admin).json()
    assert sorted(len(group["slots"]) for group in listing) == [1, 2]

    missing_scope = client.delete("/api/timetable", headers=admin)
    assert missing_scope.status_code == 400

    deleted = client.delete(f"/api/timetable?course_id={ids['c1']}&semester=1", headers=admin)
    assert deleted.status_code == 200
    assert deleted.json()["deleted"] == 2
    assert client.get("/api/timetable/count", headers=admin).json() == {"count": 1}

    reset = client.delete("/api/timetable?delete_all=true", headers=admin)
    assert reset.json()["deleted"] == 1
    assert client.get("/api/timetable/count", headers=admin).json() == {"count": 0}


def test_validate_endpoint_and_role_gates(client):
    tokens, ids = _setup_campus(client)
    client.post("/api/timetable/slots", json=_slot_payload(ids), headers=_headers(tokens["admin"]))

    proposal = {
        "subject_id": ids["s2"],
        "faculty_id": ids["f1"],
        "room_id": ids["r1"],
        "day": 1,
        "start_time": "09:00",
    }
    verdict = client.post("/api/timetable/validate", json=proposal, headers=_headers(tokens["faculty"]))
    assert verdict.status_code == 200
    assert verdict.json()["valid"] is False
    assert len(verdict.json()["reasons"]) == 2

    lunch = client.post(
        "/api/timetable/validate",
        json={**proposal, "subject_id": ids["lunch"]},
        headers=_headers(tokens["faculty"]),
    )
    assert lunch.json() == {"valid": True, "reasons": [], "suggestions": []}

    student = _headers(tokens["student"])
    assert client.post("/api/timetable/validate", json=proposal, headers=student).status_code == 403
    assert client.post("/api/timetable/slots", json=_slot_payload(ids), headers=student).status_code == 403
    assert client.post(
        "/api/timetable/slots", json=_slot_payload(ids), headers=_headers(tokens["faculty"])
    ).status_code == 403
    assert client.delete("/api/timetable?delete_all=true", headers=student).status_code == 403
    assert client.get("/api/timetable/count", headers=student).status_code == 403


def test_malformed_slot_requests_are_rejected(client):
    tokens, ids = _setup_campus(client)
    admin = _headers(tokens["admin"])

    lunch_hour = client.post("/api/timetable/slots", json=_slot_payload(ids, start_time="12:00"), headers=admin)
    assert lunch_hour.status_code == 422

    bad_day = client.post("/api/timetable/slots", json=_slot_payload(ids, day=8), headers=admin)
    assert bad_day.status_code == 422

    payload = _slot_payload(ids)
    payload.pop("room_id")
    assert client.post("/api/timetable/slots", json=payload, headers=admin).status_code == 422


def test_unknown_course_grid_is_not_found(client):
    tokens, _ = _setup_campus(client)
    response = client.get("/api/timetable/grid?course_id=missing&semester=1", headers=_headers(tokens["student"]))
    assert response.status_code == 404
    assert response.json()["details"] == {"resource_type": "Course", "resource_id": "missing"}


def test_faculty_schedule_and_change_notifications(client):
    tokens, ids = _setup_campus(client)
    admin = _headers(tokens["admin"])
    faculty = _headers(tokens["faculty"])
    client.post("/api/timetable/slots", json=_slot_payload(ids), headers=admin)
    client.post(
        "/api/timetable/slots",
        json=_slot_payload(ids, day=2, start_time="13:00", subject_id=ids["s3"], room_id=ids["r2"]),
        headers=admin,
    )

    schedule = client.get(f"/api/timetable/faculty/{ids['f1']}", headers=faculty)
    assert schedule.status_code == 200
    assert [(item["day_of_week"], item["start_time"]) for item in schedule.json()] == [(1, "09:00"), (2, "13:00")]
    assert schedule.json()[0]["room"]["name"] == "LH-101"

    assert client.get(f"/api/timetable/faculty/{ids['f2']}", headers=faculty).status_code == 403
    assert client.get(f"/api/timetable/faculty/{ids['f2']}", headers=admin).json() == []

    inbox = client.get("/api/notifications", headers=faculty)
    assert inbox.status_code == 200
    assert [item["title"] for item in inbox.json()] == ["Timetable Updated", "Timetable Updated"]
    assert client.get("/api/notifications/unread-count", headers=faculty).json() == {"unread": 2}

    first_id = inbox.json()[0]["id"]
    marked = client.post(f"/api/notifications/{first_id}/read", headers=faculty)
    assert marked.status_code == 200
    assert marked.json()["is_read"] is True
    assert client.get("/api/notifications/unread-count", headers=faculty).json() == {"unread": 1}
    assert client.post(f"/api/notifications/{first_id}/read", headers=admin).status_code == 404


def test_store_failure_is_reported_as_unavailable(client, monkeypatch):
    tokens, ids = _setup_campus(client)

    def failing_assign(self, **kwargs):
        raise OperationalError("INSERT INTO timetable_slots", {}, Exception("database is locked"))

    monkeypatch.setattr(SlotMutationService, "assign_slot", failing_assign)
    response = client.post("/api/timetable/slots", json=_slot_payload(ids), headers=_headers(tokens["admin"]))

    assert response.status_code == 503
    assert response.json() == {"message": "Timetable store is temporarily unavailable.", "details": {}}
