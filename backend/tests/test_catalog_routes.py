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


def _tokens(client):
    users = {
        "admin": {"name": "Catalog Admin", "email": "catalog-admin@example.com"},
        "faculty": {"name": "Catalog Faculty", "email": "catalog-faculty@example.com"},
        "student": {"name": "Catalog Student", "email": "catalog-student@example.com"},
    }
    tokens = {}
    for role, user in users.items():
        register_user(client, {**user, "password": "password123", "role": role})
        tokens[role] = login_user(client, user["email"], "password123", role)
    return tokens


def test_admin_builds_reference_data(client):
    tokens = _tokens(client)
    admin = _headers(tokens["admin"])

    department = client.post("/api/departments/", json={"name": "Computer Science", "code": "cse"}, headers=admin)
    assert department.status_code == 201
    assert department.json()["code"] == "CSE"
    department_id = department.json()["id"]

    course = client.post(
        "/api/courses/",
        json={"code": "btcse", "name": "B.Tech CSE", "department_id": department_id, "total_semesters": 8},
        headers=admin,
    )
    assert course.status_code == 201
    course_id = course.json()["id"]

    subject = client.post(
        f"/api/courses/{course_id}/subjects",
        json={"code": "cs201", "name": "Data Structures", "semester": 3, "type": "lecture", "credits": 4},
        headers=admin,
    )
    assert subject.status_code == 201
    assert subject.json()["course_id"] == course_id
    subject_id = subject.json()["id"]

    faculty = client.post(
        "/api/faculty/",
        json={"name": "Dr. Rao", "email": "Rao@Example.com", "department_id": department_id},
        headers=admin,
    )
    assert faculty.status_code == 201
    assert faculty.json()["email"] == "rao@example.com"
    assert faculty.json()["status"] == "active"
    faculty_id = faculty.json()["id"]

    room = client.post(
        "/api/rooms/",
        json={"name": "LH-101", "type": "lecture", "building": "Main", "floor": 1, "capacity": 60},
        headers=admin,
    )
    assert room.status_code == 201

    subject_link = client.post(f"/api/faculty/{faculty_id}/subjects", json={"subject_id": subject_id}, headers=admin)
    assert subject_link.status_code == 201
    course_link = client.post(f"/api/courses/{course_id}/faculty", json={"faculty_id": faculty_id}, headers=admin)
    assert course_link.status_code == 201

    student = _headers(tokens["student"])
    assert [item["code"] for item in client.get("/api/courses/", headers=student).json()] == ["BTCSE"]
    semester_subjects = client.get(f"/api/courses/{course_id}/subjects?semester=3", headers=student).json()
    assert [item["name"] for item in semester_subjects] == ["Data Structures"]
    assert client.get(f"/api/courses/{course_id}/subjects?semester=1", headers=student).json() == []
    assert [item["id"] for item in client.get(f"/api/courses/{course_id}/faculty", headers=admin).json()] == [faculty_id]
    assigned = client.get(f"/api/faculty/{faculty_id}/subjects", headers=admin).json()
    assert [item["subject_id"] for item in assigned] == [subject_id]
    assert [item["name"] for item in client.get("/api/rooms/", headers=student).json()] == ["LH-101"]


def test_duplicates_and_missing_parents(client):
    admin = _headers(_tokens(client)["admin"])

    first = client.post("/api/departments/", json={"name": "Mechanical", "code": "ME"}, headers=admin)
    assert first.status_code == 201
    department_id = first.json()["id"]
    assert client.post("/api/departments/", json={"name": "Mech", "code": "me"}, headers=admin).status_code == 409

    orphan = client.post(
        "/api/courses/",
        json={"code": "X1", "name": "Orphan", "department_id": "missing"},
        headers=admin,
    )
    assert orphan.status_code == 404

    course = client.post(
        "/api/courses/",
        json={"code": "BTME", "name": "B.Tech ME", "department_id": department_id, "total_semesters": 2},
        headers=admin,
    ).json()
    beyond = client.post(
        f"/api/courses/{course['id']}/subjects",
        json={"code": "ME501", "name": "Turbines", "semester": 5},
        headers=admin,
    )
    assert beyond.status_code == 400

    room = {"name": "WS-1", "type": "lab", "building": "Workshop", "capacity": 20}
    assert client.post("/api/rooms/", json=room, headers=admin).status_code == 201
    assert client.post("/api/rooms/", json=room, headers=admin).status_code == 409


def test_reference_writes_are_admin_only(client):
    tokens = _tokens(client)
    for role in ("faculty", "student"):
        response = client.post(
            "/api/departments/",
            json={"name": f"Dept {role}", "code": role[:3]},
            headers=_headers(tokens[role]),
        )
        assert response.status_code == 403


def test_faculty_update_and_scoped_listing(client):
    tokens = _tokens(client)
    admin = _headers(tokens["admin"])
    department_id = client.post(
        "/api/departments/", json={"name": "Physics", "code": "PHY"}, headers=admin
    ).json()["id"]
    mine = client.post(
        "/api/faculty/",
        json={"name": "Catalog Faculty", "email": "catalog-faculty@example.com", "department_id": department_id},
        headers=admin,
    ).json()
    client.post(
        "/api/faculty/",
        json={"name": "Someone Else", "email": "else@example.com", "department_id": department_id},
        headers=admin,
    )

    updated = client.put(f"/api/faculty/{mine['id']}", json={"status": "inactive"}, headers=admin)
    assert updated.status_code == 200
    assert updated.json()["status"] == "inactive"

    assert len(client.get("/api/faculty/", headers=admin).json()) == 2
    own = client.get("/api/faculty/", headers=_headers(tokens["faculty"])).json()
    assert [item["id"] for item in own] == [mine["id"]]
    assert client.get("/api/faculty/", headers=_headers(tokens["student"])).json() == []
