"""Seed demo accounts, reference data and a small timetable grid.

Run:
  PYTHONPATH=backend python scripts/seed_demo_campus.py
"""

from __future__ import annotations

import os
from typing import Iterable

from sqlalchemy import select

from app.core.security import get_password_hash
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.course import Course
from app.models.department import Department
from app.models.faculty import Faculty
from app.models.faculty_assignment import FacultySubjectAssignment
from app.models.room import Room, RoomType
from app.models.subject import Subject, SubjectType
from app.models.user import User, UserRole
from app.services.slot_mutation import SlotMutationService

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123!")


def _env_email(key: str, default: str) -> str:
    value = os.getenv(key, "").strip()
    return value or default


DEMO_ACCOUNTS = {
    "admin": {
        "name": "Demo Admin",
        "email": _env_email("DEMO_ADMIN_EMAIL", "admin.demo@campusgrid.example"),
        "role": UserRole.admin,
        "department": "Administration",
    },
    "faculty_1": {
        "name": "Demo Faculty One",
        "email": _env_email("DEMO_FACULTY1_EMAIL", "faculty1.demo@campusgrid.example"),
        "role": UserRole.faculty,
        "department": "CSE",
    },
    "faculty_2": {
        "name": "Demo Faculty Two",
        "email": _env_email("DEMO_FACULTY2_EMAIL", "faculty2.demo@campusgrid.example"),
        "role": UserRole.faculty,
        "department": "CSE",
    },
    "student": {
        "name": "Demo Student",
        "email": _env_email("DEMO_STUDENT_EMAIL", "student.demo@campusgrid.example"),
        "role": UserRole.student,
        "department": "CSE",
    },
}

SUBJECTS = [
    ("CS301", "Algorithms", SubjectType.lecture),
    ("CS302", "Databases", SubjectType.lecture),
    ("CS351", "Databases Lab", SubjectType.lab),
    ("LUNCH-CS3", "Lunch", SubjectType.lunch),
]

# (day, start, subject code, room name); faculty comes from subject assignments
DEMO_GRID = [
    (1, "09:00", "CS301", "A101"),
    (1, "10:00", "CS302", "A101"),
    (1, "11:00", "LUNCH-CS3", "A101"),
    (2, "13:00", "CS351", "L201"),
    (3, "09:00", "CS302", "A102"),
]


def _upsert(session, model, lookup: dict, values: dict):
    existing = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if existing is None:
        existing = model(**lookup, **values)
        session.add(existing)
    else:
        for key, value in values.items():
            setattr(existing, key, value)
    session.flush()
    return existing


def _seed_accounts(session) -> dict[str, User]:
    users: dict[str, User] = {}
    for key, item in DEMO_ACCOUNTS.items():
        users[key] = _upsert(
            session,
            User,
            {"email": item["email"]},
            {
                "name": item["name"],
                "role": item["role"],
                "department": item["department"],
                "hashed_password": get_password_hash(DEFAULT_PASSWORD),
                "is_active": True,
            },
        )
    return users


def _seed_reference_data(session, users: dict[str, User]) -> Course:
    department = _upsert(session, Department, {"code": "CSE"}, {"name": "Computer Science"})
    course = _upsert(
        session,
        Course,
        {"code": "BTCSE"},
        {"name": "B.Tech Computer Science", "department_id": department.id, "total_semesters": 8},
    )
    faculty = [
        _upsert(
            session,
            Faculty,
            {"email": users[key].email},
            {"name": users[key].name, "department_id": department.id},
        )
        for key in ("faculty_1", "faculty_2")
    ]
    for index, (code, name, subject_type) in enumerate(SUBJECTS):
        subject = _upsert(
            session,
            Subject,
            {"code": code},
            {"name": name, "course_id": course.id, "semester": 3, "type": subject_type},
        )
        if subject_type != SubjectType.lunch:
            _upsert(
                session,
                FacultySubjectAssignment,
                {"faculty_id": faculty[index % 2].id, "subject_id": subject.id},
                {},
            )
    for name, room_type in (("A101", RoomType.lecture), ("A102", RoomType.lecture), ("L201", RoomType.lab)):
        _upsert(session, Room, {"name": name}, {"type": room_type, "building": "Main", "floor": int(name[1]), "capacity": 60})
    return course


def _seed_grid(session, course: Course, admin: User) -> list[str]:
    service = SlotMutationService(session)
    problems: list[str] = []
    for day, start, subject_code, room_name in DEMO_GRID:
        subject = session.execute(select(Subject).where(Subject.code == subject_code)).scalar_one()
        room = session.execute(select(Room).where(Room.name == room_name)).scalar_one()
        outcome = service.assign_slot(
            course_id=course.id,
            semester=3,
            day=day,
            start_time=start,
            subject_id=subject.id,
            room_id=room.id,
            actor=admin,
        )
        if not outcome.committed:
            problems.extend(f"{subject_code} day {day} {start}: {reason}" for reason in outcome.verdict.reasons)
    return problems


def _print_accounts(items: Iterable[tuple[str, User]]) -> None:
    print("\nDemo accounts ready:")
    for label, user in items:
        print(f"  - {label}: {user.email} | role={user.role.value}")
    print(f"\nPassword for all demo accounts: {DEFAULT_PASSWORD}")


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        users = _seed_accounts(session)
        course = _seed_reference_data(session, users)
        problems = _seed_grid(session, course, users["admin"])
        session.commit()
        _print_accounts(users.items())

    if problems:
        print("\nSkipped slots:")
        for problem in problems:
            print(f"  - {problem}")
    else:
        print("\nB.Tech Computer Science semester 3 grid seeded.")


if __name__ == "__main__":
    main()
