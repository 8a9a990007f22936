"""Read-only access to the reference data the scheduler depends on.

Every lookup returns the entity or ``None``; listings are ordered by id so
that callers picking "the first" get the same answer on every call.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.faculty import Faculty, FacultyStatus
from app.models.faculty_assignment import FacultyCourseAssignment, FacultySubjectAssignment
from app.models.room import Room
from app.models.subject import Subject
from app.models.user import User, UserRole


class ReferenceCatalog:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_subject(self, subject_id: str) -> Subject | None:
        return self.db.get(Subject, subject_id)

    def get_faculty(self, faculty_id: str) -> Faculty | None:
        return self.db.get(Faculty, faculty_id)

    def get_room(self, room_id: str) -> Room | None:
        return self.db.get(Room, room_id)

    def get_course(self, course_id: str) -> Course | None:
        return self.db.get(Course, course_id)

    def list_faculty_in_department(self, department_id: str, *, active_only: bool = True) -> list[Faculty]:
        query = select(Faculty).where(Faculty.department_id == department_id)
        if active_only:
            query = query.where(Faculty.status == FacultyStatus.active)
        return list(self.db.execute(query.order_by(Faculty.id)).scalars())

    def list_all_active_faculty(self) -> list[Faculty]:
        return list(
            self.db.execute(
                select(Faculty).where(Faculty.status == FacultyStatus.active).order_by(Faculty.id)
            ).scalars()
        )

    def find_faculty_assigned_to_subject(self, subject_id: str) -> Faculty | None:
        assignment = self.db.execute(
            select(FacultySubjectAssignment)
            .where(FacultySubjectAssignment.subject_id == subject_id)
            .order_by(FacultySubjectAssignment.assigned_at, FacultySubjectAssignment.id)
            .limit(1)
        ).scalar_one_or_none()
        if assignment is None:
            return None
        return self.get_faculty(assignment.faculty_id)

    def list_faculty_for_course(self, course_id: str) -> list[Faculty]:
        faculty_ids = select(FacultyCourseAssignment.faculty_id).where(FacultyCourseAssignment.course_id == course_id)
        return list(
            self.db.execute(select(Faculty).where(Faculty.id.in_(faculty_ids)).order_by(Faculty.id)).scalars()
        )

    def find_user_ids_for_faculty(self, faculty_ids: Iterable[str | None]) -> list[str]:
        """Portal accounts of the given faculty members, matched by email."""
        wanted = [item for item in dict.fromkeys(faculty_ids) if item]
        if not wanted:
            return []
        emails = select(Faculty.email).where(Faculty.id.in_(wanted))
        return list(
            self.db.execute(
                select(User.id)
                .where(
                    User.email.in_(emails),
                    User.role == UserRole.faculty,
                    User.is_active.is_(True),
                )
                .order_by(User.id)
            ).scalars()
        )
