from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.faculty import Faculty
from app.models.room import Room
from app.models.subject import Subject
from app.models.timetable import TimetableSlot
from app.schemas.timetable import (
    CourseSummary,
    CourseTimetableOut,
    FacultySummary,
    GridCellOut,
    GridDayOut,
    GridOut,
    RoomSummary,
    SlotDetailOut,
    SubjectSummary,
)
from app.services.slot_grid import DAY_LABELS, TIME_SLOTS, SlotGridView


def _load_by_id(db: Session, model, ids: Iterable[str | None]) -> dict:
    wanted = {item for item in ids if item}
    if not wanted:
        return {}
    return {row.id: row for row in db.execute(select(model).where(model.id.in_(wanted))).scalars()}


def describe_slots(db: Session, slots: list[TimetableSlot]) -> list[SlotDetailOut]:
    courses = _load_by_id(db, Course, (slot.course_id for slot in slots))
    subjects = _load_by_id(db, Subject, (slot.subject_id for slot in slots))
    faculty = _load_by_id(db, Faculty, (slot.faculty_id for slot in slots))
    rooms = _load_by_id(db, Room, (slot.room_id for slot in slots))

    described: list[SlotDetailOut] = []
    for slot in slots:
        course = courses.get(slot.course_id)
        subject = subjects.get(slot.subject_id)
        member = faculty.get(slot.faculty_id)
        room = rooms.get(slot.room_id)
        detail = SlotDetailOut.model_validate(slot)
        detail.course = CourseSummary.model_validate(course) if course else None
        detail.subject = SubjectSummary.model_validate(subject) if subject else None
        detail.faculty = FacultySummary.model_validate(member) if member else None
        detail.room = RoomSummary.model_validate(room) if room else None
        described.append(detail)
    return described


def group_by_grid(db: Session, slots: list[TimetableSlot]) -> list[CourseTimetableOut]:
    """One entry per (course, semester), in the order the slots arrive."""
    groups: dict[tuple[str, int], CourseTimetableOut] = {}
    for detail in describe_slots(db, slots):
        key = (detail.course_id, detail.semester)
        group = groups.get(key)
        if group is None:
            group = CourseTimetableOut(
                course=detail.course,
                semester=detail.semester,
                slots=[],
                created_at=detail.created_at,
            )
            groups[key] = group
        group.slots.append(detail)
        if detail.created_at and (group.created_at is None or detail.created_at < group.created_at):
            group.created_at = detail.created_at
    return list(groups.values())


def render_grid(db: Session, course: Course, semester: int, grid: SlotGridView) -> GridOut:
    occupied = [slot for cells in grid.values() for slot in cells.values() if slot is not None]
    details = {detail.id: detail for detail in describe_slots(db, occupied)}
    days: list[GridDayOut] = []
    for day, cells in grid.items():
        row = [
            GridCellOut(
                start_time=start,
                end_time=end,
                slot=details.get(cells[start].id) if cells.get(start) is not None else None,
            )
            for start, end in TIME_SLOTS
        ]
        days.append(GridDayOut(day=day, label=DAY_LABELS[day], cells=row))
    return GridOut(course=CourseSummary.model_validate(course), semester=semester, days=days)
