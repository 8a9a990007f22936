"""Weekly slot grid of one (course, semester) and cross-grid occupancy queries.

The teaching day is a fixed sequence of one-hour periods: a morning block of
three, the lunch break, then an afternoon block of three. Cells are keyed by
``(day_of_week, start_time)`` with ``day_of_week`` in ``1..7`` (Monday = 1).
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.timetable import TimetableSlot

TIME_SLOTS: tuple[tuple[str, str], ...] = (
    ("09:00", "10:00"),
    ("10:00", "11:00"),
    ("11:00", "12:00"),
    ("13:00", "14:00"),
    ("14:00", "15:00"),
    ("15:00", "16:00"),
)
TEACHING_START_TIMES: tuple[str, ...] = tuple(start for start, _ in TIME_SLOTS)

DAY_LABELS: dict[int, str] = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}
DAYS_OF_WEEK: tuple[int, ...] = tuple(DAY_LABELS)


def end_time_for(start_time: str) -> str:
    for start, end in TIME_SLOTS:
        if start == start_time:
            return end
    raise ValueError(f"{start_time} is not a teaching period start time")


def neighbouring_start_times(start_time: str) -> tuple[str | None, str | None]:
    """Return the enumerated periods directly before and after ``start_time``."""
    index = TEACHING_START_TIMES.index(start_time)
    previous = TEACHING_START_TIMES[index - 1] if index > 0 else None
    following = TEACHING_START_TIMES[index + 1] if index < len(TEACHING_START_TIMES) - 1 else None
    return previous, following


SlotGridView = dict[int, dict[str, TimetableSlot | None]]


class SlotGrid:
    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _cell_query(course_id: str, semester: int, day: int, start_time: str):
        return select(TimetableSlot).where(
            TimetableSlot.course_id == course_id,
            TimetableSlot.semester == semester,
            TimetableSlot.day_of_week == day,
            TimetableSlot.start_time == start_time,
        )

    def get_slot(self, course_id: str, semester: int, day: int, start_time: str) -> TimetableSlot | None:
        return self.db.execute(self._cell_query(course_id, semester, day, start_time)).scalar_one_or_none()

    def get_slot_by_id(self, slot_id: str) -> TimetableSlot | None:
        return self.db.get(TimetableSlot, slot_id)

    def lock_cell(self, course_id: str, semester: int, day: int, start_time: str) -> TimetableSlot | None:
        # Row lock on the current occupant; a no-op on SQLite.
        return self.db.execute(
            self._cell_query(course_id, semester, day, start_time).with_for_update()
        ).scalar_one_or_none()

    def find_by_faculty(
        self,
        faculty_id: str,
        day: int,
        start_time: str,
        exclude_slot_ids: Collection[str] = (),
    ) -> TimetableSlot | None:
        query = select(TimetableSlot).where(
            TimetableSlot.faculty_id == faculty_id,
            TimetableSlot.day_of_week == day,
            TimetableSlot.start_time == start_time,
        )
        if exclude_slot_ids:
            query = query.where(TimetableSlot.id.not_in(list(exclude_slot_ids)))
        return self.db.execute(query.order_by(TimetableSlot.id).limit(1)).scalar_one_or_none()

    def find_by_room(
        self,
        room_id: str,
        day: int,
        start_time: str,
        exclude_slot_ids: Collection[str] = (),
    ) -> TimetableSlot | None:
        query = select(TimetableSlot).where(
            TimetableSlot.room_id == room_id,
            TimetableSlot.day_of_week == day,
            TimetableSlot.start_time == start_time,
        )
        if exclude_slot_ids:
            query = query.where(TimetableSlot.id.not_in(list(exclude_slot_ids)))
        return self.db.execute(query.order_by(TimetableSlot.id).limit(1)).scalar_one_or_none()

    def count_faculty_load(self, faculty_id: str, day: int, exclude_slot_ids: Collection[str] = ()) -> int:
        query = select(func.count(TimetableSlot.id)).where(
            TimetableSlot.faculty_id == faculty_id,
            TimetableSlot.day_of_week == day,
        )
        if exclude_slot_ids:
            query = query.where(TimetableSlot.id.not_in(list(exclude_slot_ids)))
        return int(self.db.execute(query).scalar_one())

    def list_slots(self, course_id: str | None = None, semester: int | None = None) -> list[TimetableSlot]:
        query = select(TimetableSlot)
        if course_id is not None:
            query = query.where(TimetableSlot.course_id == course_id)
        if semester is not None:
            query = query.where(TimetableSlot.semester == semester)
        query = query.order_by(
            TimetableSlot.course_id,
            TimetableSlot.semester,
            TimetableSlot.day_of_week,
            TimetableSlot.start_time,
        )
        return list(self.db.execute(query).scalars())

    def list_faculty_slots(self, faculty_id: str) -> list[TimetableSlot]:
        return list(
            self.db.execute(
                select(TimetableSlot)
                .where(TimetableSlot.faculty_id == faculty_id)
                .order_by(TimetableSlot.day_of_week, TimetableSlot.start_time)
            ).scalars()
        )

    def build_grid(self, course_id: str, semester: int) -> SlotGridView:
        grid: SlotGridView = {day: {start: None for start in TEACHING_START_TIMES} for day in DAYS_OF_WEEK}
        for slot in self.list_slots(course_id, semester):
            grid[slot.day_of_week][slot.start_time] = slot
        return grid
