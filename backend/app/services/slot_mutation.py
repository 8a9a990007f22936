from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.exceptions import MalformedInputError, SlotConflictError
from app.models.subject import UNSTAFFED_SUBJECT_TYPES
from app.models.timetable import TimetableSlot
from app.models.user import User
from app.services.audit import log_activity
from app.services.catalog import ReferenceCatalog
from app.services.conflict_service import ConflictValidator, SlotProposal, SlotVerdict
from app.services.faculty_resolver import FacultyResolver, FacultySource
from app.services.notifications import TimetableChangeNotifier
from app.services.slot_grid import SlotGrid, end_time_for

logger = logging.getLogger(__name__)


@dataclass
class AssignmentOutcome:
    verdict: SlotVerdict
    slot: TimetableSlot | None = None
    faculty_source: FacultySource | None = None
    evicted_slot_ids: list[str] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.slot is not None


class SlotMutationService:
    """Validate-then-commit of single slots, plus scoped and global resets.

    Nothing here commits the session: the caller owns the transaction, so a
    validation, the eviction of the old occupant and the insert of the new
    one land together or not at all.
    """

    def __init__(
        self,
        db: Session,
        *,
        settings: Settings | None = None,
        notifier: TimetableChangeNotifier | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.db = db
        self.catalog = ReferenceCatalog(db)
        self.grid = SlotGrid(db)
        self.validator = ConflictValidator(
            self.catalog,
            self.grid,
            strict_room_type_matching=settings.strict_room_type_matching,
            faculty_load_threshold=settings.faculty_daily_load_threshold,
        )
        self.resolver = FacultyResolver(self.catalog)
        self.notifier = notifier

    def validate(self, proposal: SlotProposal) -> SlotVerdict:
        return self.validator.validate(proposal)

    def assign_slot(
        self,
        *,
        course_id: str,
        semester: int,
        day: int,
        start_time: str,
        subject_id: str,
        room_id: str | None,
        faculty_id: str | None = None,
        editing_slot_id: str | None = None,
        actor: User | None = None,
    ) -> AssignmentOutcome:
        try:
            end_time = end_time_for(start_time)
        except ValueError as exc:
            raise MalformedInputError(str(exc), details={"start_time": start_time}) from exc

        course = self.catalog.get_course(course_id)
        if course is None:
            return AssignmentOutcome(verdict=SlotVerdict(reasons=["Course not found."]))
        if semester > course.total_semesters:
            return AssignmentOutcome(
                verdict=SlotVerdict(
                    reasons=[f"Semester {semester} is outside the {course.total_semesters} semesters of {course.name}."]
                )
            )

        occupant = self.grid.lock_cell(course_id, semester, day, start_time)
        editing = self.grid.get_slot_by_id(editing_slot_id) if editing_slot_id else None
        if editing is not None and (editing.course_id != course_id or editing.semester != semester):
            return AssignmentOutcome(verdict=SlotVerdict(reasons=["Slot being edited belongs to another timetable."]))
        # Both the occupant and the slot under edit are evicted on commit.
        replaced_slot_ids = tuple(item.id for item in (occupant, editing) if item is not None)

        subject = self.catalog.get_subject(subject_id)
        faculty_source: FacultySource | None = None
        if subject is not None and subject.type in UNSTAFFED_SUBJECT_TYPES:
            faculty_id = None
            room_id = None
        elif subject is not None:
            resolution = self.resolver.resolve(subject_id=subject_id, course_id=course_id, faculty_id=faculty_id)
            faculty_id = resolution.faculty_id
            faculty_source = resolution.source

        verdict = self.validator.validate(
            SlotProposal(
                subject_id=subject_id,
                day=day,
                start_time=start_time,
                faculty_id=faculty_id,
                room_id=room_id,
                editing_slot_id=editing_slot_id,
                replaced_slot_ids=replaced_slot_ids,
                course_id=course_id,
                semester=semester,
            )
        )
        if not verdict.valid:
            logger.info(
                "Rejected slot %s/%s day=%s %s: %s",
                course_id,
                semester,
                day,
                start_time,
                "; ".join(verdict.reasons),
            )
            return AssignmentOutcome(verdict=verdict, faculty_source=faculty_source)

        evicted = {item.id: item for item in (occupant, editing) if item is not None}
        affected_faculty_ids = [faculty_id, *(item.faculty_id for item in evicted.values())]
        slot = TimetableSlot(
            course_id=course_id,
            semester=semester,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            subject_id=subject_id,
            faculty_id=faculty_id,
            room_id=room_id,
        )
        try:
            for item in evicted.values():
                self.db.delete(item)
            # Flush the eviction first: within one flush inserts run before deletes.
            self.db.flush()
            self.db.add(slot)
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Concurrent assignment won cell %s/%s day=%s %s", course_id, semester, day, start_time)
            raise SlotConflictError(
                "The cell, faculty or room was taken by a concurrent assignment. Reload the grid and retry.",
                details={"course_id": course_id, "semester": semester, "day": day, "start_time": start_time},
            ) from exc

        log_activity(
            self.db,
            user=actor,
            action="timetable.slot.assign",
            entity_type="timetable_slot",
            entity_id=slot.id,
            details={
                "course_id": course_id,
                "semester": semester,
                "day": day,
                "start_time": start_time,
                "subject_id": subject_id,
                "faculty_id": faculty_id,
                "room_id": room_id,
                "faculty_source": faculty_source.value if faculty_source else None,
                "evicted_slot_ids": list(evicted),
            },
        )
        logger.info(
            "Assigned slot %s to %s/%s day=%s %s (faculty=%s via %s)",
            slot.id,
            course_id,
            semester,
            day,
            start_time,
            faculty_id,
            faculty_source.value if faculty_source else "none",
        )

        if self.notifier is not None:
            self.notifier.slot_changed(
                course=course,
                semester=semester,
                slot=slot,
                affected_user_ids=self.catalog.find_user_ids_for_faculty(affected_faculty_ids),
            )

        return AssignmentOutcome(
            verdict=verdict,
            slot=slot,
            faculty_source=faculty_source,
            evicted_slot_ids=list(evicted),
        )

    def delete_slots_for_course_semester(self, course_id: str, semester: int, *, actor: User | None = None) -> int:
        result = self.db.execute(
            delete(TimetableSlot).where(
                TimetableSlot.course_id == course_id,
                TimetableSlot.semester == semester,
            )
        )
        deleted = result.rowcount or 0
        log_activity(
            self.db,
            user=actor,
            action="timetable.grid.delete",
            entity_type="course",
            entity_id=course_id,
            details={"semester": semester, "deleted": deleted},
        )
        logger.info("Deleted %d slot(s) for %s/%s", deleted, course_id, semester)
        if deleted and self.notifier is not None:
            course = self.catalog.get_course(course_id)
            label = course.code if course is not None else course_id
            self.notifier.grid_cleared(
                message=f"The timetable of {label} semester {semester} was deleted.",
                actor_user_id=actor.id if actor is not None else None,
            )
        return deleted

    def delete_all_slots(self, *, actor: User | None = None) -> int:
        result = self.db.execute(delete(TimetableSlot))
        deleted = result.rowcount or 0
        log_activity(
            self.db,
            user=actor,
            action="timetable.grid.delete_all",
            entity_type="timetable_slot",
            details={"deleted": deleted},
        )
        logger.warning("Deleted all %d timetable slot(s)", deleted)
        if deleted and self.notifier is not None:
            self.notifier.grid_cleared(
                message="All timetables were reset.",
                actor_user_id=actor.id if actor is not None else None,
            )
        return deleted

    def count_distinct_grids(self) -> int:
        grids = select(TimetableSlot.course_id, TimetableSlot.semester).distinct().subquery()
        return int(self.db.execute(select(func.count()).select_from(grids)).scalar_one())
