from __future__ import annotations

from dataclasses import dataclass, field

from app.models.room import RoomType
from app.models.subject import UNSTAFFED_SUBJECT_TYPES, Subject, SubjectType
from app.models.timetable import TimetableSlot
from app.services.catalog import ReferenceCatalog
from app.services.slot_grid import SlotGrid, neighbouring_start_times

DEFAULT_FACULTY_LOAD_THRESHOLD = 4


@dataclass
class SlotProposal:
    subject_id: str
    day: int
    start_time: str
    faculty_id: str | None = None
    room_id: str | None = None
    editing_slot_id: str | None = None
    replaced_slot_ids: tuple[str, ...] = ()
    course_id: str | None = None
    semester: int | None = None

    @property
    def excluded_slot_ids(self) -> set[str]:
        excluded = set(self.replaced_slot_ids)
        if self.editing_slot_id:
            excluded.add(self.editing_slot_id)
        return excluded


@dataclass
class SlotVerdict:
    reasons: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.reasons


class ConflictValidator:
    """Checks one proposed slot against the catalog and the current grids.

    All checks run and their findings accumulate, so a caller sees every
    problem in one round trip. ``reasons`` block a commit; ``suggestions``
    are advisory only.
    """

    def __init__(
        self,
        catalog: ReferenceCatalog,
        grid: SlotGrid,
        *,
        strict_room_type_matching: bool = False,
        faculty_load_threshold: int = DEFAULT_FACULTY_LOAD_THRESHOLD,
    ) -> None:
        self.catalog = catalog
        self.grid = grid
        self.strict_room_type_matching = strict_room_type_matching
        self.faculty_load_threshold = faculty_load_threshold

    def validate(self, proposal: SlotProposal) -> SlotVerdict:
        verdict = SlotVerdict()

        subject = self.catalog.get_subject(proposal.subject_id)
        if subject is not None and subject.type in UNSTAFFED_SUBJECT_TYPES:
            return verdict
        if subject is None:
            verdict.reasons.append("Subject not found.")
        else:
            self._check_subject_scope(proposal, subject, verdict)

        if proposal.faculty_id:
            self._check_faculty(proposal, verdict)
        if proposal.room_id:
            self._check_room(proposal, subject, verdict)

        if proposal.faculty_id:
            clash = self.grid.find_by_faculty(
                proposal.faculty_id, proposal.day, proposal.start_time, proposal.excluded_slot_ids
            )
            if clash is not None:
                subject_name, course_name = self._describe(clash)
                verdict.reasons.append(
                    f"Faculty is already assigned to {subject_name} for {course_name} at this time."
                )

        if proposal.room_id:
            clash = self.grid.find_by_room(
                proposal.room_id, proposal.day, proposal.start_time, proposal.excluded_slot_ids
            )
            if clash is not None:
                subject_name, course_name = self._describe(clash)
                verdict.reasons.append(f"Room is already booked for {subject_name} ({course_name}) at this time.")

        if proposal.faculty_id:
            self._check_adjacent_periods(proposal, verdict)

        return verdict

    def _check_faculty(self, proposal: SlotProposal, verdict: SlotVerdict) -> None:
        faculty = self.catalog.get_faculty(proposal.faculty_id)
        if faculty is None:
            verdict.reasons.append("Faculty not found.")
            return
        load = self.grid.count_faculty_load(faculty.id, proposal.day, proposal.excluded_slot_ids)
        if load >= self.faculty_load_threshold:
            verdict.suggestions.append("Faculty has high teaching load on this day.")

    def _check_subject_scope(self, proposal: SlotProposal, subject: Subject, verdict: SlotVerdict) -> None:
        if proposal.course_id and subject.course_id != proposal.course_id:
            course = self.catalog.get_course(subject.course_id)
            course_name = course.name if course is not None else subject.course_id
            verdict.suggestions.append(f"Subject {subject.name} is assigned to course {course_name}.")
        elif proposal.semester is not None and subject.semester != proposal.semester:
            verdict.suggestions.append(f"Subject {subject.name} is taught in semester {subject.semester}.")

    def _check_room(self, proposal: SlotProposal, subject: Subject | None, verdict: SlotVerdict) -> None:
        room = self.catalog.get_room(proposal.room_id)
        if room is None:
            verdict.reasons.append("Room not found.")
            return
        if subject is None:
            return

        mismatch: str | None = None
        if room.type == RoomType.lab and subject.type != SubjectType.lab:
            mismatch = "Lab room assigned for non-lab subject."
        elif room.type == RoomType.lecture and subject.type == SubjectType.lab:
            mismatch = "Lecture room assigned for lab subject."
        if mismatch is None:
            return
        if self.strict_room_type_matching:
            verdict.reasons.append(mismatch)
        else:
            verdict.suggestions.append(mismatch)

    def _check_adjacent_periods(self, proposal: SlotProposal, verdict: SlotVerdict) -> None:
        previous, following = neighbouring_start_times(proposal.start_time)
        if previous and self.grid.find_by_faculty(
            proposal.faculty_id, proposal.day, previous, proposal.excluded_slot_ids
        ):
            verdict.suggestions.append("Faculty has a class in the previous time slot")
        if following and self.grid.find_by_faculty(
            proposal.faculty_id, proposal.day, following, proposal.excluded_slot_ids
        ):
            verdict.suggestions.append("Faculty has a class in the next time slot")

    def _describe(self, slot: TimetableSlot) -> tuple[str, str]:
        subject = self.catalog.get_subject(slot.subject_id)
        course = self.catalog.get_course(slot.course_id)
        subject_name = subject.name if subject is not None else slot.subject_id
        course_name = course.name if course is not None else slot.course_id
        return subject_name, course_name
