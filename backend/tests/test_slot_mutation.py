import pytest
from sqlalchemy import func, select

from app.core.config import get_settings
from app.core.exceptions import MalformedInputError, NoFacultyAvailableError, SlotConflictError
from app.core.security import get_password_hash
from app.models.activity_log import ActivityLog
from app.models.course import Course
from app.models.department import Department
from app.models.faculty import Faculty
from app.models.notification import Notification
from app.models.room import Room, RoomType
from app.models.subject import Subject, SubjectType
from app.models.timetable import TimetableSlot
from app.models.user import User, UserRole
from app.services.conflict_service import SlotVerdict
from app.services.faculty_resolver import FacultySource
from app.services.notifications import TimetableChangeNotifier
from app.services.slot_mutation import SlotMutationService


@pytest.fixture
def campus(db_session):
    db_session.add_all(
        [
            Department(id="dept-cse", name="Computer Science", code="CSE"),
            Department(id="dept-ece", name="Electronics", code="ECE"),
            Course(id="c1", code="BTCSE", name="B.Tech CSE", department_id="dept-cse", total_semesters=8),
            Course(id="c2", code="BTECE", name="B.Tech ECE", department_id="dept-ece", total_semesters=4),
            Subject(id="s1", code="CS101", name="Programming", course_id="c1", semester=1, type=SubjectType.lecture),
            Subject(id="s2", code="EC101", name="Circuits", course_id="c2", semester=1, type=SubjectType.lecture),
            Subject(id="s3", code="CS102", name="Discrete Maths", course_id="c1", semester=1, type=SubjectType.lecture),
            Subject(id="lab", code="CS151", name="Programming Lab", course_id="c1", semester=1, type=SubjectType.lab),
            Subject(id="lunch-c1", code="LUNCH1", name="Lunch", course_id="c1", semester=1, type=SubjectType.lunch),
            Subject(id="lunch-c2", code="LUNCH2", name="Lunch", course_id="c2", semester=1, type=SubjectType.lunch),
            Faculty(id="f1", name="Prof One", email="one@example.com", department_id="dept-cse"),
            Faculty(id="f2", name="Prof Two", email="two@example.com", department_id="dept-ece"),
            Room(id="r1", name="LH-101", type=RoomType.lecture, building="Main", floor=1, capacity=60),
            Room(id="r2", name="LH-102", type=RoomType.lecture, building="Main", floor=1, capacity=60),
        ]
    )
    db_session.commit()
    return db_session


@pytest.fixture
def service(campus):
    return SlotMutationService(campus, settings=get_settings(), notifier=TimetableChangeNotifier(campus))


def _assign(service, **overrides):
    params = {
        "course_id": "c1",
        "semester": 1,
        "day": 1,
        "start_time": "09:00",
        "subject_id": "s1",
        "room_id": "r1",
        "faculty_id": "f1",
    }
    params.update(overrides)
    outcome = service.assign_slot(**params)
    service.db.commit()
    return outcome


def _cell(db, course_id, semester, day, start_time):
    return list(
        db.execute(
            select(TimetableSlot).where(
                TimetableSlot.course_id == course_id,
                TimetableSlot.semester == semester,
                TimetableSlot.day_of_week == day,
                TimetableSlot.start_time == start_time,
            )
        ).scalars()
    )


def test_assign_creates_slot_with_period_end(service):
    outcome = _assign(service)

    assert outcome.committed
    assert outcome.slot.end_time == "10:00"
    assert outcome.faculty_source == FacultySource.explicit
    assert [slot.subject_id for slot in _cell(service.db, "c1", 1, 1, "09:00")] == ["s1"]


def test_occupied_cell_is_replaced_not_merged(service):
    first_id = _assign(service).slot.id
    second = _assign(service, subject_id="s3", faculty_id="f2", room_id="r2")

    assert second.committed
    assert second.evicted_slot_ids == [first_id]
    cell = _cell(service.db, "c1", 1, 1, "09:00")
    assert len(cell) == 1
    assert (cell[0].subject_id, cell[0].faculty_id, cell[0].room_id) == ("s3", "f2", "r2")


def test_faculty_double_booking_is_rejected_and_nothing_is_written(service):
    _assign(service)
    outcome = _assign(service, course_id="c2", subject_id="s2", room_id="r2")

    assert not outcome.committed
    assert outcome.verdict.reasons == ["Faculty is already assigned to Programming for B.Tech CSE at this time."]
    assert _cell(service.db, "c2", 1, 1, "09:00") == []


def test_reassigning_own_cell_with_editing_id_keeps_faculty_time(service):
    original_id = _assign(service).slot.id
    outcome = _assign(service, subject_id="s3", editing_slot_id=original_id)

    assert outcome.committed
    assert outcome.verdict.reasons == []
    assert service.db.get(TimetableSlot, original_id) is None


def test_editing_slot_from_another_cell_is_moved(service):
    original_id = _assign(service).slot.id
    moved = _assign(service, day=2, start_time="10:00", editing_slot_id=original_id)

    assert moved.committed
    assert _cell(service.db, "c1", 1, 1, "09:00") == []
    assert [slot.id for slot in _cell(service.db, "c1", 1, 2, "10:00")] == [moved.slot.id]


def test_moving_into_occupied_cell_replaces_its_occupant(service):
    original_id = _assign(service).slot.id
    occupant_id = _assign(service, start_time="10:00", subject_id="s3", faculty_id="f2", room_id="r1").slot.id

    moved = _assign(service, start_time="10:00", editing_slot_id=original_id)

    assert moved.committed
    assert moved.verdict.reasons == []
    assert sorted(moved.evicted_slot_ids) == sorted([original_id, occupant_id])
    assert _cell(service.db, "c1", 1, 1, "09:00") == []
    assert [slot.subject_id for slot in _cell(service.db, "c1", 1, 1, "10:00")] == ["s1"]


def test_editing_slot_from_another_timetable_is_rejected(service):
    foreign_id = _assign(
        service, course_id="c2", subject_id="s2", faculty_id="f2", room_id="r2", start_time="14:00"
    ).slot.id

    outcome = _assign(service, editing_slot_id=foreign_id)

    assert not outcome.committed
    assert outcome.verdict.reasons == ["Slot being edited belongs to another timetable."]
    assert service.db.get(TimetableSlot, foreign_id) is not None
    assert _cell(service.db, "c1", 1, 1, "09:00") == []


def test_subject_from_another_semester_is_flagged_but_committed(service):
    outcome = _assign(service, semester=2)

    assert outcome.committed
    assert outcome.verdict.suggestions == ["Subject Programming is taught in semester 1."]


def test_unstaffed_periods_never_hold_faculty_or_room(service):
    first = _assign(service, subject_id="lunch-c1", start_time="11:00")
    second = _assign(service, course_id="c2", subject_id="lunch-c2", start_time="11:00")

    assert first.committed and second.committed
    assert (first.slot.faculty_id, first.slot.room_id) == (None, None)
    assert (second.slot.faculty_id, second.slot.room_id) == (None, None)
    assert first.faculty_source is None


def test_unknown_references_are_reasons_not_errors(service):
    unknown_course = _assign(service, course_id="nope")
    unknown_faculty = _assign(service, faculty_id="ghost")

    assert unknown_course.verdict.reasons == ["Course not found."]
    assert unknown_faculty.verdict.reasons == ["Faculty not found."]
    assert service.db.execute(select(func.count(TimetableSlot.id))).scalar_one() == 0


def test_semester_outside_course_is_rejected(service):
    outcome = _assign(service, course_id="c2", semester=5, subject_id="s2", faculty_id="f2")
    assert not outcome.committed
    assert "outside the 4 semesters" in outcome.verdict.reasons[0]


def test_start_time_outside_the_teaching_day_is_malformed(service):
    with pytest.raises(MalformedInputError):
        service.assign_slot(course_id="c1", semester=1, day=1, start_time="12:00", subject_id="s1", room_id="r1")


def test_missing_faculty_is_resolved_through_fallback_chain(service):
    outcome = _assign(service, faculty_id=None, course_id="c2", subject_id="s2", room_id="r2")

    assert outcome.committed
    assert outcome.slot.faculty_id == "f2"
    assert outcome.faculty_source == FacultySource.department


def test_no_faculty_anywhere_aborts_assignment(db_session):
    db_session.add_all(
        [
            Department(id="dept", name="Physics", code="PHY"),
            Course(id="c", code="BSPHY", name="B.Sc Physics", department_id="dept"),
            Subject(id="s", code="PH101", name="Mechanics", course_id="c", semester=1, type=SubjectType.lecture),
            Room(id="r", name="PH-1", type=RoomType.lecture, building="Science", capacity=40),
        ]
    )
    db_session.commit()
    service = SlotMutationService(db_session, settings=get_settings())

    with pytest.raises(NoFacultyAvailableError):
        service.assign_slot(course_id="c", semester=1, day=1, start_time="09:00", subject_id="s", room_id="r")


def test_unique_constraint_catches_racing_faculty_booking(service, monkeypatch):
    _assign(service, course_id="c2", subject_id="s2", room_id="r2")
    # A concurrent writer that validated against a stale grid.
    monkeypatch.setattr(service.validator, "validate", lambda proposal: SlotVerdict())

    with pytest.raises(SlotConflictError) as exc_info:
        service.assign_slot(
            course_id="c1", semester=1, day=1, start_time="09:00", subject_id="s1", room_id="r1", faculty_id="f1"
        )

    assert exc_info.value.status_code == 409
    assert service.db.execute(select(func.count(TimetableSlot.id))).scalar_one() == 1


def test_delete_scoped_grid_and_count(service):
    _assign(service)
    _assign(service, start_time="10:00", subject_id="s3")
    _assign(service, course_id="c2", subject_id="s2", faculty_id="f2", room_id="r2")
    assert service.count_distinct_grids() == 2

    deleted = service.delete_slots_for_course_semester("c1", 1)
    service.db.commit()

    assert deleted == 2
    assert service.count_distinct_grids() == 1


def test_delete_all_resets_every_grid(service):
    _assign(service)
    _assign(service, course_id="c2", subject_id="s2", faculty_id="f2", room_id="r2")

    deleted = service.delete_all_slots()
    service.db.commit()

    assert deleted == 2
    assert service.count_distinct_grids() == 0


def test_committed_assignment_is_logged_and_notifies_faculty(service):
    service.db.add(
        User(
            name="Prof One",
            email="one@example.com",
            hashed_password=get_password_hash("password123"),
            role=UserRole.faculty,
        )
    )
    service.db.commit()

    outcome = _assign(service)

    log = service.db.execute(select(ActivityLog).where(ActivityLog.entity_id == outcome.slot.id)).scalar_one()
    assert log.action == "timetable.slot.assign"
    assert log.details["faculty_source"] == "explicit"
    notifications = list(service.db.execute(select(Notification)).scalars())
    assert [item.title for item in notifications] == ["Timetable Updated"]
    assert "BTCSE semester 1: Monday 09:00-10:00 is now Programming." == notifications[0].message
