from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_slot_mutation_service, require_roles
from app.core.exceptions import ResourceNotFoundError
from app.models.faculty import Faculty
from app.models.user import User, UserRole
from app.schemas.timetable import (
    CourseTimetableOut,
    GridCountOut,
    GridDeleteResult,
    GridOut,
    SlotAssignRequest,
    SlotAssignResult,
    SlotDetailOut,
    SlotValidationRequest,
    SlotValidationResult,
    TimetableSlotOut,
)
from app.services.conflict_service import SlotProposal
from app.services.slot_mutation import SlotMutationService
from app.services.timetable_views import describe_slots, group_by_grid, render_grid

router = APIRouter()


@router.post("/validate", response_model=SlotValidationResult)
def validate_slot(
    payload: SlotValidationRequest,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.faculty)),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> SlotValidationResult:
    verdict = service.validate(
        SlotProposal(
            subject_id=payload.subject_id,
            day=payload.day,
            start_time=payload.start_time,
            faculty_id=payload.faculty_id,
            room_id=payload.room_id,
            editing_slot_id=payload.editing_slot_id,
            course_id=payload.course_id,
            semester=payload.semester,
        )
    )
    return SlotValidationResult(valid=verdict.valid, reasons=verdict.reasons, suggestions=verdict.suggestions)


@router.post("/slots", response_model=SlotAssignResult)
def assign_slot(
    payload: SlotAssignRequest,
    response: Response,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> SlotAssignResult:
    outcome = service.assign_slot(
        course_id=payload.course_id,
        semester=payload.semester,
        day=payload.day,
        start_time=payload.start_time,
        subject_id=payload.subject_id,
        room_id=payload.room_id,
        faculty_id=payload.faculty_id,
        editing_slot_id=payload.editing_slot_id,
        actor=current_user,
    )
    faculty_source = outcome.faculty_source.value if outcome.faculty_source else None
    if not outcome.committed:
        response.status_code = status.HTTP_409_CONFLICT
        return SlotAssignResult(
            success=False,
            message="Slot assignment rejected.",
            faculty_source=faculty_source,
            reasons=outcome.verdict.reasons,
            suggestions=outcome.verdict.suggestions,
        )

    db.commit()
    db.refresh(outcome.slot)
    return SlotAssignResult(
        success=True,
        message="Slot assigned successfully.",
        slot=TimetableSlotOut.model_validate(outcome.slot),
        faculty_source=faculty_source,
        suggestions=outcome.verdict.suggestions,
    )


@router.delete("", response_model=GridDeleteResult)
def delete_timetable(
    course_id: str | None = Query(default=None, max_length=36),
    semester: int | None = Query(default=None, ge=1, le=20),
    delete_all: bool = Query(default=False),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> GridDeleteResult:
    if delete_all:
        deleted = service.delete_all_slots(actor=current_user)
        db.commit()
        return GridDeleteResult(deleted=deleted, message="All timetables deleted successfully")

    if not course_id or semester is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="course_id and semester are required unless delete_all is set",
        )
    deleted = service.delete_slots_for_course_semester(course_id, semester, actor=current_user)
    db.commit()
    return GridDeleteResult(deleted=deleted, message="Timetable deleted")


@router.get("/count", response_model=GridCountOut)
def count_timetables(
    current_user: User = Depends(require_roles(UserRole.admin)),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> GridCountOut:
    return GridCountOut(count=service.count_distinct_grids())


@router.get("", response_model=list[CourseTimetableOut])
def list_timetables(
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> list[CourseTimetableOut]:
    return group_by_grid(db, service.grid.list_slots())


@router.get("/grid", response_model=GridOut)
def get_grid(
    course_id: str = Query(min_length=1, max_length=36),
    semester: int = Query(ge=1, le=20),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> GridOut:
    course = service.catalog.get_course(course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return render_grid(db, course, semester, service.grid.build_grid(course_id, semester))


@router.get("/faculty/{faculty_id}", response_model=list[SlotDetailOut])
def get_faculty_schedule(
    faculty_id: str,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.faculty)),
    db: Session = Depends(get_db),
    service: SlotMutationService = Depends(get_slot_mutation_service),
) -> list[SlotDetailOut]:
    faculty: Faculty | None = service.catalog.get_faculty(faculty_id)
    if faculty is None:
        raise ResourceNotFoundError("Faculty", faculty_id)
    if current_user.role == UserRole.faculty and faculty.email != current_user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Faculty can only view their own schedule")
    return describe_slots(db, service.grid.list_faculty_slots(faculty_id))
