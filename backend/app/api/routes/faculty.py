from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.department import Department
from app.models.faculty import Faculty
from app.models.faculty_assignment import FacultySubjectAssignment
from app.models.subject import Subject
from app.models.user import User, UserRole
from app.schemas.faculty import (
    FacultyCreate,
    FacultyOut,
    FacultySubjectAssign,
    FacultySubjectAssignmentOut,
    FacultyUpdate,
)
from app.services.audit import log_activity

router = APIRouter()


@router.get("/", response_model=list[FacultyOut])
def list_faculty(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[FacultyOut]:
    if current_user.role == UserRole.admin:
        return list(db.execute(select(Faculty).order_by(Faculty.name)).scalars())
    if current_user.role == UserRole.faculty:
        email = (current_user.email or "").strip().lower()
        item = db.execute(select(Faculty).where(func.lower(Faculty.email) == email)).scalar_one_or_none()
        return [item] if item is not None else []
    return []


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(
    payload: FacultyCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultyOut:
    if db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    existing = db.execute(select(Faculty).where(Faculty.email == payload.email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty email already exists")
    faculty = Faculty(**payload.model_dump())
    db.add(faculty)
    db.flush()
    log_activity(db, user=current_user, action="faculty.create", entity_type="faculty", entity_id=faculty.id)
    db.commit()
    db.refresh(faculty)
    return faculty


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(
    faculty_id: str,
    payload: FacultyUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultyOut:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")

    data = payload.model_dump(exclude_unset=True)
    if "department_id" in data and db.get(Department, data["department_id"]) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    for key, value in data.items():
        setattr(faculty, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="faculty.update",
            entity_type="faculty",
            entity_id=faculty_id,
            details=payload.model_dump(exclude_unset=True, mode="json"),
        )
    db.commit()
    db.refresh(faculty)
    return faculty


@router.get("/{faculty_id}/subjects", response_model=list[FacultySubjectAssignmentOut])
def list_faculty_subjects(
    faculty_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[FacultySubjectAssignmentOut]:
    if db.get(Faculty, faculty_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    return list(
        db.execute(
            select(FacultySubjectAssignment)
            .where(FacultySubjectAssignment.faculty_id == faculty_id)
            .order_by(FacultySubjectAssignment.assigned_at)
        ).scalars()
    )


@router.post(
    "/{faculty_id}/subjects",
    response_model=FacultySubjectAssignmentOut,
    status_code=status.HTTP_201_CREATED,
)
def assign_faculty_subject(
    faculty_id: str,
    payload: FacultySubjectAssign,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultySubjectAssignmentOut:
    if db.get(Faculty, faculty_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    if db.get(Subject, payload.subject_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    existing = db.execute(
        select(FacultySubjectAssignment).where(
            FacultySubjectAssignment.faculty_id == faculty_id,
            FacultySubjectAssignment.subject_id == payload.subject_id,
        )
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject already assigned to faculty")
    assignment = FacultySubjectAssignment(faculty_id=faculty_id, subject_id=payload.subject_id)
    db.add(assignment)
    db.flush()
    log_activity(
        db,
        user=current_user,
        action="faculty.subject.assign",
        entity_type="faculty",
        entity_id=faculty_id,
        details={"subject_id": payload.subject_id},
    )
    db.commit()
    db.refresh(assignment)
    return assignment
