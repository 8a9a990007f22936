from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.course import Course
from app.models.department import Department
from app.models.faculty import Faculty
from app.models.faculty_assignment import FacultyCourseAssignment
from app.models.subject import Subject
from app.models.user import User, UserRole
from app.schemas.course import CourseCreate, CourseFacultyAssign, CourseOut, SubjectCreate, SubjectOut
from app.schemas.faculty import FacultyCourseAssignmentOut, FacultyOut
from app.services.audit import log_activity
from app.services.catalog import ReferenceCatalog

router = APIRouter()


def _get_course_or_404(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


@router.get("/", response_model=list[CourseOut])
def list_courses(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[CourseOut]:
    return list(db.execute(select(Course).order_by(Course.code)).scalars())


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> CourseOut:
    if db.get(Department, payload.department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    existing = db.execute(select(Course).where(Course.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")
    course = Course(**payload.model_dump())
    db.add(course)
    db.flush()
    log_activity(db, user=current_user, action="course.create", entity_type="course", entity_id=course.id)
    db.commit()
    db.refresh(course)
    return course


@router.get("/{course_id}/subjects", response_model=list[SubjectOut])
def list_course_subjects(
    course_id: str,
    semester: int | None = Query(default=None, ge=1, le=20),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    _get_course_or_404(db, course_id)
    query = select(Subject).where(Subject.course_id == course_id)
    if semester is not None:
        query = query.where(Subject.semester == semester)
    return list(db.execute(query.order_by(Subject.semester, Subject.code)).scalars())


@router.post("/{course_id}/subjects", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_course_subject(
    course_id: str,
    payload: SubjectCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> SubjectOut:
    course = _get_course_or_404(db, course_id)
    if payload.semester > course.total_semesters:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Course {course.code} has only {course.total_semesters} semesters",
        )
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    subject = Subject(course_id=course_id, **payload.model_dump())
    db.add(subject)
    db.flush()
    log_activity(db, user=current_user, action="subject.create", entity_type="subject", entity_id=subject.id)
    db.commit()
    db.refresh(subject)
    return subject


@router.get("/{course_id}/faculty", response_model=list[FacultyOut])
def list_course_faculty(
    course_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[FacultyOut]:
    _get_course_or_404(db, course_id)
    return ReferenceCatalog(db).list_faculty_for_course(course_id)


@router.post("/{course_id}/faculty", response_model=FacultyCourseAssignmentOut, status_code=status.HTTP_201_CREATED)
def assign_course_faculty(
    course_id: str,
    payload: CourseFacultyAssign,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> FacultyCourseAssignmentOut:
    _get_course_or_404(db, course_id)
    if db.get(Faculty, payload.faculty_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    existing = db.execute(
        select(FacultyCourseAssignment).where(
            FacultyCourseAssignment.course_id == course_id,
            FacultyCourseAssignment.faculty_id == payload.faculty_id,
        )
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty already assigned to course")
    assignment = FacultyCourseAssignment(course_id=course_id, faculty_id=payload.faculty_id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment
