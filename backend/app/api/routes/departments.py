from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_roles
from app.models.department import Department
from app.models.user import User, UserRole
from app.schemas.course import DepartmentCreate, DepartmentOut

router = APIRouter()


@router.get("/", response_model=list[DepartmentOut])
def list_departments(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return list(db.execute(select(Department).order_by(Department.name)).scalars())


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> DepartmentOut:
    existing = db.execute(
        select(Department).where(or_(Department.code == payload.code, Department.name == payload.name))
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department already exists")
    department = Department(**payload.model_dump())
    db.add(department)
    db.commit()
    db.refresh(department)
    return department
