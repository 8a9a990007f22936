from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.subject import SubjectType


def _normalize_code(value: str) -> str:
    code = value.strip().upper()
    if not code:
        raise ValueError("Code cannot be empty")
    return code


class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _normalize_code(value)


class DepartmentOut(DepartmentCreate):
    id: str

    model_config = {"from_attributes": True}


class CourseCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department_id: str = Field(min_length=1, max_length=36)
    total_semesters: int = Field(default=8, ge=1, le=20)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _normalize_code(value)


class CourseOut(CourseCreate):
    id: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    semester: int = Field(ge=1, le=20)
    type: SubjectType = SubjectType.lecture
    credits: int = Field(default=3, ge=0, le=40)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _normalize_code(value)


class SubjectOut(SubjectCreate):
    id: str
    course_id: str

    model_config = {"from_attributes": True}


class CourseFacultyAssign(BaseModel):
    faculty_id: str = Field(min_length=1, max_length=36)
