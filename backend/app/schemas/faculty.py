from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.faculty import FacultyStatus


class FacultyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    department_id: str = Field(min_length=1, max_length=36)
    status: FacultyStatus = FacultyStatus.active

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class FacultyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department_id: str | None = Field(default=None, min_length=1, max_length=36)
    status: FacultyStatus | None = None


class FacultyOut(BaseModel):
    id: str
    name: str
    email: str
    department_id: str
    status: FacultyStatus

    model_config = {"from_attributes": True}


class FacultySubjectAssign(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)


class FacultySubjectAssignmentOut(BaseModel):
    id: str
    faculty_id: str
    subject_id: str
    assigned_at: datetime | None = None

    model_config = {"from_attributes": True}


class FacultyCourseAssignmentOut(BaseModel):
    id: str
    faculty_id: str
    course_id: str
    assigned_at: datetime | None = None

    model_config = {"from_attributes": True}
