from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.room import RoomType
from app.models.subject import SubjectType
from app.services.slot_grid import TEACHING_START_TIMES


def _validate_start_time(value: str) -> str:
    start = value.strip()
    if start not in TEACHING_START_TIMES:
        raise ValueError(f"start_time must be one of {', '.join(TEACHING_START_TIMES)}")
    return start


class SlotValidationRequest(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, max_length=36)
    room_id: str | None = Field(default=None, max_length=36)
    day: int = Field(ge=1, le=7)
    start_time: str
    editing_slot_id: str | None = Field(default=None, max_length=36)
    course_id: str | None = Field(default=None, max_length=36)
    semester: int | None = Field(default=None, ge=1, le=20)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        return _validate_start_time(value)


class SlotValidationResult(BaseModel):
    valid: bool
    reasons: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class SlotAssignRequest(BaseModel):
    course_id: str = Field(min_length=1, max_length=36)
    semester: int = Field(ge=1, le=20)
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, max_length=36)
    room_id: str = Field(min_length=1, max_length=36)
    day: int = Field(ge=1, le=7)
    start_time: str
    editing_slot_id: str | None = Field(default=None, max_length=36)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, value: str) -> str:
        return _validate_start_time(value)


class TimetableSlotOut(BaseModel):
    id: str
    course_id: str
    semester: int
    day_of_week: int
    start_time: str
    end_time: str
    subject_id: str
    faculty_id: str | None = None
    room_id: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class SlotAssignResult(BaseModel):
    success: bool
    message: str
    slot: TimetableSlotOut | None = None
    faculty_source: str | None = None
    reasons: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class GridDeleteResult(BaseModel):
    deleted: int
    message: str


class GridCountOut(BaseModel):
    count: int


class CourseSummary(BaseModel):
    id: str
    name: str
    code: str

    model_config = {"from_attributes": True}


class SubjectSummary(BaseModel):
    id: str
    name: str
    code: str
    type: SubjectType

    model_config = {"from_attributes": True}


class FacultySummary(BaseModel):
    id: str
    name: str
    email: str

    model_config = {"from_attributes": True}


class RoomSummary(BaseModel):
    id: str
    name: str
    type: RoomType
    building: str
    floor: int

    model_config = {"from_attributes": True}


class SlotDetailOut(TimetableSlotOut):
    course: CourseSummary | None = None
    subject: SubjectSummary | None = None
    faculty: FacultySummary | None = None
    room: RoomSummary | None = None


class CourseTimetableOut(BaseModel):
    course: CourseSummary | None = None
    semester: int
    slots: list[SlotDetailOut]
    created_at: datetime | None = None


class GridCellOut(BaseModel):
    start_time: str
    end_time: str
    slot: SlotDetailOut | None = None


class GridDayOut(BaseModel):
    day: int
    label: str
    cells: list[GridCellOut]


class GridOut(BaseModel):
    course: CourseSummary
    semester: int
    days: list[GridDayOut]
