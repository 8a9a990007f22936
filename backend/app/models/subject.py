import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class SubjectType(str, Enum):
    lecture = "lecture"
    lab = "lab"
    workshop = "workshop"
    free = "free"
    lunch = "lunch"


# Placeholder periods: no faculty, no room, never in conflict.
UNSTAFFED_SUBJECT_TYPES = frozenset({SubjectType.free, SubjectType.lunch})


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    type: Mapped[SubjectType] = mapped_column(SAEnum(SubjectType, name="subject_type"), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
