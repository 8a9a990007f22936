import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class TimetableSlot(Base):
    __tablename__ = "timetable_slots"
    __table_args__ = (
        UniqueConstraint(
            "course_id",
            "semester",
            "day_of_week",
            "start_time",
            name="uq_timetable_slots_cell",
        ),
        # FREE/LUNCH rows store NULL faculty/room and never collide here.
        UniqueConstraint("faculty_id", "day_of_week", "start_time", name="uq_timetable_slots_faculty_time"),
        UniqueConstraint("room_id", "day_of_week", "start_time", name="uq_timetable_slots_room_time"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False)
    faculty_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    room_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
