from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.course import Course
from app.models.notification import Notification, NotificationType
from app.models.subject import Subject
from app.models.timetable import TimetableSlot
from app.models.user import User, UserRole
from app.services.slot_grid import DAY_LABELS

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    *,
    user_id: str,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
) -> Notification:
    record = Notification(
        user_id=user_id,
        title=title,
        message=message,
        notification_type=notification_type,
    )
    db.add(record)
    db.flush()
    return record


def notify_users(
    db: Session,
    *,
    user_ids: list[str] | set[str] | tuple[str, ...],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    exclude_user_id: str | None = None,
) -> list[Notification]:
    requested_ids = [item for item in dict.fromkeys(user_ids) if item and item != exclude_user_id]
    if not requested_ids:
        return []

    recipients = list(
        db.execute(
            select(User).where(
                User.id.in_(requested_ids),
                User.is_active.is_(True),
            )
        ).scalars()
    )
    return [
        create_notification(
            db,
            user_id=recipient.id,
            title=title,
            message=message,
            notification_type=notification_type,
        )
        for recipient in recipients
    ]


def notify_roles(
    db: Session,
    *,
    roles: list[UserRole] | set[UserRole] | tuple[UserRole, ...],
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.system,
    exclude_user_id: str | None = None,
) -> list[Notification]:
    if not roles:
        return []
    recipients = list(
        db.execute(
            select(User).where(
                User.role.in_(list(roles)),
                User.is_active.is_(True),
            )
        ).scalars()
    )
    results: list[Notification] = []
    for recipient in recipients:
        if exclude_user_id and recipient.id == exclude_user_id:
            continue
        results.append(
            create_notification(
                db,
                user_id=recipient.id,
                title=title,
                message=message,
                notification_type=notification_type,
            )
        )
    return results


def notify_admin_update(
    db: Session,
    *,
    title: str,
    message: str,
    actor_user_id: str | None = None,
    include_faculty: bool = False,
) -> list[Notification]:
    roles: list[UserRole] = [UserRole.admin]
    if include_faculty:
        roles.append(UserRole.faculty)
    return notify_roles(
        db,
        roles=roles,
        title=title,
        message=message,
        notification_type=NotificationType.timetable,
        exclude_user_id=actor_user_id,
    )


class TimetableChangeNotifier:
    """Turns committed slot changes into in-app notifications."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def slot_changed(
        self,
        *,
        course: Course,
        semester: int,
        slot: TimetableSlot,
        affected_user_ids: list[str],
    ) -> list[Notification]:
        if not affected_user_ids:
            return []
        subject = self.db.get(Subject, slot.subject_id)
        subject_label = subject.name if subject is not None else slot.subject_id
        day_label = DAY_LABELS.get(slot.day_of_week, str(slot.day_of_week))
        message = (
            f"{course.code} semester {semester}: {day_label} {slot.start_time}-{slot.end_time} "
            f"is now {subject_label}."
        )
        logger.debug("Notifying %d user(s) of timetable change in %s/%s", len(affected_user_ids), course.id, semester)
        return notify_users(
            self.db,
            user_ids=affected_user_ids,
            title="Timetable Updated",
            message=message,
            notification_type=NotificationType.timetable,
        )

    def grid_cleared(self, *, message: str, actor_user_id: str | None = None) -> list[Notification]:
        return notify_admin_update(
            self.db,
            title="Timetable Cleared",
            message=message,
            actor_user_id=actor_user_id,
            include_faculty=True,
        )
