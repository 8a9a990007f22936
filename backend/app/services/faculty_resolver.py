from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from app.core.exceptions import NoFacultyAvailableError
from app.services.catalog import ReferenceCatalog

logger = logging.getLogger(__name__)


class FacultySource(str, Enum):
    explicit = "explicit"
    subject_assignment = "subject_assignment"
    department = "department"
    any_active = "any_active"


@dataclass(frozen=True)
class FacultyResolution:
    faculty_id: str
    source: FacultySource


class FacultyResolver:
    """Pick the faculty member who teaches a slot when the caller names none.

    Tried in order, first hit wins: the explicit id, the subject's earliest
    faculty assignment, the lowest-id active faculty of the course's
    department, the lowest-id active faculty anywhere.
    """

    def __init__(self, catalog: ReferenceCatalog) -> None:
        self.catalog = catalog

    def resolve(self, *, subject_id: str, course_id: str, faculty_id: str | None = None) -> FacultyResolution:
        if faculty_id:
            return FacultyResolution(faculty_id, FacultySource.explicit)

        assigned = self.catalog.find_faculty_assigned_to_subject(subject_id)
        if assigned is not None:
            logger.info("Resolved faculty %s for subject %s from subject assignment", assigned.id, subject_id)
            return FacultyResolution(assigned.id, FacultySource.subject_assignment)

        course = self.catalog.get_course(course_id)
        if course is not None:
            department_faculty = self.catalog.list_faculty_in_department(course.department_id)
            if department_faculty:
                chosen = department_faculty[0]
                logger.info("Auto-assigned faculty %s from department %s", chosen.id, course.department_id)
                return FacultyResolution(chosen.id, FacultySource.department)

        everyone = self.catalog.list_all_active_faculty()
        if everyone:
            chosen = everyone[0]
            logger.info("Auto-assigned faculty %s from all active faculty", chosen.id)
            return FacultyResolution(chosen.id, FacultySource.any_active)

        logger.warning("No faculty available to assign for subject %s in course %s", subject_id, course_id)
        raise NoFacultyAvailableError()
