from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.course import Course  # noqa: F401
from app.models.department import Department  # noqa: F401
from app.models.faculty import Faculty, FacultyStatus  # noqa: F401
from app.models.faculty_assignment import FacultyCourseAssignment, FacultySubjectAssignment  # noqa: F401
from app.models.notification import Notification, NotificationType  # noqa: F401
from app.models.room import Room, RoomStatus, RoomType  # noqa: F401
from app.models.subject import Subject, SubjectType  # noqa: F401
from app.models.timetable import TimetableSlot  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
