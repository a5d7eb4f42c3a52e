"""SQLAlchemy models for the relational entity store."""

from .base import Base
from .user import UserModel
from .training_course import TrainingCourseModel
from .course_progress import CourseProgressModel
from .risk_assessment import RiskAssessmentModel
from .safety_document import SafetyDocumentModel
from .safety_incident import SafetyIncidentModel
from .notification import NotificationModel

__all__ = [
    "Base",
    "UserModel",
    "TrainingCourseModel",
    "CourseProgressModel",
    "RiskAssessmentModel",
    "SafetyDocumentModel",
    "SafetyIncidentModel",
    "NotificationModel",
]
