"""Conversions between SQLAlchemy models, MongoDB documents and schemas.

Integer primary keys and ObjectIds both leave the storage layer as strings.
"""

from typing import Any, Dict

from models.course_progress import CourseProgressModel
from models.notification import NotificationModel
from models.risk_assessment import RiskAssessmentModel
from models.safety_document import SafetyDocumentModel
from models.safety_incident import SafetyIncidentModel
from models.training_course import TrainingCourseModel
from models.user import UserModel
from schemas.assessment import ChecklistItem, RiskAssessment
from schemas.document import SafetyDocument
from schemas.incident import SafetyIncident
from schemas.notification import Notification
from schemas.training import TrainingCourse, UserCourseProgress
from schemas.user import User
from utils.clock import ensure_utc

TIMESTAMP_FIELDS = ("created_at", "updated_at", "completed_at")


# --- Relational models ---

def model_to_user(model: UserModel) -> User:
    return User(
        id=str(model.id),
        username=model.username,
        name=model.name,
        email=model.email,
        password_hash=model.password_hash,
        role=model.role,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_course(model: TrainingCourseModel) -> TrainingCourse:
    return TrainingCourse(
        id=str(model.id),
        title=model.title,
        description=model.description,
        duration=model.duration,
        content=model.content,
        is_required=model.is_required,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_progress(model: CourseProgressModel) -> UserCourseProgress:
    return UserCourseProgress(
        id=str(model.id),
        user_id=model.user_id,
        course_id=model.course_id,
        progress=model.progress,
        completed_at=ensure_utc(model.completed_at),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_assessment(model: RiskAssessmentModel) -> RiskAssessment:
    return RiskAssessment(
        id=str(model.id),
        title=model.title,
        area=model.area,
        risk_level=model.risk_level,
        status=model.status,
        assessor_id=model.assessor_id,
        items=[ChecklistItem(**item) for item in model.items or []],
        completed_at=ensure_utc(model.completed_at),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_document(model: SafetyDocumentModel) -> SafetyDocument:
    return SafetyDocument(
        id=str(model.id),
        title=model.title,
        category=model.category,
        file_path=model.file_path,
        uploaded_by=model.uploaded_by,
        tags=list(model.tags or []),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_incident(model: SafetyIncidentModel) -> SafetyIncident:
    return SafetyIncident(
        id=str(model.id),
        title=model.title,
        description=model.description,
        severity=model.severity,
        area=model.area,
        reported_by=model.reported_by,
        status=model.status,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def model_to_notification(model: NotificationModel) -> Notification:
    return Notification(
        id=str(model.id),
        title=model.title,
        message=model.message,
        type=model.type,
        user_id=model.user_id,
        is_read=model.is_read,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


# --- MongoDB documents ---

def from_mongo(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Turn a raw MongoDB document into schema keyword arguments."""
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    for field in TIMESTAMP_FIELDS:
        if field in data:
            data[field] = ensure_utc(data[field])
    return data
