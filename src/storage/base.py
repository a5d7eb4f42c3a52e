"""Entity store interface.

Every backing (memory, relational, document store) and the hybrid selector
implement this protocol. Ids are opaque strings at this boundary; callers must
not assume any format.

Lookups by id return None when the record is absent. Writes against an absent
id raise ``RecordNotFoundError``. Backing failures raise
``StorageOperationError``.
"""

from typing import List, Optional, Protocol, runtime_checkable

from schemas.assessment import RiskAssessment, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocument, SafetyDocumentCreate
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.notification import Notification, NotificationCreate
from schemas.training import TrainingCourse, TrainingCourseCreate, UserCourseProgress
from schemas.user import User, UserCreate

DEFAULT_RECENT_LIMIT = 10


@runtime_checkable
class EntityStore(Protocol):
    """Asynchronous CRUD and query surface for every entity kind."""

    # Users
    async def get_user(self, user_id: str) -> Optional[User]: ...

    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    async def list_users(self) -> List[User]: ...

    async def create_user(self, data: UserCreate) -> User: ...

    async def update_user(
        self,
        user_id: str,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User: ...

    # Training courses
    async def get_all_courses(self) -> List[TrainingCourse]: ...

    async def get_course(self, course_id: str) -> Optional[TrainingCourse]: ...

    async def create_course(self, data: TrainingCourseCreate) -> TrainingCourse: ...

    # Course progress
    async def get_user_progress(self, user_id: str) -> List[UserCourseProgress]: ...

    async def get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]: ...

    async def get_all_progress(self) -> List[UserCourseProgress]: ...

    async def update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress: ...

    # Risk assessments
    async def get_all_assessments(
        self, status: Optional[str] = None
    ) -> List[RiskAssessment]: ...

    async def get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]: ...

    async def create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment: ...

    async def update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment: ...

    # Safety documents
    async def get_all_documents(self) -> List[SafetyDocument]: ...

    async def get_documents_by_category(self, category: str) -> List[SafetyDocument]: ...

    async def search_documents(self, query: str) -> List[SafetyDocument]: ...

    async def create_document(self, data: SafetyDocumentCreate) -> SafetyDocument: ...

    # Safety incidents
    async def get_all_incidents(
        self, status: Optional[str] = None
    ) -> List[SafetyIncident]: ...

    async def get_recent_incidents(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> List[SafetyIncident]: ...

    async def create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident: ...

    # Notifications
    async def get_notifications(
        self, user_id: Optional[str] = None
    ) -> List[Notification]: ...

    async def create_notification(self, data: NotificationCreate) -> Notification: ...

    async def mark_notification_read(self, notification_id: str) -> None: ...


def document_matches(document: SafetyDocument, query: str) -> bool:
    """Case-insensitive substring match over title, category and tags."""
    needle = query.lower()
    if needle in document.title.lower() or needle in document.category.lower():
        return True
    return any(needle in tag.lower() for tag in document.tags)


def newest_first(records: list) -> list:
    return sorted(records, key=lambda record: record.created_at, reverse=True)
