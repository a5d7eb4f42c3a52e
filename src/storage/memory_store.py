"""In-process entity store.

Records live in one dict per entity kind, keyed by a short random id, for the
lifetime of the process. Records are copied in and out so callers never share
state with the store. There is no locking: two concurrent read-modify-write
updates of the same record can lose one of the writes.
"""

import logging
import secrets
from typing import Dict, List, Optional

from core.exceptions import DuplicateRecordError, RecordNotFoundError
from schemas.assessment import RiskAssessment, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocument, SafetyDocumentCreate
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.notification import Notification, NotificationCreate
from schemas.training import TrainingCourse, TrainingCourseCreate, UserCourseProgress
from schemas.user import User, UserCreate
from storage.base import DEFAULT_RECENT_LIMIT, document_matches, newest_first
from utils.clock import utc_now
from utils.completion import apply_assessment_update, progress_completed_at

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return secrets.token_hex(5)


class MemoryEntityStore:
    """Entity store backed by plain dictionaries."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._courses: Dict[str, TrainingCourse] = {}
        self._progress: Dict[str, UserCourseProgress] = {}
        self._assessments: Dict[str, RiskAssessment] = {}
        self._documents: Dict[str, SafetyDocument] = {}
        self._incidents: Dict[str, SafetyIncident] = {}
        self._notifications: Dict[str, Notification] = {}

    # --- Users ---

    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy(deep=True)
        return None

    async def list_users(self) -> List[User]:
        return [user.model_copy(deep=True) for user in self._users.values()]

    async def create_user(self, data: UserCreate) -> User:
        if await self.get_user_by_username(data.username):
            raise DuplicateRecordError(f"User '{data.username}' already exists")
        user = User(id=_new_id(), **data.model_dump())
        self._users[user.id] = user
        logger.info("Created user: %s (id=%s)", user.username, user.id)
        return user.model_copy(deep=True)

    async def update_user(
        self,
        user_id: str,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise RecordNotFoundError("user", user_id)
        changes = {"updated_at": utc_now()}
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if role is not None:
            changes["role"] = role
        user = user.model_copy(update=changes)
        self._users[user_id] = user
        return user.model_copy(deep=True)

    # --- Training courses ---

    async def get_all_courses(self) -> List[TrainingCourse]:
        return [c.model_copy(deep=True) for c in newest_first(list(self._courses.values()))]

    async def get_course(self, course_id: str) -> Optional[TrainingCourse]:
        course = self._courses.get(course_id)
        return course.model_copy(deep=True) if course else None

    async def create_course(self, data: TrainingCourseCreate) -> TrainingCourse:
        course = TrainingCourse(id=_new_id(), **data.model_dump())
        self._courses[course.id] = course
        logger.info("Created course: %s (id=%s)", course.title, course.id)
        return course.model_copy(deep=True)

    # --- Course progress ---

    async def get_user_progress(self, user_id: str) -> List[UserCourseProgress]:
        rows = [p for p in self._progress.values() if p.user_id == user_id]
        return [p.model_copy(deep=True) for p in newest_first(rows)]

    async def get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]:
        row = self._find_progress(user_id, course_id)
        return row.model_copy(deep=True) if row else None

    async def get_all_progress(self) -> List[UserCourseProgress]:
        return [p.model_copy(deep=True) for p in self._progress.values()]

    async def update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress:
        now = utc_now()
        existing = self._find_progress(user_id, course_id)
        if existing is None:
            row = UserCourseProgress(
                id=_new_id(),
                user_id=user_id,
                course_id=course_id,
                progress=progress,
                completed_at=progress_completed_at(progress, None, now),
                created_at=now,
                updated_at=now,
            )
        else:
            row = existing.model_copy(
                update={
                    "progress": progress,
                    "completed_at": progress_completed_at(
                        progress, existing.completed_at, now
                    ),
                    "updated_at": now,
                }
            )
        self._progress[row.id] = row
        return row.model_copy(deep=True)

    def _find_progress(self, user_id: str, course_id: str) -> Optional[UserCourseProgress]:
        for row in self._progress.values():
            if row.user_id == user_id and row.course_id == course_id:
                return row
        return None

    # --- Risk assessments ---

    async def get_all_assessments(
        self, status: Optional[str] = None
    ) -> List[RiskAssessment]:
        rows = [
            a for a in self._assessments.values()
            if status is None or a.status == status
        ]
        return [a.model_copy(deep=True) for a in newest_first(rows)]

    async def get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]:
        assessment = self._assessments.get(assessment_id)
        return assessment.model_copy(deep=True) if assessment else None

    async def create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment:
        assessment = RiskAssessment(
            id=_new_id(), assessor_id=assessor_id, **data.model_dump()
        )
        self._assessments[assessment.id] = assessment
        logger.info("Created assessment: %s (id=%s)", assessment.title, assessment.id)
        return assessment.model_copy(deep=True)

    async def update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment:
        current = self._assessments.get(assessment_id)
        if current is None:
            raise RecordNotFoundError("assessment", assessment_id)
        changes = apply_assessment_update(current, updates, utc_now())
        updated = current.model_copy(update=changes)
        self._assessments[assessment_id] = updated
        logger.info("Updated assessment %s (status=%s)", assessment_id, updated.status)
        return updated.model_copy(deep=True)

    # --- Safety documents ---

    async def get_all_documents(self) -> List[SafetyDocument]:
        return [d.model_copy(deep=True) for d in newest_first(list(self._documents.values()))]

    async def get_documents_by_category(self, category: str) -> List[SafetyDocument]:
        rows = [d for d in self._documents.values() if d.category == category]
        return [d.model_copy(deep=True) for d in newest_first(rows)]

    async def search_documents(self, query: str) -> List[SafetyDocument]:
        rows = [d for d in self._documents.values() if document_matches(d, query)]
        return [d.model_copy(deep=True) for d in newest_first(rows)]

    async def create_document(self, data: SafetyDocumentCreate) -> SafetyDocument:
        document = SafetyDocument(id=_new_id(), **data.model_dump())
        self._documents[document.id] = document
        logger.info("Created document: %s (id=%s)", document.title, document.id)
        return document.model_copy(deep=True)

    # --- Safety incidents ---

    async def get_all_incidents(
        self, status: Optional[str] = None
    ) -> List[SafetyIncident]:
        rows = [
            i for i in self._incidents.values()
            if status is None or i.status == status
        ]
        return [i.model_copy(deep=True) for i in newest_first(rows)]

    async def get_recent_incidents(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> List[SafetyIncident]:
        return (await self.get_all_incidents())[:limit]

    async def create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident:
        incident = SafetyIncident(id=_new_id(), **data.model_dump())
        self._incidents[incident.id] = incident
        logger.info("Created incident: %s (id=%s)", incident.title, incident.id)
        return incident.model_copy(deep=True)

    # --- Notifications ---

    async def get_notifications(
        self, user_id: Optional[str] = None
    ) -> List[Notification]:
        rows = [
            n for n in self._notifications.values()
            if user_id is None or n.user_id is None or n.user_id == user_id
        ]
        return [n.model_copy(deep=True) for n in newest_first(rows)]

    async def create_notification(self, data: NotificationCreate) -> Notification:
        notification = Notification(id=_new_id(), **data.model_dump())
        self._notifications[notification.id] = notification
        return notification.model_copy(deep=True)

    async def mark_notification_read(self, notification_id: str) -> None:
        notification = self._notifications.get(notification_id)
        if notification is None:
            raise RecordNotFoundError("notification", notification_id)
        if not notification.is_read:
            self._notifications[notification_id] = notification.model_copy(
                update={"is_read": True, "updated_at": utc_now()}
            )
