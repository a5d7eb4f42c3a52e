"""Hybrid entity store.

Delegates each call to the primary backing (MongoDB) while it is reachable and
to the fallback backing (memory) otherwise. Reachability is re-checked on every
call, so a reconnect takes effect on the next request.

The two backings are disjoint: records written while disconnected stay in the
fallback and are not visible once the primary is back, and nothing is synced.
The check and the delegated call are not atomic; if the primary drops in
between, the call fails with ``StorageOperationError``.
"""

import logging
from typing import Callable, List, Optional

from schemas.assessment import RiskAssessment, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocument, SafetyDocumentCreate
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.notification import Notification, NotificationCreate
from schemas.training import TrainingCourse, TrainingCourseCreate, UserCourseProgress
from schemas.user import User, UserCreate
from storage.base import DEFAULT_RECENT_LIMIT, EntityStore

logger = logging.getLogger(__name__)


class HybridEntityStore:
    """Routes every operation to the primary or the fallback store."""

    def __init__(
        self,
        primary: EntityStore,
        fallback: EntityStore,
        is_available: Callable[[], bool],
    ):
        """Initialize HybridEntityStore.

        Args:
            primary: Store used while ``is_available()`` is true.
            fallback: Store used otherwise.
            is_available: Connectivity check for the primary, called per operation.
        """
        self.primary = primary
        self.fallback = fallback
        self._is_available = is_available
        self._using_primary: Optional[bool] = None

    @property
    def active(self) -> EntityStore:
        use_primary = bool(self._is_available())
        if use_primary != self._using_primary:
            if use_primary:
                logger.info(
                    "Primary store reachable, routing to %s",
                    type(self.primary).__name__,
                )
            else:
                logger.warning(
                    "Primary store unavailable, routing to %s",
                    type(self.fallback).__name__,
                )
            self._using_primary = use_primary
        return self.primary if use_primary else self.fallback

    # --- Users ---

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.active.get_user(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.active.get_user_by_username(username)

    async def list_users(self) -> List[User]:
        return await self.active.list_users()

    async def create_user(self, data: UserCreate) -> User:
        return await self.active.create_user(data)

    async def update_user(
        self,
        user_id: str,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        return await self.active.update_user(user_id, password_hash=password_hash, role=role)

    # --- Training courses ---

    async def get_all_courses(self) -> List[TrainingCourse]:
        return await self.active.get_all_courses()

    async def get_course(self, course_id: str) -> Optional[TrainingCourse]:
        return await self.active.get_course(course_id)

    async def create_course(self, data: TrainingCourseCreate) -> TrainingCourse:
        return await self.active.create_course(data)

    # --- Course progress ---

    async def get_user_progress(self, user_id: str) -> List[UserCourseProgress]:
        return await self.active.get_user_progress(user_id)

    async def get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]:
        return await self.active.get_course_progress(user_id, course_id)

    async def get_all_progress(self) -> List[UserCourseProgress]:
        return await self.active.get_all_progress()

    async def update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress:
        return await self.active.update_progress(user_id, course_id, progress)

    # --- Risk assessments ---

    async def get_all_assessments(
        self, status: Optional[str] = None
    ) -> List[RiskAssessment]:
        return await self.active.get_all_assessments(status)

    async def get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]:
        return await self.active.get_assessment(assessment_id)

    async def create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment:
        return await self.active.create_assessment(data, assessor_id)

    async def update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment:
        return await self.active.update_assessment(assessment_id, updates)

    # --- Safety documents ---

    async def get_all_documents(self) -> List[SafetyDocument]:
        return await self.active.get_all_documents()

    async def get_documents_by_category(self, category: str) -> List[SafetyDocument]:
        return await self.active.get_documents_by_category(category)

    async def search_documents(self, query: str) -> List[SafetyDocument]:
        return await self.active.search_documents(query)

    async def create_document(self, data: SafetyDocumentCreate) -> SafetyDocument:
        return await self.active.create_document(data)

    # --- Safety incidents ---

    async def get_all_incidents(
        self, status: Optional[str] = None
    ) -> List[SafetyIncident]:
        return await self.active.get_all_incidents(status)

    async def get_recent_incidents(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> List[SafetyIncident]:
        return await self.active.get_recent_incidents(limit)

    async def create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident:
        return await self.active.create_incident(data)

    # --- Notifications ---

    async def get_notifications(
        self, user_id: Optional[str] = None
    ) -> List[Notification]:
        return await self.active.get_notifications(user_id)

    async def create_notification(self, data: NotificationCreate) -> Notification:
        return await self.active.create_notification(data)

    async def mark_notification_read(self, notification_id: str) -> None:
        await self.active.mark_notification_read(notification_id)
