"""Document-store entity store built on pymongo.

One collection per entity kind. Ids are native ObjectIds exposed as strings;
a string that is not a valid ObjectId behaves like an absent id. Document
search uses MongoDB regex matching and progress updates use a native upsert.
pymongo is blocking, so every operation runs in the default executor.
"""

import asyncio
import functools
import logging
import re
from typing import Any, Callable, Dict, List, Optional, TypeVar

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageOperationError,
)
from schemas.assessment import RiskAssessment, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocument, SafetyDocumentCreate
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.notification import Notification, NotificationCreate
from schemas.training import TrainingCourse, TrainingCourseCreate, UserCourseProgress
from schemas.user import User, UserCreate
from storage.base import DEFAULT_RECENT_LIMIT
from utils.clock import utc_now
from utils.completion import apply_assessment_update, progress_completed_at
from utils.converters import from_mongo

logger = logging.getLogger(__name__)

T = TypeVar("T")

USERS = "users"
COURSES = "training_courses"
PROGRESS = "user_course_progress"
ASSESSMENTS = "risk_assessments"
DOCUMENTS = "safety_documents"
INCIDENTS = "safety_incidents"
NOTIFICATIONS = "notifications"


def _oid(record_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(record_id):
        return None
    return ObjectId(record_id)


class MongoEntityStore:
    """Entity store backed by MongoDB collections."""

    def __init__(self, db: Database):
        """Initialize MongoEntityStore.

        Args:
            db: pymongo database holding the entity collections.
        """
        self.db = db
        self._indexes_ready = False

    def ensure_indexes(self) -> None:
        """Create the unique and lookup indexes. Safe to call repeatedly.

        Called before the first operation that reaches the server, so a store
        built while MongoDB was down gets its indexes once it comes up.
        """
        self.db[USERS].create_index("username", unique=True)
        self.db[PROGRESS].create_index([("user_id", 1), ("course_id", 1)], unique=True)
        self.db[DOCUMENTS].create_index("category")
        self.db[INCIDENTS].create_index("created_at")
        self.db[NOTIFICATIONS].create_index("user_id")
        self._indexes_ready = True

    async def _run(self, operation: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        try:
            if not self._indexes_ready:
                await loop.run_in_executor(None, self.ensure_indexes)
            return await loop.run_in_executor(
                None, functools.partial(operation, *args)
            )
        except PyMongoError as e:
            logger.error("Document store operation %s failed: %s", operation.__name__, e)
            raise StorageOperationError("Document store operation failed") from e

    def _find_one(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        oid = _oid(record_id)
        if oid is None:
            return None
        return self.db[collection].find_one({"_id": oid})

    def _find(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        cursor = self.db[collection].find(query or {}).sort("created_at", DESCENDING)
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def _insert(self, collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        now = utc_now()
        doc["created_at"] = now
        doc["updated_at"] = now
        # insert_one adds the generated _id to doc
        self.db[collection].insert_one(doc)
        return doc

    # --- Users ---

    async def get_user(self, user_id: str) -> Optional[User]:
        doc = await self._run(self._find_one, USERS, user_id)
        return User(**from_mongo(doc)) if doc else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        doc = await self._run(self.db[USERS].find_one, {"username": username})
        return User(**from_mongo(doc)) if doc else None

    async def list_users(self) -> List[User]:
        docs = await self._run(self._find, USERS)
        return [User(**from_mongo(d)) for d in docs]

    async def create_user(self, data: UserCreate) -> User:
        doc = await self._run(self._create_user, data)
        logger.info("Created user: %s (id=%s)", data.username, doc["_id"])
        return User(**from_mongo(doc))

    def _create_user(self, data: UserCreate) -> Dict[str, Any]:
        if self.db[USERS].find_one({"username": data.username}):
            raise DuplicateRecordError(f"User '{data.username}' already exists")
        try:
            return self._insert(USERS, data.model_dump())
        except DuplicateKeyError as e:
            raise DuplicateRecordError(f"User '{data.username}' already exists") from e

    async def update_user(
        self,
        user_id: str,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        changes: Dict[str, Any] = {"updated_at": utc_now()}
        if password_hash is not None:
            changes["password_hash"] = password_hash
        if role is not None:
            changes["role"] = role
        doc = await self._run(self._update_by_id, USERS, user_id, changes)
        if doc is None:
            raise RecordNotFoundError("user", user_id)
        return User(**from_mongo(doc))

    def _update_by_id(
        self, collection: str, record_id: str, changes: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        oid = _oid(record_id)
        if oid is None:
            return None
        return self.db[collection].find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    # --- Training courses ---

    async def get_all_courses(self) -> List[TrainingCourse]:
        docs = await self._run(self._find, COURSES)
        return [TrainingCourse(**from_mongo(d)) for d in docs]

    async def get_course(self, course_id: str) -> Optional[TrainingCourse]:
        doc = await self._run(self._find_one, COURSES, course_id)
        return TrainingCourse(**from_mongo(doc)) if doc else None

    async def create_course(self, data: TrainingCourseCreate) -> TrainingCourse:
        doc = await self._run(self._insert, COURSES, data.model_dump())
        logger.info("Created course: %s (id=%s)", data.title, doc["_id"])
        return TrainingCourse(**from_mongo(doc))

    # --- Course progress ---

    async def get_user_progress(self, user_id: str) -> List[UserCourseProgress]:
        docs = await self._run(self._find, PROGRESS, {"user_id": user_id})
        return [UserCourseProgress(**from_mongo(d)) for d in docs]

    async def get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]:
        doc = await self._run(
            self.db[PROGRESS].find_one, {"user_id": user_id, "course_id": course_id}
        )
        return UserCourseProgress(**from_mongo(doc)) if doc else None

    async def get_all_progress(self) -> List[UserCourseProgress]:
        docs = await self._run(self._find, PROGRESS)
        return [UserCourseProgress(**from_mongo(d)) for d in docs]

    async def update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress:
        doc = await self._run(self._upsert_progress, user_id, course_id, progress)
        return UserCourseProgress(**from_mongo(doc))

    def _upsert_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> Dict[str, Any]:
        now = utc_now()
        key = {"user_id": user_id, "course_id": course_id}
        existing = self.db[PROGRESS].find_one(key) or {}
        completed_at = progress_completed_at(
            progress, existing.get("completed_at"), now
        )
        return self.db[PROGRESS].find_one_and_update(
            key,
            {
                "$set": {
                    "progress": progress,
                    "completed_at": completed_at,
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    # --- Risk assessments ---

    async def get_all_assessments(
        self, status: Optional[str] = None
    ) -> List[RiskAssessment]:
        query = {"status": status} if status else {}
        docs = await self._run(self._find, ASSESSMENTS, query)
        return [RiskAssessment(**from_mongo(d)) for d in docs]

    async def get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]:
        doc = await self._run(self._find_one, ASSESSMENTS, assessment_id)
        return RiskAssessment(**from_mongo(doc)) if doc else None

    async def create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment:
        doc = data.model_dump()
        doc["assessor_id"] = assessor_id
        doc["completed_at"] = None
        doc = await self._run(self._insert, ASSESSMENTS, doc)
        logger.info("Created assessment: %s (id=%s)", data.title, doc["_id"])
        return RiskAssessment(**from_mongo(doc))

    async def update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment:
        current = await self.get_assessment(assessment_id)
        if current is None:
            raise RecordNotFoundError("assessment", assessment_id)
        changes = apply_assessment_update(current, updates, utc_now())
        if "items" in changes:
            changes["items"] = [item.model_dump() for item in changes["items"]]
        doc = await self._run(self._update_by_id, ASSESSMENTS, assessment_id, changes)
        if doc is None:
            raise RecordNotFoundError("assessment", assessment_id)
        updated = RiskAssessment(**from_mongo(doc))
        logger.info("Updated assessment %s (status=%s)", assessment_id, updated.status)
        return updated

    # --- Safety documents ---

    async def get_all_documents(self) -> List[SafetyDocument]:
        docs = await self._run(self._find, DOCUMENTS)
        return [SafetyDocument(**from_mongo(d)) for d in docs]

    async def get_documents_by_category(self, category: str) -> List[SafetyDocument]:
        docs = await self._run(self._find, DOCUMENTS, {"category": category})
        return [SafetyDocument(**from_mongo(d)) for d in docs]

    async def search_documents(self, query: str) -> List[SafetyDocument]:
        pattern = {"$regex": re.escape(query), "$options": "i"}
        docs = await self._run(
            self._find,
            DOCUMENTS,
            {"$or": [{"title": pattern}, {"category": pattern}, {"tags": pattern}]},
        )
        return [SafetyDocument(**from_mongo(d)) for d in docs]

    async def create_document(self, data: SafetyDocumentCreate) -> SafetyDocument:
        doc = await self._run(self._insert, DOCUMENTS, data.model_dump())
        logger.info("Created document: %s (id=%s)", data.title, doc["_id"])
        return SafetyDocument(**from_mongo(doc))

    # --- Safety incidents ---

    async def get_all_incidents(
        self, status: Optional[str] = None
    ) -> List[SafetyIncident]:
        query = {"status": status} if status else {}
        docs = await self._run(self._find, INCIDENTS, query)
        return [SafetyIncident(**from_mongo(d)) for d in docs]

    async def get_recent_incidents(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> List[SafetyIncident]:
        docs = await self._run(self._find, INCIDENTS, None, limit)
        return [SafetyIncident(**from_mongo(d)) for d in docs]

    async def create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident:
        doc = await self._run(self._insert, INCIDENTS, data.model_dump())
        logger.info("Created incident: %s (id=%s)", data.title, doc["_id"])
        return SafetyIncident(**from_mongo(doc))

    # --- Notifications ---

    async def get_notifications(
        self, user_id: Optional[str] = None
    ) -> List[Notification]:
        # {"user_id": None} matches both a null and a missing field
        query: Dict[str, Any] = {}
        if user_id is not None:
            query = {"$or": [{"user_id": user_id}, {"user_id": None}]}
        docs = await self._run(self._find, NOTIFICATIONS, query)
        return [Notification(**from_mongo(d)) for d in docs]

    async def create_notification(self, data: NotificationCreate) -> Notification:
        doc = await self._run(self._insert, NOTIFICATIONS, data.model_dump())
        return Notification(**from_mongo(doc))

    async def mark_notification_read(self, notification_id: str) -> None:
        doc = await self._run(self._find_one, NOTIFICATIONS, notification_id)
        if doc is None:
            raise RecordNotFoundError("notification", notification_id)
        if not doc.get("is_read"):
            await self._run(
                self._update_by_id,
                NOTIFICATIONS,
                notification_id,
                {"is_read": True, "updated_at": utc_now()},
            )
