"""Relational entity store built on SQLAlchemy.

One table per entity kind. Each operation opens its own session, runs in the
default thread-pool executor so the event loop never blocks on the database,
and commits before returning. Integer primary keys are exposed as strings.
"""

import asyncio
import functools
import logging
from typing import Callable, List, Optional, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageOperationError,
)
from models.course_progress import CourseProgressModel
from models.notification import NotificationModel
from models.risk_assessment import RiskAssessmentModel
from models.safety_document import SafetyDocumentModel
from models.safety_incident import SafetyIncidentModel
from models.training_course import TrainingCourseModel
from models.user import UserModel
from schemas.assessment import RiskAssessment, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocument, SafetyDocumentCreate
from schemas.incident import SafetyIncident, SafetyIncidentCreate
from schemas.notification import Notification, NotificationCreate
from schemas.training import TrainingCourse, TrainingCourseCreate, UserCourseProgress
from schemas.user import User, UserCreate
from storage.base import DEFAULT_RECENT_LIMIT, document_matches
from utils.clock import utc_now
from utils.completion import apply_assessment_update, progress_completed_at
from utils.converters import (
    model_to_assessment,
    model_to_course,
    model_to_document,
    model_to_incident,
    model_to_notification,
    model_to_progress,
    model_to_user,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _pk(record_id: str) -> Optional[int]:
    """Parse an opaque id into a primary key; None if it cannot be one."""
    try:
        return int(record_id)
    except (TypeError, ValueError):
        return None


class SqlEntityStore:
    """Entity store backed by SQLAlchemy tables."""

    def __init__(self, session_factory: sessionmaker):
        """Initialize SqlEntityStore.

        Args:
            session_factory: Factory producing SQLAlchemy sessions.
        """
        self._session_factory = session_factory

    async def _run(self, operation: Callable[..., T], *args) -> T:
        """Run a blocking session operation in the executor."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, functools.partial(operation, *args)
            )
        except (RecordNotFoundError, DuplicateRecordError):
            raise
        except SQLAlchemyError as e:
            logger.error("Relational store operation %s failed: %s", operation.__name__, e)
            raise StorageOperationError("Relational store operation failed") from e

    # --- Users ---

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self._run(self._get_user, user_id)

    def _get_user(self, user_id: str) -> Optional[User]:
        pk = _pk(user_id)
        if pk is None:
            return None
        with self._session_factory() as db:
            model = db.get(UserModel, pk)
            return model_to_user(model) if model else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self._run(self._get_user_by_username, username)

    def _get_user_by_username(self, username: str) -> Optional[User]:
        with self._session_factory() as db:
            model = db.query(UserModel).filter(UserModel.username == username).first()
            return model_to_user(model) if model else None

    async def list_users(self) -> List[User]:
        return await self._run(self._list_users)

    def _list_users(self) -> List[User]:
        with self._session_factory() as db:
            return [model_to_user(m) for m in db.query(UserModel).all()]

    async def create_user(self, data: UserCreate) -> User:
        return await self._run(self._create_user, data)

    def _create_user(self, data: UserCreate) -> User:
        now = utc_now()
        with self._session_factory() as db:
            existing = db.query(UserModel).filter(UserModel.username == data.username).first()
            if existing:
                raise DuplicateRecordError(f"User '{data.username}' already exists")
            model = UserModel(**data.model_dump(), created_at=now, updated_at=now)
            db.add(model)
            # Two concurrent registrations can both pass the check above; the
            # unique constraint catches the second one.
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise DuplicateRecordError(
                    f"User '{data.username}' already exists"
                ) from e
            db.refresh(model)
            logger.info("Created user: %s (id=%s)", model.username, model.id)
            return model_to_user(model)

    async def update_user(
        self,
        user_id: str,
        password_hash: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        return await self._run(self._update_user, user_id, password_hash, role)

    def _update_user(
        self, user_id: str, password_hash: Optional[str], role: Optional[str]
    ) -> User:
        with self._session_factory() as db:
            model = self._require(db, UserModel, user_id, "user")
            if password_hash is not None:
                model.password_hash = password_hash
            if role is not None:
                model.role = role
            model.updated_at = utc_now()
            db.commit()
            db.refresh(model)
            return model_to_user(model)

    # --- Training courses ---

    async def get_all_courses(self) -> List[TrainingCourse]:
        return await self._run(self._get_all_courses)

    def _get_all_courses(self) -> List[TrainingCourse]:
        with self._session_factory() as db:
            models = (
                db.query(TrainingCourseModel)
                .order_by(TrainingCourseModel.created_at.desc())
                .all()
            )
            return [model_to_course(m) for m in models]

    async def get_course(self, course_id: str) -> Optional[TrainingCourse]:
        return await self._run(self._get_course, course_id)

    def _get_course(self, course_id: str) -> Optional[TrainingCourse]:
        pk = _pk(course_id)
        if pk is None:
            return None
        with self._session_factory() as db:
            model = db.get(TrainingCourseModel, pk)
            return model_to_course(model) if model else None

    async def create_course(self, data: TrainingCourseCreate) -> TrainingCourse:
        return await self._run(self._create_course, data)

    def _create_course(self, data: TrainingCourseCreate) -> TrainingCourse:
        now = utc_now()
        with self._session_factory() as db:
            model = TrainingCourseModel(**data.model_dump(), created_at=now, updated_at=now)
            db.add(model)
            db.commit()
            db.refresh(model)
            logger.info("Created course: %s (id=%s)", model.title, model.id)
            return model_to_course(model)

    # --- Course progress ---

    async def get_user_progress(self, user_id: str) -> List[UserCourseProgress]:
        return await self._run(self._get_user_progress, user_id)

    def _get_user_progress(self, user_id: str) -> List[UserCourseProgress]:
        with self._session_factory() as db:
            models = (
                db.query(CourseProgressModel)
                .filter(CourseProgressModel.user_id == user_id)
                .order_by(CourseProgressModel.created_at.desc())
                .all()
            )
            return [model_to_progress(m) for m in models]

    async def get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]:
        return await self._run(self._get_course_progress, user_id, course_id)

    def _get_course_progress(
        self, user_id: str, course_id: str
    ) -> Optional[UserCourseProgress]:
        with self._session_factory() as db:
            model = self._find_progress(db, user_id, course_id)
            return model_to_progress(model) if model else None

    async def get_all_progress(self) -> List[UserCourseProgress]:
        return await self._run(self._get_all_progress)

    def _get_all_progress(self) -> List[UserCourseProgress]:
        with self._session_factory() as db:
            return [model_to_progress(m) for m in db.query(CourseProgressModel).all()]

    async def update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress:
        return await self._run(self._update_progress, user_id, course_id, progress)

    def _update_progress(
        self, user_id: str, course_id: str, progress: int
    ) -> UserCourseProgress:
        now = utc_now()
        with self._session_factory() as db:
            model = self._find_progress(db, user_id, course_id)
            if model is None:
                model = CourseProgressModel(
                    user_id=user_id,
                    course_id=course_id,
                    progress=progress,
                    completed_at=progress_completed_at(progress, None, now),
                    created_at=now,
                    updated_at=now,
                )
                db.add(model)
            else:
                model.progress = progress
                model.completed_at = progress_completed_at(
                    progress, model.completed_at, now
                )
                model.updated_at = now
            db.commit()
            db.refresh(model)
            return model_to_progress(model)

    @staticmethod
    def _find_progress(
        db: Session, user_id: str, course_id: str
    ) -> Optional[CourseProgressModel]:
        return (
            db.query(CourseProgressModel)
            .filter(
                CourseProgressModel.user_id == user_id,
                CourseProgressModel.course_id == course_id,
            )
            .first()
        )

    # --- Risk assessments ---

    async def get_all_assessments(
        self, status: Optional[str] = None
    ) -> List[RiskAssessment]:
        return await self._run(self._get_all_assessments, status)

    def _get_all_assessments(self, status: Optional[str]) -> List[RiskAssessment]:
        with self._session_factory() as db:
            query = db.query(RiskAssessmentModel)
            if status:
                query = query.filter(RiskAssessmentModel.status == status)
            models = query.order_by(RiskAssessmentModel.created_at.desc()).all()
            return [model_to_assessment(m) for m in models]

    async def get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]:
        return await self._run(self._get_assessment, assessment_id)

    def _get_assessment(self, assessment_id: str) -> Optional[RiskAssessment]:
        pk = _pk(assessment_id)
        if pk is None:
            return None
        with self._session_factory() as db:
            model = db.get(RiskAssessmentModel, pk)
            return model_to_assessment(model) if model else None

    async def create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment:
        return await self._run(self._create_assessment, data, assessor_id)

    def _create_assessment(
        self, data: RiskAssessmentCreate, assessor_id: str
    ) -> RiskAssessment:
        now = utc_now()
        with self._session_factory() as db:
            model = RiskAssessmentModel(
                **data.model_dump(),
                assessor_id=assessor_id,
                created_at=now,
                updated_at=now,
            )
            db.add(model)
            db.commit()
            db.refresh(model)
            logger.info("Created assessment: %s (id=%s)", model.title, model.id)
            return model_to_assessment(model)

    async def update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment:
        return await self._run(self._update_assessment, assessment_id, updates)

    def _update_assessment(
        self, assessment_id: str, updates: RiskAssessmentUpdate
    ) -> RiskAssessment:
        with self._session_factory() as db:
            model = self._require(db, RiskAssessmentModel, assessment_id, "assessment")
            changes = apply_assessment_update(
                model_to_assessment(model), updates, utc_now()
            )
            if "items" in changes:
                changes["items"] = [item.model_dump() for item in changes["items"]]
            for field, value in changes.items():
                setattr(model, field, value)
            db.commit()
            db.refresh(model)
            logger.info("Updated assessment %s (status=%s)", model.id, model.status)
            return model_to_assessment(model)

    # --- Safety documents ---

    async def get_all_documents(self) -> List[SafetyDocument]:
        return await self._run(self._get_all_documents)

    def _get_all_documents(self) -> List[SafetyDocument]:
        with self._session_factory() as db:
            models = (
                db.query(SafetyDocumentModel)
                .order_by(SafetyDocumentModel.created_at.desc())
                .all()
            )
            return [model_to_document(m) for m in models]

    async def get_documents_by_category(self, category: str) -> List[SafetyDocument]:
        return await self._run(self._get_documents_by_category, category)

    def _get_documents_by_category(self, category: str) -> List[SafetyDocument]:
        with self._session_factory() as db:
            models = (
                db.query(SafetyDocumentModel)
                .filter(SafetyDocumentModel.category == category)
                .order_by(SafetyDocumentModel.created_at.desc())
                .all()
            )
            return [model_to_document(m) for m in models]

    async def search_documents(self, query: str) -> List[SafetyDocument]:
        # Full scan filtered in process; tags live in a JSON column.
        documents = await self.get_all_documents()
        return [d for d in documents if document_matches(d, query)]

    async def create_document(self, data: SafetyDocumentCreate) -> SafetyDocument:
        return await self._run(self._create_document, data)

    def _create_document(self, data: SafetyDocumentCreate) -> SafetyDocument:
        now = utc_now()
        with self._session_factory() as db:
            model = SafetyDocumentModel(**data.model_dump(), created_at=now, updated_at=now)
            db.add(model)
            db.commit()
            db.refresh(model)
            logger.info("Created document: %s (id=%s)", model.title, model.id)
            return model_to_document(model)

    # --- Safety incidents ---

    async def get_all_incidents(
        self, status: Optional[str] = None
    ) -> List[SafetyIncident]:
        return await self._run(self._get_incidents, status, None)

    async def get_recent_incidents(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> List[SafetyIncident]:
        return await self._run(self._get_incidents, None, limit)

    def _get_incidents(
        self, status: Optional[str], limit: Optional[int]
    ) -> List[SafetyIncident]:
        with self._session_factory() as db:
            query = db.query(SafetyIncidentModel)
            if status:
                query = query.filter(SafetyIncidentModel.status == status)
            query = query.order_by(SafetyIncidentModel.created_at.desc())
            if limit is not None:
                query = query.limit(limit)
            return [model_to_incident(m) for m in query.all()]

    async def create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident:
        return await self._run(self._create_incident, data)

    def _create_incident(self, data: SafetyIncidentCreate) -> SafetyIncident:
        now = utc_now()
        with self._session_factory() as db:
            model = SafetyIncidentModel(**data.model_dump(), created_at=now, updated_at=now)
            db.add(model)
            db.commit()
            db.refresh(model)
            logger.info("Created incident: %s (id=%s)", model.title, model.id)
            return model_to_incident(model)

    # --- Notifications ---

    async def get_notifications(
        self, user_id: Optional[str] = None
    ) -> List[Notification]:
        return await self._run(self._get_notifications, user_id)

    def _get_notifications(self, user_id: Optional[str]) -> List[Notification]:
        with self._session_factory() as db:
            query = db.query(NotificationModel)
            if user_id is not None:
                query = query.filter(
                    (NotificationModel.user_id.is_(None))
                    | (NotificationModel.user_id == user_id)
                )
            models = query.order_by(NotificationModel.created_at.desc()).all()
            return [model_to_notification(m) for m in models]

    async def create_notification(self, data: NotificationCreate) -> Notification:
        return await self._run(self._create_notification, data)

    def _create_notification(self, data: NotificationCreate) -> Notification:
        now = utc_now()
        with self._session_factory() as db:
            model = NotificationModel(**data.model_dump(), created_at=now, updated_at=now)
            db.add(model)
            db.commit()
            db.refresh(model)
            return model_to_notification(model)

    async def mark_notification_read(self, notification_id: str) -> None:
        await self._run(self._mark_notification_read, notification_id)

    def _mark_notification_read(self, notification_id: str) -> None:
        with self._session_factory() as db:
            model = self._require(db, NotificationModel, notification_id, "notification")
            if not model.is_read:
                model.is_read = True
                model.updated_at = utc_now()
                db.commit()

    # --- Helpers ---

    @staticmethod
    def _require(db: Session, model_cls, record_id: str, kind: str):
        pk = _pk(record_id)
        model = db.get(model_cls, pk) if pk is not None else None
        if model is None:
            raise RecordNotFoundError(kind, record_id)
        return model
