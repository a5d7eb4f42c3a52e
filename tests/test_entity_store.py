"""Behaviour every entity store backing must share."""

import asyncio

import pytest

from core.exceptions import DuplicateRecordError, RecordNotFoundError
from schemas.assessment import ChecklistItem, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.document import SafetyDocumentCreate
from schemas.incident import SafetyIncidentCreate
from schemas.notification import NotificationCreate
from schemas.training import TrainingCourseCreate
from schemas.user import UserCreate


def run(coro):
    return asyncio.run(coro)


def _user(username="alice"):
    return UserCreate(username=username, name="Alice", password_hash="x")


def _course(title="Fire Safety", required=True):
    return TrainingCourseCreate(
        title=title,
        description="desc",
        duration=30,
        content="content",
        is_required=required,
    )


def _assessment(items=None, status="pending"):
    return RiskAssessmentCreate(
        title="Warehouse check",
        area="Warehouse",
        risk_level="medium",
        status=status,
        items=items or [],
    )


def _incident(title="Spill", status="open"):
    return SafetyIncidentCreate(
        title=title,
        description="Oil on floor",
        severity="low",
        area="Dock 2",
        status=status,
        reported_by="u1",
    )


def _document(title, category="Procedures", tags=None):
    return SafetyDocumentCreate(
        title=title,
        category=category,
        file_path=f"/tmp/{title}.pdf",
        uploaded_by="u1",
        tags=tags or [],
    )


# --- Users ---

def test_create_and_get_user(store):
    created = run(store.create_user(_user()))
    assert isinstance(created.id, str)
    assert run(store.get_user(created.id)).username == "alice"
    assert run(store.get_user_by_username("alice")).id == created.id


def test_unknown_user_is_none(store):
    assert run(store.get_user("does-not-exist")) is None
    assert run(store.get_user_by_username("nobody")) is None


def test_duplicate_username_rejected(store):
    run(store.create_user(_user()))
    with pytest.raises(DuplicateRecordError):
        run(store.create_user(_user()))


def test_update_user_role(store):
    created = run(store.create_user(_user()))
    updated = run(store.update_user(created.id, role="admin"))
    assert updated.role == "admin"
    assert run(store.get_user(created.id)).role == "admin"


def test_update_missing_user_raises(store):
    with pytest.raises(RecordNotFoundError):
        run(store.update_user("missing", role="admin"))


# --- Courses and progress ---

def test_create_and_list_courses(store):
    course = run(store.create_course(_course()))
    assert run(store.get_course(course.id)).title == "Fire Safety"
    assert [c.id for c in run(store.get_all_courses())] == [course.id]


def test_progress_below_100_has_no_completion(store):
    row = run(store.update_progress("u1", "c1", 40))
    assert row.progress == 40
    assert row.completed_at is None


def test_progress_at_100_is_stamped_and_kept(store):
    first = run(store.update_progress("u1", "c1", 100))
    assert first.completed_at is not None
    again = run(store.update_progress("u1", "c1", 100))
    assert again.completed_at == first.completed_at


def test_progress_drop_clears_completion(store):
    run(store.update_progress("u1", "c1", 100))
    row = run(store.update_progress("u1", "c1", 50))
    assert row.completed_at is None


def test_progress_is_unique_per_user_and_course(store):
    first = run(store.update_progress("u1", "c1", 10))
    second = run(store.update_progress("u1", "c1", 60))
    run(store.update_progress("u1", "c2", 20))
    run(store.update_progress("u2", "c1", 30))

    assert second.id == first.id
    assert len(run(store.get_user_progress("u1"))) == 2
    assert len(run(store.get_all_progress())) == 3
    assert run(store.get_course_progress("u1", "c1")).progress == 60


# --- Assessments ---

def test_two_item_checklist_auto_completes(store):
    assessment = run(store.create_assessment(
        _assessment(items=[
            ChecklistItem(id="1", text="Exits clear"),
            ChecklistItem(id="2", text="Extinguishers present"),
        ]),
        assessor_id="u1",
    ))
    assert assessment.status == "pending"
    assert assessment.assessor_id == "u1"

    updated = run(store.update_assessment(
        assessment.id,
        RiskAssessmentUpdate(
            status="in_progress",
            items=[
                ChecklistItem(id="1", text="Exits clear", completed=True),
                ChecklistItem(id="2", text="Extinguishers present", completed=True),
            ],
        ),
    ))
    assert updated.status == "completed"
    assert updated.completed_at is not None
    assert run(store.get_assessment(assessment.id)).status == "completed"


def test_incomplete_required_item_keeps_caller_status(store):
    assessment = run(store.create_assessment(_assessment(), assessor_id="u1"))
    updated = run(store.update_assessment(
        assessment.id,
        RiskAssessmentUpdate(
            status="in_progress",
            items=[
                ChecklistItem(id="1", text="a", completed=True),
                ChecklistItem(id="2", text="b", completed=False),
            ],
        ),
    ))
    assert updated.status == "in_progress"
    assert updated.completed_at is None


def test_optional_items_do_not_block_completion(store):
    assessment = run(store.create_assessment(_assessment(), assessor_id="u1"))
    updated = run(store.update_assessment(
        assessment.id,
        RiskAssessmentUpdate(items=[
            ChecklistItem(id="1", text="a", completed=True),
            ChecklistItem(id="2", text="b", completed=False, required=False),
        ]),
    ))
    assert updated.status == "completed"


def test_update_without_items_leaves_other_fields(store):
    assessment = run(store.create_assessment(
        _assessment(items=[ChecklistItem(id="1", text="a")]), assessor_id="u1"
    ))
    updated = run(store.update_assessment(
        assessment.id, RiskAssessmentUpdate(title="Renamed")
    ))
    assert updated.title == "Renamed"
    assert updated.area == "Warehouse"
    assert updated.status == "pending"
    assert [item.id for item in updated.items] == ["1"]


def test_update_missing_assessment_raises(store):
    with pytest.raises(RecordNotFoundError):
        run(store.update_assessment("missing", RiskAssessmentUpdate(title="x")))


def test_assessments_filtered_by_status(store):
    run(store.create_assessment(_assessment(status="pending"), assessor_id="u1"))
    run(store.create_assessment(_assessment(status="in_progress"), assessor_id="u1"))
    assert len(run(store.get_all_assessments())) == 2
    pending = run(store.get_all_assessments("pending"))
    assert [a.status for a in pending] == ["pending"]


# --- Documents ---

def test_search_documents_is_case_insensitive(store):
    run(store.create_document(_document("Fire Drill Plan", tags=["evacuation"])))
    run(store.create_document(_document("Forklift Manual", category="Equipment")))

    assert [d.title for d in run(store.search_documents("fire"))] == ["Fire Drill Plan"]
    assert [d.title for d in run(store.search_documents("EQUIP"))] == ["Forklift Manual"]
    assert [d.title for d in run(store.search_documents("evac"))] == ["Fire Drill Plan"]
    assert run(store.search_documents("nothing-matches")) == []


def test_search_treats_query_literally(store):
    run(store.create_document(_document("Plan (v2)")))
    assert len(run(store.search_documents("(v2)"))) == 1
    assert run(store.search_documents(".*")) == []


def test_documents_by_category(store):
    run(store.create_document(_document("A", category="Procedures")))
    run(store.create_document(_document("B", category="Equipment")))
    assert [d.title for d in run(store.get_documents_by_category("Equipment"))] == ["B"]
    assert len(run(store.get_all_documents())) == 2


# --- Incidents ---

def test_incidents_filtered_and_limited(store):
    for n in range(4):
        run(store.create_incident(_incident(title=f"i{n}")))
    run(store.create_incident(_incident(title="done", status="resolved")))

    assert len(run(store.get_all_incidents())) == 5
    assert [i.title for i in run(store.get_all_incidents("resolved"))] == ["done"]
    assert len(run(store.get_recent_incidents(3))) == 3


# --- Notifications ---

def test_notifications_for_user_include_broadcasts_only(store):
    run(store.create_notification(NotificationCreate(title="all", message="m", type="info")))
    run(store.create_notification(
        NotificationCreate(title="mine", message="m", type="info", user_id="u1")
    ))
    run(store.create_notification(
        NotificationCreate(title="theirs", message="m", type="info", user_id="u2")
    ))

    titles = {n.title for n in run(store.get_notifications("u1"))}
    assert titles == {"all", "mine"}
    assert len(run(store.get_notifications())) == 3


def test_mark_read_is_idempotent(store):
    created = run(store.create_notification(
        NotificationCreate(title="t", message="m", type="warning")
    ))
    run(store.mark_notification_read(created.id))
    run(store.mark_notification_read(created.id))
    (notification,) = run(store.get_notifications())
    assert notification.is_read is True


def test_mark_read_unknown_id_raises(store):
    with pytest.raises(RecordNotFoundError):
        run(store.mark_notification_read("missing"))
