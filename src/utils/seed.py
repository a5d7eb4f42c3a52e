"""Demo data for a fresh store."""

import logging

from schemas.assessment import ChecklistItem, RiskAssessmentCreate, RiskAssessmentUpdate
from schemas.notification import NotificationCreate
from schemas.training import TrainingCourseCreate
from schemas.user import User, UserCreate
from storage.base import EntityStore
from utils.security import hash_password

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"

DEMO_COURSES = [
    TrainingCourseCreate(
        title="Fire Safety & Evacuation",
        description="Essential fire safety procedures and emergency evacuation protocols",
        duration=45,
        content=(
            "Comprehensive fire safety training covering detection systems, "
            "evacuation procedures, and emergency response protocols."
        ),
        is_required=True,
    ),
    TrainingCourseCreate(
        title="Equipment Safety Training",
        description="Proper use and maintenance of industrial safety equipment",
        duration=60,
        content=(
            "Training on personal protective equipment, machinery safety, "
            "and proper handling procedures."
        ),
        is_required=True,
    ),
    TrainingCourseCreate(
        title="Chemical Handling Safety",
        description="Safe handling, storage, and disposal of hazardous chemicals",
        duration=90,
        content=(
            "Comprehensive chemical safety including MSDS sheets, storage "
            "requirements, and emergency procedures."
        ),
        is_required=False,
    ),
]

DEMO_NOTIFICATIONS = [
    NotificationCreate(
        title="Monthly Safety Training Due",
        message="Please complete your monthly safety training modules by the end of the week.",
        type="training",
    ),
    NotificationCreate(
        title="Safety Equipment Inspection",
        message="Quarterly safety equipment inspection scheduled for next Monday.",
        type="maintenance",
    ),
]


async def seed_store(store: EntityStore) -> bool:
    """Populate ``store`` with demo records unless it already has an admin.

    Returns:
        True if data was written, False if the store was already seeded.
    """
    if await store.get_user_by_username(ADMIN_USERNAME):
        logger.info("Store already seeded")
        return False

    admin: User = await store.create_user(
        UserCreate(
            username=ADMIN_USERNAME,
            email="admin@safetyfirst.com",
            name="System Administrator",
            password_hash=hash_password(ADMIN_PASSWORD),
            role="admin",
        )
    )

    for course in DEMO_COURSES:
        await store.create_course(course)

    await store.create_assessment(
        RiskAssessmentCreate(
            title="Warehouse Safety Inspection",
            area="Main Warehouse",
            risk_level="medium",
            items=[
                ChecklistItem(id="1", text="Check emergency exits are clear"),
                ChecklistItem(id="2", text="Verify fire extinguisher locations"),
                ChecklistItem(id="3", text="Inspect lifting equipment"),
            ],
        ),
        assessor_id=admin.id,
    )

    office_items = [
        ChecklistItem(id="1", text="Check air quality systems", completed=True),
        ChecklistItem(id="2", text="Verify emergency lighting", completed=True),
        ChecklistItem(id="3", text="Test smoke detectors", completed=True),
    ]
    office = await store.create_assessment(
        RiskAssessmentCreate(
            title="Office Environmental Check",
            area="Administrative Offices",
            risk_level="low",
            items=office_items,
        ),
        assessor_id=admin.id,
    )
    # Run the checklist through the update rule so it is stamped completed
    await store.update_assessment(office.id, RiskAssessmentUpdate(items=office_items))

    for notification in DEMO_NOTIFICATIONS:
        await store.create_notification(notification)

    logger.info("Seeded demo data (admin id=%s)", admin.id)
    return True
