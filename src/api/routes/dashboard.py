"""Dashboard routes: metrics, the recent-activity feed and emergency alerts."""

import logging
from typing import List

from fastapi import APIRouter, status
from pydantic import BaseModel

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep, MetricsAggregatorDep
from schemas.incident import EmergencyAlertRequest, SafetyIncident, SafetyIncidentCreate
from schemas.metrics import ActivityItem, SafetyMetrics
from schemas.notification import Notification, NotificationCreate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Dashboard"])

RECENT_INCIDENTS = 5
RECENT_NOTIFICATIONS = 3
ACTIVITY_FEED_SIZE = 5


class EmergencyAlertResponse(BaseModel):
    notification: Notification
    incident: SafetyIncident


@router.get("/metrics", response_model=SafetyMetrics, summary="Safety metrics")
async def get_metrics(
    aggregator: MetricsAggregatorDep, current_user: CurrentUserDep
) -> SafetyMetrics:
    return await aggregator.get_safety_metrics()


@router.get(
    "/recent-activity", response_model=List[ActivityItem], summary="Recent activity"
)
async def get_recent_activity(
    store: EntityStoreDep, current_user: CurrentUserDep
) -> List[ActivityItem]:
    """Merge recent incidents and the caller's notifications, newest first."""
    incidents = await store.get_recent_incidents(RECENT_INCIDENTS)
    notifications = await store.get_notifications(current_user.id)

    activities = [
        ActivityItem(
            id=f"incident-{incident.id}",
            type="incident",
            title=incident.title,
            description=f"{incident.severity} severity in {incident.area}",
            timestamp=incident.created_at,
            icon="exclamation",
        )
        for incident in incidents
    ]
    activities.extend(
        ActivityItem(
            id=f"notification-{notification.id}",
            type="notification",
            title=notification.title,
            description=notification.message,
            timestamp=notification.created_at,
            icon="bell",
        )
        for notification in notifications[:RECENT_NOTIFICATIONS]
    )
    activities.sort(key=lambda item: item.timestamp, reverse=True)
    return activities[:ACTIVITY_FEED_SIZE]


@router.post(
    "/emergency",
    response_model=EmergencyAlertResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Raise an emergency alert",
)
async def raise_emergency(
    req: EmergencyAlertRequest, store: EntityStoreDep, current_user: CurrentUserDep
) -> EmergencyAlertResponse:
    """Broadcast an emergency notification and record a critical incident.

    The two writes are independent; if the incident fails the notification
    is not rolled back.
    """
    notification = await store.create_notification(
        NotificationCreate(
            title="Emergency Alert",
            message=f"{req.message} (Area: {req.area})",
            type="error",
        )
    )
    incident = await store.create_incident(
        SafetyIncidentCreate(
            title="Emergency Alert Triggered",
            description=req.message,
            severity="critical",
            area=req.area,
            status="open",
            reported_by=current_user.id,
        )
    )
    logger.warning(
        "Emergency alert raised by %s in %s: %s",
        current_user.username,
        req.area,
        req.title,
    )
    return EmergencyAlertResponse(notification=notification, incident=incident)
