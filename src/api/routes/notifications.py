"""Notification routes."""

from typing import List, Optional

from fastapi import APIRouter, status

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep
from schemas.notification import Notification, NotificationCreate

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=List[Notification], summary="List notifications")
async def list_notifications(
    store: EntityStoreDep,
    current_user: CurrentUserDep,
    user_id: Optional[str] = None,
) -> List[Notification]:
    """Broadcast notifications plus those targeted at ``user_id``.

    ``user_id`` defaults to the current user.
    """
    return await store.get_notifications(user_id or current_user.id)


@router.post(
    "",
    response_model=Notification,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification",
)
async def create_notification(
    req: NotificationCreate, store: EntityStoreDep, current_user: CurrentUserDep
) -> Notification:
    return await store.create_notification(req)


@router.put("/{notification_id}/read", summary="Mark a notification read")
async def mark_notification_read(
    notification_id: str, store: EntityStoreDep, current_user: CurrentUserDep
) -> dict:
    # Unknown ids raise RecordNotFoundError, mapped to 404 by the app
    await store.mark_notification_read(notification_id)
    return {"success": True}
