from fastapi import APIRouter, Query, status

from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.schemas.notification import NotificationListResponse, NotificationResponse
from asms.services import notification_center

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse, status_code=status.HTTP_200_OK)
async def list_notifications(
    session: DBSessionDep,
    current_user: CurrentUserDep,
    unread_only: bool = Query(False),
) -> NotificationListResponse:
    """List the caller's notifications, newest first."""
    notifications = await notification_center.list_notifications(session, current_user.id, unread_only=unread_only)
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(notification) for notification in notifications],
        total=len(notifications),
        unread=sum(1 for notification in notifications if not notification.is_read),
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse, status_code=status.HTTP_200_OK)
async def mark_notification_read(
    notification_id: int, session: DBSessionDep, current_user: CurrentUserDep
) -> NotificationResponse:
    notification = await notification_center.mark_read(session, notification_id, current_user.id)
    return NotificationResponse.model_validate(notification)
