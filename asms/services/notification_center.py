"""Service for the per-user notification inbox."""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from asms.core.errors import NotFoundError
from asms.models import ApplicationStatus, Notification, NotificationCategory, User, UserRole

logger = logging.getLogger(__name__)

APPLICATION_STATUS_TITLE = "Application Status Update"
NEW_SCHEME_TITLE = "New Scholarship Available"
VIEW_APPLICATION_ACTION = "view-application"
VIEW_SCHOLARSHIP_ACTION = "view-scholarship"


def create_notification(
    session: AsyncSession,
    user_id: int,
    title: str,
    message: str,
    category: NotificationCategory = NotificationCategory.INFO,
    action_type: str | None = None,
    action_id: int | None = None,
) -> Notification:
    """
    Add a notification to the session.

    The caller owns the transaction so the notification commits together with the
    change that produced it.
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        category=category,
        action_type=action_type,
        action_id=action_id,
        is_read=False,
        created_at=datetime.utcnow(),
    )
    session.add(notification)
    return notification


def status_notification_category(status: ApplicationStatus) -> NotificationCategory:
    """Approved is the only positive outcome; every other status is framed as a warning."""
    if status == ApplicationStatus.APPROVED:
        return NotificationCategory.SUCCESS
    return NotificationCategory.WARNING


def notify_application_status(
    session: AsyncSession,
    user_id: int,
    application_id: int,
    scheme_name: str,
    status: ApplicationStatus,
) -> Notification:
    message = f"Your application for {scheme_name} has been {status.value.capitalize()}"
    return create_notification(
        session,
        user_id=user_id,
        title=APPLICATION_STATUS_TITLE,
        message=message,
        category=status_notification_category(status),
        action_type=VIEW_APPLICATION_ACTION,
        action_id=application_id,
    )


async def notify_new_scheme(session: AsyncSession, scheme_id: int, scheme_name: str) -> int:
    """Queue a new-scholarship notification for every active applicant. Returns the count."""
    stmt = select(User.id).where(User.role == UserRole.APPLICANT, User.is_active.is_(True))
    result = await session.execute(stmt)
    user_ids = list(result.scalars().all())

    message = f"A new scholarship '{scheme_name}' is now available for application"
    for user_id in user_ids:
        create_notification(
            session,
            user_id=user_id,
            title=NEW_SCHEME_TITLE,
            message=message,
            category=NotificationCategory.INFO,
            action_type=VIEW_SCHOLARSHIP_ACTION,
            action_id=scheme_id,
        )
    return len(user_ids)


async def list_notifications(session: AsyncSession, user_id: int, unread_only: bool = False) -> list[Notification]:
    """Return the user's notifications, newest first."""
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def mark_read(session: AsyncSession, notification_id: int, user_id: int) -> Notification:
    """
    Mark a notification as read.

    Idempotent: a notification that is already read is returned unchanged.

    Raises:
        NotFoundError: If the notification does not exist or belongs to another user
    """
    stmt = select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    result = await session.execute(stmt)
    notification = result.scalar_one_or_none()

    if notification is None:
        logger.warning(
            "Notification not found for user",
            extra={"notification_id": notification_id, "user_id": user_id},
        )
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        await session.commit()

    return notification
