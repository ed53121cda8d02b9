"""Administrative status transitions of applications."""
import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from asms.core.errors import NotFoundError, PreconditionError, StorageError, ValidationError
from asms.models import Application, ApplicationStatus, BankDetail
from asms.services.notification_center import notify_application_status

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {ApplicationStatus.APPROVED, ApplicationStatus.REJECTED},
    ApplicationStatus.APPROVED: {ApplicationStatus.DISBURSED},
    ApplicationStatus.REJECTED: set(),
    ApplicationStatus.DISBURSED: set(),
}


def can_transition(current: ApplicationStatus, new: ApplicationStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


async def list_applications(session: AsyncSession, status: ApplicationStatus | None = None) -> list[Application]:
    """List all applications for review, newest first, optionally filtered by status."""
    stmt = select(Application)
    if status is not None:
        stmt = stmt.where(Application.status == status)
    stmt = stmt.order_by(Application.apply_date.desc(), Application.id.desc())
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def get_application(session: AsyncSession, application_id: int) -> Application:
    """
    Load an application with its applicant and bank details.

    Raises:
        NotFoundError: If the application does not exist
    """
    stmt = (
        select(Application)
        .where(Application.id == application_id)
        .options(selectinload(Application.user), selectinload(Application.bank_detail))
    )
    result = await session.execute(stmt)
    application = result.unique().scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    return application


async def has_bank_details(session: AsyncSession, application_id: int) -> bool:
    stmt = select(BankDetail.id).where(BankDetail.application_id == application_id)
    result = await session.execute(stmt)
    return result.scalar_one_or_none() is not None


async def set_status(
    session: AsyncSession,
    application_id: int,
    new_status: ApplicationStatus,
    remark: str,
    disbursed_amount: Decimal | None = None,
) -> Application:
    """
    Move an application to a new status and notify its owner.

    The status change and the notification are committed together.

    Raises:
        NotFoundError: If the application does not exist
        ValidationError: If the remark is blank, or a disbursement has no amount
        PreconditionError: If the transition is not allowed, or a disbursement is
            attempted before bank details were submitted
        StorageError: If the change could not be persisted
    """
    application = await get_application(session, application_id)

    remark = (remark or "").strip()
    if not remark:
        raise ValidationError("Missing required field: remark")

    current_status = application.status
    if not can_transition(current_status, new_status):
        raise PreconditionError(
            f"Cannot change application status from {current_status.value} to {new_status.value}"
        )

    if new_status == ApplicationStatus.DISBURSED:
        if not await has_bank_details(session, application.id):
            raise PreconditionError("Bank details required before disbursement")
        if disbursed_amount is None or disbursed_amount <= 0:
            raise ValidationError("Missing required field: disbursed_amount")
        application.disbursed_amount = disbursed_amount

    application.status = new_status
    application.remark = remark
    application.updated_at = datetime.utcnow()

    notify_application_status(
        session,
        user_id=application.user_id,
        application_id=application.id,
        scheme_name=application.scheme_name,
        status=new_status,
    )

    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to update status of application {application_id}: {e}", exc_info=True)
        raise StorageError("Failed to update application status")

    logger.info(
        "Application status changed",
        extra={
            "application_id": application_id,
            "from_status": current_status.value,
            "to_status": new_status.value,
        },
    )
    return application
