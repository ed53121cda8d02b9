"""Service for one-time capture of payout bank details per application."""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from asms.core.errors import ConflictError, NotFoundError, StorageError
from asms.models import Application, BankDetail
from asms.schemas.bank_details import BankDetailCreate

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED_MESSAGE = "Bank details already submitted for this application"


async def get_owned_application_by_number(
    session: AsyncSession, application_number: str, user_id: int
) -> Application:
    stmt = select(Application).where(
        Application.application_number == application_number,
        Application.user_id == user_id,
    )
    result = await session.execute(stmt)
    application = result.unique().scalar_one_or_none()
    if application is None:
        raise NotFoundError("Application not found")
    return application


async def submit_bank_details(session: AsyncSession, user_id: int, data: BankDetailCreate) -> BankDetail:
    """
    Record bank details for one of the caller's applications.

    Details cannot be changed once submitted.

    Raises:
        NotFoundError: If the application is not the caller's
        ConflictError: If details were already submitted for the application
    """
    application = await get_owned_application_by_number(session, data.application_number.strip(), user_id)

    existing_stmt = select(BankDetail.id).where(BankDetail.application_id == application.id)
    existing = await session.execute(existing_stmt)
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(ALREADY_SUBMITTED_MESSAGE)

    bank_detail = BankDetail(
        application_id=application.id,
        application_number=application.application_number,
        user_id=user_id,
        account_holder_name=data.account_holder_name.strip(),
        bank_name=data.bank_name.strip(),
        branch_name=data.branch_name.strip(),
        swift_code=data.swift_code.strip().upper(),
        account_number=data.account_number.strip(),
        created_at=datetime.utcnow(),
    )
    session.add(bank_detail)

    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(ALREADY_SUBMITTED_MESSAGE)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to save bank details for {data.application_number}: {e}", exc_info=True)
        raise StorageError("Failed to save bank details")

    logger.info(
        "Bank details submitted",
        extra={"application_id": bank_detail.application_id, "user_id": user_id},
    )
    return bank_detail


async def get_bank_details(session: AsyncSession, user_id: int, application_number: str) -> BankDetail:
    stmt = select(BankDetail).where(
        BankDetail.application_number == application_number,
        BankDetail.user_id == user_id,
    )
    result = await session.execute(stmt)
    bank_detail = result.scalar_one_or_none()
    if bank_detail is None:
        raise NotFoundError("Bank details not found")
    return bank_detail
