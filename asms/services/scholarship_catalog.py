"""Service for listing and maintaining scholarship schemes."""
import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from asms.core.errors import NotFoundError, PreconditionError, StorageError
from asms.models import Scheme
from asms.schemas.scheme import SchemeCreate, SchemeUpdate
from asms.services.notification_center import notify_new_scheme

logger = logging.getLogger(__name__)


async def list_open_schemes(session: AsyncSession, today: date | None = None) -> list[Scheme]:
    """Return schemes still accepting applications, most recently published first."""
    today = today or datetime.utcnow().date()
    stmt = (
        select(Scheme)
        .where(Scheme.last_date >= today)
        .order_by(Scheme.published_at.desc(), Scheme.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_all_schemes(session: AsyncSession) -> list[Scheme]:
    stmt = select(Scheme).order_by(Scheme.published_at.desc(), Scheme.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_scheme(session: AsyncSession, scheme_id: int) -> Scheme:
    """
    Raises:
        NotFoundError: If no scheme has this id
    """
    stmt = select(Scheme).where(Scheme.id == scheme_id)
    result = await session.execute(stmt)
    scheme = result.scalar_one_or_none()
    if scheme is None:
        raise NotFoundError("Scholarship not found")
    return scheme


async def get_open_scheme(session: AsyncSession, scheme_id: int, today: date | None = None) -> Scheme:
    """
    Return a scheme that still accepts applications.

    Raises:
        NotFoundError: If no scheme has this id
        PreconditionError: If the last application date has passed
    """
    scheme = await get_scheme(session, scheme_id)
    if not scheme.is_open_on(today or datetime.utcnow().date()):
        raise PreconditionError("This scholarship is closed for applications")
    return scheme


async def create_scheme(session: AsyncSession, data: SchemeCreate) -> Scheme:
    """Publish a new scheme and notify every active applicant about it."""
    scheme = Scheme(**data.model_dump(), published_at=datetime.utcnow())
    session.add(scheme)
    try:
        await session.flush()
        notified = await notify_new_scheme(session, scheme.id, scheme.name)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to create scheme: {e}", exc_info=True)
        raise StorageError("Failed to create scholarship")

    logger.info("Scheme published", extra={"scheme_id": scheme.id, "notified_users": notified})
    return scheme


async def update_scheme(session: AsyncSession, scheme_id: int, data: SchemeUpdate) -> Scheme:
    scheme = await get_scheme(session, scheme_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(scheme, field, value)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to update scheme {scheme_id}: {e}", exc_info=True)
        raise StorageError("Failed to update scholarship")
    return scheme
