import logging

from sqlalchemy import select

from asms.config import settings
from asms.core.security import get_password_hash
from asms.models import User, UserRole

logger = logging.getLogger(__name__)


async def ensure_system_admin_user(session) -> None:
    """Ensure a system admin user exists based on configuration."""
    if not settings.system_admin_email or not settings.system_admin_password or not settings.system_admin_full_name:
        return  # Skip if not configured

    email = settings.system_admin_email.lower()
    stmt = select(User).where(User.email == email)
    result = await session.execute(stmt)
    existing_user = result.scalar_one_or_none()

    if existing_user:
        return  # System admin already exists

    system_admin = User(
        email=email,
        hashed_password=get_password_hash(settings.system_admin_password),
        full_name=settings.system_admin_full_name,
        mobile_number="",
        role=UserRole.ADMIN,
        is_active=True,
    )
    session.add(system_admin)
    await session.commit()
    logger.info("System admin user created", extra={"email": email})
