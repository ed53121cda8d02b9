import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select

from asms.core.security import validate_access_token
from asms.dependencies.database import DBSessionDep
from asms.models import User, UserRole

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    session: DBSessionDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Extract and verify JWT token, then return the current user."""
    if credentials is None:
        raise _unauthorized("Authentication required")

    identity = validate_access_token(credentials.credentials)
    if identity is None:
        raise _unauthorized("Invalid or expired token")

    stmt = select(User).where(User.id == identity.user_id)
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    if user is None or user.email != identity.email:
        raise _unauthorized("User not found")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Ensure the current user is active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )
    return current_user


class RoleChecker:
    """Role-based authorization checker."""

    def __init__(self, required_role: UserRole):
        self.required_role = required_role

    async def __call__(
        self,
        current_user: Annotated[User, Depends(get_current_active_user)],
    ) -> User:
        if current_user.role != self.required_role:
            logger.warning(
                "Role check failed",
                extra={"user_id": current_user.id, "required_role": self.required_role.value},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {self.required_role.value}",
            )
        return current_user


admin_only = RoleChecker(required_role=UserRole.ADMIN)

# Typed dependencies for use in route handlers
CurrentUserDep = Annotated[User, Depends(get_current_active_user)]
AdminDep = Annotated[User, Depends(admin_only)]
