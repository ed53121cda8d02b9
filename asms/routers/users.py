from fastapi import APIRouter, HTTPException, status

from asms.core.security import get_password_hash, verify_password
from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.routers.auth import check_password_length
from asms.schemas.auth import MessageResponse, UserPasswordChange, UserProfileUpdate, UserResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/profile", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_profile(current_user: CurrentUserDep) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def update_profile(
    profile_update: UserProfileUpdate,
    session: DBSessionDep,
    current_user: CurrentUserDep,
) -> UserResponse:
    """Update current user's own profile (name and mobile number)."""
    current_user.full_name = profile_update.full_name.strip()
    current_user.mobile_number = profile_update.mobile_number.strip()
    await session.commit()
    return UserResponse.model_validate(current_user)


@router.put("/password", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def change_password(
    password_change: UserPasswordChange,
    session: DBSessionDep,
    current_user: CurrentUserDep,
) -> MessageResponse:
    """Change current user's own password. Requires current password verification."""
    if not verify_password(password_change.current_password, current_user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    check_password_length(password_change.new_password)

    current_user.hashed_password = get_password_hash(password_change.new_password)
    await session.commit()
    return MessageResponse(message="Password updated successfully")
