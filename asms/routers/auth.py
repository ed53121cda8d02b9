from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from asms.config import settings
from asms.core.security import create_access_token, get_password_hash, verify_password
from asms.dependencies.auth import CurrentUserDep
from asms.dependencies.database import DBSessionDep
from asms.models import User, UserRole
from asms.schemas.auth import AuthResponse, MessageResponse, UserLogin, UserRegister, UserResponse

router = APIRouter(prefix="/api/v1/auth", tags=["authentication"])


def check_password_length(password: str) -> None:
    if not settings.password_min_length <= len(password) <= settings.password_max_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Password must be between {settings.password_min_length} and "
                f"{settings.password_max_length} characters long"
            ),
        )


def build_auth_response(user: User) -> AuthResponse:
    access_token = create_access_token(user_id=user.id, email=user.email)
    return AuthResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, session: DBSessionDep) -> AuthResponse:
    """Register an applicant account and log it in."""
    email = user_data.email.lower()

    # Check if user already exists
    stmt = select(User).where(User.email == email)
    result = await session.execute(stmt)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    check_password_length(user_data.password)

    new_user = User(
        full_name=user_data.full_name.strip(),
        email=email,
        mobile_number=user_data.mobile_number.strip(),
        hashed_password=get_password_hash(user_data.password),
        role=UserRole.APPLICANT,  # admins are only created by the bootstrap step
        is_active=True,
    )
    session.add(new_user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    return build_auth_response(new_user)


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def login(user_credentials: UserLogin, session: DBSessionDep) -> AuthResponse:
    """Authenticate user and return JWT token."""
    stmt = select(User).where(User.email == user_credentials.email.lower())
    result = await session.execute(stmt)
    user = result.scalar_one_or_none()

    # Verify user exists and password is correct
    if not user or not verify_password(user_credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )

    return build_auth_response(user)


@router.post("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def logout(current_user: CurrentUserDep) -> MessageResponse:
    """Tokens are stateless; clients discard them and they expire on their own."""
    return MessageResponse(message="Logged out successfully")
