"""Authentication endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_principal, get_current_user
from app.config import settings
from app.core.security import create_access_token, verify_password
from app.db.postgres import get_db
from app.models.sql.user import User
from app.schemas.auth import (
    AdminLogin,
    AdminTokenData,
    Principal,
    UserData,
    UserResponse,
)
from app.schemas.common import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def sync_user(db: AsyncSession, principal: Principal) -> User:
    """Create the user for a principal, or refresh its profile fields."""
    result = await db.execute(select(User).where(User.provider_uid == principal.uid))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            provider_uid=principal.uid,
            email=principal.email,
            name=principal.name or "Guest",
            picture=principal.picture,
            provider=principal.provider,
            is_admin=principal.is_admin,
        )
        db.add(user)
        logger.info("Created user for %s (%s)", principal.email, principal.provider)
    else:
        user.email = principal.email or user.email
        user.name = principal.name or user.name
        user.picture = principal.picture or user.picture
        user.is_admin = principal.is_admin

    await db.flush()
    await db.refresh(user)
    return user


@router.post(
    "/login",
    response_model=ApiResponse[UserData],
    summary="Sync the verified user into the database",
)
async def login(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[UserData]:
    """Create or update the user behind a verified token."""
    user = await sync_user(db, principal)
    return ApiResponse(
        message="Login successful",
        data=UserData(user=UserResponse.model_validate(user)),
    )


@router.post(
    "/admin-login",
    response_model=ApiResponse[AdminTokenData],
    summary="Privileged fallback login",
)
async def admin_login(
    credentials: AdminLogin,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[AdminTokenData]:
    """Check the configured admin credentials and issue a local token."""
    configured = bool(settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD_HASH)
    if (
        not configured
        or credentials.email.lower() != settings.ADMIN_EMAIL.lower()
        or not verify_password(credentials.password, settings.ADMIN_PASSWORD_HASH)
    ):
        logger.warning("Rejected admin login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal = Principal(
        uid=f"admin:{settings.ADMIN_EMAIL.lower()}",
        email=settings.ADMIN_EMAIL,
        name=settings.ADMIN_NAME,
        provider="local",
        is_admin=True,
    )
    user = await sync_user(db, principal)

    token = create_access_token(
        principal.uid,
        additional_claims={
            "email": principal.email,
            "name": principal.name,
            "picture": principal.picture,
            "is_admin": True,
        },
    )

    return ApiResponse(
        message="Login successful",
        data=AdminTokenData(
            token=token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            user=UserResponse.model_validate(user),
        ),
    )


@router.get(
    "/profile",
    response_model=ApiResponse[UserData],
    summary="Get current user profile",
)
async def get_profile(
    current_user: User = Depends(get_current_user),
) -> ApiResponse[UserData]:
    """Get the stored profile of the authenticated user."""
    return ApiResponse(data=UserData(user=UserResponse.model_validate(current_user)))
