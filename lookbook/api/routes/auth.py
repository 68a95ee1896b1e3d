"""Admin authentication routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.deps import get_current_admin
from lookbook.core.auth import create_access_token
from lookbook.core.password import verify_password
from lookbook.infrastructure.rate_limiter import rate_limit
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.repositories.admin_user_repository import AdminUserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    """Login request."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Login response."""

    access_token: str
    token_type: str = "bearer"
    email: str
    name: str | None = None
    role: str


class AdminInfoResponse(BaseModel):
    """Current admin info response."""

    id: int
    email: str
    name: str | None = None
    role: str


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _rate_limit: Annotated[None, Depends(rate_limit("auth"))],
) -> LoginResponse:
    """Login endpoint for the admin back office.

    Args:
        login_data: Login credentials
        db: Database session

    Returns:
        JWT access token
    """
    user = await AdminUserRepository(db).get_by_email(login_data.email)
    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.info("Admin login failed", extra={"email": login_data.email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # sub must be a string for JWT compatibility
    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})

    return LoginResponse(
        access_token=access_token,
        email=user.email,
        name=user.name,
        role=user.role,
    )


@router.get("/me", response_model=AdminInfoResponse)
async def get_current_admin_info(
    current_admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> AdminInfoResponse:
    """Get the authenticated admin's information."""
    return AdminInfoResponse(
        id=current_admin.id,
        email=current_admin.email,
        name=current_admin.name,
        role=current_admin.role,
    )
