"""FastAPI dependencies for admin authentication."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.core.auth import decode_access_token
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.repositories.admin_user_repository import AdminUserRepository

# auto_error=False so a missing header yields 401 rather than 403
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_admin(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AdminUser:
    """Get current authenticated admin from JWT token.

    Args:
        credentials: HTTP bearer credentials, if any
        db: Database session

    Returns:
        Current admin user

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or
            refers to an unknown user
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid authentication credentials")

    user_id_str = payload.get("sub")
    try:
        user_id = int(user_id_str)
    except (ValueError, TypeError):
        raise _unauthorized("Invalid token payload")

    user = await AdminUserRepository(db).get_by_id(user_id)
    if user is None:
        raise _unauthorized("User not found")

    return user
