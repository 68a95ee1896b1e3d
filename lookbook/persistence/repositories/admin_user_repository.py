"""Admin user repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.admin_user import AdminUser
from lookbook.persistence.repositories.base import BaseRepository


class AdminUserRepository(BaseRepository[AdminUser]):
    """Repository for admin user lookups."""

    def __init__(self, session: AsyncSession):
        """Initialize admin user repository."""
        super().__init__(AdminUser, session)

    async def get_by_email(self, email: str) -> AdminUser | None:
        """Get admin user by email (case-insensitive)."""
        stmt = select(AdminUser).where(AdminUser.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
