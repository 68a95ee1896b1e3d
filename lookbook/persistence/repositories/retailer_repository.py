"""Trusted retailer repository."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.persistence.models.trusted_retailer import TrustedRetailer


class RetailerRepository:
    """Repository for the affiliate redirect whitelist.

    Retailers are keyed by their normalized domain rather than the
    surrogate id, so this does not extend BaseRepository.
    """

    def __init__(self, session: AsyncSession):
        """Initialize retailer repository."""
        self.session = session

    async def list_all(self, active_only: bool = False) -> list[TrustedRetailer]:
        """List retailers ordered by category then name."""
        stmt = select(TrustedRetailer).order_by(TrustedRetailer.category, TrustedRetailer.name)
        if active_only:
            stmt = stmt.where(TrustedRetailer.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_domains(self) -> set[str]:
        """Return the set of active whitelisted domains."""
        stmt = select(TrustedRetailer.domain).where(TrustedRetailer.is_active.is_(True))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def get_by_domain(self, domain: str) -> TrustedRetailer | None:
        """Get retailer by its normalized domain."""
        stmt = select(TrustedRetailer).where(TrustedRetailer.domain == domain)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        domain: str,
        name: str,
        category: str,
        is_active: bool = True,
        added_at: datetime | None = None,
    ) -> TrustedRetailer:
        """Create a new retailer entry."""
        retailer = TrustedRetailer(
            domain=domain,
            name=name,
            category=category,
            is_active=is_active,
            added_at=added_at or datetime.utcnow(),
        )
        self.session.add(retailer)
        await self.session.commit()
        await self.session.refresh(retailer)
        return retailer

    async def update(self, domain: str, **data) -> TrustedRetailer | None:
        """Update a retailer's name, category or active flag."""
        retailer = await self.get_by_domain(domain)
        if retailer is None:
            return None
        for key, value in data.items():
            setattr(retailer, key, value)
        await self.session.commit()
        await self.session.refresh(retailer)
        return retailer

    async def delete(self, domain: str) -> bool:
        """Remove a retailer from the whitelist."""
        retailer = await self.get_by_domain(domain)
        if retailer is None:
            return False
        await self.session.delete(retailer)
        await self.session.commit()
        return True

    async def seed_defaults(self, retailers: Iterable[dict]) -> int:
        """Insert any default retailers whose domain is not present yet.

        Returns:
            Number of retailers inserted
        """
        existing = set((await self.session.execute(select(TrustedRetailer.domain))).scalars().all())
        inserted = 0
        for entry in retailers:
            if entry["domain"] in existing:
                continue
            self.session.add(TrustedRetailer(**entry))
            inserted += 1
        if inserted:
            await self.session.commit()
        return inserted
