"""Trusted retailer whitelist for affiliate redirects.

A URL is a valid redirect target iff it uses https and its hostname, with a
leading "www." stripped, equals the domain of an active trusted retailer.
URLs whose host a browser could read differently from urlsplit are never valid.
"""

import logging
from collections.abc import Collection
from datetime import datetime
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.core.urls import split_url
from lookbook.persistence.models.trusted_retailer import RetailerCategory, TrustedRetailer
from lookbook.persistence.repositories.retailer_repository import RetailerRepository

logger = logging.getLogger(__name__)

_SEED_DATE = datetime(2024, 1, 1)


def _default(domain: str, name: str, category: RetailerCategory) -> dict:
    return {
        "domain": domain,
        "name": name,
        "category": category.value,
        "is_active": True,
        "added_at": _SEED_DATE,
    }


DEFAULT_RETAILERS: list[dict] = [
    # Luxury & Designer
    _default("nordstrom.com", "Nordstrom", RetailerCategory.LUXURY),
    _default("net-a-porter.com", "Net-A-Porter", RetailerCategory.LUXURY),
    _default("saksfifthavenue.com", "Saks Fifth Avenue", RetailerCategory.LUXURY),
    _default("bergdorfgoodman.com", "Bergdorf Goodman", RetailerCategory.LUXURY),
    _default("matchesfashion.com", "Matches Fashion", RetailerCategory.LUXURY),
    _default("mytheresa.com", "Mytheresa", RetailerCategory.LUXURY),
    _default("luisaviaroma.com", "Luisa Via Roma", RetailerCategory.LUXURY),
    _default("farfetch.com", "Farfetch", RetailerCategory.LUXURY),
    _default("ssense.com", "SSENSE", RetailerCategory.LUXURY),
    # Contemporary
    _default("shopbop.com", "Shopbop", RetailerCategory.CONTEMPORARY),
    _default("revolve.com", "Revolve", RetailerCategory.CONTEMPORARY),
    _default("anthropologie.com", "Anthropologie", RetailerCategory.CONTEMPORARY),
    _default("freepeople.com", "Free People", RetailerCategory.CONTEMPORARY),
    _default("urbanoutfitters.com", "Urban Outfitters", RetailerCategory.CONTEMPORARY),
    # Fast Fashion
    _default("zara.com", "Zara", RetailerCategory.FAST_FASHION),
    _default("hm.com", "H&M", RetailerCategory.FAST_FASHION),
    _default("asos.com", "ASOS", RetailerCategory.FAST_FASHION),
    _default("mango.com", "Mango", RetailerCategory.FAST_FASHION),
    _default("stories.com", "& Other Stories", RetailerCategory.FAST_FASHION),
    # Marketplaces
    _default("amazon.com", "Amazon", RetailerCategory.MARKETPLACE),
    _default("etsy.com", "Etsy", RetailerCategory.MARKETPLACE),
    _default("ebay.com", "eBay", RetailerCategory.MARKETPLACE),
]


class RetailerError(ValueError):
    """Raised for invalid whitelist operations."""


def strip_www(hostname: str) -> str:
    """Remove a single leading "www." from a hostname."""
    return hostname[4:] if hostname.startswith("www.") else hostname


def normalize_domain(value: str) -> str:
    """Normalize operator input ("https://www.Zara.com/x") to "zara.com".

    Raises:
        RetailerError: If no hostname can be extracted
    """
    candidate = value.strip().lower()
    if "://" not in candidate:
        candidate = f"//{candidate}"
    hostname = urlsplit(candidate).hostname or ""
    hostname = strip_www(hostname.rstrip("."))
    if not hostname or "." not in hostname:
        raise RetailerError(f"Invalid retailer domain: {value!r}")
    return hostname


def hostname_of(url: str) -> str | None:
    """Return the lowercase hostname with "www." stripped, or None if unsafe or unparseable."""
    parts = split_url(url)
    if parts is None:
        return None
    return strip_www(parts.hostname)


def is_valid_affiliate_url(url: str, active_domains: Collection[str]) -> bool:
    """Check a URL against the set of active trusted domains.

    Args:
        url: Candidate redirect destination
        active_domains: Normalized domains of active retailers

    Returns:
        True only for https URLs whose hostname is an active retailer domain
    """
    parts = split_url(url)
    if parts is None or parts.scheme.lower() != "https":
        return False
    return strip_www(parts.hostname) in active_domains


class RetailerWhitelistService:
    """Operator-curated whitelist of redirect destinations.

    Usage:
        whitelist = RetailerWhitelistService(db)
        if await whitelist.is_valid_affiliate_url(url):
            ...
    """

    def __init__(self, session: AsyncSession):
        """Initialize whitelist service."""
        self.repo = RetailerRepository(session)

    async def ensure_defaults(self) -> int:
        """Seed the default retailers that are not present yet."""
        inserted = await self.repo.seed_defaults(DEFAULT_RETAILERS)
        if inserted:
            logger.info(f"Seeded {inserted} default trusted retailers")
        return inserted

    async def list_retailers(self, active_only: bool = False) -> list[TrustedRetailer]:
        """List retailers on the whitelist."""
        return await self.repo.list_all(active_only=active_only)

    async def active_domains(self) -> set[str]:
        """Domains currently accepted as redirect targets."""
        return await self.repo.list_active_domains()

    async def is_valid_affiliate_url(self, url: str) -> bool:
        """Authoritative whitelist check for a redirect destination."""
        return is_valid_affiliate_url(url, await self.active_domains())

    async def get_retailer_by_url(self, url: str) -> TrustedRetailer | None:
        """Look up the retailer entry for a URL, active or not."""
        hostname = hostname_of(url)
        if hostname is None:
            return None
        return await self.repo.get_by_domain(hostname)

    async def add_retailer(
        self,
        domain: str,
        name: str,
        category: RetailerCategory,
        is_active: bool = True,
    ) -> TrustedRetailer:
        """Add a retailer to the whitelist.

        Raises:
            RetailerError: If the domain is invalid or already listed
        """
        normalized = normalize_domain(domain)
        if await self.repo.get_by_domain(normalized) is not None:
            raise RetailerError(f"Retailer {normalized} is already on the whitelist")
        retailer = await self.repo.create(
            domain=normalized,
            name=name.strip(),
            category=category.value,
            is_active=is_active,
        )
        logger.info("Trusted retailer added", extra={"domain": normalized})
        return retailer

    async def update_retailer(self, domain: str, **changes) -> TrustedRetailer | None:
        """Update name, category or active flag of a retailer."""
        if isinstance(changes.get("category"), RetailerCategory):
            changes["category"] = changes["category"].value
        return await self.repo.update(normalize_domain(domain), **changes)

    async def toggle_retailer(self, domain: str) -> TrustedRetailer | None:
        """Flip the active flag of a retailer."""
        retailer = await self.repo.get_by_domain(normalize_domain(domain))
        if retailer is None:
            return None
        updated = await self.repo.update(retailer.domain, is_active=not retailer.is_active)
        logger.info(
            "Trusted retailer toggled",
            extra={"domain": retailer.domain, "is_active": updated.is_active},
        )
        return updated

    async def remove_retailer(self, domain: str) -> bool:
        """Remove a retailer from the whitelist."""
        removed = await self.repo.delete(normalize_domain(domain))
        if removed:
            logger.info("Trusted retailer removed", extra={"domain": domain})
        return removed
