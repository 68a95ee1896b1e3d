"""Affiliate redirect gate.

Decides whether a product's purchase link may be followed. The decision is
computed server-side so the whitelist stays authoritative; the client only
renders the outcome and runs the countdown.

Flow:
  Client opens product "Buy" link ->
  GET /go/{product_id} ->
  product lookup -> basic URL check -> https + trusted retailer check ->
  redirect URL with tracking parameters
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlunsplit

from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.core.urls import clean_netloc, split_url
from lookbook.domain.services.retailer_whitelist import (
    RetailerWhitelistService,
    hostname_of,
    is_valid_affiliate_url,
)
from lookbook.persistence.models.catalog import Product
from lookbook.persistence.repositories.product_repository import ProductRepository
from lookbook.settings import settings

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found"
MISSING_PURCHASE_LINK = "This product does not have a purchase link available"
INVALID_REDIRECT_URL = "Invalid redirect URL"
UNTRUSTED_RETAILER = "This retailer is not on the trusted list"


class DecisionState(str, Enum):
    """Outcome of a redirect evaluation."""

    REDIRECTING = "redirecting"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Why a redirect was refused."""

    NOT_FOUND = "not_found"
    MISSING_URL = "missing_url"
    INVALID_URL = "invalid_url"
    UNTRUSTED_RETAILER = "untrusted_retailer"


@dataclass(frozen=True)
class RedirectDecision:
    """Server-side verdict for one product's purchase link."""

    state: DecisionState
    product_id: str
    message: str | None = None
    kind: ErrorKind | None = None
    redirect_url: str | None = None
    retailer: str | None = None
    retailer_name: str | None = None
    countdown_seconds: int = 0
    product: Product | None = None

    @property
    def is_redirect(self) -> bool:
        return self.state == DecisionState.REDIRECTING

    @classmethod
    def error(
        cls,
        product_id: str,
        kind: ErrorKind,
        message: str,
        product: Product | None = None,
    ) -> "RedirectDecision":
        return cls(
            state=DecisionState.ERROR,
            product_id=product_id,
            kind=kind,
            message=message,
            product=product,
        )


def is_valid_url(url: str | None) -> bool:
    """Basic URL sanity check: parseable, http(s), with a host and no ambiguous parts."""
    parts = split_url(url)
    return parts is not None and parts.scheme.lower() in ("http", "https")


def add_tracking_params(url: str, product_id: str) -> str:
    """Append affiliate tracking parameters, keeping existing query parameters.

    Tracking keys already present in the URL are overwritten. The URL is
    rebuilt as scheme://host[:port]/path from its parsed parts.

    Raises:
        ValueError: If the URL cannot be split safely
    """
    parts = split_url(url)
    if parts is None:
        raise ValueError(f"Refusing to rebuild unsafe URL: {url!r}")
    tracking = {
        "utm_source": settings.utm_source,
        "utm_medium": settings.utm_medium,
        "utm_campaign": settings.utm_campaign,
        "utm_content": product_id,
        "ref": settings.tracking_ref,
    }
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key not in tracking]
    query.extend(tracking.items())
    return urlunsplit((parts.scheme.lower(), clean_netloc(parts), parts.path, urlencode(query), parts.fragment))


class AffiliateGate:
    """Evaluates redirect requests against the catalog and the whitelist."""

    def __init__(self, session: AsyncSession):
        """Initialize affiliate gate."""
        self.products = ProductRepository(session)
        self.whitelist = RetailerWhitelistService(session)

    async def evaluate(self, product_id: str) -> RedirectDecision:
        """Decide whether the product's affiliate URL may be followed.

        Args:
            product_id: Product id or slug

        Returns:
            RedirectDecision in REDIRECTING or ERROR state
        """
        product = await self.products.get_by_id_or_slug(product_id)
        if product is None:
            logger.info("Redirect refused: product not found", extra={"product_id": product_id})
            return RedirectDecision.error(product_id, ErrorKind.NOT_FOUND, PRODUCT_NOT_FOUND)

        url = (product.affiliate_url or "").strip()
        if not url:
            return RedirectDecision.error(product.id, ErrorKind.MISSING_URL, MISSING_PURCHASE_LINK, product)

        if not is_valid_url(url):
            logger.warning(
                "Redirect refused: malformed affiliate URL",
                extra={"product_id": product.id},
            )
            return RedirectDecision.error(product.id, ErrorKind.INVALID_URL, INVALID_REDIRECT_URL, product)

        if not is_valid_affiliate_url(url, await self.whitelist.active_domains()):
            logger.warning(
                "Redirect refused: untrusted retailer",
                extra={"product_id": product.id, "hostname": hostname_of(url)},
            )
            return RedirectDecision.error(product.id, ErrorKind.UNTRUSTED_RETAILER, UNTRUSTED_RETAILER, product)

        retailer = await self.whitelist.get_retailer_by_url(url)
        hostname = hostname_of(url)
        return RedirectDecision(
            state=DecisionState.REDIRECTING,
            product_id=product.id,
            redirect_url=add_tracking_params(url, product.id),
            retailer=hostname,
            retailer_name=retailer.name if retailer else hostname,
            countdown_seconds=settings.redirect_countdown_seconds,
            product=product,
        )
