"""Pydantic schemas for the affiliate redirect decision."""

from decimal import Decimal

from lookbook.domain.models.analytics import CamelModel
from lookbook.domain.services.affiliate_gate import DecisionState, ErrorKind, RedirectDecision


class RedirectProduct(CamelModel):
    id: str
    name: str
    brand: str | None = None
    image_url: str | None = None
    price: Decimal | None = None


class RedirectResponse(CamelModel):
    """Outcome of GET /go/{product_id}.

    `redirectUrl` is only present in the redirecting state; `message` and
    `kind` only in the error state.
    """

    state: DecisionState
    product_id: str
    redirect_url: str | None = None
    retailer: str | None = None
    retailer_name: str | None = None
    countdown_seconds: int = 0
    message: str | None = None
    kind: ErrorKind | None = None
    product: RedirectProduct | None = None

    @classmethod
    def from_decision(cls, decision: RedirectDecision) -> "RedirectResponse":
        product = None
        if decision.product is not None:
            product = RedirectProduct(
                id=decision.product.id,
                name=decision.product.name,
                brand=decision.product.brand,
                image_url=decision.product.image_url,
                price=decision.product.price,
            )
        return cls(
            state=decision.state,
            product_id=decision.product_id,
            redirect_url=decision.redirect_url,
            retailer=decision.retailer,
            retailer_name=decision.retailer_name,
            countdown_seconds=decision.countdown_seconds,
            message=decision.message,
            kind=decision.kind,
            product=product,
        )
