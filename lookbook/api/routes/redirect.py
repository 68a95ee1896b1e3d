"""Affiliate redirect gate route."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.schemas.redirect import RedirectResponse
from lookbook.domain.services.affiliate_gate import AffiliateGate, ErrorKind
from lookbook.persistence.database import get_db

router = APIRouter()


@router.get(
    "/{product_id}",
    response_model=RedirectResponse,
    responses={404: {"model": RedirectResponse}, 422: {"model": RedirectResponse}},
)
async def get_redirect(
    product_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Decide whether the product's purchase link may be followed.

    Returns the tracked destination on success. Refusals are terminal: the
    client shows the message and never navigates.
    """
    decision = await AffiliateGate(db).evaluate(product_id)
    body = RedirectResponse.from_decision(decision)
    if decision.is_redirect:
        return body

    status_code = (
        status.HTTP_404_NOT_FOUND
        if decision.kind == ErrorKind.NOT_FOUND
        else status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
    )
