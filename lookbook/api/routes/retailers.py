"""Admin routes for the trusted retailer whitelist."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lookbook.api.deps import get_current_admin
from lookbook.api.schemas.retailers import (
    RetailerCreate,
    RetailerResponse,
    RetailerUpdate,
    UrlValidationRequest,
    UrlValidationResponse,
)
from lookbook.domain.services.retailer_whitelist import RetailerError, RetailerWhitelistService
from lookbook.persistence.database import get_db
from lookbook.persistence.models.admin_user import AdminUser

router = APIRouter()


async def get_whitelist_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    _admin: Annotated[AdminUser, Depends(get_current_admin)],
) -> RetailerWhitelistService:
    return RetailerWhitelistService(db)


WhitelistDep = Annotated[RetailerWhitelistService, Depends(get_whitelist_service)]


def _not_found(domain: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Retailer {domain} not found",
    )


@router.get("", response_model=list[RetailerResponse])
async def list_retailers(
    whitelist: WhitelistDep,
    active_only: bool = False,
) -> list[RetailerResponse]:
    """List whitelisted retailers."""
    retailers = await whitelist.list_retailers(active_only=active_only)
    return [RetailerResponse.model_validate(retailer) for retailer in retailers]


@router.post("", response_model=RetailerResponse, status_code=status.HTTP_201_CREATED)
async def add_retailer(
    retailer_data: RetailerCreate,
    whitelist: WhitelistDep,
) -> RetailerResponse:
    """Add a retailer to the whitelist."""
    try:
        retailer = await whitelist.add_retailer(
            domain=retailer_data.domain,
            name=retailer_data.name,
            category=retailer_data.category,
            is_active=retailer_data.is_active,
        )
    except RetailerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return RetailerResponse.model_validate(retailer)


@router.post("/validate", response_model=UrlValidationResponse)
async def validate_url(
    request_data: UrlValidationRequest,
    whitelist: WhitelistDep,
) -> UrlValidationResponse:
    """Check a URL against the whitelist (https + active retailer)."""
    valid = await whitelist.is_valid_affiliate_url(request_data.url)
    retailer = await whitelist.get_retailer_by_url(request_data.url) if valid else None
    return UrlValidationResponse(
        valid=valid,
        retailer=RetailerResponse.model_validate(retailer) if retailer else None,
    )


@router.patch("/{domain}", response_model=RetailerResponse)
async def update_retailer(
    domain: str,
    retailer_data: RetailerUpdate,
    whitelist: WhitelistDep,
) -> RetailerResponse:
    """Update a retailer's name, category or active flag."""
    try:
        retailer = await whitelist.update_retailer(domain, **retailer_data.model_dump(exclude_unset=True))
    except RetailerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if retailer is None:
        raise _not_found(domain)
    return RetailerResponse.model_validate(retailer)


@router.post("/{domain}/toggle", response_model=RetailerResponse)
async def toggle_retailer(
    domain: str,
    whitelist: WhitelistDep,
) -> RetailerResponse:
    """Flip a retailer between active and inactive."""
    try:
        retailer = await whitelist.toggle_retailer(domain)
    except RetailerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if retailer is None:
        raise _not_found(domain)
    return RetailerResponse.model_validate(retailer)


@router.delete("/{domain}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_retailer(
    domain: str,
    whitelist: WhitelistDep,
) -> None:
    """Remove a retailer from the whitelist."""
    try:
        removed = await whitelist.remove_retailer(domain)
    except RetailerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not removed:
        raise _not_found(domain)
