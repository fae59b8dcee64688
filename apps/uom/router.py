from fastapi import APIRouter, Depends, Query
from typing import Optional
from apps.uom.schemas import UomListResponse
from apps.uom.services import UomService, get_uom_service, DEFAULT_LIMIT

router = APIRouter()


@router.get(
    "/",
    response_model=UomListResponse,
    summary="Units of measure",
    description="Unit of measure codes with type, conversion factor and usage counts"
)
def get_units_of_measure(
    limit: Optional[int] = Query(None, description="Maximum number of units"),
    service: UomService = Depends(get_uom_service),
):
    """List units of measure"""
    return UomListResponse(data=service.overview(limit or DEFAULT_LIMIT))
