from fastapi import APIRouter, Depends, status, Query, Body
from typing import Optional
from apps.parts.schemas import (
    PartSearchFilters,
    PartSearchResponse,
    PartUpsert,
    PartDetailResponse,
)
from apps.parts.services import PartService, get_part_service
from core.config import settings
from core.exceptions import InvalidInputError, NotFoundError
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=PartSearchResponse,
    summary="Search parts",
    description="Search by part number and/or description (use * as a wildcard), optionally in stock only"
)
def search_parts(
    part_number: str = Query("", alias="partNumber", description="Part number, * as wildcard"),
    description: str = Query("", description="Description, * as wildcard"),
    in_stock: bool = Query(False, alias="inStock", description="Only parts with available stock"),
    limit: Optional[int] = Query(
        None, ge=1, le=settings.PART_SEARCH_MAX_LIMIT, description="Maximum number of results"
    ),
    service: PartService = Depends(get_part_service),
):
    """Search parts"""
    filters = PartSearchFilters(
        part_number=part_number.strip(),
        description=description.strip(),
        in_stock_only=in_stock,
        limit=limit or settings.PART_SEARCH_DEFAULT_LIMIT,
    )

    if not filters.has_filters:
        logger.warning("Rejected part search without filters")
        raise InvalidInputError(
            "Provide a part number, description, or enable the In Stock filter.",
            code="missing_filters",
        )

    logger.info(
        f"Incoming part search request (part number length {len(filters.part_number)}, "
        f"description length {len(filters.description)}, in stock only {filters.in_stock_only})"
    )
    results = service.search(filters)
    logger.info(f"Part search completed with {len(results)} results")
    return PartSearchResponse(data=results)


@router.post(
    "/",
    response_model=PartDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a part",
    description="Create a part with its attribute set; a part type is required"
)
def create_part(
    payload: PartUpsert,
    service: PartService = Depends(get_part_service),
):
    """Create a part"""
    return PartDetailResponse(data=service.upsert(payload, allow_create=True))


@router.get(
    "/{part_number}",
    response_model=PartDetailResponse,
    summary="Get part detail",
    description="Part fields, stock and attributes with their required/visible state"
)
def get_part(
    part_number: str,
    service: PartService = Depends(get_part_service),
):
    """Get a part by part number"""
    detail = service.get_detail(part_number)
    if not detail:
        raise NotFoundError("Part not found.", code="part_not_found")
    return PartDetailResponse(data=detail)


@router.put(
    "/{part_number}",
    response_model=PartDetailResponse,
    summary="Update a part",
    description="Replace the scalar fields and the whole attribute set of an existing part"
)
def update_part(
    part_number: str,
    payload: PartUpsert = Body(...),
    service: PartService = Depends(get_part_service),
):
    """Update an existing part"""
    payload = payload.model_copy(update={"part_number": part_number})
    return PartDetailResponse(data=service.upsert(payload, allow_create=False))
