from fastapi import APIRouter, Depends, Query
from typing import Optional
from apps.part_types.schemas import (
    PartTypeListResponse,
    AttributeFormResponse,
    PackageListResponse,
)
from apps.part_types.services import PartTypeService, get_part_type_service

router = APIRouter()


@router.get(
    "/",
    response_model=PartTypeListResponse,
    summary="List part types",
    description="All part types with their package catalog selector"
)
def get_part_types(
    service: PartTypeService = Depends(get_part_type_service),
):
    """List part types"""
    return PartTypeListResponse(data=service.list_part_types())


@router.get(
    "/{part_type_id}/attributes",
    response_model=AttributeFormResponse,
    summary="Attribute definitions for a part type",
    description="Attribute fields with required/visible evaluated for the given subtype"
)
def get_part_type_attributes(
    part_type_id: int,
    subtype: Optional[str] = Query(None, description="Current subtype value"),
    service: PartTypeService = Depends(get_part_type_service),
):
    """Attribute form for a part type"""
    return AttributeFormResponse(data=service.attribute_form(part_type_id, subtype))


@router.get(
    "/{part_type_id}/packages",
    response_model=PackageListResponse,
    summary="Packages for a part type",
    description="Package catalog filtered by the part type's component category"
)
def get_part_type_packages(
    part_type_id: int,
    service: PartTypeService = Depends(get_part_type_service),
):
    """Packages for a part type"""
    return PackageListResponse(data=service.list_packages(part_type_id))
