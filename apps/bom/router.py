from fastapi import APIRouter, Depends, Query
from typing import Optional
from apps.bom.schemas import BomListResponse, BuildPlanResponse
from apps.bom.services import BomService, get_bom_service

router = APIRouter()


@router.get(
    "/",
    response_model=BomListResponse,
    summary="Bill of materials",
    description="BOM lines with component stock and location, for one assembly or all assemblies"
)
def get_bill_of_materials(
    assembly: Optional[str] = Query(None, description="Assembly part number"),
    limit: Optional[int] = Query(None, description="Maximum number of lines"),
    service: BomService = Depends(get_bom_service),
):
    """Get bill of materials"""
    return BomListResponse(data=service.bill_of_materials(assembly=assembly, limit=limit))


@router.get(
    "/{assembly}/build-plan",
    response_model=BuildPlanResponse,
    summary="Build plan for an assembly",
    description="Assemblies buildable from stock and component shortages for a build quantity"
)
def get_build_plan(
    assembly: str,
    quantity: int = Query(1, ge=0, description="Number of assemblies to build"),
    service: BomService = Depends(get_bom_service),
):
    """Buildable count and shortages for an assembly"""
    return BuildPlanResponse(data=service.build_plan(assembly, quantity))
