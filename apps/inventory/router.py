from fastapi import APIRouter, Depends, Query
from typing import Optional
from apps.inventory.schemas import (
    InventorySnapshotResponse,
    PartAvailability,
    PartAvailabilityResponse,
    LocationListResponse,
)
from apps.inventory.services import InventoryService, get_inventory_service, DEFAULT_LOCATION_LIMIT

router = APIRouter()


@router.get(
    "/",
    response_model=InventorySnapshotResponse,
    summary="Inventory snapshot",
    description="Total on-hand, allocated and available quantity across all lots"
)
def get_inventory_snapshot(
    service: InventoryService = Depends(get_inventory_service),
):
    """Global inventory totals"""
    return InventorySnapshotResponse(data=service.snapshot())


@router.get(
    "/locations",
    response_model=LocationListResponse,
    summary="List stock locations",
    description="Room and location codes with their descriptions"
)
def get_locations(
    limit: Optional[int] = Query(None, description="Maximum number of locations"),
    service: InventoryService = Depends(get_inventory_service),
):
    """List stock locations"""
    return LocationListResponse(data=service.list_locations(limit or DEFAULT_LOCATION_LIMIT))


@router.get(
    "/availability/{part_number}",
    response_model=PartAvailabilityResponse,
    summary="Available quantity for a part",
    description="On-hand minus allocated quantity, never below zero"
)
def get_part_availability(
    part_number: str,
    service: InventoryService = Depends(get_inventory_service),
):
    """Available quantity for one part"""
    part_number = part_number.strip()
    return PartAvailabilityResponse(data=PartAvailability(
        part_number=part_number,
        available_quantity=service.available_quantity(part_number),
    ))
