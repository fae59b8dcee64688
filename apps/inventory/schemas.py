from typing import List, Optional

from core.schemas import CamelModel


class InventorySnapshot(CamelModel):
    quantity_on_hand: float
    quantity_allocated: float
    quantity_available: float
    lot_count: int
    last_receipt_date: Optional[str] = None


class InventorySnapshotResponse(CamelModel):
    data: InventorySnapshot


class PartAvailability(CamelModel):
    part_number: str
    available_quantity: float


class PartAvailabilityResponse(CamelModel):
    data: PartAvailability


class LocationOption(CamelModel):
    room_code: str
    room_description: str
    room_display: str
    location_code: str
    location_description: str
    location_display: str


class LocationListResponse(CamelModel):
    data: List[LocationOption]
