from sqlalchemy.orm import Session
from sqlalchemy import case, func, select
from typing import List
from fastapi import Depends
import logging

from apps.inventory.models import InventoryLot, InventoryTag, StockLocation, Department
from apps.inventory.schemas import InventorySnapshot, LocationOption
from core.database import get_db
from core.values import as_iso_date, as_number, as_text

logger = logging.getLogger(__name__)

DEFAULT_LOCATION_LIMIT = 500
MAX_LOCATION_LIMIT = 5000


def on_hand_subquery():
    """Lot quantity summed per part number."""
    return (
        select(
            InventoryLot.part_number.label("part_number"),
            func.sum(InventoryLot.quantity).label("quantity_on_hand"),
        )
        .group_by(InventoryLot.part_number)
        .subquery("il")
    )


def allocated_subquery():
    """Allocated tag quantity summed per part number, ignoring NULL tags."""
    return (
        select(
            InventoryTag.part_number.label("part_number"),
            func.sum(InventoryTag.allocated_quantity).label("quantity_allocated"),
        )
        .where(InventoryTag.allocated_quantity.isnot(None))
        .group_by(InventoryTag.part_number)
        .subquery("it")
    )


def location_description_subquery():
    """First non-blank description for each location code."""
    return (
        select(
            StockLocation.location_code.label("location_code"),
            func.max(func.nullif(func.trim(StockLocation.description), "")).label("location_description"),
        )
        .group_by(StockLocation.location_code)
        .subquery("sl")
    )


def available_quantity_expression(on_hand, allocated):
    """max(on hand - allocated, 0) with missing rows counted as zero.

    Written as a CASE rather than GREATEST so SQLite evaluates it too.
    """
    net = func.coalesce(on_hand.c.quantity_on_hand, 0) - func.coalesce(allocated.c.quantity_allocated, 0)
    return case((net > 0, net), else_=0)


def location_label(description, code) -> str:
    """Prefer the location description, then the raw code."""
    return as_text(description) or as_text(code)


class InventoryService:
    def __init__(self, db: Session):
        self.db = db

    def available_quantity(self, part_number: str) -> float:
        """Available quantity for one part, never negative."""
        on_hand = on_hand_subquery()
        allocated = allocated_subquery()

        quantity_on_hand = self.db.execute(
            select(on_hand.c.quantity_on_hand).where(on_hand.c.part_number == part_number)
        ).scalar()
        quantity_allocated = self.db.execute(
            select(allocated.c.quantity_allocated).where(allocated.c.part_number == part_number)
        ).scalar()

        available = max(0.0, as_number(quantity_on_hand) - as_number(quantity_allocated))
        logger.debug(f"Available quantity for {part_number}: {available}")
        return available

    def snapshot(self) -> InventorySnapshot:
        """Global on-hand, allocated and available totals across all lots."""
        logger.debug("Computing inventory snapshot metrics")

        lots = self.db.execute(
            select(
                func.coalesce(func.sum(InventoryLot.quantity), 0).label("total_quantity"),
                func.count().label("lot_count"),
                func.max(InventoryLot.date_received).label("last_receipt_date"),
            ).select_from(InventoryLot)
        ).one()

        total_allocated = self.db.execute(
            select(func.coalesce(func.sum(InventoryTag.allocated_quantity), 0))
            .where(InventoryTag.allocated_quantity.isnot(None))
        ).scalar()

        quantity_on_hand = as_number(lots.total_quantity)
        quantity_allocated = as_number(total_allocated)

        snapshot = InventorySnapshot(
            quantity_on_hand=quantity_on_hand,
            quantity_allocated=quantity_allocated,
            quantity_available=max(0.0, quantity_on_hand - quantity_allocated),
            lot_count=max(0, int(as_number(lots.lot_count))),
            last_receipt_date=as_iso_date(lots.last_receipt_date),
        )

        logger.debug(
            f"Inventory snapshot prepared: on hand {snapshot.quantity_on_hand}, "
            f"allocated {snapshot.quantity_allocated}, lots {snapshot.lot_count}"
        )
        return snapshot

    def list_locations(self, limit: int = DEFAULT_LOCATION_LIMIT) -> List[LocationOption]:
        """Distinct room/location pairs with display labels."""
        if limit is None or limit <= 0:
            safe_limit = DEFAULT_LOCATION_LIMIT
        else:
            safe_limit = min(int(limit), MAX_LOCATION_LIMIT)

        logger.debug(f"Loading stock locations (limit {safe_limit})")

        rows = self.db.execute(
            select(
                StockLocation.room_code,
                StockLocation.location_code,
                func.max(func.nullif(func.trim(StockLocation.description), "")).label("location_description"),
                func.max(func.nullif(func.trim(Department.description), "")).label("room_description"),
            )
            .outerjoin(Department, Department.code == StockLocation.room_code)
            .where(
                StockLocation.room_code.isnot(None),
                func.length(func.trim(StockLocation.room_code)) > 0,
                StockLocation.location_code.isnot(None),
                func.length(func.trim(StockLocation.location_code)) > 0,
            )
            .group_by(StockLocation.room_code, StockLocation.location_code)
            .order_by(StockLocation.room_code.asc(), StockLocation.location_code.asc())
            .limit(safe_limit)
        ).all()

        locations = []
        for row in rows:
            room_code = as_text(row.room_code)
            location_code = as_text(row.location_code)
            if not room_code or not location_code:
                continue
            room_description = as_text(row.room_description)
            location_description = as_text(row.location_description)
            locations.append(LocationOption(
                room_code=room_code,
                room_description=room_description,
                room_display=f"{room_code} - {room_description}" if room_description else room_code,
                location_code=location_code,
                location_description=location_description,
                location_display=(
                    f"{location_code} - {location_description}" if location_description else location_code
                ),
            ))
        return locations


# Dependency injection
def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    return InventoryService(db)
