from sqlalchemy.orm import Session, aliased
from sqlalchemy import Integer, case, cast, func, select
from typing import Iterable, List, Optional
from fastapi import Depends
import logging
import math
import re

from apps.bom.models import BomLine
from apps.bom.schemas import BomLineResult, ComponentShortage, BuildPlan
from apps.parts.models import Part
from apps.inventory.services import (
    on_hand_subquery,
    allocated_subquery,
    location_description_subquery,
    available_quantity_expression,
    location_label,
)
from core.database import get_db
from core.exceptions import InvalidInputError, NotFoundError
from core.values import as_iso_date, as_number, as_optional_number, as_text

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_ASSEMBLY_LIMIT = 200
MAX_LIMIT = 200

# Non-numeric sequences sort after every numeric one
SEQUENCE_SENTINEL = 999999

_NUMERIC_SEQUENCE = re.compile(r"^[0-9]+$")


def sequence_position(sequence) -> Optional[int]:
    text = as_text(sequence)
    return int(text) if _NUMERIC_SEQUENCE.match(text) else None


def _consuming_quantity(quantity_per) -> Optional[float]:
    number = as_optional_number(quantity_per)
    if number is None or number <= 0:
        return None
    return number


def assemblies_available(lines: Iterable[BomLineResult]) -> int:
    """Whole assemblies buildable from current component stock.

    Any line without a positive, finite quantity-per makes the assembly
    unbuildable, as does an empty parts list.
    """
    buildable = None
    for line in lines:
        quantity_per = _consuming_quantity(line.quantity_per)
        if quantity_per is None:
            return 0
        count = max(0.0, as_number(line.available_quantity)) / quantity_per
        buildable = count if buildable is None else min(buildable, count)

    if buildable is None:
        return 0
    return int(math.floor(buildable))


def component_shortages(lines: Iterable[BomLineResult], quantity: int) -> List[ComponentShortage]:
    """Per-component shortfall for building ``quantity`` assemblies.

    Lines with a non-positive quantity-per do not consume stock and are left out.
    """
    if quantity < 0:
        raise InvalidInputError("Build quantity cannot be negative.", code="invalid_quantity")

    shortages = []
    for line in lines:
        quantity_per = _consuming_quantity(line.quantity_per)
        if quantity_per is None:
            continue
        available = max(0.0, as_number(line.available_quantity))
        required = quantity_per * quantity
        shortages.append(ComponentShortage(
            component=line.component,
            component_description=line.component_description,
            quantity_per=quantity_per,
            required_quantity=required,
            available_quantity=available,
            shortage=max(0.0, required - available),
        ))
    return shortages


class BomService:
    def __init__(self, db: Session):
        self.db = db

    def bill_of_materials(self, assembly: Optional[str] = None, limit: Optional[int] = None) -> List[BomLineResult]:
        """BOM lines for one assembly, or across all assemblies.

        Ordered by assembly, then sequence (numerically when the sequence is
        a number), then component.
        """
        sanitized_assembly = (assembly or "").strip()
        default_limit = DEFAULT_ASSEMBLY_LIMIT if sanitized_assembly else DEFAULT_LIMIT
        if isinstance(limit, int) and limit > 0:
            safe_limit = min(limit, MAX_LIMIT)
        else:
            safe_limit = default_limit

        logger.debug(f"Fetching bill of materials (assembly '{sanitized_assembly}', limit {safe_limit})")
        return self._query_lines(sanitized_assembly, safe_limit)

    def build_plan(self, assembly: str, quantity: int = 1) -> BuildPlan:
        """Buildable count and component shortages for one assembly."""
        sanitized_assembly = (assembly or "").strip()
        if not sanitized_assembly:
            raise InvalidInputError("An assembly part number is required.", code="missing_assembly")

        lines = self._query_lines(sanitized_assembly, None)
        if not lines:
            raise NotFoundError(
                f"Assembly {sanitized_assembly} has no bill of materials.", code="assembly_not_found"
            )

        plan = BuildPlan(
            assembly=sanitized_assembly,
            quantity=quantity,
            assemblies_available=assemblies_available(lines),
            lines=lines,
            shortages=component_shortages(lines, quantity),
        )
        logger.info(
            f"Build plan for {sanitized_assembly} x{quantity}: {plan.assemblies_available} buildable, "
            f"{sum(1 for s in plan.shortages if s.shortage > 0)} components short"
        )
        return plan

    def _query_lines(self, assembly: str, limit: Optional[int]) -> List[BomLineResult]:
        assembly_part = aliased(Part)
        component_part = aliased(Part)
        on_hand = on_hand_subquery()
        allocated = allocated_subquery()
        locations = location_description_subquery()

        sequence = func.trim(BomLine.item_sequence)
        position = case(
            (sequence.regexp_match("^[0-9]+$"), cast(sequence, Integer)),
            else_=SEQUENCE_SENTINEL,
        )

        query = (
            select(
                BomLine.assembly,
                assembly_part.description.label("assembly_description"),
                BomLine.component,
                component_part.description.label("component_description"),
                BomLine.item_sequence,
                BomLine.quantity_per,
                BomLine.effective_date,
                BomLine.obsolete_date,
                BomLine.notes,
                component_part.location_code.label("component_location_code"),
                locations.c.location_description.label("component_location_description"),
                available_quantity_expression(on_hand, allocated).label("available_quantity"),
            )
            .select_from(BomLine)
            .outerjoin(assembly_part, assembly_part.part_number == BomLine.assembly)
            .outerjoin(component_part, component_part.part_number == BomLine.component)
            .outerjoin(on_hand, on_hand.c.part_number == BomLine.component)
            .outerjoin(allocated, allocated.c.part_number == BomLine.component)
            .outerjoin(locations, locations.c.location_code == component_part.location_code)
        )
        if assembly:
            query = query.where(BomLine.assembly == assembly)
        query = query.order_by(BomLine.assembly.asc(), position.asc(), BomLine.component.asc())
        if limit:
            query = query.limit(limit)

        rows = self.db.execute(query).all()
        return [self._map_row(row) for row in rows]

    def _map_row(self, row) -> BomLineResult:
        return BomLineResult(
            assembly=as_text(row.assembly),
            assembly_description=as_text(row.assembly_description),
            component=as_text(row.component),
            component_description=as_text(row.component_description),
            sequence=as_text(row.item_sequence),
            position=sequence_position(row.item_sequence),
            quantity_per=as_optional_number(row.quantity_per),
            effective_date=as_iso_date(row.effective_date),
            obsolete_date=as_iso_date(row.obsolete_date),
            notes=as_text(row.notes),
            component_location=location_label(
                row.component_location_description, row.component_location_code
            ),
            available_quantity=max(0.0, as_number(row.available_quantity)),
        )


# Dependency injection
def get_bom_service(db: Session = Depends(get_db)) -> BomService:
    return BomService(db)
