from sqlalchemy.orm import Session
from sqlalchemy import and_, delete, select
from typing import Dict, List, Optional
from fastapi import Depends
import logging

from apps.parts.models import Part, PartAttributeValue
from apps.parts.schemas import (
    PartSearchFilters,
    PartSearchResult,
    PartUpsert,
    PartDetail,
    PartAttributeDetail,
)
from apps.parts.wildcards import compile_patterns, like_predicates
from apps.part_types.attributes import (
    AttributeDefinition,
    assert_required,
    evaluate_definitions,
    find_subtype_value,
    validate_value,
)
from apps.part_types.services import PartTypeService, to_field
from apps.inventory.services import (
    InventoryService,
    on_hand_subquery,
    allocated_subquery,
    location_description_subquery,
    available_quantity_expression,
    location_label,
)
from core.database import get_db, transaction
from core.exceptions import InvalidInputError, NotFoundError
from core.values import as_number, as_text

logger = logging.getLogger(__name__)

SCALAR_FIELDS = {
    "description": "description",
    "revision": "revision",
    "stock_uom": "stock_uom",
    "status": "status",
    "storage_room": "storage_room",
    "storage_location": "location_code",
}


class PartService:
    def __init__(self, db: Session):
        self.db = db
        self.part_types = PartTypeService(db)
        self.inventory = InventoryService(db)

    def get_part(self, part_number: str) -> Optional[Part]:
        """Get part by part number"""
        return self.db.get(Part, part_number)

    def search(self, filters: PartSearchFilters) -> List[PartSearchResult]:
        """Search parts by part number, description and stock.

        Every supplied filter narrows the result. Callers are expected to
        refuse a search with no filters at all; this method composes
        whatever it is given.
        """
        part_number = (filters.part_number or "").strip()
        description = (filters.description or "").strip()
        in_stock_only = bool(filters.in_stock_only)
        limit = filters.limit if isinstance(filters.limit, int) and filters.limit > 0 else None

        on_hand = on_hand_subquery()
        allocated = allocated_subquery()
        locations = location_description_subquery()
        available = available_quantity_expression(on_hand, allocated)

        conditions = []
        if part_number:
            clause = like_predicates(Part.part_number, compile_patterns(part_number))
            if clause is not None:
                conditions.append(clause)
        if description:
            clause = like_predicates(Part.description, compile_patterns(description))
            if clause is not None:
                conditions.append(clause)
        if in_stock_only:
            conditions.append(available > 0)

        query = (
            select(
                Part.part_number,
                Part.description,
                Part.revision,
                Part.stock_uom,
                Part.status,
                Part.location_code,
                locations.c.location_description,
                available.label("available_quantity"),
            )
            .select_from(Part)
            .outerjoin(on_hand, on_hand.c.part_number == Part.part_number)
            .outerjoin(allocated, allocated.c.part_number == Part.part_number)
            .outerjoin(locations, locations.c.location_code == Part.location_code)
        )
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(Part.part_number.asc())
        if limit:
            query = query.limit(limit)

        logger.debug(
            f"Executing part search query (part number length {len(part_number)}, "
            f"description length {len(description)}, in stock only {in_stock_only}, limit {limit})"
        )

        rows = self.db.execute(query).all()
        return [
            PartSearchResult(
                part_number=as_text(row.part_number),
                description=as_text(row.description),
                revision=as_text(row.revision),
                stock_uom=as_text(row.stock_uom),
                status=as_text(row.status),
                available_quantity=max(0.0, as_number(row.available_quantity)),
                location=location_label(row.location_description, row.location_code),
            )
            for row in rows
        ]

    def get_detail(self, part_number: str) -> Optional[PartDetail]:
        """Part with its type, stock and evaluated attribute set"""
        part = self.get_part((part_number or "").strip())
        if not part:
            return None

        definitions: Dict[int, AttributeDefinition] = {}
        if part.part_type_id is not None:
            definitions = self.part_types.resolve_definitions(part.part_type_id)

        values = self._stored_attributes(part.part_number)
        subtype = find_subtype_value(values, definitions)
        states = evaluate_definitions(definitions, subtype)

        attributes = [
            PartAttributeDetail(
                **to_field(definition, states[attribute_id].required, states[attribute_id].visible).model_dump(),
                value=values.get(attribute_id, ""),
            )
            for attribute_id, definition in definitions.items()
        ]

        locations = location_description_subquery()
        location_description = None
        if part.location_code:
            location_description = self.db.execute(
                select(locations.c.location_description)
                .where(locations.c.location_code == part.location_code)
            ).scalar()

        part_type = part.part_type
        return PartDetail(
            part_number=as_text(part.part_number),
            description=as_text(part.description),
            revision=as_text(part.revision),
            stock_uom=as_text(part.stock_uom),
            status=as_text(part.status),
            part_type_id=part.part_type_id,
            part_type_code=as_text(part_type.code) if part_type else "",
            part_type_name=as_text(part_type.name) if part_type else "",
            storage_room=as_text(part.storage_room),
            storage_location=as_text(part.location_code),
            location=location_label(location_description, part.location_code),
            available_quantity=self.inventory.available_quantity(part.part_number),
            attributes=attributes,
        )

    def upsert(self, payload: PartUpsert, allow_create: bool = False) -> PartDetail:
        """Create or update a part and replace its whole attribute set.

        All validation runs before the first write. The scalar fields and
        the attribute rows are then written in one transaction: every
        existing attribute row is deleted and the validated set inserted,
        so attributes dropped by a type or subtype change never linger.
        """
        part_number = (payload.part_number or "").strip()
        if not part_number:
            raise InvalidInputError("A part number is required.", code="missing_part_number")

        existing = self.get_part(part_number)
        if existing is None and not allow_create:
            raise NotFoundError(f"Part {part_number} does not exist.", code="part_not_found")

        part_type_id = payload.part_type_id
        if part_type_id is None and existing is not None:
            part_type_id = existing.part_type_id
        if part_type_id is None:
            if existing is None:
                raise InvalidInputError(
                    "A part type is required to create a part.", code="missing_part_type"
                )
            raise InvalidInputError(
                f"Part {part_number} has no part type. Select one before saving.", code="missing_part_type"
            )
        if not self.part_types.get_part_type(part_type_id):
            raise InvalidInputError(f"Part type {part_type_id} is not defined.", code="unknown_part_type")

        definitions = self.part_types.resolve_definitions(part_type_id)
        attributes = self._normalize_attributes(self._submitted_attributes(payload, existing), definitions)
        if definitions:
            assert_required(attributes, definitions)

        with transaction(self.db):
            part = existing
            if part is None:
                part = Part(part_number=part_number)
                self.db.add(part)

            for field, column in SCALAR_FIELDS.items():
                value = getattr(payload, field)
                if value is not None:
                    setattr(part, column, value.strip())
            part.part_type_id = part_type_id
            self.db.flush()

            self.db.execute(
                delete(PartAttributeValue)
                .where(PartAttributeValue.part_number == part_number)
                .execution_options(synchronize_session="fetch")
            )
            self.db.add_all([
                PartAttributeValue(part_number=part_number, attribute_id=attribute_id, value=value)
                for attribute_id, value in attributes.items()
                if value
            ])

        logger.info(
            f"{'Created' if existing is None else 'Updated'} part {part_number} "
            f"(type {part_type_id}, {sum(1 for v in attributes.values() if v)} attributes)"
        )
        return self.get_detail(part_number)

    def _stored_attributes(self, part_number: str) -> Dict[int, str]:
        # Plain column rows keep attribute entities out of the identity map
        rows = self.db.execute(
            select(PartAttributeValue.attribute_id, PartAttributeValue.value)
            .where(PartAttributeValue.part_number == part_number)
        ).all()
        return {row.attribute_id: row.value or "" for row in rows}

    def _submitted_attributes(self, payload: PartUpsert, existing: Optional[Part]) -> Dict[int, str]:
        if payload.attributes is None:
            return self._stored_attributes(existing.part_number) if existing is not None else {}
        return {entry.attribute_id: entry.value for entry in payload.attributes}

    def _normalize_attributes(
        self,
        submitted: Dict[int, str],
        definitions: Dict[int, AttributeDefinition],
    ) -> Dict[int, str]:
        normalized = {}
        for attribute_id, value in submitted.items():
            definition = definitions.get(attribute_id)
            if definition is None:
                logger.debug(f"Ignoring attribute {attribute_id}: not defined for this part type")
                continue
            normalized[attribute_id] = validate_value(definition, value)
        return normalized


# Dependency injection
def get_part_service(db: Session = Depends(get_db)) -> PartService:
    return PartService(db)
