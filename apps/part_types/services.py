from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Dict, List, Optional
from fastapi import Depends
import logging

from apps.part_types.models import PartType, Attribute, PartTypeAttribute, Package, PackageColumn
from apps.part_types.schemas import PartTypeSummary, AttributeField, PackageOption
from apps.part_types.attributes import (
    AttributeDefinition,
    evaluate_definitions,
    parse_datatype,
    parse_required_rule,
)
from core.database import get_db
from core.exceptions import NotFoundError
from core.values import as_optional_number, as_text

logger = logging.getLogger(__name__)


def to_definition(attribute: Attribute, sort_order: int = 0) -> AttributeDefinition:
    """Build a rule-engine definition from an attribute row, parsing its rules once."""
    return AttributeDefinition(
        attribute_id=attribute.id,
        code=as_text(attribute.code),
        datatype=parse_datatype(attribute.datatype),
        required_rule=parse_required_rule(attribute.required_rule),
        min_value=as_optional_number(attribute.min_value),
        max_value=as_optional_number(attribute.max_value),
        unit=as_text(attribute.unit),
        datatype_text=as_text(attribute.datatype),
        rule_text=as_text(attribute.required_rule),
        sort_order=sort_order or 0,
    )


def to_field(definition: AttributeDefinition, required: bool, visible: bool) -> AttributeField:
    return AttributeField(
        attribute_id=definition.attribute_id,
        code=definition.code,
        label=definition.label,
        datatype=definition.datatype.kind.value,
        options=list(definition.datatype.options),
        min_value=definition.min_value,
        max_value=definition.max_value,
        unit=definition.unit,
        required_rule=definition.rule_text,
        required=required,
        visible=visible,
        is_subtype=definition.is_subtype,
    )


class PartTypeService:
    def __init__(self, db: Session):
        self.db = db

    def get_part_type(self, part_type_id: int) -> Optional[PartType]:
        """Get part type by ID"""
        return self.db.get(PartType, part_type_id)

    def list_part_types(self) -> List[PartTypeSummary]:
        """All part types ordered by code"""
        part_types = self.db.execute(
            select(PartType).order_by(PartType.code.asc())
        ).scalars().all()

        return [
            PartTypeSummary(
                id=part_type.id,
                code=as_text(part_type.code),
                name=as_text(part_type.name) or as_text(part_type.code),
                package_column=as_text(part_type.package_column) or None,
            )
            for part_type in part_types
        ]

    def resolve_definitions(self, part_type_id: int) -> Dict[int, AttributeDefinition]:
        """Attribute definitions mapped to a part type, in display order."""
        rows = self.db.execute(
            select(Attribute, PartTypeAttribute.sort_order)
            .join(PartTypeAttribute, PartTypeAttribute.attribute_id == Attribute.id)
            .where(PartTypeAttribute.part_type_id == part_type_id)
            .order_by(PartTypeAttribute.sort_order.asc(), Attribute.id.asc())
        ).all()

        definitions = {
            attribute.id: to_definition(attribute, sort_order)
            for attribute, sort_order in rows
        }
        logger.debug(f"Resolved {len(definitions)} attribute definitions for part type {part_type_id}")
        return definitions

    def attribute_form(self, part_type_id: int, subtype: Optional[str] = None) -> List[AttributeField]:
        """Definitions of a part type with required/visible evaluated for a subtype."""
        if not self.get_part_type(part_type_id):
            raise NotFoundError(f"Part type {part_type_id} does not exist.")

        definitions = self.resolve_definitions(part_type_id)
        states = evaluate_definitions(definitions, subtype)
        return [
            to_field(definition, states[attribute_id].required, states[attribute_id].visible)
            for attribute_id, definition in definitions.items()
        ]

    def list_packages(self, part_type_id: int) -> List[PackageOption]:
        """Packages flagged for the part type's component category."""
        part_type = self.get_part_type(part_type_id)
        if not part_type:
            raise NotFoundError(f"Part type {part_type_id} does not exist.")

        query = select(Package).order_by(Package.code.asc())

        selector = as_text(part_type.package_column).lower()
        if selector:
            try:
                column = PackageColumn(selector)
            except ValueError:
                logger.warning(
                    f"Part type {part_type_id} has unknown package column '{selector}'; listing all packages"
                )
            else:
                query = query.where(getattr(Package, column.value).is_(True))

        packages = self.db.execute(query).scalars().all()
        return [
            PackageOption(code=as_text(package.code), description=as_text(package.description))
            for package in packages
        ]


# Dependency injection
def get_part_type_service(db: Session = Depends(get_db)) -> PartTypeService:
    return PartTypeService(db)
