from sqlalchemy.orm import Session
from sqlalchemy import func, select
from typing import List
from fastapi import Depends
import logging
import math

from apps.uom.models import UnitOfMeasure
from apps.uom.schemas import UomOverview
from apps.parts.models import Part
from apps.bom.models import BomLine
from core.database import get_db
from core.values import as_optional_number, as_text

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 250

UOM_TYPES = {
    0: "Stock",
    1: "Purchase",
    2: "Sales",
    3: "Manufacturing",
}


def interpret_type(value) -> str:
    number = as_optional_number(value)
    if number is None:
        return "Unspecified"
    code = math.trunc(number)
    return UOM_TYPES.get(code, f"Type {code}")


def _format_count(value) -> str:
    return f"{value:g}"


def build_usage(stock, purchase, bom) -> str:
    parts = []
    for label, raw in (("Stock", stock), ("Purchase", purchase), ("BOM", bom)):
        count = as_optional_number(raw)
        if count and count > 0:
            parts.append(f"{label} ({_format_count(count)})")

    if not parts:
        return "Not referenced"
    return " • ".join(parts)


def _usage_subquery(column, name):
    return (
        select(column.label("code"), func.count().label("usage"))
        .where(column.isnot(None), func.length(func.trim(column)) > 0)
        .group_by(column)
        .subquery(name)
    )


class UomService:
    def __init__(self, db: Session):
        self.db = db

    def overview(self, limit: int = DEFAULT_LIMIT) -> List[UomOverview]:
        """Units of measure with how often each is referenced"""
        if limit is None or limit <= 0:
            safe_limit = DEFAULT_LIMIT
        else:
            safe_limit = min(int(limit), MAX_LIMIT)

        logger.debug(f"Retrieving units of measure overview (limit {safe_limit})")

        stock = _usage_subquery(Part.stock_uom, "stock")
        purchase = _usage_subquery(Part.purchase_uom, "purchase")
        bom = _usage_subquery(BomLine.uom_code, "bom")

        rows = self.db.execute(
            select(
                UnitOfMeasure.code,
                UnitOfMeasure.description,
                UnitOfMeasure.uom_type,
                UnitOfMeasure.conversion_factor,
                stock.c.usage.label("stock_usage"),
                purchase.c.usage.label("purchase_usage"),
                bom.c.usage.label("bom_usage"),
            )
            .select_from(UnitOfMeasure)
            .outerjoin(stock, stock.c.code == UnitOfMeasure.code)
            .outerjoin(purchase, purchase.c.code == UnitOfMeasure.code)
            .outerjoin(bom, bom.c.code == UnitOfMeasure.code)
            .order_by(UnitOfMeasure.code.asc())
            .limit(safe_limit)
        ).all()

        return [
            UomOverview(
                code=as_text(row.code),
                description=as_text(row.description),
                type=interpret_type(row.uom_type),
                conversion_factor=as_optional_number(row.conversion_factor),
                usage=build_usage(row.stock_usage, row.purchase_usage, row.bom_usage),
            )
            for row in rows
        ]


# Dependency injection
def get_uom_service(db: Session = Depends(get_db)) -> UomService:
    return UomService(db)
