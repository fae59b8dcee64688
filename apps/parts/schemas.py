from pydantic import Field, field_validator
from typing import Any, List, Optional

from apps.part_types.schemas import AttributeField
from core.schemas import CamelModel


class PartSearchFilters(CamelModel):
    part_number: str = ""
    description: str = ""
    in_stock_only: bool = False
    limit: Optional[int] = Field(None, description="Row cap; unbounded when absent")

    @property
    def has_filters(self) -> bool:
        return bool(self.part_number.strip() or self.description.strip() or self.in_stock_only)


class PartSearchResult(CamelModel):
    part_number: str
    description: str
    revision: str
    stock_uom: str
    status: str
    available_quantity: float = Field(..., ge=0)
    location: str


class PartSearchResponse(CamelModel):
    data: List[PartSearchResult]


class AttributeInput(CamelModel):
    attribute_id: int
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def value_as_text(cls, v: Any) -> str:
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return ""


class PartUpsert(CamelModel):
    part_number: str = ""
    description: Optional[str] = Field(None, max_length=255)
    revision: Optional[str] = Field(None, max_length=20)
    stock_uom: Optional[str] = Field(None, max_length=10)
    status: Optional[str] = Field(None, max_length=10)
    part_type_id: Optional[int] = None
    storage_room: Optional[str] = Field(None, max_length=20)
    storage_location: Optional[str] = Field(None, max_length=20)
    # None keeps the current attribute set; a list replaces it
    attributes: Optional[List[AttributeInput]] = None


class PartAttributeDetail(AttributeField):
    value: str = ""


class PartDetail(CamelModel):
    part_number: str
    description: str
    revision: str
    stock_uom: str
    status: str
    part_type_id: Optional[int] = None
    part_type_code: str = ""
    part_type_name: str = ""
    storage_room: str = ""
    storage_location: str = ""
    location: str = ""
    available_quantity: float = 0.0
    attributes: List[PartAttributeDetail] = []


class PartDetailResponse(CamelModel):
    data: PartDetail
