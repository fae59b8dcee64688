from typing import List, Optional

from core.schemas import CamelModel


class PartTypeSummary(CamelModel):
    id: int
    code: str
    name: str
    package_column: Optional[str] = None


class PartTypeListResponse(CamelModel):
    data: List[PartTypeSummary]


class AttributeField(CamelModel):
    """One attribute definition as a form field, with its evaluated state."""
    attribute_id: int
    code: str
    label: str
    datatype: str
    options: List[str] = []
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    unit: str = ""
    required_rule: str = ""
    required: bool = False
    visible: bool = True
    is_subtype: bool = False


class AttributeFormResponse(CamelModel):
    data: List[AttributeField]


class PackageOption(CamelModel):
    code: str
    description: str


class PackageListResponse(CamelModel):
    data: List[PackageOption]
