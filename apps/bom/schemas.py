from pydantic import Field
from typing import List, Optional

from core.schemas import CamelModel


class BomLineResult(CamelModel):
    assembly: str
    assembly_description: str = ""
    component: str
    component_description: str = ""
    sequence: str = ""
    position: Optional[int] = None
    quantity_per: Optional[float] = None
    effective_date: Optional[str] = None
    obsolete_date: Optional[str] = None
    notes: str = ""
    component_location: str = ""
    available_quantity: float = Field(0.0, ge=0)


class BomListResponse(CamelModel):
    data: List[BomLineResult]


class ComponentShortage(CamelModel):
    component: str
    component_description: str = ""
    quantity_per: float
    required_quantity: float
    available_quantity: float
    shortage: float


class BuildPlan(CamelModel):
    assembly: str
    quantity: int
    assemblies_available: int
    lines: List[BomLineResult]
    shortages: List[ComponentShortage]


class BuildPlanResponse(CamelModel):
    data: BuildPlan
