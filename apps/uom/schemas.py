from typing import List, Optional

from core.schemas import CamelModel


class UomOverview(CamelModel):
    code: str
    description: str
    type: str
    conversion_factor: Optional[float] = None
    usage: str


class UomListResponse(CamelModel):
    data: List[UomOverview]
