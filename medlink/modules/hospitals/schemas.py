# medlink/modules/hospitals/schemas.py
from __future__ import annotations

from typing import Annotated, List
from uuid import UUID

from pydantic import StringConstraints

from medlink.core.schemas import CamelModel

LabelStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


class HospitalCreateRequest(CamelModel):
    name: LabelStr
    city: LabelStr
    address: LabelStr


class HospitalSummary(CamelModel):
    id: UUID
    name: str
    city: str
    address: str


class HospitalPublic(HospitalSummary):
    rating: float


class HospitalListResponse(CamelModel):
    data: List[HospitalPublic]
