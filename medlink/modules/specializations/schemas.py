# medlink/modules/specializations/schemas.py
from __future__ import annotations

from typing import Annotated, List
from uuid import UUID

from pydantic import StringConstraints

from medlink.core.schemas import CamelModel

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]


class SpecializationCreateRequest(CamelModel):
    name: NameStr


class SpecializationPublic(CamelModel):
    id: UUID
    name: str


class SpecializationListResponse(CamelModel):
    data: List[SpecializationPublic]
