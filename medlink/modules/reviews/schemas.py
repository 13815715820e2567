# medlink/modules/reviews/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field, StringConstraints

from medlink.core.schemas import CamelModel


class ReviewCreateRequest(CamelModel):
    appointment_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]] = None


class ReviewPublic(CamelModel):
    id: UUID
    appointment_id: UUID
    patient_id: UUID
    doctor_id: UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class ReviewEnvelope(CamelModel):
    data: ReviewPublic
