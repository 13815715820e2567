# medlink/modules/appointments/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import Field, StringConstraints

from medlink.core.schemas import CamelModel
from medlink.modules.appointments.lifecycle import ApptStatus


class AppointmentCreateRequest(CamelModel):
    """
    Payload to create an appointment.
    - patient_id is taken from the current user, never from the client.
    - date: ISO-8601 timestamp; naive values are clinic-local.
    """
    doctor_id: UUID
    hospital_id: UUID
    date: datetime
    reason: Optional[Annotated[str, StringConstraints(strip_whitespace=True, max_length=2000)]] = None


class StatusUpdateRequest(CamelModel):
    status: ApptStatus


class ReviewSummary(CamelModel):
    rating: int
    comment: Optional[str] = None


class AppointmentPublic(CamelModel):
    """
    DTO returned for one appointment. `date` is the full clinic timestamp.
    """
    id: UUID
    patient_id: UUID
    doctor_id: UUID
    hospital_id: UUID
    date: datetime
    end: datetime
    status: ApptStatus
    reason: Optional[str] = None
    review: Optional[ReviewSummary] = None
    created_at: datetime


class AppointmentEnvelope(CamelModel):
    data: AppointmentPublic


class AppointmentListEnvelope(CamelModel):
    data: List[AppointmentPublic] = Field(default_factory=list)


class SlotsEnvelope(CamelModel):
    data: List[str] = Field(default_factory=list, description="Free HH:MM start times")
