# medlink/modules/doctors/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional
from uuid import UUID

from pydantic import Field, StringConstraints, field_validator

from medlink.core.schemas import CamelModel, ClockTime, ClockTimeIn
from medlink.modules.hospitals.schemas import HospitalSummary
from medlink.modules.specializations.schemas import SpecializationPublic


class AvailabilitySlotIn(CamelModel):
    """
    One weekly window as submitted by the schedule editor.
    Any `id` sent back by the client is ignored: the set is replaced as a whole.
    """
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: ClockTimeIn = Field(..., description="HH:MM (24h)")
    end_time: ClockTimeIn = Field(..., description="HH:MM (24h)")

    @field_validator("end_time")
    @classmethod
    def _end_after_start(cls, v, info):
        start = info.data.get("start_time")
        if start is not None and v <= start:
            raise ValueError("end_time must be after start_time")
        return v


class AvailabilitySlotPublic(CamelModel):
    id: int
    day_of_week: int
    start_time: ClockTime
    end_time: ClockTime


class AvailabilityReplaceRequest(CamelModel):
    availability: List[AvailabilitySlotIn] = Field(default_factory=list, max_length=7 * 48)


class AvailabilityResponse(CamelModel):
    availability: List[AvailabilitySlotPublic]


class DoctorPublic(CamelModel):
    id: UUID
    name: str
    email: str
    years_of_experience: int
    city: Optional[str] = None
    bio: Optional[str] = None
    rating: float
    review_count: int
    specialization: Optional[SpecializationPublic] = None
    hospitals: List[HospitalSummary] = Field(default_factory=list)


class DoctorMeResponse(DoctorPublic):
    availability: List[AvailabilitySlotPublic] = Field(default_factory=list)


# --- Directory ---

class PaginationMeta(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class DoctorListResponse(CamelModel):
    data: List[DoctorPublic]
    meta: PaginationMeta


class DoctorStats(CamelModel):
    total_doctors: int
    total_cities: int
    average_rating: float


class DoctorStatsEnvelope(CamelModel):
    data: DoctorStats


class SpecializationAssign(CamelModel):
    """`null` clears the doctor's specialization."""
    specialization_id: Optional[UUID] = None


# --- Change requests ---

ShortText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]


class ProfileChanges(CamelModel):
    """Fields a doctor may propose to change. Unset fields are left untouched."""
    first_name: Optional[ShortText] = None
    last_name: Optional[ShortText] = None
    city: Optional[ShortText] = None
    bio: Optional[Annotated[str, StringConstraints(max_length=2000)]] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0, le=80)


class ChangeRequestCreate(CamelModel):
    changes: ProfileChanges


class ChangeRequestPublic(CamelModel):
    id: UUID
    doctor_id: UUID
    changes: dict[str, Any]
    status: str
    created_at: datetime
    processed_at: Optional[datetime] = None


class ChangeRequestProcess(CamelModel):
    status: Literal["APPROVED", "REJECTED"]


class ChangeRequestEnvelope(CamelModel):
    data: ChangeRequestPublic


class ChangeRequestListEnvelope(CamelModel):
    data: List[ChangeRequestPublic]
