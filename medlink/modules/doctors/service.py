# medlink/modules/doctors/service.py
from __future__ import annotations

import logging
import math
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.doctors import repository as repo
from medlink.modules.doctors.models import ChangeRequestStatus, DoctorProfile
from medlink.modules.doctors.schemas import (
    AvailabilityReplaceRequest,
    AvailabilitySlotPublic,
    ChangeRequestCreate,
    ChangeRequestPublic,
    DoctorListResponse,
    DoctorMeResponse,
    DoctorPublic,
    DoctorStats,
    PaginationMeta,
)
from medlink.modules.hospitals.repository import require_hospital
from medlink.modules.hospitals.schemas import HospitalSummary
from medlink.modules.log import write_audit_log
from medlink.modules.specializations import repository as specializations_repo
from medlink.modules.specializations.schemas import SpecializationPublic
from medlink.modules.users.models import User, UserRole
from medlink.modules.users.repository import get_with_role

logger = logging.getLogger(__name__)


class DoctorNotFound(Exception):
    pass


class ChangeRequestNotFound(Exception):
    pass


class ChangeRequestAlreadyProcessed(Exception):
    pass


async def require_doctor(session: AsyncSession, doctor_id: UUID) -> User:
    doctor = await get_with_role(session, doctor_id, UserRole.DOCTOR)
    if doctor is None:
        raise DoctorNotFound("doctor_not_found")
    return doctor


async def _ensure_profile(session: AsyncSession, doctor_id: UUID) -> DoctorProfile:
    profile = await repo.get_profile(session, doctor_id=doctor_id)
    if profile is None:
        profile = await repo.create_profile(session, doctor_id=doctor_id)
    return profile


async def _to_public(
    session: AsyncSession, doctor: User, profile: Optional[DoctorProfile] = None
) -> DoctorPublic:
    if profile is None:
        profile = await _ensure_profile(session, doctor.id)
    hospitals = await repo.list_hospitals_for_doctor(session, doctor_id=doctor.id)
    specialization = None
    if profile.specialization_id is not None:
        spec = await specializations_repo.get_specialization(session, profile.specialization_id)
        if spec is not None:
            specialization = SpecializationPublic.model_validate(spec)
    return DoctorPublic(
        id=doctor.id,
        name=doctor.full_name,
        email=doctor.email,
        years_of_experience=profile.years_of_experience,
        city=profile.city,
        bio=profile.bio,
        rating=profile.rating,
        review_count=profile.review_count,
        specialization=specialization,
        hospitals=[HospitalSummary.model_validate(h) for h in hospitals],
    )


async def get_doctor_public(session: AsyncSession, doctor_id: UUID) -> DoctorPublic:
    doctor = await require_doctor(session, doctor_id)
    return await _to_public(session, doctor)


async def get_availability(session: AsyncSession, doctor_id: UUID) -> List[AvailabilitySlotPublic]:
    """
    The doctor's weekly windows, ordered by day then start time.
    """
    rows = await repo.list_availability(session, doctor_id=doctor_id)
    return [AvailabilitySlotPublic.model_validate(r) for r in rows]


async def get_my_profile(session: AsyncSession, doctor: User) -> DoctorMeResponse:
    public = await _to_public(session, doctor)
    availability = await get_availability(session, doctor.id)
    return DoctorMeResponse(**public.model_dump(), availability=availability)


async def replace_availability_svc(
    session: AsyncSession,
    doctor_id: UUID,
    payload: AvailabilityReplaceRequest,
    actor: User,
) -> List[AvailabilitySlotPublic]:
    """
    Replace the doctor's whole weekly schedule with the submitted set.

    - Payload validation (day range, HH:MM, start < end) already happened at DTO level.
    - Overlapping windows are accepted; the slot generator de-duplicates them.
    - Delete + insert run in the request transaction (all-or-nothing).
    """
    await require_doctor(session, doctor_id)
    rows = await repo.replace_availability(
        session,
        doctor_id=doctor_id,
        windows=[(s.day_of_week, s.start_time, s.end_time) for s in payload.availability],
    )
    await write_audit_log(
        session,
        actor.id,
        "REPLACE_AVAILABILITY",
        f"doctor={doctor_id} windows={len(rows)}",
    )
    logger.info("Availability replaced for doctor %s (%d windows)", doctor_id, len(rows))
    return [AvailabilitySlotPublic.model_validate(r) for r in rows]


async def link_hospital_svc(
    session: AsyncSession, doctor_id: UUID, hospital_id: UUID, actor: User
) -> DoctorPublic:
    doctor = await require_doctor(session, doctor_id)
    await require_hospital(session, hospital_id)
    await _ensure_profile(session, doctor_id)
    if await repo.link_hospital(session, doctor_id=doctor_id, hospital_id=hospital_id):
        await write_audit_log(session, actor.id, "LINK_HOSPITAL", f"doctor={doctor_id} hospital={hospital_id}")
    return await _to_public(session, doctor)


async def list_doctors_svc(
    session: AsyncSession,
    *,
    city: Optional[str] = None,
    specialization: Optional[str] = None,
    sort_by: str = "rating",
    order: str = "desc",
    page: int = 1,
    limit: int = 20,
) -> DoctorListResponse:
    """
    Public doctor directory.

    `specialization` may be a specialization id or its name (case-insensitive).
    """
    specialization_id = None
    specialization_name = None
    if specialization:
        try:
            specialization_id = UUID(specialization)
        except ValueError:
            specialization_name = specialization

    rows, total = await repo.list_doctors(
        session,
        city=city,
        specialization_id=specialization_id,
        specialization_name=specialization_name,
        sort_by=sort_by,
        descending=order == "desc",
        offset=(page - 1) * limit,
        limit=limit,
    )
    data = [await _to_public(session, user, profile) for user, profile in rows]
    return DoctorListResponse(
        data=data,
        meta=PaginationMeta(
            page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)
        ),
    )


async def doctor_stats_svc(session: AsyncSession) -> DoctorStats:
    total_doctors, total_cities, average = await repo.doctor_stats(session)
    return DoctorStats(
        total_doctors=total_doctors,
        total_cities=total_cities,
        average_rating=round(average or 0.0, 2),
    )


async def set_specialization_svc(
    session: AsyncSession, doctor_id: UUID, specialization_id: Optional[UUID], actor: User
) -> DoctorPublic:
    doctor = await require_doctor(session, doctor_id)
    if specialization_id is not None:
        await specializations_repo.require_specialization(session, specialization_id)
    profile = await _ensure_profile(session, doctor_id)
    profile.specialization_id = specialization_id
    await session.flush()
    await write_audit_log(
        session,
        actor.id,
        "SET_SPECIALIZATION",
        {"doctor": doctor_id, "specialization": specialization_id},
    )
    return await _to_public(session, doctor, profile)


# CHANGE REQUESTS
async def submit_change_request(
    session: AsyncSession, doctor: User, payload: ChangeRequestCreate
) -> ChangeRequestPublic:
    changes = payload.changes.model_dump(exclude_unset=True)
    req = await repo.create_change_request(session, doctor_id=doctor.id, changes=changes)
    await write_audit_log(session, doctor.id, "SUBMIT_CHANGE_REQUEST", f"request={req.id}")
    return ChangeRequestPublic.model_validate(req)


async def list_pending_change_requests(session: AsyncSession) -> List[ChangeRequestPublic]:
    rows = await repo.list_change_requests(session)
    return [ChangeRequestPublic.model_validate(r) for r in rows]


async def process_change_request(
    session: AsyncSession, request_id: UUID, status: str, admin: User
) -> ChangeRequestPublic:
    """
    Approve or reject a pending request. Approval applies the proposed
    fields to the doctor's user row and profile.
    """
    req = await repo.get_change_request(session, request_id=request_id)
    if req is None:
        raise ChangeRequestNotFound("change_request_not_found")
    if req.status != ChangeRequestStatus.PENDING.value:
        raise ChangeRequestAlreadyProcessed("change_request_already_processed")

    target = ChangeRequestStatus(status)
    if target is ChangeRequestStatus.APPROVED:
        doctor = await require_doctor(session, req.doctor_id)
        profile = await _ensure_profile(session, req.doctor_id)
        for field, value in req.changes.items():
            if field in ("first_name", "last_name"):
                setattr(doctor, field, value)
            elif hasattr(profile, field):
                setattr(profile, field, value)
        await session.flush()

    req = await repo.mark_change_request(session, request=req, status=target)
    await write_audit_log(session, admin.id, f"CHANGE_REQUEST_{target.value}", f"request={req.id}")
    logger.info("Change request %s %s by admin %s", req.id, target.value.lower(), admin.id)
    return ChangeRequestPublic.model_validate(req)
