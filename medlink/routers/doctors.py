# medlink/routers/doctors.py
from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import require_roles
from medlink.modules.doctors.schemas import (
    AvailabilityReplaceRequest,
    AvailabilityResponse,
    ChangeRequestEnvelope,
    ChangeRequestListEnvelope,
    ChangeRequestProcess,
    DoctorListResponse,
    DoctorPublic,
    DoctorStatsEnvelope,
    SpecializationAssign,
)
from medlink.modules.doctors.service import (
    ChangeRequestAlreadyProcessed,
    ChangeRequestNotFound,
    DoctorNotFound,
    doctor_stats_svc,
    get_availability,
    get_doctor_public,
    link_hospital_svc,
    list_doctors_svc,
    list_pending_change_requests,
    process_change_request,
    replace_availability_svc,
    require_doctor,
    set_specialization_svc,
)
from medlink.modules.hospitals.repository import HospitalNotFound
from medlink.modules.specializations.repository import SpecializationNotFound
from medlink.modules.users.models import User

router = APIRouter(tags=["doctors"])

require_admin = require_roles("admin")


# Static paths first so "/doctors/{doctor_id}" does not capture them
@router.get(
    "/doctors",
    response_model=DoctorListResponse,
    summary="Doctor directory, filterable by city and specialization",
)
async def doctors_index(
    city: Optional[str] = Query(default=None, max_length=120),
    specialization: Optional[str] = Query(default=None, max_length=120),
    sort_by: Literal["rating", "experience", "name"] = Query(default="rating", alias="sortBy"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    return await list_doctors_svc(
        session,
        city=city,
        specialization=specialization,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )


@router.get(
    "/doctors/stats",
    response_model=DoctorStatsEnvelope,
    summary="Directory totals for the landing page",
)
async def doctors_stats(session: AsyncSession = Depends(get_session)):
    return DoctorStatsEnvelope(data=await doctor_stats_svc(session))


@router.get(
    "/doctors/requests",
    response_model=ChangeRequestListEnvelope,
    summary="Pending doctor change requests (admin only)",
)
async def doctors_list_requests(
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_admin),
):
    return ChangeRequestListEnvelope(data=await list_pending_change_requests(session))


@router.post(
    "/doctors/requests/{request_id}/process",
    response_model=ChangeRequestEnvelope,
    summary="Approve or reject a change request (admin only)",
)
async def doctors_process_request(
    request_id: UUID,
    payload: ChangeRequestProcess,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_admin),
):
    try:
        req = await process_change_request(session, request_id, payload.status, current_admin)
    except ChangeRequestNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="change_request_not_found")
    except ChangeRequestAlreadyProcessed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="change_request_already_processed",
        )
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    return ChangeRequestEnvelope(data=req)


@router.get(
    "/doctors/{doctor_id}",
    response_model=DoctorPublic,
    summary="Public doctor profile with aggregate rating",
)
async def doctors_show(
    doctor_id: UUID,
    session: AsyncSession = Depends(get_session),
):
    try:
        return await get_doctor_public(session, doctor_id)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")


@router.get(
    "/doctors/{doctor_id}/availability",
    response_model=AvailabilityResponse,
    summary="A doctor's weekly availability windows",
)
async def doctors_availability(
    doctor_id: UUID,
    session: AsyncSession = Depends(get_session),
):
    try:
        await require_doctor(session, doctor_id)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    return AvailabilityResponse(availability=await get_availability(session, doctor_id))


@router.put(
    "/doctors/{doctor_id}/availability",
    response_model=AvailabilityResponse,
    summary="Replace a doctor's weekly schedule on their behalf (admin only)",
)
async def doctors_replace_availability(
    doctor_id: UUID,
    payload: AvailabilityReplaceRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_admin),
):
    try:
        rows = await replace_availability_svc(session, doctor_id, payload, current_admin)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    return AvailabilityResponse(availability=rows)


@router.post(
    "/doctors/{doctor_id}/hospitals/{hospital_id}",
    response_model=DoctorPublic,
    summary="Attach a doctor to a hospital (admin only)",
)
async def doctors_link_hospital(
    doctor_id: UUID,
    hospital_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_admin),
):
    try:
        return await link_hospital_svc(session, doctor_id, hospital_id, current_admin)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    except HospitalNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="hospital_not_found")


@router.put(
    "/doctors/{doctor_id}/specialization",
    response_model=DoctorPublic,
    summary="Set or clear a doctor's specialization (admin only)",
)
async def doctors_set_specialization(
    doctor_id: UUID,
    payload: SpecializationAssign,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_admin),
):
    try:
        return await set_specialization_svc(
            session, doctor_id, payload.specialization_id, current_admin
        )
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    except SpecializationNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="specialization_not_found")
