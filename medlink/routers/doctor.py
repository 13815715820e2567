# medlink/routers/doctor.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import require_roles
from medlink.modules.doctors.schemas import (
    AvailabilityReplaceRequest,
    AvailabilityResponse,
    ChangeRequestCreate,
    ChangeRequestEnvelope,
    DoctorMeResponse,
)
from medlink.modules.doctors.service import (
    DoctorNotFound,
    get_my_profile,
    replace_availability_svc,
    submit_change_request,
)
from medlink.modules.users.models import User

# Endpoints acting on the signed-in doctor
router = APIRouter(tags=["doctor"])

require_doctor_role = require_roles("doctor")


@router.get(
    "/doctor/me",
    response_model=DoctorMeResponse,
    summary="Signed-in doctor's profile and weekly availability",
)
async def doctor_me(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_doctor_role),
):
    return await get_my_profile(session, current_user)


@router.put(
    "/doctor/availability",
    response_model=AvailabilityResponse,
    summary="Replace the signed-in doctor's whole weekly schedule",
)
async def doctor_replace_availability(
    payload: AvailabilityReplaceRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_doctor_role),
):
    """
    Full replace, not a merge: send every window of all seven days.
    """
    try:
        rows = await replace_availability_svc(session, current_user.id, payload, current_user)
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    return AvailabilityResponse(availability=rows)


@router.post(
    "/doctors/requests",
    response_model=ChangeRequestEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Propose profile changes for admin approval",
)
async def doctor_submit_change_request(
    payload: ChangeRequestCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_doctor_role),
):
    req = await submit_change_request(session, current_user, payload)
    return ChangeRequestEnvelope(data=req)
