# medlink/routers/appointments.py
from __future__ import annotations

from datetime import date as Date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import get_current_user
from medlink.modules.appointments.lifecycle import InvalidTransition
from medlink.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentEnvelope,
    AppointmentListEnvelope,
    SlotsEnvelope,
    StatusUpdateRequest,
)
from medlink.modules.appointments.service import (
    AppointmentConflict,
    AppointmentForbidden,
    AppointmentInvalid,
    AppointmentNotFound,
    create_appointment_svc,
    get_available_slots_svc,
    list_my_appointments_svc,
    update_status_svc,
)
from medlink.modules.doctors.service import DoctorNotFound
from medlink.modules.hospitals.repository import HospitalNotFound
from medlink.modules.notifications.service import AppointmentNotifier, get_notifier
from medlink.modules.users.models import User

router = APIRouter(tags=["appointments"])


@router.get(
    "/appointments/slots",
    response_model=SlotsEnvelope,
    summary="Free HH:MM slots of a doctor on a date",
)
async def appointments_slots(
    doctor_id: UUID = Query(..., alias="doctorId"),
    day: Date = Query(..., alias="date", description="YYYY-MM-DD"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        slots = await get_available_slots_svc(session, doctor_id, day)
    except DoctorNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="doctor_not_found",
        )
    except AppointmentInvalid as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return SlotsEnvelope(data=slots)


@router.post(
    "/appointments",
    response_model=AppointmentEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment (starts PENDING)",
    responses={
        403: {"description": "Only patients can book"},
        404: {"description": "Doctor or hospital not found"},
        409: {"description": "Slot unavailable"},
    },
)
async def appointments_create(
    payload: AppointmentCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
    notifier: AppointmentNotifier = Depends(get_notifier),
):
    try:
        appt = await create_appointment_svc(session, payload, current_user, notifier)
    except AppointmentForbidden as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e) or "forbidden",
        )
    except DoctorNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="doctor_not_found")
    except HospitalNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="hospital_not_found")
    except AppointmentInvalid as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AppointmentConflict as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e) or "appointment_conflict",
        )
    return AppointmentEnvelope(data=appt)


@router.get(
    "/appointments/me",
    response_model=AppointmentListEnvelope,
    summary="Retrieve current user's appointments",
)
async def appointments_me(
    role: Optional[str] = Query(None, pattern="^(PATIENT|DOCTOR|patient|doctor)$", description="PATIENT or DOCTOR view"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        items = await list_my_appointments_svc(session, current_user, role)
    except AppointmentForbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return AppointmentListEnvelope(data=items)


@router.patch(
    "/appointments/{appointment_id}/status",
    response_model=AppointmentEnvelope,
    summary="Move an appointment along its lifecycle",
    responses={
        403: {"description": "Not owner, or role may not trigger this transition"},
        404: {"description": "Appointment not found"},
        409: {"description": "Illegal transition"},
    },
)
async def appointments_update_status(
    appointment_id: UUID,
    payload: StatusUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        appt = await update_status_svc(session, appointment_id, payload.status, current_user)
    except AppointmentNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="appointment_not_found",
        )
    except AppointmentForbidden as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e) or "forbidden",
        )
    except InvalidTransition:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="invalid_status_transition",
        )
    return AppointmentEnvelope(data=appt)
