# medlink/modules/appointments/service.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.core.config import settings
from medlink.modules.appointments.lifecycle import (
    ApptStatus,
    TransitionForbidden,
    check_transition,
)
from medlink.modules.appointments.models import Appointment
from medlink.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentPublic,
    ReviewSummary,
)
from medlink.modules.appointments.slots import (
    clinic_today,
    format_slots,
    from_clinic_local,
    is_bookable,
    iter_slot_times,
    slot_end,
    to_clinic_local,
    weekday_index,
)
from medlink.modules.doctors import repository as doctors_repo
from medlink.modules.doctors.service import require_doctor
from medlink.modules.hospitals.repository import require_hospital
from medlink.modules.log import write_audit_log
from medlink.modules.notifications.service import AppointmentNotifier
from medlink.modules.reviews.models import Review
from medlink.modules.users.models import User

logger = logging.getLogger(__name__)


# Custom errors, mapped to HTTP by the router
class AppointmentConflict(Exception):
    """
    Slot outside availability, or already held by a live appointment.
    """


class AppointmentNotFound(Exception):
    pass


class AppointmentForbidden(Exception):
    """
    User does not have permission to operate this appointment
    """


class AppointmentInvalid(Exception):
    """
    Request is well-formed but not acceptable (e.g. date in the past).
    """


def _to_public(appt: Appointment, review: Optional[Review] = None) -> AppointmentPublic:
    tz = settings.CLINIC_TIMEZONE
    return AppointmentPublic(
        id=appt.id,
        patient_id=appt.patient_id,
        doctor_id=appt.doctor_id,
        hospital_id=appt.hospital_id,
        date=from_clinic_local(appt.appointment_date, appt.start_time, tz),
        end=from_clinic_local(appt.appointment_date, appt.end_time, tz),
        status=ApptStatus(appt.status),
        reason=appt.reason,
        review=ReviewSummary.model_validate(review) if review else None,
        created_at=appt.created_at,
    )


async def _reviews_by_appointment(
    session: AsyncSession, appointment_ids: Iterable[UUID]
) -> Dict[UUID, Review]:
    ids = list(appointment_ids)
    if not ids:
        return {}
    rows = await session.execute(select(Review).where(Review.appointment_id.in_(ids)))
    return {r.appointment_id: r for r in rows.scalars().all()}


def _reject_past(day: date) -> None:
    if settings.REJECT_PAST_BOOKINGS and day < clinic_today(settings.CLINIC_TIMEZONE):
        raise AppointmentInvalid("date_in_past")


async def _windows_for(session: AsyncSession, doctor_id: UUID, day: date):
    rows = await doctors_repo.list_availability(
        session, doctor_id=doctor_id, day_of_week=weekday_index(day)
    )
    return [(r.start_time, r.end_time) for r in rows]


# SLOTS
async def get_available_slots_svc(
    session: AsyncSession, doctor_id: UUID, day: date
) -> List[str]:
    """
    Free "HH:MM" start times for one doctor on one date.

    - Windows for the date's weekday, stepped by SLOT_MINUTES.
    - Minus start times of non-cancelled appointments on that date.
    - No window that weekday => empty list.
    """
    await require_doctor(session, doctor_id)
    _reject_past(day)

    windows = await _windows_for(session, doctor_id, day)
    if not windows:
        return []

    booked_rows = await session.execute(
        select(Appointment.start_time).where(
            and_(
                Appointment.doctor_id == doctor_id,
                Appointment.appointment_date == day,
                Appointment.status != ApptStatus.CANCELLED.value,
            )
        )
    )
    booked = booked_rows.scalars().all()
    return format_slots(iter_slot_times(windows, settings.SLOT_MINUTES, booked))


# CREATE
async def create_appointment_svc(
    session: AsyncSession,
    payload: AppointmentCreateRequest,
    current_user: User,
    notifier: AppointmentNotifier,
) -> AppointmentPublic:
    """
    Book a slot for the current patient. New appointments start PENDING.

    Logic:
    - Only role 'patient' may create; patient_id = current_user.id
    - Doctor and hospital must exist, and the doctor must practice at that hospital.
    - The time must be a grid slot of one of the doctor's windows that weekday.
    - No other live (non-cancelled) appointment may hold the same doctor/date/time.
      The partial unique index catches a concurrent insert that passed the check.
    """
    if current_user.role != "patient":
        raise AppointmentForbidden("only_patients_can_create")

    await require_doctor(session, payload.doctor_id)
    await require_hospital(session, payload.hospital_id)
    if not await doctors_repo.is_linked_to_hospital(
        session, doctor_id=payload.doctor_id, hospital_id=payload.hospital_id
    ):
        raise AppointmentConflict("doctor_not_at_hospital")

    local = to_clinic_local(payload.date, settings.CLINIC_TIMEZONE)
    day, at = local.date(), local.time()
    _reject_past(day)

    windows = await _windows_for(session, payload.doctor_id, day)
    if not is_bookable(windows, settings.SLOT_MINUTES, at):
        logger.warning(
            "Booking outside availability: doctor=%s at %s %s", payload.doctor_id, day, at
        )
        raise AppointmentConflict("outside_availability")

    stmt_conflict = select(Appointment.id).where(
        and_(
            Appointment.doctor_id == payload.doctor_id,
            Appointment.appointment_date == day,
            Appointment.start_time == at,
            Appointment.status != ApptStatus.CANCELLED.value,
        )
    )
    if (await session.execute(stmt_conflict)).first() is not None:
        logger.warning("Slot already taken: doctor=%s at %s %s", payload.doctor_id, day, at)
        raise AppointmentConflict("slot_already_taken")

    appt = Appointment(
        patient_id=current_user.id,
        doctor_id=payload.doctor_id,
        hospital_id=payload.hospital_id,
        appointment_date=day,
        start_time=at,
        end_time=slot_end(at, settings.SLOT_MINUTES),
        status=ApptStatus.PENDING.value,
        reason=payload.reason or None,
    )

    session.add(appt)
    try:
        # Flush to force INSERT; the request transaction is rolled back on conflict
        await session.flush()
    except IntegrityError as exc:
        logger.warning("Concurrent booking lost: doctor=%s at %s %s", payload.doctor_id, day, at)
        raise AppointmentConflict("slot_already_taken") from exc

    await session.refresh(appt)
    await write_audit_log(
        session,
        current_user.id,
        "CREATE_APPOINTMENT",
        {"appointment": appt.id, "doctor": appt.doctor_id, "at": f"{day} {at:%H:%M}"},
    )
    logger.info("Appointment %s booked by patient %s", appt.id, current_user.id)

    try:
        await notifier.appointment_requested(current_user, appt)
    except Exception as e:
        # Delivery is best effort; the booking itself stands
        logger.error("Failed to send appointment confirmation for %s: %s", appt.id, e)

    return _to_public(appt)


# MY APPOINTMENTS
async def list_my_appointments_svc(
    session: AsyncSession,
    current_user: User,
    role: Optional[str] = None,
) -> List[AppointmentPublic]:
    """
    Role-scoped list, newest first.
    - patient => appointments where user is patient
    - doctor  => appointments where user is doctor (?role=DOCTOR)
    - admin   => no such view
    """
    view = (role or current_user.role).lower()
    if view != current_user.role:
        raise AppointmentForbidden("role_mismatch")

    if view == "patient":
        cond = Appointment.patient_id == current_user.id
    elif view == "doctor":
        cond = Appointment.doctor_id == current_user.id
    else:
        raise AppointmentForbidden("no_appointment_view_for_role")

    stmt = (
        select(Appointment)
        .where(cond)
        .order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc())
    )
    rows: List[Appointment] = list((await session.execute(stmt)).scalars().all())
    reviews = await _reviews_by_appointment(session, (a.id for a in rows))
    return [_to_public(a, reviews.get(a.id)) for a in rows]


# STATUS
async def update_status_svc(
    session: AsyncSession,
    appointment_id: UUID,
    target: ApptStatus,
    current_user: User,
) -> AppointmentPublic:
    """
    Move an appointment along its lifecycle.
    - patient may only act on their own appointments
    - doctor may only act on appointments where they are the doctor
    - admin acts on all
    Edge legality and role permission come from the transition table.
    """
    appt = await session.get(Appointment, appointment_id)
    if not appt:
        raise AppointmentNotFound("appointment_not_found")

    if current_user.role == "patient" and appt.patient_id != current_user.id:
        raise AppointmentForbidden("not_owner")
    if current_user.role == "doctor" and appt.doctor_id != current_user.id:
        raise AppointmentForbidden("not_owner")

    previous = appt.status
    try:
        new_status = check_transition(previous, target, current_user.role)
    except TransitionForbidden as exc:
        raise AppointmentForbidden("transition_not_allowed_for_role") from exc

    appt.status = new_status.value
    await session.flush()
    await session.refresh(appt)

    await write_audit_log(
        session,
        current_user.id,
        "UPDATE_APPOINTMENT_STATUS",
        f"appointment={appt.id} {previous}->{appt.status}",
    )
    logger.info("Appointment %s %s -> %s by %s", appt.id, previous, appt.status, current_user.role)

    reviews = await _reviews_by_appointment(session, [appt.id])
    return _to_public(appt, reviews.get(appt.id))
