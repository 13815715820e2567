# medlink/modules/reviews/service.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.appointments.lifecycle import ApptStatus
from medlink.modules.appointments.models import Appointment
from medlink.modules.doctors import repository as doctors_repo
from medlink.modules.log import write_audit_log
from medlink.modules.reviews.models import Review
from medlink.modules.reviews.schemas import ReviewCreateRequest, ReviewPublic
from medlink.modules.users.models import User

logger = logging.getLogger(__name__)


class ReviewForbidden(Exception):
    pass


class ReviewAppointmentNotFound(Exception):
    pass


class ReviewNotAllowed(Exception):
    """Appointment is not COMPLETED."""


class ReviewConflict(Exception):
    """Patient already reviewed this doctor (or this appointment)."""


async def recompute_doctor_rating(session: AsyncSession, doctor_id: UUID) -> tuple[float, int]:
    """
    rating = mean of all the doctor's reviews, review_count = their number.
    """
    row = await session.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.doctor_id == doctor_id)
    )
    avg, count = row.one()
    rating = round(float(avg), 2) if avg is not None else 0.0
    await doctors_repo.set_rating(session, doctor_id=doctor_id, rating=rating, review_count=count)
    return rating, count


async def submit_review_svc(
    session: AsyncSession,
    payload: ReviewCreateRequest,
    current_user: User,
) -> ReviewPublic:
    """
    Attach a review to a completed appointment.

    - Only the appointment's patient may review it.
    - Appointment must be COMPLETED.
    - One review per (patient, doctor), whichever appointment it comes from.
    - Doctor aggregate rating is recomputed in the same transaction.
    """
    if current_user.role != "patient":
        raise ReviewForbidden("only_patients_can_review")

    appt = await session.get(Appointment, payload.appointment_id)
    if appt is None:
        raise ReviewAppointmentNotFound("appointment_not_found")
    if appt.patient_id != current_user.id:
        raise ReviewForbidden("not_owner")
    if appt.status != ApptStatus.COMPLETED.value:
        raise ReviewNotAllowed("appointment_not_completed")

    existing = await session.execute(
        select(Review.id).where(
            and_(Review.patient_id == current_user.id, Review.doctor_id == appt.doctor_id)
        )
    )
    if existing.first() is not None:
        raise ReviewConflict("already_reviewed")

    review = Review(
        appointment_id=appt.id,
        patient_id=current_user.id,
        doctor_id=appt.doctor_id,
        rating=payload.rating,
        comment=payload.comment or None,
    )
    session.add(review)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ReviewConflict("already_reviewed") from exc

    await session.refresh(review)
    rating, count = await recompute_doctor_rating(session, appt.doctor_id)
    await write_audit_log(session, current_user.id, "SUBMIT_REVIEW", f"appointment={appt.id} rating={review.rating}")
    logger.info("Review for doctor %s stored; rating now %.2f over %d reviews", appt.doctor_id, rating, count)
    return ReviewPublic.model_validate(review)
