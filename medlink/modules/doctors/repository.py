# medlink/modules/doctors/repository.py
from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Any, Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.doctors.models import (
    ChangeRequestStatus,
    DoctorAvailability,
    DoctorChangeRequest,
    DoctorProfile,
    doctor_hospitals,
)
from medlink.modules.hospitals.models import Hospital
from medlink.modules.specializations.models import Specialization
from medlink.modules.users.models import User, UserRole


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Profiles

async def get_profile(db: AsyncSession, *, doctor_id: UUID) -> Optional[DoctorProfile]:
    return await db.get(DoctorProfile, doctor_id)


async def create_profile(db: AsyncSession, *, doctor_id: UUID) -> DoctorProfile:
    profile = DoctorProfile(user_id=doctor_id)
    db.add(profile)
    await db.flush()
    await db.refresh(profile)
    return profile


async def set_rating(
    db: AsyncSession, *, doctor_id: UUID, rating: float, review_count: int
) -> None:
    profile = await db.get(DoctorProfile, doctor_id)
    if profile is None:
        return
    profile.rating = rating
    profile.review_count = review_count
    await db.flush()


# Directory

DOCTOR_SORT_COLUMNS = {
    "rating": (DoctorProfile.rating,),
    "experience": (DoctorProfile.years_of_experience,),
    "name": (User.last_name, User.first_name),
}


def _directory_query(
    *, city: Optional[str], specialization_id: Optional[UUID], specialization_name: Optional[str]
):
    stmt = (
        select(User, DoctorProfile)
        .join(DoctorProfile, DoctorProfile.user_id == User.id)
        .where(User.role == UserRole.DOCTOR.value, User.is_active.is_(True))
    )
    if city:
        stmt = stmt.where(func.lower(DoctorProfile.city) == city.strip().lower())
    if specialization_id is not None:
        stmt = stmt.where(DoctorProfile.specialization_id == specialization_id)
    elif specialization_name:
        stmt = stmt.join(Specialization, Specialization.id == DoctorProfile.specialization_id).where(
            func.lower(Specialization.name) == specialization_name.strip().lower()
        )
    return stmt


async def list_doctors(
    db: AsyncSession,
    *,
    city: Optional[str] = None,
    specialization_id: Optional[UUID] = None,
    specialization_name: Optional[str] = None,
    sort_by: str = "rating",
    descending: bool = True,
    offset: int = 0,
    limit: int = 20,
) -> tuple[Sequence[tuple[User, DoctorProfile]], int]:
    """
    One page of active doctors plus the total number of matches.
    `sort_by` is one of DOCTOR_SORT_COLUMNS; ties are broken by user id.
    """
    base = _directory_query(
        city=city, specialization_id=specialization_id, specialization_name=specialization_name
    )
    total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar_one()

    columns = DOCTOR_SORT_COLUMNS[sort_by]
    order = [c.desc() if descending else c.asc() for c in columns]
    rows = await db.execute(base.order_by(*order, User.id).offset(offset).limit(limit))
    return [(user, profile) for user, profile in rows.all()], total


async def doctor_stats(db: AsyncSession) -> tuple[int, int, Optional[float]]:
    """
    (doctor count, distinct cities, mean rating of doctors with at least one review).
    """
    active = (
        select(DoctorProfile)
        .join(User, User.id == DoctorProfile.user_id)
        .where(User.role == UserRole.DOCTOR.value, User.is_active.is_(True))
        .subquery()
    )
    row = (
        await db.execute(
            select(
                func.count(active.c.user_id),
                func.count(func.distinct(func.lower(active.c.city))),
            )
        )
    ).one()
    avg = (
        await db.execute(select(func.avg(active.c.rating)).where(active.c.review_count > 0))
    ).scalar_one()
    return row[0], row[1], avg


# Hospitals

async def list_hospitals_for_doctor(db: AsyncSession, *, doctor_id: UUID) -> Sequence[Hospital]:
    rows = await db.execute(
        select(Hospital)
        .join(doctor_hospitals, doctor_hospitals.c.hospital_id == Hospital.id)
        .where(doctor_hospitals.c.doctor_id == doctor_id)
        .order_by(Hospital.name)
    )
    return rows.scalars().all()


async def is_linked_to_hospital(db: AsyncSession, *, doctor_id: UUID, hospital_id: UUID) -> bool:
    exists = await db.execute(
        select(func.count())
        .select_from(doctor_hospitals)
        .where(
            doctor_hospitals.c.doctor_id == doctor_id,
            doctor_hospitals.c.hospital_id == hospital_id,
        )
    )
    return bool(exists.scalar_one())


async def link_hospital(db: AsyncSession, *, doctor_id: UUID, hospital_id: UUID) -> bool:
    """
    Link a doctor to a hospital. Returns False if the link already existed.
    """
    if await is_linked_to_hospital(db, doctor_id=doctor_id, hospital_id=hospital_id):
        return False
    await db.execute(insert(doctor_hospitals).values(doctor_id=doctor_id, hospital_id=hospital_id))
    return True


# Availability

async def list_availability(
    db: AsyncSession, *, doctor_id: UUID, day_of_week: Optional[int] = None
) -> Sequence[DoctorAvailability]:
    stmt = select(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id)
    if day_of_week is not None:
        stmt = stmt.where(DoctorAvailability.day_of_week == day_of_week)
    stmt = stmt.order_by(
        DoctorAvailability.day_of_week,
        DoctorAvailability.start_time,
        DoctorAvailability.id,
    )
    rows = await db.execute(stmt)
    return rows.scalars().all()


async def replace_availability(
    db: AsyncSession,
    *,
    doctor_id: UUID,
    windows: Iterable[tuple[int, time, time]],
) -> Sequence[DoctorAvailability]:
    """
    Delete every window of the doctor and insert the given ones.
    Runs inside the caller's transaction, so the swap is all-or-nothing.
    """
    await db.execute(delete(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id))
    for day, start, end in windows:
        db.add(
            DoctorAvailability(
                doctor_id=doctor_id,
                day_of_week=day,
                start_time=start,
                end_time=end,
            )
        )
    await db.flush()
    return await list_availability(db, doctor_id=doctor_id)


# Change requests

async def create_change_request(
    db: AsyncSession, *, doctor_id: UUID, changes: dict[str, Any]
) -> DoctorChangeRequest:
    req = DoctorChangeRequest(doctor_id=doctor_id, changes=changes)
    db.add(req)
    await db.flush()
    await db.refresh(req)
    return req


async def get_change_request(db: AsyncSession, *, request_id: UUID) -> Optional[DoctorChangeRequest]:
    return await db.get(DoctorChangeRequest, request_id)


async def list_change_requests(
    db: AsyncSession, *, status: Optional[ChangeRequestStatus] = ChangeRequestStatus.PENDING
) -> Sequence[DoctorChangeRequest]:
    stmt = select(DoctorChangeRequest)
    if status is not None:
        stmt = stmt.where(DoctorChangeRequest.status == status.value)
    rows = await db.execute(stmt.order_by(DoctorChangeRequest.created_at, DoctorChangeRequest.id))
    return rows.scalars().all()


async def mark_change_request(
    db: AsyncSession, *, request: DoctorChangeRequest, status: ChangeRequestStatus
) -> DoctorChangeRequest:
    request.status = status.value
    request.processed_at = _utcnow()
    await db.flush()
    await db.refresh(request)
    return request
