# medlink/modules/specializations/repository.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.doctors.models import DoctorProfile
from medlink.modules.specializations.models import Specialization


class SpecializationNotFound(Exception):
    """Referenced specialization does not exist."""


class SpecializationExists(Exception):
    """A specialization with that name is already registered."""


async def get_specialization(session: AsyncSession, specialization_id: UUID) -> Optional[Specialization]:
    return await session.get(Specialization, specialization_id)


async def require_specialization(session: AsyncSession, specialization_id: UUID) -> Specialization:
    spec = await session.get(Specialization, specialization_id)
    if spec is None:
        raise SpecializationNotFound("specialization_not_found")
    return spec


async def find_by_name(session: AsyncSession, name: str) -> Optional[Specialization]:
    stmt = select(Specialization).where(func.lower(Specialization.name) == name.strip().lower())
    return (await session.execute(stmt)).scalar_one_or_none()


async def create_specialization(session: AsyncSession, *, name: str) -> Specialization:
    # Names are unique case-insensitively ("Cardiology" == "cardiology")
    if await find_by_name(session, name) is not None:
        raise SpecializationExists("specialization_exists")
    spec = Specialization(name=name)
    session.add(spec)
    await session.flush()
    await session.refresh(spec)
    return spec


async def list_specializations(session: AsyncSession) -> Sequence[Specialization]:
    rows = await session.execute(select(Specialization).order_by(Specialization.name, Specialization.id))
    return rows.scalars().all()


async def delete_specialization(session: AsyncSession, specialization_id: UUID) -> None:
    spec = await require_specialization(session, specialization_id)
    # SQLite does not enforce ON DELETE SET NULL unless foreign keys are on
    await session.execute(
        update(DoctorProfile)
        .where(DoctorProfile.specialization_id == specialization_id)
        .values(specialization_id=None)
    )
    await session.delete(spec)
    await session.flush()
