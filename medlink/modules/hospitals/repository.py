# medlink/modules/hospitals/repository.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.modules.hospitals.models import Hospital


class HospitalNotFound(Exception):
    """Referenced hospital does not exist."""


async def get_hospital(session: AsyncSession, hospital_id: UUID) -> Optional[Hospital]:
    return await session.get(Hospital, hospital_id)


async def require_hospital(session: AsyncSession, hospital_id: UUID) -> Hospital:
    hospital = await session.get(Hospital, hospital_id)
    if hospital is None:
        raise HospitalNotFound("hospital_not_found")
    return hospital


async def create_hospital(
    session: AsyncSession, *, name: str, city: str, address: str
) -> Hospital:
    hospital = Hospital(name=name, city=city, address=address)
    session.add(hospital)
    await session.flush()
    await session.refresh(hospital)
    return hospital


async def list_hospitals(session: AsyncSession) -> Sequence[Hospital]:
    rows = await session.execute(select(Hospital).order_by(Hospital.name, Hospital.id))
    return rows.scalars().all()
