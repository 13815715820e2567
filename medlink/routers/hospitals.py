# medlink/routers/hospitals.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import require_roles
from medlink.modules.hospitals import repository as repo
from medlink.modules.hospitals.schemas import (
    HospitalCreateRequest,
    HospitalListResponse,
    HospitalPublic,
)
from medlink.modules.log import write_audit_log
from medlink.modules.users.models import User

router = APIRouter(tags=["hospitals"])


@router.post(
    "/hospitals",
    response_model=HospitalPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create a hospital (admin only)",
)
async def hospitals_create(
    payload: HospitalCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_roles("admin")),
):
    hospital = await repo.create_hospital(
        session, name=payload.name, city=payload.city, address=payload.address
    )
    await write_audit_log(session, current_admin.id, "CREATE_HOSPITAL", f"hospital={hospital.id}")
    return hospital


@router.get("/hospitals", response_model=HospitalListResponse)
async def hospitals_index(session: AsyncSession = Depends(get_session)):
    rows = await repo.list_hospitals(session)
    return HospitalListResponse(data=[HospitalPublic.model_validate(h) for h in rows])


@router.get("/hospitals/{hospital_id}", response_model=HospitalPublic)
async def hospitals_show(hospital_id: UUID, session: AsyncSession = Depends(get_session)):
    hospital = await repo.get_hospital(session, hospital_id)
    if hospital is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="hospital_not_found")
    return hospital
