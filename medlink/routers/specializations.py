# medlink/routers/specializations.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import require_roles
from medlink.modules.log import write_audit_log
from medlink.modules.specializations import repository as repo
from medlink.modules.specializations.schemas import (
    SpecializationCreateRequest,
    SpecializationListResponse,
    SpecializationPublic,
)
from medlink.modules.users.models import User

router = APIRouter(tags=["specializations"])


@router.get("/specializations", response_model=SpecializationListResponse)
async def specializations_index(session: AsyncSession = Depends(get_session)):
    rows = await repo.list_specializations(session)
    return SpecializationListResponse(data=[SpecializationPublic.model_validate(s) for s in rows])


@router.post(
    "/specializations",
    response_model=SpecializationPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create a specialization (admin only)",
)
async def specializations_create(
    payload: SpecializationCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_roles("admin")),
):
    try:
        spec = await repo.create_specialization(session, name=payload.name)
    except repo.SpecializationExists:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="specialization_exists")
    await write_audit_log(session, current_admin.id, "CREATE_SPECIALIZATION", f"specialization={spec.id}")
    return spec


@router.delete(
    "/specializations/{specialization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a specialization (admin only)",
)
async def specializations_delete(
    specialization_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_admin: User = Depends(require_roles("admin")),
):
    try:
        await repo.delete_specialization(session, specialization_id)
    except repo.SpecializationNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="specialization_not_found")
    await write_audit_log(
        session, current_admin.id, "DELETE_SPECIALIZATION", f"specialization={specialization_id}"
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
