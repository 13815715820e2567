# medlink/routers/reviews.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.db.sql import get_session
from medlink.dependencies import get_current_user
from medlink.modules.reviews.schemas import ReviewCreateRequest, ReviewEnvelope
from medlink.modules.reviews.service import (
    ReviewAppointmentNotFound,
    ReviewConflict,
    ReviewForbidden,
    ReviewNotAllowed,
    submit_review_svc,
)
from medlink.modules.users.models import User

router = APIRouter(tags=["reviews"])


@router.post(
    "/reviews",
    response_model=ReviewEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Review a completed appointment",
    responses={
        400: {"description": "Appointment not completed"},
        409: {"description": "Doctor already reviewed by this patient"},
    },
)
async def reviews_create(
    payload: ReviewCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        review = await submit_review_svc(session, payload, current_user)
    except ReviewAppointmentNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="appointment_not_found",
        )
    except ReviewForbidden as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ReviewNotAllowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="appointment_not_completed",
        )
    except ReviewConflict:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="already_reviewed",
        )
    return ReviewEnvelope(data=review)
