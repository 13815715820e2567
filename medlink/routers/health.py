# medlink/routers/health.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medlink.core.config import settings
from medlink.db.sql import get_session

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_root():
    return {"status": "ok", "env": settings.APP_ENV}


@router.get("/health/db")
async def health_db(session: AsyncSession = Depends(get_session)):
    """
    Readiness probe: SELECT 1 against the configured database.
    503 when the database cannot be reached.
    """
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="database_unavailable",
        ) from exc
    return {"status": "ok", "database": session.bind.dialect.name}
