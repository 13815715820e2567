# medlink/db/sql.py
from __future__ import annotations

import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from medlink.core.config import settings
from medlink.db.base import Base

logger = logging.getLogger(__name__)


def build_engine(dsn: str, *, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine. Pool sizing only applies to server databases.
    """
    if dsn.startswith("sqlite"):
        return create_async_engine(dsn, echo=echo)
    return create_async_engine(
        dsn,
        echo=echo,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


engine = build_engine(settings.SQL_DSN, echo=settings.DB_ECHO)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_session() -> AsyncIterator[AsyncSession]:
    """
    Provide a DB session for each request.
    Commit on success, rollback (and re-raise) on any error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def import_models() -> None:
    """
    Import every model module so Base.metadata knows all tables.
    """
    from medlink.modules.users import models as _users  # noqa: F401
    from medlink.modules.hospitals import models as _hospitals  # noqa: F401
    from medlink.modules.specializations import models as _specializations  # noqa: F401
    from medlink.modules.doctors import models as _doctors  # noqa: F401
    from medlink.modules.appointments import models as _appointments  # noqa: F401
    from medlink.modules.reviews import models as _reviews  # noqa: F401


async def init_db(bind: AsyncEngine | None = None, *, drop: bool = False) -> None:
    """
    Create all tables (optionally dropping them first).
    """
    import_models()
    async with (bind or engine).begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (drop=%s)", drop)
