# medlink/db/base.py
from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import MetaData, func, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Deterministic names for constraints declared without one
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDPKMixin:
    id: Mapped[uuid.UUID] = mapped_column(default=uuid.uuid4, primary_key=True)


class TimestampMixin:
    """created_at / updated_at filled in by the database."""

    created_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )


class ReprMixin:
    """
    __repr__ built from already-loaded attributes only.
    Touching an expired attribute under AsyncSession would trigger IO, so
    unloaded columns are shown as `...`.
    """

    _repr_hidden = frozenset({"password_hash"})

    def __repr__(self) -> str:
        state = inspect(self)
        parts = []
        for key in state.mapper.columns.keys():
            if key in self._repr_hidden:
                value = "***"
            elif key in state.unloaded:
                value = "..."
            else:
                value = repr(state.dict.get(key))
            parts.append(f"{key}={value}")
        return f"<{self.__class__.__name__} {' '.join(parts)}>"


__all__ = ["Base", "UUIDPKMixin", "TimestampMixin", "ReprMixin"]
