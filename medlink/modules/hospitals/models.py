# medlink/modules/hospitals/models.py
from __future__ import annotations

from sqlalchemy import Float, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from medlink.db.base import Base, UUIDPKMixin, TimestampMixin, ReprMixin


class Hospital(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    __tablename__ = "hospitals"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")

    __table_args__ = (Index("ix_hospitals_city", "city"),)
