# medlink/modules/specializations/models.py
from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from medlink.db.base import Base, UUIDPKMixin, TimestampMixin, ReprMixin


class Specialization(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    __tablename__ = "specializations"

    name: Mapped[str] = mapped_column(String(120), nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_specializations_name"),)
