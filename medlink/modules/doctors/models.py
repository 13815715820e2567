# medlink/modules/doctors/models.py
from __future__ import annotations

import datetime as dt
import uuid
from datetime import time
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Table,
    Text,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column

from medlink.db.base import Base, UUIDPKMixin, TimestampMixin, ReprMixin


# Which hospitals a doctor practices at
doctor_hospitals = Table(
    "doctor_hospitals",
    Base.metadata,
    Column("doctor_id", ForeignKey("doctor_profiles.user_id", ondelete="CASCADE"), primary_key=True),
    Column("hospital_id", ForeignKey("hospitals.id", ondelete="CASCADE"), primary_key=True),
)


class DoctorProfile(TimestampMixin, ReprMixin, Base):
    """
    Public profile of a user with role 'doctor'. Shares the user's id.
    rating / review_count are derived from reviews and recomputed on insert.
    """

    __tablename__ = "doctor_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    years_of_experience: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    city: Mapped[Optional[str]] = mapped_column(String(120))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    specialization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("specializations.id", ondelete="SET NULL"), nullable=True
    )

    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    review_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    __table_args__ = (
        CheckConstraint("years_of_experience >= 0", name="ck_doctor_years_positive"),
        CheckConstraint("review_count >= 0", name="ck_doctor_review_count_positive"),
        Index("ix_doctor_profiles_city", "city"),
        Index("ix_doctor_profiles_specialization_id", "specialization_id"),
    )


class DoctorAvailability(ReprMixin, Base):
    """
    One recurring weekly window. One row = one window.
    day_of_week: 0 = Sunday ... 6 = Saturday.
    """

    __tablename__ = "doctor_availability"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_avail_day_range"),
        CheckConstraint("start_time < end_time", name="ck_avail_time_order"),
        # Overlapping windows on the same day are allowed; no uniqueness here
        Index("ix_avail_doctor_day", "doctor_id", "day_of_week"),
    )


class ChangeRequestStatus(PyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DoctorChangeRequest(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    """
    Profile edit proposed by a doctor, applied only after admin approval.
    """

    __tablename__ = "doctor_change_requests"

    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    changes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ChangeRequestStatus.PENDING.value,
        server_default=ChangeRequestStatus.PENDING.value,
    )
    processed_at: Mapped[Optional[dt.datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')", name="ck_change_request_status"
        ),
        Index("ix_change_requests_status", "status"),
    )
