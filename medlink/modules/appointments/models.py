# medlink/modules/appointments/models.py
from __future__ import annotations

import uuid
from datetime import date, time
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from medlink.db.base import Base, UUIDPKMixin, TimestampMixin, ReprMixin
from medlink.modules.appointments.lifecycle import ApptStatus


class Appointment(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    """
    One booked encounter. Date/time columns hold clinic-local wall clock.
    Rows are never deleted; cancelling only changes status.
    """

    __tablename__ = "appointments"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    hospital_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("hospitals.id", ondelete="RESTRICT"), nullable=False
    )

    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApptStatus.PENDING.value,
        server_default=ApptStatus.PENDING.value,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_appt_time_order"),
        CheckConstraint(
            "status IN ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED')",
            name="ck_appt_status_valid",
        ),
        # No double booking: one live appointment per doctor, day and start time.
        # Cancelled rows release the slot.
        Index(
            "uq_appt_doctor_day_start_live",
            "doctor_id", "appointment_date", "start_time",
            unique=True,
            postgresql_where=text("status <> 'CANCELLED'"),
            sqlite_where=text("status <> 'CANCELLED'"),
        ),
        Index("ix_appt_patient_date", "patient_id", "appointment_date"),
    )
