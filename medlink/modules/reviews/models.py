# medlink/modules/reviews/models.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from medlink.db.base import Base, UUIDPKMixin, TimestampMixin, ReprMixin


class Review(UUIDPKMixin, TimestampMixin, ReprMixin, Base):
    """
    Patient review of a completed appointment. Immutable once written.
    doctor_id / patient_id are copied from the appointment so the
    one-review-per-doctor rule can live in the schema.
    """

    __tablename__ = "reviews"

    appointment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("appointments.id", ondelete="RESTRICT"), nullable=False
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
        UniqueConstraint("appointment_id", name="uq_review_appointment"),
        UniqueConstraint("patient_id", "doctor_id", name="uq_review_patient_doctor"),
    )
