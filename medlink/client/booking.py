# medlink/client/booking.py
"""
Patient-side booking: pick a date, pick a free slot, book.

Slot lists can arrive out of order when the user clicks through dates
quickly; a response is only applied if its date is still the selected one.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from medlink.client.api import MedLinkClient
from medlink.client.config import client_settings
from medlink.client.errors import ConflictError, MedLinkError, ValidationError

logger = logging.getLogger(__name__)


class BookingFlow:
    def __init__(
        self,
        client: MedLinkClient,
        doctor_id: str,
        hospital_id: str,
        *,
        today: Optional[date] = None,
        days_ahead: Optional[int] = None,
    ):
        self.client = client
        self.doctor_id = doctor_id
        self.hospital_id = hospital_id
        self.today = today or date.today()
        self.days_ahead = days_ahead or client_settings.BOOKING_DAYS_AHEAD

        self.selected_date: Optional[date] = None
        self.selected_slot: Optional[str] = None
        self.slots: List[str] = []

    @property
    def dates(self) -> List[date]:
        return [self.today + timedelta(days=i) for i in range(self.days_ahead)]

    async def select_date(self, day: date) -> List[str]:
        self.selected_date = day
        self.selected_slot = None
        self.slots = []

        slots = await self.client.get_available_slots(self.doctor_id, day)
        if self.selected_date != day:
            logger.debug("Discarding stale slots for %s (now showing %s)", day, self.selected_date)
            return self.slots

        self.slots = slots
        return slots

    def select_slot(self, slot: str) -> None:
        if slot not in self.slots:
            raise ValidationError("slot_not_available", detail=slot)
        self.selected_slot = slot

    def appointment_time(self) -> datetime:
        """Selected date + slot as a naive clinic-local timestamp."""
        if self.selected_date is None or self.selected_slot is None:
            raise ValidationError("no_slot_selected")
        return datetime.combine(self.selected_date, time.fromisoformat(self.selected_slot))

    async def book(self, reason: Optional[str] = None) -> Dict[str, Any]:
        when = self.appointment_time()
        try:
            appointment = await self.client.create_appointment(
                self.doctor_id, self.hospital_id, when, reason
            )
        except ConflictError:
            # Someone else got the slot; show what is still free
            logger.info("Slot %s on %s was taken, refreshing", self.selected_slot, self.selected_date)
            try:
                await self.select_date(self.selected_date)
            except MedLinkError as e:
                # The conflict is what the caller needs to see
                logger.warning("Slot refresh after conflict failed: %s", e)
            raise

        logger.info("Booked appointment %s", appointment.get("id"))
        self.selected_slot = None
        return appointment
