# medlink/client/appointments.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from medlink.client.api import MedLinkClient
from medlink.client.errors import MedLinkError, ValidationError
from medlink.modules.appointments.lifecycle import ApptStatus, allowed_targets

logger = logging.getLogger(__name__)


def allowed_transitions(appointment: Dict[str, Any], role: str) -> List[str]:
    """Status buttons to offer `role` for this appointment."""
    return [s.value for s in allowed_targets(appointment["status"], role.lower())]


def can_review(appointment: Dict[str, Any], role: str) -> bool:
    return (
        role.lower() == "patient"
        and appointment["status"] == ApptStatus.COMPLETED.value
        and not appointment.get("review")
    )


class AppointmentBoard:
    """
    The signed-in user's appointments (patient or doctor view).

    The list is refetched after every action instead of being patched
    locally, so it always mirrors the server.
    """

    def __init__(self, client: MedLinkClient, role: str):
        self.client = client
        self.role = role.lower()
        self.items: List[Dict[str, Any]] = []

    async def reload(self) -> List[Dict[str, Any]]:
        self.items = await self.client.list_my_appointments(self.role)
        return self.items

    async def refresh(self) -> List[Dict[str, Any]]:
        """Background refresh: failures are logged and the last list is kept."""
        try:
            return await self.reload()
        except MedLinkError as e:
            logger.warning("Appointment refresh failed: %s", e)
            return self.items

    def get(self, appointment_id: str) -> Optional[Dict[str, Any]]:
        return next((a for a in self.items if a["id"] == str(appointment_id)), None)

    async def update_status(self, appointment_id: str, status: str) -> Dict[str, Any]:
        appt = self.get(appointment_id)
        if appt is not None and status not in allowed_transitions(appt, self.role):
            raise ValidationError("transition_not_available", detail=status)

        updated = await self.client.update_appointment_status(appointment_id, status)
        await self.refresh()
        return updated

    async def submit_review(
        self,
        appointment_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not 1 <= rating <= 5:
            raise ValidationError("rating_out_of_range", detail=rating)
        appt = self.get(appointment_id)
        if appt is not None and not can_review(appt, self.role):
            raise ValidationError("review_not_available")

        review = await self.client.submit_review(appointment_id, rating, comment)
        await self.refresh()
        return review
