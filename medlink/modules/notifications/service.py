"""
Appointment notifications.

Delivery (email/SMS) is owned by an external service; this module only
decides *what* to send and hands it to a notifier. The default notifier
logs the dispatch.
"""

import logging
from typing import Protocol

from medlink.modules.appointments.models import Appointment
from medlink.modules.users.models import User

logger = logging.getLogger(__name__)


class AppointmentNotifier(Protocol):
    async def appointment_requested(self, patient: User, appointment: Appointment) -> None: ...


class LoggingNotifier:
    """Notifier that records the confirmation in the application log."""

    async def appointment_requested(self, patient: User, appointment: Appointment) -> None:
        logger.info(
            f"📧 Appointment confirmation queued for {patient.email}: "
            f"{appointment.appointment_date} {appointment.start_time:%H:%M} "
            f"(appointment {appointment.id})"
        )


_default_notifier = LoggingNotifier()


def get_notifier() -> AppointmentNotifier:
    """FastAPI dependency; override in tests or wire a real sender here."""
    return _default_notifier
