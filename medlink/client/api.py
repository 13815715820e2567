# medlink/client/api.py
"""
Thin async wrapper over the MedLink HTTP API.

Every call attaches the session's bearer token and turns non-2xx answers into
the `medlink.client.errors` taxonomy. A 401 also clears the session so the
caller is sent back to sign-in.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from medlink.client.config import client_settings
from medlink.client.errors import AuthError, UnknownError, error_from_response
from medlink.client.session import FileSessionStore, Session

logger = logging.getLogger(__name__)


class MedLinkClient:
    def __init__(
        self,
        session: Session,
        *,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url or client_settings.API_BASE_URL,
            transport=transport,
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls) -> "MedLinkClient":
        """Client bound to the configured API and the on-disk session, if any."""
        session = Session.load(FileSessionStore(client_settings.SESSION_FILE))
        return cls(session, base_url=client_settings.API_BASE_URL)

    async def __aenter__(self) -> "MedLinkClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        try:
            response = await self._http.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise UnknownError(str(e) or e.__class__.__name__) from e

        if response.is_error:
            err = error_from_response(response)
            if isinstance(err, AuthError):
                self.session.clear()
            raise err
        if not response.content:
            return None
        return response.json()

    # --- auth ---

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.start(body["access_token"], body["user"])
        return body["user"]

    def logout(self) -> None:
        self.session.clear()

    # --- doctor schedule ---

    async def get_my_doctor_profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/doctor/me")

    async def get_my_availability(self) -> List[Dict[str, Any]]:
        profile = await self.get_my_doctor_profile()
        return profile.get("availability", [])

    async def replace_availability(self, windows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        body = await self._request("PUT", "/doctor/availability", json={"availability": windows})
        return body["availability"]

    # --- booking ---

    async def get_available_slots(self, doctor_id: str, day: date) -> List[str]:
        body = await self._request(
            "GET",
            "/appointments/slots",
            params={"doctorId": str(doctor_id), "date": day.isoformat()},
        )
        return body["data"]

    async def create_appointment(
        self,
        doctor_id: str,
        hospital_id: str,
        when: datetime,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {
            "doctorId": str(doctor_id),
            "hospitalId": str(hospital_id),
            "date": when.isoformat(),
        }
        if reason:
            payload["reason"] = reason
        body = await self._request("POST", "/appointments", json=payload)
        return body["data"]

    async def list_my_appointments(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"role": role.upper()} if role else None
        body = await self._request("GET", "/appointments/me", params=params)
        return body["data"]

    async def update_appointment_status(self, appointment_id: str, status: str) -> Dict[str, Any]:
        body = await self._request(
            "PATCH",
            f"/appointments/{appointment_id}/status",
            json={"status": status},
        )
        return body["data"]

    async def submit_review(
        self,
        appointment_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"appointmentId": str(appointment_id), "rating": rating}
        if comment:
            payload["comment"] = comment
        body = await self._request("POST", "/reviews", json=payload)
        return body["data"]
