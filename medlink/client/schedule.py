# medlink/client/schedule.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List
from uuid import uuid4

from medlink.client.api import MedLinkClient
from medlink.client.errors import ValidationError

logger = logging.getLogger(__name__)

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

DEFAULT_START = "09:00"
DEFAULT_END = "17:00"


def _new_key() -> str:
    return uuid4().hex


@dataclass
class WindowRow:
    day_of_week: int
    start_time: str = DEFAULT_START
    end_time: str = DEFAULT_END
    key: str = field(default_factory=_new_key)


class ScheduleEditor:
    """
    Local editable copy of a doctor's weekly windows.

    Rows are addressed by a generated key, never by list position, so
    removing one row cannot shift edits onto another. `save` replaces the
    server-side set as a whole and reloads it.
    """

    def __init__(self, client: MedLinkClient):
        self.client = client
        self._rows: Dict[str, WindowRow] = {}

    @property
    def rows(self) -> List[WindowRow]:
        return list(self._rows.values())

    def for_day(self, day_of_week: int) -> List[WindowRow]:
        return [r for r in self._rows.values() if r.day_of_week == day_of_week]

    async def load(self) -> List[WindowRow]:
        windows = await self.client.get_my_availability()
        self._rows = {}
        for w in windows:
            row = WindowRow(day_of_week=w["dayOfWeek"], start_time=w["startTime"], end_time=w["endTime"])
            self._rows[row.key] = row
        return self.rows

    def add(self, day_of_week: int, start_time: str = DEFAULT_START, end_time: str = DEFAULT_END) -> str:
        if day_of_week not in range(7):
            raise ValidationError("invalid_day_of_week", detail=day_of_week)
        row = WindowRow(day_of_week=day_of_week, start_time=start_time, end_time=end_time)
        self._rows[row.key] = row
        return row.key

    def _row(self, key: str) -> WindowRow:
        try:
            return self._rows[key]
        except KeyError:
            raise ValidationError("unknown_window", detail=key)

    def update(self, key: str, *, start_time: str | None = None, end_time: str | None = None) -> WindowRow:
        row = self._row(key)
        if start_time is not None:
            row.start_time = start_time
        if end_time is not None:
            row.end_time = end_time
        return row

    def remove(self, key: str) -> None:
        self._row(key)
        del self._rows[key]

    def to_payload(self) -> List[dict]:
        payload = []
        for row in self._rows.values():
            if not row.start_time or not row.end_time:
                raise ValidationError(
                    f"{DAY_NAMES[row.day_of_week]}: start and end time are required",
                    detail=row.key,
                )
            payload.append(
                {"dayOfWeek": row.day_of_week, "startTime": row.start_time, "endTime": row.end_time}
            )
        return payload

    async def save(self) -> List[WindowRow]:
        payload = self.to_payload()
        await self.client.replace_availability(payload)
        logger.info("Saved %d availability windows", len(payload))
        return await self.load()
