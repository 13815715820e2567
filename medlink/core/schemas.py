# medlink/core/schemas.py
from __future__ import annotations

import re
from datetime import time
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base DTO: camelCase on the wire, snake_case in Python.
    Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def parse_hhmm(value):
    """
    Accept "HH:MM" (24h) strings, or naive `time` values on whole minutes.
    Seconds and UTC offsets are rejected rather than silently dropped.
    """
    if isinstance(value, time):
        if value.tzinfo is not None or value.second or value.microsecond:
            raise ValueError("time must be HH:MM (24h)")
        return value
    if isinstance(value, str) and HHMM_RE.match(value):
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    raise ValueError("time must be HH:MM (24h)")


# Wall-clock time rendered as "HH:MM" (24h)
ClockTime = Annotated[time, PlainSerializer(format_hhmm, return_type=str)]

# Wall-clock time accepted only as "HH:MM" (24h)
ClockTimeIn = Annotated[time, BeforeValidator(parse_hhmm)]
