"""Weekly grid coordinates and schedule timelines"""

import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidParameter

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

TIME_BLOCK_PATTERN = re.compile(r"^(1[0-2]|[1-9]):[0-5]\d(am|pm)$")

SLOT_SEPARATOR = "-"


class Timeline(str, Enum):
    CURRENT = "current"
    FUTURE = "future"

    @classmethod
    def parse(cls, value, field: str = "schedule") -> "Timeline":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidParameter(field, f"must be one of current, future (got {value!r})") from None


@dataclass(frozen=True)
class TimeSlot:
    day: str
    time_block: str

    @property
    def key(self) -> str:
        return f"{self.day}{SLOT_SEPARATOR}{self.time_block}"

    def __str__(self) -> str:
        return self.key

    @classmethod
    def build(cls, day: str, time_block: str) -> "TimeSlot":
        day = (day or "").strip().title()
        if day not in DAYS:
            raise InvalidParameter("day", f"unknown day {day!r}")

        time_block = (time_block or "").strip().lower().replace(" ", "")
        if not TIME_BLOCK_PATTERN.match(time_block):
            raise InvalidParameter("time", f"expected a time like 1:00pm (got {time_block!r})")

        return cls(day=day, time_block=time_block)

    @classmethod
    def parse(cls, key: str) -> "TimeSlot":
        """Parse a joined slot key such as "Monday-1:00pm"."""
        if not key or SLOT_SEPARATOR not in key:
            raise InvalidParameter("slot", f"expected <day>-<time> (got {key!r})")
        day, time_block = key.split(SLOT_SEPARATOR, 1)
        return cls.build(day, time_block)
