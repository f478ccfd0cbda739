"""Time intervals occupied by reservations on a table"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Union


@dataclass(frozen=True)
class Interval:
    """Half-open span [start, end)"""
    start: datetime
    end: datetime

    @classmethod
    def starting_at(cls, on_date: date, start_time: time, duration_minutes: int) -> "Interval":
        start = datetime.combine(on_date, start_time)
        return cls(start=start, end=start + timedelta(minutes=duration_minutes))

    def overlaps(self, other: "Interval") -> bool:
        # Touching endpoints do not overlap: 17:00-18:00 and 18:00-19:30 coexist.
        return self.start < other.end and self.end > other.start


def normalize_time(value: Union[str, time]) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time with whole seconds"""
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)

    text = value.strip()
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time: {value!r}")
