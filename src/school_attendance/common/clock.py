from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_SCHOOL_TIMEZONE


class Clock(Protocol):
    """Current wall-clock time in the school's local civil calendar.

    Returned datetimes are naive and already converted to school time, which
    is how session dates/times and scan times are stored.
    """

    def now(self) -> datetime:
        raise NotImplementedError


@dataclass(frozen=True)
class SchoolClock:
    timezone: str = DEFAULT_SCHOOL_TIMEZONE

    def now(self) -> datetime:
        return datetime.now(ZoneInfo(self.timezone)).replace(tzinfo=None)


@dataclass
class FixedClock:
    """Clock pinned to a given instant (scripts, tests)."""

    current: datetime = field(default_factory=datetime.now)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current
