from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import LATE_GRACE_MINUTES
from ..sessions.model import AttendanceSession
from .strategies.base import ScanStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class ScanStrategyFactory:
    """Factory Pattern: choose the strategy for a scan based on timing rules."""

    late_grace_minutes: int = LATE_GRACE_MINUTES

    def late_threshold(self, session: AttendanceSession) -> datetime:
        return session.starts_at + timedelta(minutes=self.late_grace_minutes)

    def for_scan(self, *, now: datetime, session: AttendanceSession) -> ScanStrategy:
        # Inclusive: a scan exactly at the threshold is still present.
        if now > self.late_threshold(session):
            return LateStrategy()
        return PresentStrategy()
