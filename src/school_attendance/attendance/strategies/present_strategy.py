from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...sessions.model import AttendanceSession
from .base import ScanStrategy, StatusDecision


class PresentStrategy(ScanStrategy):
    """Scan within the late grace period."""

    def decide(self, *, now: datetime, session: AttendanceSession) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
