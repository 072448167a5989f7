from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...sessions.model import AttendanceSession
from .base import ScanStrategy, StatusDecision


class LateStrategy(ScanStrategy):
    """Scan after start + late grace."""

    def decide(self, *, now: datetime, session: AttendanceSession) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
