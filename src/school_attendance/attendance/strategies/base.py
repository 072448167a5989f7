from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus
from ...sessions.model import AttendanceSession


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus


class ScanStrategy(ABC):
    """Strategy Pattern: encapsulate how an accepted scan is labelled."""

    @abstractmethod
    def decide(self, *, now: datetime, session: AttendanceSession) -> StatusDecision:
        raise NotImplementedError
