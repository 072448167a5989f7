from __future__ import annotations

from typing import Protocol, Sequence

from .model import AuditEntry


class AuditRepository(Protocol):
    def add(self, entry: AuditEntry) -> int:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AuditEntry]:
        raise NotImplementedError
