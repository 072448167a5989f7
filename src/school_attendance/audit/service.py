from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.actor import Actor, require_role
from ..core.enums import Role
from .model import AuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditTrail:
    """Best-effort audit writer.

    A failed audit write is logged and never fails the operation being audited.
    """

    def __init__(self, audits: Optional[AuditRepository] = None):
        self._audits = audits

    def record(self, entry: AuditEntry) -> None:
        if self._audits is None:
            return
        try:
            self._audits.add(entry)
        except Exception:
            logger.warning("Audit write failed for %s", entry, exc_info=True)

    def list_for_session(self, actor: Actor, session_id: int) -> Sequence[AuditEntry]:
        """Audit history of one session, oldest first. Admins only."""

        require_role(actor, Role.ADMIN)
        if self._audits is None:
            return []
        return list(self._audits.list_for_session(int(session_id)))
