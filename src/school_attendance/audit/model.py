from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    action: AuditAction
    new_status: str
    performed_by: str
    student_id: Optional[str] = None
    session_id: Optional[int] = None
    previous_status: Optional[str] = None
    reason: Optional[str] = None
