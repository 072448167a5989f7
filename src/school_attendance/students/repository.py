from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class RosterRepository(Protocol):
    """Read-only view over enrolled students.

    ``class_name``/``section`` restrict the result to one class+section;
    both None means the whole roster.
    """

    def list_ids(self, *, class_name: Optional[str] = None, section: Optional[str] = None) -> Sequence[str]:
        raise NotImplementedError

    def get(self, admission_number: str) -> Optional[Student]:
        raise NotImplementedError
