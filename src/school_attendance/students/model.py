from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled student (owned by the roster, read-only here)."""

    admission_number: str
    full_name: str
    class_name: str
    section: str
