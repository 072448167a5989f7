from __future__ import annotations

from dataclasses import dataclass

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """The authenticated caller. Identity itself is managed elsewhere."""

    actor_id: str
    role: Role


STAFF_ROLES = (Role.ADMIN, Role.TEACHER)


def require_role(actor: Actor, *roles: Role) -> None:
    if actor.role not in roles:
        raise AuthorizationError()
