"""
Actor Protocol — who is asking to change stock.

The credential layer authenticates a user; an ActorResolver turns that
user into an Actor, the only shape the authorization gate understands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from stockledger.models.enums import ActorRole


@dataclass(frozen=True)
class Actor:
    """Authenticated actor as seen by the ledger."""

    id: int
    role: str
    department_id: int | None = None

    @property
    def is_manager(self) -> bool:
        return self.role == ActorRole.MANAGER


@runtime_checkable
class ActorResolver(Protocol):
    """
    Protocol for mapping an authenticated user to an Actor.

    Implementations provide the department-membership lookup used for
    staff scoping.
    """

    def resolve(self, user: Any) -> Actor:
        """
        Build the Actor for a user.

        Args:
            user: Authenticated user object from the credential layer

        Returns:
            Actor with id, role and department_id
        """
        ...
