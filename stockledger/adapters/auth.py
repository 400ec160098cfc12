"""
Django auth adapter — resolves an Actor from a user object.

Reads ``role`` and ``department_id`` from the user (custom user models or
proxies usually expose them). When ``role`` is missing, superusers are
managers and everybody else is staff.

Usage in settings.py:
    STOCKLEDGER = {
        "ACTOR_RESOLVER": "stockledger.adapters.auth.UserActorResolver",
    }
"""

from __future__ import annotations

from typing import Any

from stockledger.models.enums import ActorRole
from stockledger.protocols.actor import Actor


class UserActorResolver:
    """Attribute-based resolver for Django users."""

    role_attribute = 'role'
    department_attribute = 'department_id'

    def resolve(self, user: Any) -> Actor:
        role = getattr(user, self.role_attribute, None)
        if role not in ActorRole.values:
            role = ActorRole.MANAGER if getattr(user, 'is_superuser', False) else ActorRole.STAFF

        return Actor(
            id=user.pk,
            role=str(role),
            department_id=getattr(user, self.department_attribute, None),
        )
