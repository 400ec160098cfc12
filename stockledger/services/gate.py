"""
Authorization gate — who may change a product's stock.

The single place where department scoping lives, for writes and for
scoped reads. Pure: no queries, no side effects. Called before any
transaction opens.
"""

from stockledger.exceptions import AuthorizationError
from stockledger.protocols.actor import Actor


class AuthorizationGate:
    """Role and department capability check."""

    @staticmethod
    def can_modify(actor: Actor, product) -> bool:
        """
        Whether actor may change product's stock.

        - Managers may modify any product.
        - Staff may modify products of their own department only.
        - Products without a department are manager-only.
        """
        if actor.is_manager:
            return True
        if product.department_id is None:
            return False
        return product.department_id == actor.department_id

    @classmethod
    def check(cls, actor: Actor, product) -> None:
        """
        Raise unless actor may modify product.

        Raises:
            AuthorizationError('MANAGER_REQUIRED'): Product has no department
            AuthorizationError('DEPARTMENT_MISMATCH'): Staff outside the department
        """
        if cls.can_modify(actor, product):
            return

        code = 'MANAGER_REQUIRED' if product.department_id is None else 'DEPARTMENT_MISMATCH'
        raise AuthorizationError(
            code,
            product_id=product.pk,
            actor_id=actor.id,
            department_id=product.department_id,
        )

    @staticmethod
    def visible_department(actor: Actor | None, department_id=None):
        """
        Department a read is scoped to.

        Staff always see their own department. Managers (and internal
        callers passing no actor) see the requested department, or all
        departments when department_id is None.

        Raises:
            AuthorizationError('DEPARTMENT_REQUIRED'): Staff without a department
        """
        if actor is None or actor.is_manager:
            return department_id
        if actor.department_id is None:
            raise AuthorizationError('DEPARTMENT_REQUIRED', actor_id=actor.id)
        return actor.department_id
