"""Role based authorization policy.

``allow`` is a pure decision function: it looks only at its arguments and
denies anything not listed in ``_RULES``. Services call ``ensure_allowed``
before every mutation and every read of per-user data.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from store_ratings.core.auth import Role
from store_ratings.domain.errors import Forbidden
from store_ratings.domain.models import Actor

logger = structlog.get_logger(__name__)


class Operation(str, enum.Enum):
    ASSIGN_ROLE = "assign_role"
    READ_OWN_ROLE = "read_own_role"
    CREATE_STORE = "create_store"
    DELETE_STORE = "delete_store"
    UPDATE_STORE = "update_store"
    READ_STORE = "read_store"
    LIST_STORES = "list_stores"
    READ_OWN_STORE = "read_own_store"
    LIST_STORE_RATINGS = "list_store_ratings"
    SUBMIT_RATING = "submit_rating"
    READ_OWN_RATINGS = "read_own_ratings"
    DELETE_RATING = "delete_rating"
    MANAGE_USERS = "manage_users"
    READ_USER = "read_user"
    READ_STATS = "read_stats"


@dataclass(slots=True, frozen=True)
class Target:
    """What an operation acts on.

    ``owner_id`` is the user that owns the resource: the store owner for store
    operations, the rater for rating operations, the subject for user reads.
    """

    owner_id: str | None = None


Rule = Callable[[Role, str, Target], bool]


def _admin_only(role: Role, actor_id: str, target: Target) -> bool:
    return role is Role.SYSTEM_ADMINISTRATOR


def _any_role(role: Role, actor_id: str, target: Target) -> bool:
    return True


def _owner_or_admin(role: Role, actor_id: str, target: Target) -> bool:
    if role is Role.SYSTEM_ADMINISTRATOR:
        return True
    return target.owner_id is not None and target.owner_id == actor_id


def _store_owner_or_admin(role: Role, actor_id: str, target: Target) -> bool:
    if role is Role.SYSTEM_ADMINISTRATOR:
        return True
    return role is Role.STORE_OWNER and target.owner_id == actor_id


def _own_rating(role: Role, actor_id: str, target: Target) -> bool:
    return role is Role.NORMAL_USER and target.owner_id == actor_id


_RULES: dict[Operation, Rule] = {
    Operation.ASSIGN_ROLE: _admin_only,
    Operation.READ_OWN_ROLE: _owner_or_admin,
    Operation.CREATE_STORE: _admin_only,
    Operation.DELETE_STORE: _admin_only,
    Operation.UPDATE_STORE: _store_owner_or_admin,
    Operation.READ_STORE: _any_role,
    Operation.LIST_STORES: _any_role,
    Operation.READ_OWN_STORE: _store_owner_or_admin,
    Operation.LIST_STORE_RATINGS: _store_owner_or_admin,
    Operation.SUBMIT_RATING: _own_rating,
    Operation.READ_OWN_RATINGS: _owner_or_admin,
    Operation.DELETE_RATING: _admin_only,
    Operation.MANAGE_USERS: _admin_only,
    Operation.READ_USER: _owner_or_admin,
    Operation.READ_STATS: _admin_only,
}


def allow(
    actor_role: Role | str | None,
    actor_id: str | None,
    operation: Operation,
    target: Target | None = None,
) -> bool:
    """Return True when ``actor_role``/``actor_id`` may perform ``operation`` on ``target``."""
    if not actor_id or actor_role is None:
        return False
    try:
        role = Role(actor_role)
    except ValueError:
        return False

    rule = _RULES.get(operation)
    if rule is None:
        return False
    return rule(role, actor_id, target or Target())


def ensure_allowed(actor: Actor, operation: Operation, target: Target | None = None) -> None:
    """Raise ``Forbidden`` unless the policy allows the call."""
    if allow(actor.role, actor.user_id, operation, target):
        return

    logger.warning(
        "authorization_denied",
        actor_id=actor.user_id,
        actor_role=actor.role.value if actor.role else None,
        operation=operation.value,
        target_owner_id=target.owner_id if target else None,
    )
    role = actor.role.value if actor.role else "none"
    raise Forbidden(f"Role '{role}' may not {operation.value}")
