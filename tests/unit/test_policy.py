"""Decision table for the authorization policy."""

from __future__ import annotations

import pytest

from store_ratings.core.auth import Role
from store_ratings.domain import Actor
from store_ratings.domain.errors import Forbidden
from store_ratings.domain.policy import _RULES, Operation, Target, allow, ensure_allowed

ADMIN = Role.SYSTEM_ADMINISTRATOR
OWNER = Role.STORE_OWNER
USER = Role.NORMAL_USER

ADMIN_ONLY = [
    Operation.ASSIGN_ROLE,
    Operation.CREATE_STORE,
    Operation.DELETE_STORE,
    Operation.DELETE_RATING,
    Operation.MANAGE_USERS,
    Operation.READ_STATS,
]


def test_every_operation_has_a_rule() -> None:
    assert set(_RULES) == set(Operation)


@pytest.mark.parametrize("operation", ADMIN_ONLY)
def test_admin_only_operations(operation: Operation) -> None:
    assert allow(ADMIN, "admin-1", operation)
    assert not allow(OWNER, "owner-1", operation)
    assert not allow(USER, "user-1", operation)


@pytest.mark.parametrize("role", [ADMIN, OWNER, USER])
def test_any_role_may_browse_stores(role: Role) -> None:
    assert allow(role, "someone", Operation.LIST_STORES)
    assert allow(role, "someone", Operation.READ_STORE)


@pytest.mark.parametrize(
    ("role", "actor_id", "owner_id", "expected"),
    [
        (ADMIN, "admin-1", "owner-1", True),
        (OWNER, "owner-1", "owner-1", True),
        (OWNER, "owner-2", "owner-1", False),
        (USER, "owner-1", "owner-1", False),
    ],
)
def test_update_store_requires_owning_store_owner(
    role: Role, actor_id: str, owner_id: str, expected: bool
) -> None:
    target = Target(owner_id=owner_id)

    assert allow(role, actor_id, Operation.UPDATE_STORE, target) is expected
    assert allow(role, actor_id, Operation.LIST_STORE_RATINGS, target) is expected


@pytest.mark.parametrize(
    ("role", "actor_id", "owner_id", "expected"),
    [
        (USER, "user-1", "user-1", True),
        (USER, "user-1", "user-2", False),
        (OWNER, "owner-1", "owner-1", False),
        (ADMIN, "admin-1", "admin-1", False),
    ],
)
def test_only_normal_users_submit_their_own_rating(
    role: Role, actor_id: str, owner_id: str, expected: bool
) -> None:
    assert allow(role, actor_id, Operation.SUBMIT_RATING, Target(owner_id=owner_id)) is expected


def test_own_store_lookup_requires_store_owner_role() -> None:
    assert allow(OWNER, "owner-1", Operation.READ_OWN_STORE, Target(owner_id="owner-1"))
    assert allow(ADMIN, "admin-1", Operation.READ_OWN_STORE, Target(owner_id="owner-1"))
    assert not allow(USER, "user-1", Operation.READ_OWN_STORE, Target(owner_id="user-1"))
    assert not allow(OWNER, "owner-2", Operation.READ_OWN_STORE, Target(owner_id="owner-1"))


def test_reading_own_data_is_allowed_reading_others_is_not() -> None:
    own = Target(owner_id="user-1")
    other = Target(owner_id="user-2")

    assert allow(USER, "user-1", Operation.READ_OWN_RATINGS, own)
    assert not allow(USER, "user-1", Operation.READ_OWN_RATINGS, other)
    assert allow(ADMIN, "admin-1", Operation.READ_OWN_RATINGS, other)
    assert not allow(USER, "user-1", Operation.READ_OWN_ROLE)


@pytest.mark.parametrize(
    ("role", "actor_id"),
    [(None, "user-1"), (ADMIN, ""), (ADMIN, None), ("superuser", "user-1")],
)
def test_missing_or_unknown_identity_is_denied(role: object, actor_id: str | None) -> None:
    assert not allow(role, actor_id, Operation.LIST_STORES)  # type: ignore[arg-type]


def test_role_may_be_given_as_its_string_value() -> None:
    assert allow("system_administrator", "admin-1", Operation.CREATE_STORE)


def test_ensure_allowed_raises_forbidden() -> None:
    actor = Actor(user_id="user-1", role=USER)

    with pytest.raises(Forbidden) as excinfo:
        ensure_allowed(actor, Operation.CREATE_STORE)

    assert excinfo.value.to_dict()["code"] == "forbidden"
    assert "create_store" in excinfo.value.message


def test_ensure_allowed_passes_silently_when_allowed() -> None:
    ensure_allowed(Actor(user_id="admin-1", role=ADMIN), Operation.CREATE_STORE)
