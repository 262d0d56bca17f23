"""Store registry: store metadata plus the read side of rating aggregates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy.exc import IntegrityError

from store_ratings.core.auth import Role
from store_ratings.domain.errors import Conflict, NotFound, ValidationError
from store_ratings.domain.models import Actor
from store_ratings.domain.policy import Operation, Target, ensure_allowed
from store_ratings.domain.validation import clean_address, clean_email, clean_name
from store_ratings.infrastructure.db.models import Store
from store_ratings.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = frozenset({"name", "email", "address"})
# Aggregates belong to the aggregation engine; identity fields never change
PROTECTED_FIELDS = frozenset({"id", "owner_id", "average_rating", "total_ratings"})

_CLEANERS = {
    "name": clean_name,
    "email": clean_email,
    "address": clean_address,
}


class StoreService:
    """Domain logic for the store registry."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_store(
        self,
        actor: Actor,
        *,
        name: str,
        email: str,
        address: str,
        owner_id: str,
    ) -> Store:
        ensure_allowed(actor, Operation.CREATE_STORE)

        store = Store(
            name=clean_name(name),
            email=clean_email(email),
            address=clean_address(address),
            owner_id=owner_id,
        )

        try:
            async with UnitOfWork(self.session) as uow:
                if await uow.users.get(owner_id) is None:
                    raise NotFound(f"Owner {owner_id} not found", field="owner_id")
                owner_role = await uow.roles.get(owner_id)
                if owner_role is not Role.STORE_OWNER:
                    raise ValidationError(
                        f"User {owner_id} does not hold the store_owner role", field="owner_id"
                    )
                if await uow.stores.get_by_owner(owner_id) is not None:
                    raise Conflict(f"Owner {owner_id} already has a store", field="owner_id")
                uow.stores.add(store)
        except IntegrityError as exc:
            raise Conflict(f"Owner {owner_id} already has a store", field="owner_id") from exc

        logger.info(
            "store_created",
            store_id=store.id,
            store_name=store.name,
            owner_id=owner_id,
            admin_user=actor.user_id,
        )
        return store

    async def get_store(self, actor: Actor, store_id: str) -> Store:
        ensure_allowed(actor, Operation.READ_STORE)
        async with UnitOfWork(self.session) as uow:
            store = await uow.stores.get(store_id)
        if store is None:
            raise NotFound(f"Store {store_id} not found", field="store_id")
        return store

    async def get_store_for_owner(self, actor: Actor, owner_id: str) -> Store | None:
        """Return the owner's store, or ``None`` when no store is assigned yet."""
        ensure_allowed(actor, Operation.READ_OWN_STORE, Target(owner_id=owner_id))
        async with UnitOfWork(self.session) as uow:
            return await uow.stores.get_by_owner(owner_id)

    async def list_stores(
        self,
        actor: Actor,
        *,
        name_contains: str | None = None,
        address_contains: str | None = None,
        email_contains: str | None = None,
    ) -> Sequence[Store]:
        ensure_allowed(actor, Operation.LIST_STORES)
        async with UnitOfWork(self.session) as uow:
            return await uow.stores.search(
                name=name_contains, address=address_contains, email=email_contains
            )

    async def update_store_profile(
        self, actor: Actor, store_id: str, fields: Mapping[str, Any]
    ) -> Store:
        """Update name/email/address. Aggregate and identity fields are rejected."""
        async with UnitOfWork(self.session) as uow:
            store = await uow.stores.get(store_id)
            if store is None:
                raise NotFound(f"Store {store_id} not found", field="store_id")
            ensure_allowed(actor, Operation.UPDATE_STORE, Target(owner_id=store.owner_id))

            changes = _clean_profile_fields(fields)
            for key, value in changes.items():
                setattr(store, key, value)

        logger.info(
            "store_updated",
            store_id=store_id,
            actor_id=actor.user_id,
            updated_fields=sorted(changes),
        )
        return store

    async def delete_store(self, actor: Actor, store_id: str) -> None:
        ensure_allowed(actor, Operation.DELETE_STORE)
        async with UnitOfWork(self.session) as uow:
            store = await uow.stores.get(store_id)
            if store is None:
                raise NotFound(f"Store {store_id} not found", field="store_id")
            await uow.stores.delete(store)

        logger.info("store_deleted", store_id=store_id, admin_user=actor.user_id)


def _clean_profile_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    protected = sorted(PROTECTED_FIELDS.intersection(fields))
    if protected:
        raise ValidationError(f"Field(s) not writable: {', '.join(protected)}", field=protected[0])
    unknown = sorted(set(fields) - EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}", field=unknown[0])
    if not fields:
        raise ValidationError("No fields to update")
    return {key: _CLEANERS[key](value) for key, value in fields.items()}
