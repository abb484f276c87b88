"""
Back-Office Backend: Role-Scoped Data Access Model
====================================================

What:  The authenticated principal, its effective role set, and the query
       filters that decide which owned records a principal may read or change.
Why:   One place holds the visibility rule for clients, services,
       appointments and invoices; services never compare user ids by hand.

Effective roles:
    Computed once per request from the `user_roles` rows. An empty set
    becomes {"user"}. Authorization consults only this computed set, so
    "no role row" and "user role" behave identically everywhere.

Visibility:
    ┌──────────────┬───────────────────────────┬────────────────────────┐
    │              │ read (list / get)         │ mutate (update/delete) │
    ├──────────────┼───────────────────────────┼────────────────────────┤
    │ user         │ own rows                  │ own rows               │
    │ admin        │ all rows + owner_email    │ own rows               │
    └──────────────┴───────────────────────────┴────────────────────────┘

    The same rule applies to all four owned entity types. Rows outside the
    caller's scope are simply absent from query results, so a stale or
    foreign id surfaces as NotFoundError.
"""

import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import AuthorizationError, NotFoundError
from backoffice.models.user import ROLE_ADMIN, ROLE_USER, User, UserRole

DEFAULT_ROLES: FrozenSet[str] = frozenset({ROLE_USER})


def effective_roles(labels: Iterable[Optional[str]]) -> FrozenSet[str]:
    """Role labels held by a principal, defaulting to {"user"} when none are granted."""
    roles = frozenset(label for label in labels if label)
    return roles or DEFAULT_ROLES


@dataclass(frozen=True)
class Principal:
    """The caller of a request: account id, email, and effective roles."""

    user_id: uuid.UUID
    email: str
    roles: FrozenSet[str] = field(default=DEFAULT_ROLES)

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError(required_role=ROLE_ADMIN)


def readable(statement: Select, model, principal: Principal) -> Select:
    """Restricts a SELECT on an owned model to the rows the principal may read."""
    if principal.is_admin:
        return statement
    return statement.where(model.user_id == principal.user_id)


def writable(statement: Select, model, principal: Principal) -> Select:
    """Restricts a SELECT on an owned model to the rows the principal may change."""
    return statement.where(model.user_id == principal.user_id)


def owner_email_for(record, principal: Principal) -> Optional[str]:
    """Owner email shown next to a record in admin views; None for everyone else."""
    if not principal.is_admin:
        return None
    owner = getattr(record, "owner", None)
    return owner.email if owner is not None else None


async def get_readable(db: AsyncSession, model, record_id: uuid.UUID, principal: Principal, resource: str):
    """Loads one owned record the principal may read, or raises NotFoundError."""
    result = await db.execute(readable(select(model).where(model.id == record_id), model, principal))
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError(resource=resource, resource_id=str(record_id))
    return record


async def get_writable(db: AsyncSession, model, record_id: uuid.UUID, principal: Principal, resource: str):
    """Loads one owned record the principal may change, or raises NotFoundError."""
    result = await db.execute(writable(select(model).where(model.id == record_id), model, principal))
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError(resource=resource, resource_id=str(record_id))
    return record


async def load_principal(db: AsyncSession, user_id: uuid.UUID) -> Optional[Principal]:
    """Builds the Principal for an account id, or None if the account is gone."""
    user = await db.get(User, user_id)
    if user is None:
        return None
    result = await db.execute(select(UserRole.role).where(UserRole.user_id == user.id))
    return Principal(
        user_id=user.id,
        email=user.email,
        roles=effective_roles(result.scalars().all()),
    )
