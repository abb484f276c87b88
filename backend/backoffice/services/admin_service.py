"""
Back-Office Backend: Administration Service
=============================================

What:  Admin-only workflows: user/role listing, role changes, the audit
       log, and the irreversible cascading deletion of a user.
Who:   Called by /api/admin route handlers (behind the require_admin gate).

Cascading deletion:
    ┌───────┐  ┌─────────┐  ┌─────────┐  ┌──────────┐  ┌──────────────┐  ┌──────────┐  ┌─────────┐
    │ roles │─▶│ profile │─▶│ clients │─▶│ services │─▶│ appointments │─▶│ invoices │─▶│ account │
    └───────┘  └─────────┘  └─────────┘  └──────────┘  └──────────────┘  └──────────┘  └─────────┘
                (tolerated)

    Every step runs in the request's transaction. The profile step runs in
    a SAVEPOINT: many accounts have no profile, and a failure there is
    logged and skipped. Any other failing step raises CascadeDeletionError
    and the whole request rolls back, leaving the target untouched.

    Deleting the account row last and finding nothing to delete means the
    user is already gone; that surfaces as NotFoundError.

Audit:
    Role changes and deletions append an `admin_actions` row inside their
    own SAVEPOINT. A failed audit write is logged and never undoes the
    operation it describes.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.config import settings
from backoffice.exceptions import CascadeDeletionError, NotFoundError, ValidationError
from backoffice.models.appointment import Appointment
from backoffice.models.client import Client
from backoffice.models.invoice import Invoice
from backoffice.models.service import Service
from backoffice.models.user import (
    ACTION_ASSIGN_ROLE,
    ACTION_DELETE_USER,
    ACTION_UPDATE_ROLE,
    ROLE_USER,
    ROLES,
    AdminAction,
    User,
    UserProfile,
    UserRole,
)
from backoffice.schemas.admin import (
    AdminActionResponse,
    AdminUserResponse,
    DeleteUserResponse,
    RoleUpdateResponse,
)
from backoffice.services.access import Principal

logger = logging.getLogger(__name__)

# (step name, model) in deletion order; the account itself follows
CASCADE_STEPS = (
    ("roles", UserRole),
    ("profile", UserProfile),
    ("clients", Client),
    ("services", Service),
    ("appointments", Appointment),
    ("invoices", Invoice),
)
TOLERATED_STEPS = frozenset({"profile"})


class AdminService:

    async def list_users(self, db: AsyncSession, principal: Principal) -> List[AdminUserResponse]:
        """Every account with its effective role, newest first."""
        principal.require_admin()
        result = await db.execute(
            select(User, UserRole)
            .outerjoin(UserRole, UserRole.user_id == User.id)
            .order_by(desc(User.created_at))
        )
        return [
            AdminUserResponse(
                user_id=user.id,
                email=user.email,
                role=role.role if role is not None else ROLE_USER,
                role_id=role.id if role is not None else None,
                created_at=user.created_at,
            )
            for user, role in result.all()
        ]

    async def list_actions(self, db: AsyncSession, principal: Principal) -> List[AdminActionResponse]:
        """The most recent audit entries, newest first."""
        principal.require_admin()
        result = await db.execute(
            select(AdminAction)
            .order_by(desc(AdminAction.created_at))
            .limit(settings.admin_actions_limit)
        )
        return [AdminActionResponse.model_validate(action) for action in result.scalars().all()]

    async def _record_action(
        self,
        db: AsyncSession,
        principal: Principal,
        action_type: str,
        target_user_id: uuid.UUID,
        notes: Optional[str],
    ) -> None:
        """Appends an audit row; failures are logged, not raised."""
        try:
            async with db.begin_nested():
                db.add(AdminAction(
                    admin_id=principal.user_id,
                    action_type=action_type,
                    target_user_id=target_user_id,
                    notes=notes,
                ))
        except SQLAlchemyError as e:
            logger.error(
                "Error logging admin action %s on %s: %s",
                action_type, target_user_id, str(e), exc_info=True,
            )

    async def update_user_role(
        self,
        db: AsyncSession,
        principal: Principal,
        target_user_id: uuid.UUID,
        role: str,
        notes: Optional[str] = None,
    ) -> RoleUpdateResponse:
        """
        Sets the target's role, updating the existing grant or inserting one.

        Raises:
            AuthorizationError: caller is not an admin
            ValidationError:    role is not one of ROLES
            NotFoundError:      no such account
        """
        principal.require_admin()
        if role not in ROLES:
            raise ValidationError(message=f"Invalid role '{role}'", field="role")
        if await db.get(User, target_user_id) is None:
            raise NotFoundError(resource="user", resource_id=str(target_user_id))

        result = await db.execute(select(UserRole).where(UserRole.user_id == target_user_id))
        grant = result.scalar_one_or_none()
        if grant is not None:
            grant.role = role
            action_type = ACTION_UPDATE_ROLE
        else:
            db.add(UserRole(user_id=target_user_id, role=role))
            action_type = ACTION_ASSIGN_ROLE
        await db.flush()

        logger.info(
            "Admin %s set role of %s to %s (%s)",
            principal.user_id, target_user_id, role, action_type,
        )
        await self._record_action(db, principal, action_type, target_user_id, notes)
        return RoleUpdateResponse(
            message="User role updated successfully",
            user_id=target_user_id,
            role=role,
            action_type=action_type,
        )

    async def _delete_rows(self, db: AsyncSession, model, target_user_id: uuid.UUID) -> int:
        result = await db.execute(delete(model).where(model.user_id == target_user_id))
        return result.rowcount

    async def delete_user(
        self,
        db: AsyncSession,
        principal: Principal,
        target_user_id: uuid.UUID,
        notes: Optional[str] = None,
    ) -> DeleteUserResponse:
        """
        Permanently removes an account and everything it owns.

        Raises:
            AuthorizationError:   caller is not an admin
            ValidationError:      caller targets their own account
            CascadeDeletionError: a non-tolerated step failed (nothing persists)
            NotFoundError:        the account does not exist (or was already deleted)
        """
        principal.require_admin()
        if target_user_id == principal.user_id:
            raise ValidationError(message="Cannot delete your own account", field="userId")

        logger.info("Admin %s deleting user %s", principal.user_id, target_user_id)
        deleted: Dict[str, int] = {}

        for step, model in CASCADE_STEPS:
            table = model.__tablename__
            if step in TOLERATED_STEPS:
                try:
                    async with db.begin_nested():
                        deleted[table] = await self._delete_rows(db, model, target_user_id)
                except SQLAlchemyError as e:
                    logger.warning(
                        "Error deleting user %s for %s, continuing: %s",
                        step, target_user_id, str(e),
                    )
                    deleted[table] = 0
                    continue
            else:
                try:
                    deleted[table] = await self._delete_rows(db, model, target_user_id)
                except SQLAlchemyError as e:
                    logger.error(
                        "Error deleting user %s for %s: %s",
                        step, target_user_id, str(e), exc_info=True,
                    )
                    raise CascadeDeletionError(step=step)
            logger.info("Deleted %d %s rows for %s", deleted[table], table, target_user_id)

        try:
            result = await db.execute(delete(User).where(User.id == target_user_id))
        except SQLAlchemyError as e:
            logger.error("Error deleting user account %s: %s", target_user_id, str(e), exc_info=True)
            raise CascadeDeletionError(step="account")
        if result.rowcount == 0:
            raise NotFoundError(resource="user", resource_id=str(target_user_id))
        deleted[User.__tablename__] = result.rowcount

        await self._record_action(db, principal, ACTION_DELETE_USER, target_user_id, notes)
        logger.info("User %s deleted by admin %s", target_user_id, principal.user_id)
        return DeleteUserResponse(deleted=deleted)


admin_service = AdminService()
