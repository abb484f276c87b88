"""
Back-Office Backend: Admin Routes
===================================

Every route here depends on require_admin, so a non-admin caller gets 403
before any query runs. The services re-check the role as well.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import require_admin
from backoffice.schemas.admin import (
    AdminActionResponse,
    AdminUserResponse,
    DeleteUserRequest,
    DeleteUserResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
)
from backoffice.schemas.common import ErrorResponse
from backoffice.services.access import Principal
from backoffice.services.admin_service import admin_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])

FORBIDDEN = {403: {"description": "Caller is not an admin", "model": ErrorResponse}}


@router.get("/users", response_model=List[AdminUserResponse], responses=FORBIDDEN)
async def list_users(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[AdminUserResponse]:
    return await admin_service.list_users(db, principal)


@router.get("/actions", response_model=List[AdminActionResponse], responses=FORBIDDEN)
async def list_actions(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[AdminActionResponse]:
    return await admin_service.list_actions(db, principal)


@router.put(
    "/users/{user_id}/role",
    response_model=RoleUpdateResponse,
    responses={**FORBIDDEN, 404: {"description": "No such user", "model": ErrorResponse}},
    summary="Grant or change a user's role",
)
async def update_user_role(
    user_id: UUID,
    body: RoleUpdateRequest,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> RoleUpdateResponse:
    return await admin_service.update_user_role(db, principal, user_id, body.role, body.notes)


@router.post(
    "/delete-user",
    response_model=DeleteUserResponse,
    responses={
        **FORBIDDEN,
        400: {"description": "Attempt to delete own account", "model": ErrorResponse},
        404: {"description": "No such user", "model": ErrorResponse},
        500: {"description": "A deletion step failed; nothing was deleted", "model": ErrorResponse},
    },
    summary="Permanently delete a user and all data they own",
)
async def delete_user(
    body: DeleteUserRequest,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteUserResponse:
    return await admin_service.delete_user(db, principal, body.user_id, body.notes)
