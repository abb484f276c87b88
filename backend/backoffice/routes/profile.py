"""Business profile routes (/api/profile): always the caller's own profile."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.profile import ProfileFields, ProfileResponse
from backoffice.services.access import Principal
from backoffice.services.profile_service import profile_service

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get(
    "",
    response_model=Optional[ProfileResponse],
    summary="The caller's profile, or null if none was saved yet",
)
async def get_profile(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[ProfileResponse]:
    return await profile_service.get_profile(db, principal)


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Profile already exists", "model": ErrorResponse}},
)
async def create_profile(
    data: ProfileFields,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.create_profile(db, principal, data)


@router.patch(
    "",
    response_model=ProfileResponse,
    responses={404: {"description": "No profile yet", "model": ErrorResponse}},
)
async def update_profile(
    data: ProfileFields,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.update_profile(db, principal, data)
