"""Service catalog routes (/api/services)."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from backoffice.services.access import Principal
from backoffice.services.catalog_service import catalog_service

router = APIRouter(prefix="/api/services", tags=["Services"])

NOT_FOUND = {404: {"description": "Service not found", "model": ErrorResponse}}


@router.get("", response_model=List[ServiceResponse])
async def list_services(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[ServiceResponse]:
    return await catalog_service.list_services(db, principal)


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    return await catalog_service.create_service(db, principal, data)


@router.get("/{service_id}", response_model=ServiceResponse, responses=NOT_FOUND)
async def get_service(
    service_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    return await catalog_service.get_service(db, principal, service_id)


@router.patch("/{service_id}", response_model=ServiceResponse, responses=NOT_FOUND)
async def update_service(
    service_id: UUID,
    data: ServiceUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ServiceResponse:
    return await catalog_service.update_service(db, principal, service_id, data)


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_service(
    service_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await catalog_service.delete_service(db, principal, service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
