"""
Back-Office Backend: Client Routes
====================================

GET lists and reads follow the caller's read scope (admins see every owner's
clients with `owner_email`); PATCH and DELETE work on the caller's own
clients only.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from backoffice.schemas.common import ErrorResponse
from backoffice.services.access import Principal
from backoffice.services.client_service import client_service

router = APIRouter(prefix="/api/clients", tags=["Clients"])

NOT_FOUND = {404: {"description": "Client not found", "model": ErrorResponse}}


@router.get("", response_model=List[ClientResponse], summary="List visible clients")
async def list_clients(
    response: Response,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[ClientResponse]:
    clients = await client_service.list_clients(db, principal)
    response.headers["X-Total-Count"] = str(len(clients))
    return clients


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client owned by the caller",
)
async def create_client(
    data: ClientCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ClientResponse:
    return await client_service.create_client(db, principal, data)


@router.get("/{client_id}", response_model=ClientResponse, responses=NOT_FOUND)
async def get_client(
    client_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ClientResponse:
    return await client_service.get_client(db, principal, client_id)


@router.patch("/{client_id}", response_model=ClientResponse, responses=NOT_FOUND)
async def update_client(
    client_id: UUID,
    data: ClientUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> ClientResponse:
    return await client_service.update_client(db, principal, client_id, data)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=NOT_FOUND,
    summary="Delete a client and, through the database, its appointments and invoices",
)
async def delete_client(
    client_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await client_service.delete_client(db, principal, client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
