"""
Back-Office Backend: Client Service
=====================================

What:  CRUD for client records under the role-scoped visibility rule.
Who:   Called by /api/clients route handlers.

Admin listing:
    Admins receive every owner's clients, each annotated with the owning
    account's email. Regular users receive only their own clients.
"""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import DatabaseError
from backoffice.models.client import Client
from backoffice.schemas.client import ClientCreate, ClientResponse, ClientUpdate
from backoffice.services.access import (
    Principal,
    get_readable,
    get_writable,
    owner_email_for,
    readable,
)

logger = logging.getLogger(__name__)


def to_response(client: Client, principal: Principal) -> ClientResponse:
    response = ClientResponse.model_validate(client)
    response.owner_email = owner_email_for(client, principal)
    return response


class ClientService:
    """Stateless; receives the request's session and principal on every call."""

    async def list_clients(self, db: AsyncSession, principal: Principal) -> List[ClientResponse]:
        """Clients visible to the principal, newest first."""
        try:
            query = readable(select(Client), Client, principal).order_by(desc(Client.created_at))
            result = await db.execute(query)
            clients = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing clients: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve clients. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [to_response(client, principal) for client in clients]

    async def get_client(
        self, db: AsyncSession, principal: Principal, client_id: uuid.UUID
    ) -> ClientResponse:
        client = await get_readable(db, Client, client_id, principal, "client")
        return to_response(client, principal)

    async def create_client(
        self, db: AsyncSession, principal: Principal, data: ClientCreate
    ) -> ClientResponse:
        """New clients always belong to the caller, admins included."""
        client = Client(user_id=principal.user_id, **data.model_dump())
        db.add(client)
        await db.flush()
        await db.refresh(client)
        logger.info("Client %s created by %s", client.id, principal.user_id)
        return to_response(client, principal)

    async def update_client(
        self, db: AsyncSession, principal: Principal, client_id: uuid.UUID, data: ClientUpdate
    ) -> ClientResponse:
        client = await get_writable(db, Client, client_id, principal, "client")
        for key, value in data.changes().items():
            setattr(client, key, value)
        await db.flush()
        await db.refresh(client)
        return to_response(client, principal)

    async def delete_client(
        self, db: AsyncSession, principal: Principal, client_id: uuid.UUID
    ) -> None:
        """Removes a client; the database cascades to its appointments and invoices."""
        client = await get_writable(db, Client, client_id, principal, "client")
        await db.delete(client)
        await db.flush()
        logger.info("Client %s deleted by %s", client_id, principal.user_id)


client_service = ClientService()
