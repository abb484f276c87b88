"""
Back-Office Backend: Service Catalog
======================================

CRUD for the services an owner offers (name, duration, price). Same
visibility rule as clients: own rows for users, all rows (with owner email)
for admin reads, own rows only for every mutation.
"""

import logging
import uuid
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import DatabaseError
from backoffice.models.service import Service
from backoffice.schemas.service import ServiceCreate, ServiceResponse, ServiceUpdate
from backoffice.services.access import (
    Principal,
    get_readable,
    get_writable,
    owner_email_for,
    readable,
)

logger = logging.getLogger(__name__)


def to_response(service: Service, principal: Principal) -> ServiceResponse:
    response = ServiceResponse.model_validate(service)
    response.owner_email = owner_email_for(service, principal)
    return response


class CatalogService:

    async def list_services(self, db: AsyncSession, principal: Principal) -> List[ServiceResponse]:
        """Visible services ordered by name, as the booking form lists them."""
        try:
            query = readable(select(Service), Service, principal).order_by(asc(Service.name))
            result = await db.execute(query)
            services = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing services: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve services. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [to_response(service, principal) for service in services]

    async def get_service(
        self, db: AsyncSession, principal: Principal, service_id: uuid.UUID
    ) -> ServiceResponse:
        service = await get_readable(db, Service, service_id, principal, "service")
        return to_response(service, principal)

    async def create_service(
        self, db: AsyncSession, principal: Principal, data: ServiceCreate
    ) -> ServiceResponse:
        service = Service(user_id=principal.user_id, **data.model_dump())
        db.add(service)
        await db.flush()
        await db.refresh(service)
        logger.info("Service %s created by %s", service.id, principal.user_id)
        return to_response(service, principal)

    async def update_service(
        self, db: AsyncSession, principal: Principal, service_id: uuid.UUID, data: ServiceUpdate
    ) -> ServiceResponse:
        # Existing appointments keep their stored end_time when duration changes
        service = await get_writable(db, Service, service_id, principal, "service")
        for key, value in data.changes().items():
            setattr(service, key, value)
        await db.flush()
        await db.refresh(service)
        return to_response(service, principal)

    async def delete_service(
        self, db: AsyncSession, principal: Principal, service_id: uuid.UUID
    ) -> None:
        service = await get_writable(db, Service, service_id, principal, "service")
        await db.delete(service)
        await db.flush()
        logger.info("Service %s deleted by %s", service_id, principal.user_id)


catalog_service = CatalogService()
