"""
Back-Office Backend: Invoice Service
======================================

What:  Invoice CRUD plus the mark-as-paid shortcut.
Who:   Called by /api/invoices route handlers.

Paid date rule:
    paid_date is stamped when an invoice moves into `paid` and cleared when
    it moves to any other status. Editing other fields of a paid invoice
    keeps its original paid_date.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import DatabaseError
from backoffice.models.appointment import Appointment
from backoffice.models.client import Client
from backoffice.models.invoice import STATUS_PAID, Invoice
from backoffice.models.user import utcnow
from backoffice.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from backoffice.services.access import (
    Principal,
    get_readable,
    get_writable,
    owner_email_for,
    readable,
)

logger = logging.getLogger(__name__)


def to_response(invoice: Invoice, principal: Principal) -> InvoiceResponse:
    response = InvoiceResponse.model_validate(invoice)
    response.owner_email = owner_email_for(invoice, principal)
    return response


def apply_status(invoice: Invoice, status: str) -> None:
    """Sets the status and keeps paid_date consistent with it."""
    if status == STATUS_PAID:
        if invoice.status != STATUS_PAID or invoice.paid_date is None:
            invoice.paid_date = utcnow()
    else:
        invoice.paid_date = None
    invoice.status = status


class InvoiceService:

    async def _check_references(
        self,
        db: AsyncSession,
        principal: Principal,
        client_id: Optional[uuid.UUID],
        appointment_id: Optional[uuid.UUID],
    ) -> None:
        """Referenced client and appointment must be the caller's own."""
        if client_id is not None:
            await get_writable(db, Client, client_id, principal, "client")
        if appointment_id is not None:
            await get_writable(db, Appointment, appointment_id, principal, "appointment")

    async def list_invoices(self, db: AsyncSession, principal: Principal) -> List[InvoiceResponse]:
        """Visible invoices, newest first."""
        try:
            query = readable(select(Invoice), Invoice, principal).order_by(desc(Invoice.created_at))
            result = await db.execute(query)
            invoices = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing invoices: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve invoices. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [to_response(invoice, principal) for invoice in invoices]

    async def get_invoice(
        self, db: AsyncSession, principal: Principal, invoice_id: uuid.UUID
    ) -> InvoiceResponse:
        invoice = await get_readable(db, Invoice, invoice_id, principal, "invoice")
        return to_response(invoice, principal)

    async def create_invoice(
        self, db: AsyncSession, principal: Principal, data: InvoiceCreate
    ) -> InvoiceResponse:
        await self._check_references(db, principal, data.client_id, data.appointment_id)

        fields = data.model_dump(exclude={"status"})
        invoice = Invoice(user_id=principal.user_id, status=None, paid_date=None, **fields)
        apply_status(invoice, data.status)
        db.add(invoice)
        await db.flush()
        await db.refresh(invoice)
        logger.info(
            "Invoice %s created by %s (amount=%s, status=%s)",
            invoice.id, principal.user_id, invoice.amount, invoice.status,
        )
        return to_response(invoice, principal)

    async def update_invoice(
        self, db: AsyncSession, principal: Principal, invoice_id: uuid.UUID, data: InvoiceUpdate
    ) -> InvoiceResponse:
        invoice = await get_writable(db, Invoice, invoice_id, principal, "invoice")
        changes = data.changes()
        await self._check_references(
            db, principal, changes.get("client_id"), changes.get("appointment_id")
        )

        status = changes.pop("status", None)
        for key, value in changes.items():
            setattr(invoice, key, value)
        if status is not None:
            apply_status(invoice, status)
        await db.flush()
        await db.refresh(invoice)
        return to_response(invoice, principal)

    async def mark_as_paid(
        self, db: AsyncSession, principal: Principal, invoice_id: uuid.UUID
    ) -> InvoiceResponse:
        """Moves an invoice to `paid`; an already paid invoice keeps its paid_date."""
        invoice = await get_writable(db, Invoice, invoice_id, principal, "invoice")
        apply_status(invoice, STATUS_PAID)
        await db.flush()
        await db.refresh(invoice)
        logger.info("Invoice %s marked as paid by %s", invoice_id, principal.user_id)
        return to_response(invoice, principal)

    async def delete_invoice(
        self, db: AsyncSession, principal: Principal, invoice_id: uuid.UUID
    ) -> None:
        invoice = await get_writable(db, Invoice, invoice_id, principal, "invoice")
        await db.delete(invoice)
        await db.flush()
        logger.info("Invoice %s deleted by %s", invoice_id, principal.user_id)


invoice_service = InvoiceService()
