"""Invoice routes (/api/invoices), including the mark-paid shortcut."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from backoffice.services.access import Principal
from backoffice.services.invoice_service import invoice_service

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])

NOT_FOUND = {404: {"description": "Invoice not found", "model": ErrorResponse}}


@router.get("", response_model=List[InvoiceResponse])
async def list_invoices(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> List[InvoiceResponse]:
    return await invoice_service.list_invoices(db, principal)


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    data: InvoiceCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> InvoiceResponse:
    return await invoice_service.create_invoice(db, principal, data)


@router.get("/{invoice_id}", response_model=InvoiceResponse, responses=NOT_FOUND)
async def get_invoice(
    invoice_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> InvoiceResponse:
    return await invoice_service.get_invoice(db, principal, invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceResponse, responses=NOT_FOUND)
async def update_invoice(
    invoice_id: UUID,
    data: InvoiceUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> InvoiceResponse:
    return await invoice_service.update_invoice(db, principal, invoice_id, data)


@router.post(
    "/{invoice_id}/mark-paid",
    response_model=InvoiceResponse,
    responses=NOT_FOUND,
    summary="Mark an invoice as paid today",
)
async def mark_invoice_paid(
    invoice_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> InvoiceResponse:
    return await invoice_service.mark_as_paid(db, principal, invoice_id)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT, responses=NOT_FOUND)
async def delete_invoice(
    invoice_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await invoice_service.delete_invoice(db, principal, invoice_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
