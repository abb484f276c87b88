"""
Back-Office Backend: Invoice Service Tests
============================================

What we test:
    ✅ paid_date is stamped exactly when an invoice is (or becomes) paid
    ✅ Leaving `paid` clears paid_date; other edits keep it
    ✅ mark_as_paid stamps the current time, and keeps an existing paid_date
    ✅ Referenced client/appointment must belong to the caller
    ✅ Scoping: users see their own invoices, admins see all
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backoffice.exceptions import NotFoundError
from backoffice.models.invoice import Invoice
from backoffice.schemas.invoice import InvoiceCreate, InvoiceUpdate
from backoffice.services.invoice_service import apply_status, invoice_service


def new_invoice(**fields) -> InvoiceCreate:
    fields.setdefault("amount", Decimal("120.00"))
    return InvoiceCreate(**fields)


def as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class TestApplyStatus:
    """The paid_date rule on a bare model instance."""

    def test_entering_paid_stamps_date(self):
        """Moving into paid should stamp paid_date."""
        invoice = Invoice(status="pending", paid_date=None)
        apply_status(invoice, "paid")
        assert invoice.status == "paid"
        assert invoice.paid_date is not None

    def test_staying_paid_keeps_original_date(self):
        """Re-applying paid should not move the original paid_date."""
        original = datetime(2026, 1, 5, tzinfo=timezone.utc)
        invoice = Invoice(status="paid", paid_date=original)
        apply_status(invoice, "paid")
        assert invoice.paid_date == original

    @pytest.mark.parametrize("status", ["pending", "cancelled", "overdue"])
    def test_leaving_paid_clears_date(self, status):
        """Any non-paid status should clear paid_date."""
        invoice = Invoice(status="paid", paid_date=datetime(2026, 1, 5, tzinfo=timezone.utc))
        apply_status(invoice, status)
        assert invoice.status == status
        assert invoice.paid_date is None


class TestCreateInvoice:
    """Tests for create_invoice."""

    @pytest.mark.asyncio
    async def test_pending_invoice_has_no_paid_date(self, db_session, user, make_client):
        """A default invoice is pending with no paid_date."""
        client = await make_client(user)

        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id, due_date=date(2026, 4, 1))
        )

        assert invoice.status == "pending"
        assert invoice.paid_date is None
        assert invoice.amount == Decimal("120.00")
        assert invoice.client.name == "Ana Client"

    @pytest.mark.asyncio
    async def test_invoice_created_as_paid_is_stamped(self, db_session, user, make_client):
        """Creating straight into paid should stamp paid_date."""
        client = await make_client(user)

        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id, status="paid")
        )

        assert invoice.paid_date is not None

    @pytest.mark.asyncio
    async def test_links_own_appointment(self, db_session, user, make_appointment, at):
        """An invoice may reference one of the caller's appointments."""
        appointment = await make_appointment(user, at(9))

        invoice = await invoice_service.create_invoice(
            db_session, user,
            new_invoice(client_id=appointment.client_id, appointment_id=appointment.id),
        )

        assert invoice.appointment_id == appointment.id

    @pytest.mark.asyncio
    async def test_foreign_client_rejected(self, db_session, user, other_user, make_client):
        """Another owner's client should look like it does not exist."""
        theirs = await make_client(other_user, "Their Client")
        with pytest.raises(NotFoundError):
            await invoice_service.create_invoice(
                db_session, user, new_invoice(client_id=theirs.id)
            )

    @pytest.mark.asyncio
    async def test_foreign_appointment_rejected(
        self, db_session, user, other_user, make_client, make_appointment, at
    ):
        """Another owner's appointment should look like it does not exist."""
        mine = await make_client(user)
        theirs = await make_appointment(other_user, at(9))
        with pytest.raises(NotFoundError):
            await invoice_service.create_invoice(
                db_session, user, new_invoice(client_id=mine.id, appointment_id=theirs.id)
            )

    def test_negative_amount_rejected(self):
        """The schema refuses negative amounts."""
        with pytest.raises(ValueError):
            InvoiceCreate(client_id="00000000-0000-0000-0000-000000000001", amount=Decimal("-1"))


class TestUpdateInvoice:
    """Tests for update_invoice."""

    @pytest.mark.asyncio
    async def test_paid_then_pending_clears_date(self, db_session, user, make_client):
        """Moving a paid invoice back to pending should clear paid_date."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id, status="paid")
        )

        updated = await invoice_service.update_invoice(
            db_session, user, invoice.id, InvoiceUpdate(status="pending")
        )

        assert updated.status == "pending"
        assert updated.paid_date is None

    @pytest.mark.asyncio
    async def test_editing_paid_invoice_keeps_paid_date(self, db_session, user, make_client):
        """Editing other fields of a paid invoice keeps its paid_date."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id, status="paid")
        )

        updated = await invoice_service.update_invoice(
            db_session, user, invoice.id, InvoiceUpdate(notes="Thanks!", amount=Decimal("99.50"))
        )

        assert updated.paid_date == invoice.paid_date
        assert updated.amount == Decimal("99.50")

    @pytest.mark.asyncio
    async def test_admin_cannot_edit_foreign_invoice(self, db_session, admin, user, make_client):
        """Admins read everything but only edit their own invoices."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id)
        )
        with pytest.raises(NotFoundError):
            await invoice_service.update_invoice(
                db_session, admin, invoice.id, InvoiceUpdate(status="cancelled")
            )


class TestMarkAsPaid:
    """Tests for the mark-as-paid shortcut."""

    @pytest.mark.asyncio
    async def test_sets_status_and_date(self, db_session, user, make_client):
        """A pending invoice becomes paid with paid_date set to now."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id)
        )
        before = datetime.now(timezone.utc) - timedelta(seconds=1)

        paid = await invoice_service.mark_as_paid(db_session, user, invoice.id)

        assert paid.status == "paid"
        assert paid.paid_date is not None
        assert as_aware(paid.paid_date) >= before

    @pytest.mark.asyncio
    async def test_already_paid_keeps_original_date(self, db_session, user, make_client):
        """Marking an already paid invoice should not move its paid_date."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id)
        )
        original = datetime(2026, 1, 5, 12, tzinfo=timezone.utc)
        row = await db_session.get(Invoice, invoice.id)
        row.status = "paid"
        row.paid_date = original
        await db_session.flush()

        paid = await invoice_service.mark_as_paid(db_session, user, invoice.id)

        assert paid.status == "paid"
        assert as_aware(paid.paid_date) == original

    @pytest.mark.asyncio
    async def test_foreign_invoice_not_found(self, db_session, user, other_user, make_client):
        """Another owner's invoice cannot be marked paid."""
        client = await make_client(other_user)
        invoice = await invoice_service.create_invoice(
            db_session, other_user, new_invoice(client_id=client.id)
        )
        with pytest.raises(NotFoundError):
            await invoice_service.mark_as_paid(db_session, user, invoice.id)


class TestListInvoices:
    """Tests for listing and deleting invoices."""

    @pytest.mark.asyncio
    async def test_scoping(self, db_session, admin, user, other_user, make_client):
        """Users see their own invoices; admins see everyone's with owner_email."""
        for owner in (user, other_user):
            client = await make_client(owner)
            await invoice_service.create_invoice(
                db_session, owner, new_invoice(client_id=client.id)
            )

        assert len(await invoice_service.list_invoices(db_session, user)) == 1
        all_invoices = await invoice_service.list_invoices(db_session, admin)
        assert {i.owner_email for i in all_invoices} == {"owner@example.com", "other@example.com"}

    @pytest.mark.asyncio
    async def test_delete(self, db_session, user, make_client):
        """A deleted invoice drops out of the listing."""
        client = await make_client(user)
        invoice = await invoice_service.create_invoice(
            db_session, user, new_invoice(client_id=client.id)
        )

        await invoice_service.delete_invoice(db_session, user, invoice.id)

        assert await invoice_service.list_invoices(db_session, user) == []
