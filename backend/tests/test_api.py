"""
Back-Office Backend: HTTP API Tests
=====================================

What:  End-to-end requests through the FastAPI app (middleware, dependencies,
       exception handlers) against the in-memory test database.

What we test:
    ✅ Register / login (JSON and form) / me
    ✅ Error envelope: error, message, request_id; WWW-Authenticate on 401
    ✅ Admin routes answer 403 to regular users
    ✅ Booking flow: 201, overlap → 409 with conflicting ids, availability
    ✅ Invoice mark-paid
    ✅ Admin cascade deletion via `userId`, and the deleted token stops working
    ✅ A failed cascade step rolls the whole deletion back
    ✅ Health check, request id header, CORS preflight headers
"""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from backoffice.models import Client, Service, User, UserRole
from backoffice.services.admin_service import AdminService

# Password the register fixture signs up with
TEST_PASSWORD = "correct-horse-battery"


async def seed_booking_refs(test_client, headers) -> dict:
    """Creates a client and a 60-minute service for the caller; returns their ids."""
    client = await test_client.post(
        "/api/clients",
        json={"name": "Ana Client", "email": "ana@example.com", "phone": "+381 11 123 456"},
        headers=headers,
    )
    assert client.status_code == 201, client.text
    service = await test_client.post(
        "/api/services",
        json={"name": "Haircut", "duration": 60, "price": "25.00"},
        headers=headers,
    )
    assert service.status_code == 201, service.text
    return {"client_id": client.json()["id"], "service_id": service.json()["id"]}


class TestAuthEndpoints:
    """Tests for /api/auth."""

    @pytest.mark.asyncio
    async def test_register_returns_token(self, register):
        """Registration returns a bearer token for a non-admin account."""
        body = await register("new@example.com")
        assert body["token_type"] == "bearer"
        assert body["email"] == "new@example.com"
        assert body["is_admin"] is False

    @pytest.mark.asyncio
    async def test_duplicate_registration_is_400(self, test_client, register):
        """A taken email (any case) is a 400 envelope naming the email field."""
        await register("dup@example.com")

        response = await test_client.post(
            "/api/auth/register", json={"email": "DUP@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["field"] == "email"
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_login_with_json(self, test_client, register):
        """Login accepts a JSON body."""
        await register("json@example.com")

        response = await test_client.post(
            "/api/auth/login", json={"email": "json@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    @pytest.mark.asyncio
    async def test_login_with_oauth2_form(self, test_client, register):
        """Login accepts the OAuth2 password form."""
        await register("form@example.com")

        response = await test_client.post(
            "/api/auth/login", data={"username": "form@example.com", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_bad_password_is_401_with_challenge(self, test_client, register):
        """A wrong password is a 401 carrying the Bearer challenge."""
        await register("who@example.com")

        response = await test_client.post(
            "/api/auth/login", json={"email": "who@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["error"] == "authentication_error"

    @pytest.mark.asyncio
    async def test_login_without_body_is_400(self, test_client):
        """An unreadable login body is a 400."""
        response = await test_client.post(
            "/api/auth/login", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_me(self, test_client, register):
        """/me describes the caller with the implicit user role."""
        account = await register("me@example.com")

        response = await test_client.get("/api/auth/me", headers=account["headers"])

        assert response.status_code == 200
        assert response.json() == {
            "id": account["user_id"],
            "email": "me@example.com",
            "roles": ["user"],
            "is_admin": False,
        }

    @pytest.mark.asyncio
    async def test_me_without_token(self, test_client):
        """A missing Authorization header is a 401."""
        response = await test_client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["message"] == "Missing authorization header"

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, test_client):
        """A token that is not a JWT is a 401."""
        response = await test_client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401


class TestOwnedRecordEndpoints:
    """Scoped CRUD over HTTP."""

    @pytest.mark.asyncio
    async def test_client_listing_sets_total_count(self, test_client, register):
        """Listings report their size in X-Total-Count."""
        account = await register("owner@example.com")
        await seed_booking_refs(test_client, account["headers"])

        response = await test_client.get("/api/clients", headers=account["headers"])

        assert response.status_code == 200
        assert response.headers["x-total-count"] == "1"

    @pytest.mark.asyncio
    async def test_foreign_client_is_404(self, test_client, register):
        """Another owner's client is a 404, not a 403."""
        owner = await register("owner@example.com")
        stranger = await register("stranger@example.com")
        refs = await seed_booking_refs(test_client, owner["headers"])

        response = await test_client.get(
            f"/api/clients/{refs['client_id']}", headers=stranger["headers"]
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_returns_204(self, test_client, register):
        """Deleting an owned record answers 204."""
        account = await register("owner@example.com")
        refs = await seed_booking_refs(test_client, account["headers"])

        response = await test_client.delete(
            f"/api/services/{refs['service_id']}", headers=account["headers"]
        )

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_admin_list_carries_owner_email(self, test_client, register, grant_role):
        """Admin listings tag each row with its owner's email."""
        owner = await register("owner@example.com")
        boss = await register("boss@example.com")
        await grant_role(boss["user_id"])
        await seed_booking_refs(test_client, owner["headers"])

        response = await test_client.get("/api/clients", headers=boss["headers"])

        assert [c["owner_email"] for c in response.json()] == ["owner@example.com"]


class TestBookingFlow:
    """Appointments and invoices over HTTP."""

    @pytest.mark.asyncio
    async def test_book_conflict_and_back_to_back(self, test_client, register):
        """Overlaps are 409 with the clashing ids; touching slots book fine."""
        account = await register("owner@example.com")
        refs = await seed_booking_refs(test_client, account["headers"])

        first = await test_client.post(
            "/api/appointments",
            json={**refs, "start_time": "2026-03-02T09:00:00Z", "end_time": "2026-03-02T10:00:00Z"},
            headers=account["headers"],
        )
        assert first.status_code == 201, first.text

        clash = await test_client.post(
            "/api/appointments",
            json={**refs, "start_time": "2026-03-02T09:30:00Z", "end_time": "2026-03-02T10:30:00Z"},
            headers=account["headers"],
        )
        assert clash.status_code == 409
        assert clash.json()["error"] == "conflict"
        assert clash.json()["details"]["conflicting_ids"] == [first.json()["id"]]

        touching = await test_client.post(
            "/api/appointments",
            json={**refs, "start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T11:00:00Z"},
            headers=account["headers"],
        )
        assert touching.status_code == 201

    @pytest.mark.asyncio
    async def test_availability_endpoint(self, test_client, register):
        """Availability reports conflicts and honours exclude_id."""
        account = await register("owner@example.com")
        refs = await seed_booking_refs(test_client, account["headers"])
        booked = await test_client.post(
            "/api/appointments",
            json={**refs, "start_time": "2026-03-02T09:00:00Z", "end_time": "2026-03-02T10:00:00Z"},
            headers=account["headers"],
        )

        busy = await test_client.get(
            "/api/appointments/availability",
            params={"start_time": "2026-03-02T09:15:00Z", "end_time": "2026-03-02T09:45:00Z"},
            headers=account["headers"],
        )
        own_slot = await test_client.get(
            "/api/appointments/availability",
            params={
                "start_time": "2026-03-02T09:15:00Z",
                "end_time": "2026-03-02T09:45:00Z",
                "exclude_id": booked.json()["id"],
            },
            headers=account["headers"],
        )

        assert busy.json() == {"available": False, "conflicts": [booked.json()["id"]]}
        assert own_slot.json() == {"available": True, "conflicts": []}

    @pytest.mark.asyncio
    async def test_inverted_interval_is_400(self, test_client, register):
        """An end before the start is a 400 on end_time."""
        account = await register("owner@example.com")
        refs = await seed_booking_refs(test_client, account["headers"])

        response = await test_client.post(
            "/api/appointments",
            json={**refs, "start_time": "2026-03-02T10:00:00Z", "end_time": "2026-03-02T09:00:00Z"},
            headers=account["headers"],
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "end_time"

    @pytest.mark.asyncio
    async def test_mark_invoice_paid(self, test_client, register):
        """mark-paid moves the invoice to paid with a paid_date."""
        account = await register("owner@example.com")
        refs = await seed_booking_refs(test_client, account["headers"])
        invoice = await test_client.post(
            "/api/invoices",
            json={"client_id": refs["client_id"], "amount": "50.00"},
            headers=account["headers"],
        )
        assert invoice.json()["paid_date"] is None

        response = await test_client.post(
            f"/api/invoices/{invoice.json()['id']}/mark-paid", headers=account["headers"]
        )

        assert response.status_code == 200
        assert response.json()["status"] == "paid"
        assert response.json()["paid_date"] is not None


class TestAdminEndpoints:
    """Tests for /api/admin."""

    @pytest.mark.asyncio
    async def test_regular_user_gets_403(self, test_client, register):
        """Every admin route answers 403 to a regular user."""
        account = await register("plain@example.com")

        for method, path in (
            ("GET", "/api/admin/users"),
            ("GET", "/api/admin/actions"),
            ("POST", "/api/admin/delete-user"),
        ):
            response = await test_client.request(
                method, path, headers=account["headers"],
                json={"userId": account["user_id"]} if method == "POST" else None,
            )
            assert response.status_code == 403, path
            assert response.json()["error"] == "authorization_error"

    @pytest.mark.asyncio
    async def test_cascade_delete_flow(self, test_client, register, grant_role):
        """Deletion removes the account, kills its token and is audited once."""
        boss = await register("boss@example.com")
        await grant_role(boss["user_id"])
        target = await register("target@example.com")
        await seed_booking_refs(test_client, target["headers"])

        response = await test_client.post(
            "/api/admin/delete-user",
            json={"userId": target["user_id"], "notes": "Requested by customer"},
            headers=boss["headers"],
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User deleted successfully"
        assert body["deleted"]["clients"] == 1
        assert body["deleted"]["services"] == 1
        assert body["deleted"]["users"] == 1

        # The target's token no longer resolves to an account
        me = await test_client.get("/api/auth/me", headers=target["headers"])
        assert me.status_code == 401

        again = await test_client.post(
            "/api/admin/delete-user", json={"userId": target["user_id"]}, headers=boss["headers"]
        )
        assert again.status_code == 404

        actions = await test_client.get("/api/admin/actions", headers=boss["headers"])
        assert [a["action_type"] for a in actions.json()] == ["delete_user"]

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, test_client, register, grant_role):
        """An admin deleting their own account gets a 400."""
        boss = await register("boss@example.com")
        await grant_role(boss["user_id"])

        response = await test_client.post(
            "/api/admin/delete-user", json={"userId": boss["user_id"]}, headers=boss["headers"]
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot delete your own account"

    @pytest.mark.asyncio
    async def test_failed_cascade_leaves_target_intact(
        self, test_client, register, grant_role, session_factory, monkeypatch
    ):
        """A failing services step is a 500 and the whole deletion rolls back."""
        boss = await register("boss@example.com")
        await grant_role(boss["user_id"])
        target = await register("target@example.com")
        await grant_role(target["user_id"], "user")
        await seed_booking_refs(test_client, target["headers"])
        original = AdminService._delete_rows

        async def broken(self, db, model, target_user_id):
            if model is Service:
                raise SQLAlchemyError("permission denied for table services")
            return await original(self, db, model, target_user_id)

        monkeypatch.setattr(AdminService, "_delete_rows", broken)

        response = await test_client.post(
            "/api/admin/delete-user", json={"userId": target["user_id"]}, headers=boss["headers"]
        )

        assert response.status_code == 500
        assert response.json()["error"] == "deletion_failed"
        assert response.json()["message"] == "Failed to delete user services"

        target_id = uuid.UUID(target["user_id"])
        async with session_factory() as session:
            for model in (UserRole, Client, Service):
                count = await session.scalar(
                    select(func.count()).select_from(model).where(model.user_id == target_id)
                )
                assert count == 1, model.__tablename__
            assert await session.get(User, target_id) is not None

    @pytest.mark.asyncio
    async def test_role_change_takes_effect_immediately(self, test_client, register, grant_role):
        """A granted role applies to the member's existing token."""
        boss = await register("boss@example.com")
        await grant_role(boss["user_id"])
        member = await register("member@example.com")

        response = await test_client.put(
            f"/api/admin/users/{member['user_id']}/role",
            json={"role": "admin"},
            headers=boss["headers"],
        )
        assert response.status_code == 200
        assert response.json()["action_type"] == "assign_role"

        # Same token, new role: roles are read per request, not from the token
        me = await test_client.get("/api/auth/me", headers=member["headers"])
        assert me.json()["is_admin"] is True


class TestPlatform:
    """Health, middleware and the smaller endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        """Health check reports the database as connected."""
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        """A caller-supplied X-Request-ID comes back unchanged."""
        response = await test_client.get("/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["x-request-id"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        """Without one, an 8-character request id is generated."""
        response = await test_client.get("/health")
        assert len(response.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    async def test_cors_preflight_allows_client_headers(self, test_client):
        """Preflight allows the headers the web client sends."""
        response = await test_client.options(
            "/api/clients",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
            },
        )

        assert response.status_code == 200
        allowed = response.headers["access-control-allow-headers"].lower()
        for header in ("authorization", "x-client-info", "apikey", "content-type"):
            assert header in allowed

    @pytest.mark.asyncio
    async def test_suggest_reply(self, test_client, register):
        """suggest-reply classifies the message topic."""
        account = await register("owner@example.com")

        response = await test_client.post(
            "/api/messages/suggest-reply",
            json={"text": "How much does it cost?"},
            headers=account["headers"],
        )

        assert response.status_code == 200
        assert response.json()["topic"] == "pricing"

    @pytest.mark.asyncio
    async def test_dashboard(self, test_client, register):
        """The dashboard carries seven daily revenue buckets."""
        account = await register("owner@example.com")

        response = await test_client.get("/api/dashboard", headers=account["headers"])

        assert response.status_code == 200
        assert len(response.json()["last_7_days"]) == 7
