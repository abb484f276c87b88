"""
Back-Office Backend: ORM Models
=================================

Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the test suite's create_all depend on.

Ownership:
    Every business record (client, service, appointment, invoice) carries a
    `user_id` naming the account that owns it. Visibility and mutation rules
    are applied on that column by backoffice.services.access.
"""

from backoffice.models.user import AdminAction, User, UserProfile, UserRole
from backoffice.models.client import Client
from backoffice.models.service import Service
from backoffice.models.appointment import Appointment
from backoffice.models.invoice import Invoice

__all__ = [
    "AdminAction",
    "Appointment",
    "Client",
    "Invoice",
    "Service",
    "User",
    "UserProfile",
    "UserRole",
]
