"""
Back-Office Backend: Application Package
==========================================

Small-business back office: clients, service catalog, appointments,
invoices, business profile and an admin panel.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth dependencies
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← scoping, scheduling, cascades
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← one async session per request
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
