# Services package init
"""
Back-Office Backend: Services Layer
=====================================

Service Inventory:
    - access:        Principal, effective roles, read/write scoping helpers
    - scheduling:    interval overlap and conflict pre-check
    - auth:          registration and login
    - client / catalog / appointment / invoice:  owned-entity CRUD
    - profile:       the caller's business profile
    - dashboard:     landing-screen summary numbers
    - message:       reply suggestions
    - admin:         role management, audit log, cascading user deletion

Services receive the request's AsyncSession and Principal and raise
BackofficeError subclasses; they never commit (get_db_session does).
"""
