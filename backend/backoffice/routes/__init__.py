# Routes package init
"""
Back-Office Backend: API Routes Package
=========================================

Route Inventory:
    - auth.py:          /api/auth/register, /api/auth/login, /api/auth/me
    - clients.py:       /api/clients[/{id}]
    - catalog.py:       /api/services[/{id}]
    - appointments.py:  /api/appointments[/{id}], /api/appointments/availability
    - invoices.py:      /api/invoices[/{id}], /api/invoices/{id}/mark-paid
    - profile.py:       /api/profile
    - dashboard.py:     /api/dashboard
    - messages.py:      /api/messages/suggest-reply
    - admin.py:         /api/admin/users, /api/admin/actions,
                        /api/admin/users/{id}/role, /api/admin/delete-user
    - health.py:        /health

Routes stay thin: resolve the principal, call one service method, return
its result. Scoping and business rules live in the services.
"""
