# Middleware package init
"""
Back-Office Backend: Middleware Package
========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [Rate Limit] → [GZip] → [CORS] → Route Handler

    The request ID is assigned first so every access line and every error
    envelope carries it, 429 responses included. Rate limiting rejects
    before any route or database work.
"""
