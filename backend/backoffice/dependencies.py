"""
Back-Office Backend: Request Dependencies
==========================================

What:  FastAPI dependencies that turn the Authorization header into a
       Principal, and gate admin-only routes.
How:   HTTPBearer extracts the token; the account and its role rows are
       loaded in the request's session; effective roles are computed once.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.exceptions import AuthenticationError
from backoffice.security import decode_access_token
from backoffice.services.access import Principal, load_principal

logger = logging.getLogger(__name__)

# auto_error=False: a missing header becomes our AuthenticationError (401
# with the standard error envelope) instead of FastAPI's bare 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Principal:
    """
    Resolves the authenticated caller.

    Raises:
        AuthenticationError: no bearer token, invalid token, or the account
                             was deleted after the token was issued
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Missing authorization header")

    user_id = decode_access_token(credentials.credentials)
    principal = await load_principal(db, user_id)
    if principal is None:
        logger.info("Token presented for missing account %s", user_id)
        raise AuthenticationError(message="Unauthorized")
    return principal


async def require_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """Admin-only routes: raises AuthorizationError unless the caller holds `admin`."""
    principal.require_admin()
    return principal
