"""
Back-Office Backend: Password Hashing and Access Tokens
=========================================================

What:  Password hashing (passlib) and bearer token issue/verify (python-jose).
Who:   AuthService (register/login) and the get_current_principal dependency.

Token format:
    HS256-signed JWT with `sub` = account UUID, `email`, and `exp`.
    Roles are NOT embedded: they are re-read from `user_roles` on every
    request so that a role change or account deletion takes effect
    immediately instead of when the token expires.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from backoffice.config import settings
from backoffice.exceptions import AuthenticationError

# pbkdf2_sha256 is implemented by passlib itself, no native backend needed
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Issues a signed bearer token for the given account."""
    minutes = expires_minutes or settings.access_token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": str(user_id), "email": email, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verifies a bearer token and returns the account id it was issued for.

    Raises:
        AuthenticationError: bad signature, expired, or malformed subject
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
        subject = payload.get("sub")
        if subject is None:
            raise AuthenticationError(message="Invalid token")
        return uuid.UUID(subject)
    except (JWTError, ValueError):
        raise AuthenticationError(message="Invalid token")
