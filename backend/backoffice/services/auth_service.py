"""
Back-Office Backend: Account Registration and Login
=====================================================

New accounts get no `user_roles` row; they hold the implicit `user` role
until an admin grants one.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.exceptions import AuthenticationError, ValidationError
from backoffice.models.user import User
from backoffice.schemas.auth import Credentials, PrincipalResponse, TokenResponse
from backoffice.security import create_access_token, hash_password, verify_password
from backoffice.services.access import Principal, load_principal

logger = logging.getLogger(__name__)


def issue_token(principal: Principal) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(principal.user_id, principal.email),
        user_id=principal.user_id,
        email=principal.email,
        is_admin=principal.is_admin,
    )


def describe(principal: Principal) -> PrincipalResponse:
    return PrincipalResponse(
        id=principal.user_id,
        email=principal.email,
        roles=sorted(principal.roles),
        is_admin=principal.is_admin,
    )


class AuthService:

    async def register(self, db: AsyncSession, credentials: Credentials) -> TokenResponse:
        """
        Creates an account and returns a token for it.

        Raises:
            ValidationError: the email is already registered
        """
        existing = await db.execute(select(User.id).where(User.email == credentials.email))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(message="Email is already registered", field="email")

        user = User(email=credentials.email, password_hash=hash_password(credentials.password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration for the same email
            raise ValidationError(message="Email is already registered", field="email")

        logger.info("Registered account %s", user.id)
        return issue_token(Principal(user_id=user.id, email=user.email))

    async def login(self, db: AsyncSession, email: str, password: str) -> TokenResponse:
        """
        Verifies credentials and returns a token.

        Unknown email and wrong password produce the same error.
        """
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError(message="Invalid email or password")

        principal = await load_principal(db, user.id)
        return issue_token(principal)


auth_service = AuthService()
