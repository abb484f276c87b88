"""
Back-Office Backend: Authentication Routes
============================================

What:  Registration, login and the current-principal lookup.
Who:   Called by the login/register screens and on app start (GET /me).

Login accepts either the OAuth2 password form (`username`, `password`) so
that Swagger UI and standard clients work, or a JSON body
(`email`, `password`) as the browser client sends it.
"""

import json
import logging

import pydantic
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db_session
from backoffice.dependencies import get_current_principal
from backoffice.exceptions import ValidationError
from backoffice.schemas.auth import Credentials, LoginRequest, PrincipalResponse, TokenResponse
from backoffice.schemas.common import ErrorResponse
from backoffice.services.access import Principal
from backoffice.services.auth_service import auth_service, describe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_login(request: Request) -> LoginRequest:
    """Parses either login body shape into a LoginRequest."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith(FORM_CONTENT_TYPES):
            form = await request.form()
            return LoginRequest(
                email=form.get("username") or form.get("email") or "",
                password=form.get("password") or "",
            )
        return LoginRequest.model_validate(await request.json())
    except (json.JSONDecodeError, pydantic.ValidationError):
        raise ValidationError(message="Email and password are required")


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create an account",
)
async def register(
    credentials: Credentials,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.register(db, credentials)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange email and password for a bearer token",
)
async def login(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    body = await read_login(request)
    return await auth_service.login(db, body.email, body.password)


@router.get(
    "/me",
    response_model=PrincipalResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="The authenticated caller and their effective roles",
)
async def me(principal: Principal = Depends(get_current_principal)) -> PrincipalResponse:
    return describe(principal)
