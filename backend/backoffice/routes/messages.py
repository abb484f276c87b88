"""Messaging routes: reply suggestions for incoming client messages."""

from fastapi import APIRouter, Depends

from backoffice.dependencies import get_current_principal
from backoffice.schemas.common import ErrorResponse
from backoffice.schemas.message import ReplySuggestionRequest, ReplySuggestionResponse
from backoffice.services.access import Principal
from backoffice.services.message_service import reply_suggester

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.post(
    "/suggest-reply",
    response_model=ReplySuggestionResponse,
    responses={400: {"description": "Empty message", "model": ErrorResponse}},
)
async def suggest_reply(
    body: ReplySuggestionRequest,
    principal: Principal = Depends(get_current_principal),
) -> ReplySuggestionResponse:
    return reply_suggester.suggest(body.text)
