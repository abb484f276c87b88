"""Messaging schemas."""

from pydantic import BaseModel, Field


class ReplySuggestionRequest(BaseModel):
    text: str = Field(max_length=5000, description="The client's message")


class ReplySuggestionResponse(BaseModel):
    reply: str
    topic: str = Field(description="appointment, pricing, cancellation or general")
