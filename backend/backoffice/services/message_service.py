"""
Back-Office Backend: Reply Suggestions
========================================

What:  Proposes a reply to a client's message for the messages screen.
How:   ReplySuggester is the provider interface; KeywordReplySuggester picks
       a canned reply from the first matching keyword rule. A model-backed
       suggester can replace it without touching the route.

Keyword rules (checked in order, case-insensitive substring match):
    appointment     → scheduling reply
    price / cost    → pricing reply
    cancel          → cancellation reply
    (no match)      → generic acknowledgement
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple

from backoffice.exceptions import ValidationError
from backoffice.schemas.message import ReplySuggestionResponse

TOPIC_APPOINTMENT = "appointment"
TOPIC_PRICING = "pricing"
TOPIC_CANCELLATION = "cancellation"
TOPIC_GENERAL = "general"

REPLIES = {
    TOPIC_APPOINTMENT: (
        "I'd be happy to schedule an appointment for you. "
        "Would you prefer morning or afternoon?"
    ),
    TOPIC_PRICING: (
        "Our service pricing varies based on your specific needs. "
        "I'd be happy to provide you with a detailed quote."
    ),
    TOPIC_CANCELLATION: (
        "I understand you need to cancel. No problem at all. "
        "Is there a specific reason or would you like to reschedule?"
    ),
    TOPIC_GENERAL: "Thank you for your message. I'll get back to you as soon as possible.",
}

KEYWORD_RULES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("appointment",), TOPIC_APPOINTMENT),
    (("price", "cost"), TOPIC_PRICING),
    (("cancel",), TOPIC_CANCELLATION),
)


class ReplySuggester(ABC):
    """
    Interface for reply suggestion providers.

    Contract:
        - suggest() rejects blank input with ValidationError
        - always returns a reply; "no idea" is the general topic, never None
    """

    @abstractmethod
    def suggest(self, text: str) -> ReplySuggestionResponse:
        ...


class KeywordReplySuggester(ReplySuggester):

    def classify(self, text: str) -> str:
        lowered = text.lower()
        for keywords, topic in KEYWORD_RULES:
            if any(keyword in lowered for keyword in keywords):
                return topic
        return TOPIC_GENERAL

    def suggest(self, text: str) -> ReplySuggestionResponse:
        if not text or not text.strip():
            raise ValidationError(message="Message text is required", field="text")
        topic = self.classify(text)
        return ReplySuggestionResponse(reply=REPLIES[topic], topic=topic)


reply_suggester: ReplySuggester = KeywordReplySuggester()
