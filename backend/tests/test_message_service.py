"""
Back-Office Backend: Reply Suggestion Tests
=============================================

What we test:
    ✅ Keyword rules map to their topics, case-insensitively
    ✅ First matching rule wins
    ✅ Unmatched text gets the general acknowledgement
    ✅ Blank input is rejected
"""

import pytest

from backoffice.exceptions import ValidationError
from backoffice.services.message_service import REPLIES, KeywordReplySuggester


@pytest.fixture
def suggester():
    return KeywordReplySuggester()


class TestKeywordReplySuggester:
    """Tests for the keyword reply suggester."""

    @pytest.mark.parametrize(
        "text, topic",
        [
            ("Can I book an APPOINTMENT for Friday?", "appointment"),
            ("What is the price of a haircut?", "pricing"),
            ("How much does it cost?", "pricing"),
            ("I need to cancel tomorrow", "cancellation"),
            ("Thanks for yesterday!", "general"),
        ],
    )
    def test_topics(self, suggester, text, topic):
        """Each keyword rule maps to its topic and canned reply."""
        suggestion = suggester.suggest(text)
        assert suggestion.topic == topic
        assert suggestion.reply == REPLIES[topic]

    def test_first_rule_wins(self, suggester):
        """Text matching several rules takes the first."""
        assert suggester.classify("cancel my appointment please") == "appointment"

    def test_scheduling_reply_text(self, suggester):
        """The appointment reply text is exact."""
        assert suggester.suggest("appointment?").reply == (
            "I'd be happy to schedule an appointment for you. "
            "Would you prefer morning or afternoon?"
        )

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_rejected(self, suggester, text):
        """Blank text is rejected on the text field."""
        with pytest.raises(ValidationError) as exc_info:
            suggester.suggest(text)
        assert exc_info.value.field == "text"
