"""Keyword classification of free-text customer input."""

from enum import Flag, auto


class Intent(Flag):
    """What a customer message asks for. Both bits may be set at once."""

    NONE = 0
    RESOLUTION = auto()
    ESCALATION = auto()


# Substring matches. Bare "no" and "ok" also fire inside longer words
# ("know", "token") and replies like "no, one more question".
RESOLUTION_KEYWORDS = (
    "thank you",
    "thanks",
    "thankyou",
    "thnx",
    "done",
    "resolved",
    "solved",
    "got it",
    "understand",
    "clear",
    "understood",
    "no more questions",
    "all set",
    "fine",
    "okay",
    "ok",
    "perfect",
    "great",
    "no",
    "nothing else",
    "all good",
    "no problem",
    "no thanks",
    "no need",
    "that's all",
)

ESCALATION_KEYWORDS = (
    "talk to agent",
    "speak with agent",
    "connect to agent",
    "human agent",
    "talk to human",
    "speak to person",
    "agent",
    "representative",
    "support person",
    "escalate",
    "transfer",
)

ASKS_FOR_MORE_PROMPTS = (
    "anything else",
    "something else",
    "any other",
    "help you with",
    "can help",
    "else i can",
)


def _normalize(text: str) -> str:
    return text.lower().strip()


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def is_resolution(text: str) -> bool:
    return _contains_any(_normalize(text), RESOLUTION_KEYWORDS)


def is_agent_request(text: str) -> bool:
    return _contains_any(_normalize(text), ESCALATION_KEYWORDS)


def classify(text: str) -> Intent:
    """Classify a customer message against both keyword sets."""
    intent = Intent.NONE
    if is_resolution(text):
        intent |= Intent.RESOLUTION
    if is_agent_request(text):
        intent |= Intent.ESCALATION
    return intent


def bot_asks_for_more(bot_message: str) -> bool:
    """Whether a bot message ends the topic with an "anything else?" prompt."""
    return _contains_any(bot_message.lower(), ASKS_FOR_MORE_PROMPTS)


def declines_more(text: str) -> bool:
    """Loose "no"/"thank" check used after the bot asked for more."""
    lowered = text.lower()
    return "no" in lowered or "thank" in lowered
