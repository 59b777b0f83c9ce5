"""Conversation lifecycle module."""

from .classifier import Intent, bot_asks_for_more, classify
from .controller import (
    ALREADY_ACTIVE_MESSAGE,
    BOT_NAME,
    ILifecycleController,
    LifecycleController,
    TextOutcome,
    needs_rating,
    new_message,
)

__all__ = [
    "ALREADY_ACTIVE_MESSAGE",
    "BOT_NAME",
    "ILifecycleController",
    "Intent",
    "LifecycleController",
    "TextOutcome",
    "bot_asks_for_more",
    "classify",
    "needs_rating",
    "new_message",
]
