"""Conversation store module."""

from .conversation_store import (
    ConversationStore,
    IConversationStore,
    search,
    sorted_by_activity,
)

__all__ = ["ConversationStore", "IConversationStore", "search", "sorted_by_activity"]
