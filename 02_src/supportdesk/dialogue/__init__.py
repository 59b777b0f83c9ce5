"""Dialogue module."""

from .engine import DialogueEngine, IDialogueEngine, format_inr
from .session import ChatSession

__all__ = ["ChatSession", "DialogueEngine", "IDialogueEngine", "format_inr"]
