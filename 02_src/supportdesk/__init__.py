"""KRUX loan support desk: customer chat bot, ticket lifecycle and agent dashboard."""

from .app import Application
from .config import TypingConfig
from .dialogue import ChatSession, DialogueEngine
from .lifecycle import LifecycleController
from .store import ConversationStore

__version__ = "0.1.0"

__all__ = [
    "Application",
    "ChatSession",
    "ConversationStore",
    "DialogueEngine",
    "LifecycleController",
    "TypingConfig",
]
