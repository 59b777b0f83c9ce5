"""Core data models for the support desk."""

from .conversations import (
    Attachment,
    Category,
    Conversation,
    ConversationStatus,
    InternalNote,
    Message,
    Priority,
    Rating,
    Sender,
)
from .dialogue import BotOption, BotResponse, DialogueState, Flow
from .loans import LoanApplication, LoanStatus, LoanType, QuickReply
from .principals import Agent, AgentStatus, Customer, Principal, Role
from .tracing import TraceEvent

__all__ = [
    # Principals
    "Agent",
    "AgentStatus",
    "Customer",
    "Principal",
    "Role",
    # Conversations
    "Attachment",
    "Category",
    "Conversation",
    "ConversationStatus",
    "InternalNote",
    "Message",
    "Priority",
    "Rating",
    "Sender",
    # Dialogue
    "BotOption",
    "BotResponse",
    "DialogueState",
    "Flow",
    # Loans
    "LoanApplication",
    "LoanStatus",
    "LoanType",
    "QuickReply",
    # Tracing
    "TraceEvent",
]
