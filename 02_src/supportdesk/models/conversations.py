"""Conversation-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Sender(str, Enum):
    """Author of a message."""

    CUSTOMER = "customer"
    BOT = "bot"
    AGENT = "agent"


class ConversationStatus(str, Enum):
    """Lifecycle status. WAITING is a query, ACTIVE an active ticket."""

    WAITING = "waiting"
    ACTIVE = "active"
    RESOLVED = "resolved"
    ESCALATED = "escalated"


class Priority(str, Enum):
    """Ticket priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Category(str, Enum):
    """Ticket category."""

    LOAN_APPLICATION = "loan_application"
    DOCUMENT_QUERY = "document_query"
    STATUS_CHECK = "status_check"
    GENERAL = "general"
    ESCALATION = "escalation"


@dataclass
class Attachment:
    """File metadata attached to a message (no file content is kept)."""

    id: str
    name: str
    mime_type: str
    size: int
    url: str | None = None


@dataclass
class Message:
    """A single message in a conversation. Immutable once appended."""

    id: str
    conversation_id: str
    sender: Sender
    sender_name: str
    content: str
    timestamp: datetime
    read: bool
    sender_id: str | None = None
    attachments: list[Attachment] = field(default_factory=list)


@dataclass
class InternalNote:
    """Agent-only annotation, hidden from the customer."""

    id: str
    agent_id: str
    agent_name: str
    content: str
    timestamp: datetime


@dataclass
class Rating:
    """Customer satisfaction rating for a resolved conversation."""

    score: int  # 1..5
    comment: str | None = None


@dataclass
class Conversation:
    """A support conversation (query or ticket) with its message log."""

    id: str
    customer_id: str
    customer_name: str
    customer_phone: str
    status: ConversationStatus
    priority: Priority
    category: Category
    created_at: datetime
    last_message_at: datetime
    messages: list[Message] = field(default_factory=list)
    assigned_agent_id: str | None = None
    assigned_agent_name: str | None = None
    resolved_at: datetime | None = None
    tags: list[str] = field(default_factory=list)
    internal_notes: list[InternalNote] = field(default_factory=list)
    rating: Rating | None = None
