"""In-memory conversation store, the system of record for conversations."""

import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from ..errors import ConversationNotFoundError
from ..models import (
    Category,
    Conversation,
    ConversationStatus,
    Customer,
    InternalNote,
    Message,
    Priority,
    Rating,
    Sender,
)

# Dashboard filter that selects conversations assigned to the viewing agent
ASSIGNED_FILTER = "assigned"
ALL_FILTER = "all"


class IConversationStore(Protocol):
    """Authoritative collection of conversations and their messages."""

    def create(self, customer: Customer) -> str:
        """Create a waiting conversation with an empty log. Return its ID."""
        ...

    def append(self, conversation_id: str, message: Message) -> None:
        """Append a message and bump last_message_at."""
        ...

    def set_status(self, conversation_id: str, status: ConversationStatus) -> None:
        """Change status; stamps resolved_at when status becomes resolved."""
        ...

    def assign_agent(self, conversation_id: str, agent_id: str, agent_name: str) -> None:
        """Record the agent handling the conversation."""
        ...

    def get(self, conversation_id: str) -> Conversation | None:
        """Get a conversation, None if unknown."""
        ...

    def add_note(self, conversation_id: str, note: InternalNote) -> None:
        """Append an internal note."""
        ...

    def mark_read(self, conversation_id: str) -> None:
        """Mark every message read."""
        ...

    def unread_count(self, conversation_id: str) -> int:
        """Count unread messages not written by the customer."""
        ...

    def set_rating(self, conversation_id: str, rating: Rating) -> None:
        """Attach the customer's satisfaction rating."""
        ...

    def active_ticket_for(
        self, customer_id: str, exclude: str | None = None
    ) -> Conversation | None:
        """The customer's active conversation other than `exclude`, if any."""
        ...


class ConversationStore:
    """Keeps conversations in memory, in creation order."""

    def __init__(self, conversations: Iterable[Conversation] = ()):
        self._conversations: dict[str, Conversation] = {}
        self.load(conversations)

    # Persistence hooks
    def load(self, conversations: Iterable[Conversation]) -> None:
        """Replace contents with previously saved conversations."""
        self._conversations = {c.id: c for c in conversations}

    def snapshot(self) -> list[Conversation]:
        """All conversations in creation order."""
        return list(self._conversations.values())

    def clear(self) -> None:
        self._conversations.clear()

    def __len__(self) -> int:
        return len(self._conversations)

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    # Mutations
    def create(self, customer: Customer) -> str:
        """Create a waiting conversation with an empty log. Return its ID."""
        conversation_id = f"conv-{uuid.uuid4().hex[:12]}"
        now = datetime.now(timezone.utc)

        self._conversations[conversation_id] = Conversation(
            id=conversation_id,
            customer_id=customer.id,
            customer_name=customer.name,
            customer_phone=customer.phone,
            status=ConversationStatus.WAITING,
            priority=Priority.MEDIUM,
            category=Category.GENERAL,
            created_at=now,
            last_message_at=now,
        )
        return conversation_id

    def append(self, conversation_id: str, message: Message) -> None:
        """Append a message and bump last_message_at."""
        conversation = self._require(conversation_id)
        conversation.messages.append(message)
        conversation.last_message_at = message.timestamp

    def set_status(self, conversation_id: str, status: ConversationStatus) -> None:
        """Change status. resolved_at is stamped on resolve and never cleared."""
        conversation = self._require(conversation_id)
        conversation.status = status
        if status == ConversationStatus.RESOLVED:
            conversation.resolved_at = datetime.now(timezone.utc)

    def assign_agent(self, conversation_id: str, agent_id: str, agent_name: str) -> None:
        """Record the handling agent; a general query is recategorized as escalation."""
        conversation = self._require(conversation_id)
        conversation.assigned_agent_id = agent_id
        conversation.assigned_agent_name = agent_name
        if conversation.category == Category.GENERAL:
            conversation.category = Category.ESCALATION

    def add_note(self, conversation_id: str, note: InternalNote) -> None:
        self._require(conversation_id).internal_notes.append(note)

    def set_rating(self, conversation_id: str, rating: Rating) -> None:
        self._require(conversation_id).rating = rating

    def mark_read(self, conversation_id: str) -> None:
        """Mark every message read. Idempotent."""
        for message in self._require(conversation_id).messages:
            message.read = True

    # Queries
    def get(self, conversation_id: str) -> Conversation | None:
        return self._conversations.get(conversation_id)

    def unread_count(self, conversation_id: str) -> int:
        """Count unread bot/agent messages; unknown IDs count as 0."""
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            return 0
        return sum(
            1
            for msg in conversation.messages
            if not msg.read and msg.sender != Sender.CUSTOMER
        )

    def list_for_customer(self, customer_id: str) -> list[Conversation]:
        """A customer's conversations, most recent activity first."""
        return sorted_by_activity(
            c for c in self._conversations.values() if c.customer_id == customer_id
        )

    def active_ticket_for(
        self, customer_id: str, exclude: str | None = None
    ) -> Conversation | None:
        """The customer's active conversation other than `exclude`, if any."""
        for conversation in self._conversations.values():
            if (
                conversation.customer_id == customer_id
                and conversation.status == ConversationStatus.ACTIVE
                and conversation.id != exclude
            ):
                return conversation
        return None

    def has_active_ticket(self, customer_id: str) -> bool:
        return self.active_ticket_for(customer_id) is not None

    def filter(
        self, status: str | None = None, agent_id: str | None = None
    ) -> list[Conversation]:
        """Dashboard filter: "all", "assigned" (to agent_id) or a status value."""
        conversations = self.snapshot()
        if not status or status == ALL_FILTER:
            return conversations
        if status == ASSIGNED_FILTER:
            return [c for c in conversations if c.assigned_agent_id == agent_id]
        return [c for c in conversations if c.status.value == status]


def search(query: str | None, conversations: Iterable[Conversation]) -> list[Conversation]:
    """Case-insensitive search over conversation metadata and message content."""
    conversations = list(conversations)
    term = (query or "").strip().lower()
    if not term:
        return conversations

    def matches(conversation: Conversation) -> bool:
        fields = [
            conversation.id,
            conversation.customer_name,
            conversation.customer_phone,
            conversation.category.value,
            conversation.status.value,
            conversation.priority.value,
            conversation.assigned_agent_name or "",
        ]
        if any(term in field.lower() for field in fields):
            return True
        return any(term in msg.content.lower() for msg in conversation.messages)

    return [c for c in conversations if matches(c)]


def sorted_by_activity(conversations: Iterable[Conversation]) -> list[Conversation]:
    """Newest last_message_at first."""
    return sorted(conversations, key=lambda c: c.last_message_at, reverse=True)
