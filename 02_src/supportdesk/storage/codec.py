"""Conversion between models and their JSON storage representation.

Timestamps are written as ISO 8601 strings and turned back into
timezone-aware datetimes on every load. There is no schema version: a
document of the wrong shape raises KeyError/ValueError from here.
"""

from datetime import datetime, timezone
from typing import Any

from ..models import (
    Agent,
    AgentStatus,
    Attachment,
    Category,
    Conversation,
    ConversationStatus,
    Customer,
    InternalNote,
    LoanApplication,
    LoanStatus,
    LoanType,
    Message,
    Principal,
    Priority,
    Rating,
    Role,
    Sender,
)


def _dump_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _load_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def attachment_to_dict(attachment: Attachment) -> dict[str, Any]:
    return {
        "id": attachment.id,
        "name": attachment.name,
        "mime_type": attachment.mime_type,
        "size": attachment.size,
        "url": attachment.url,
    }


def attachment_from_dict(data: dict[str, Any]) -> Attachment:
    return Attachment(
        id=data["id"],
        name=data["name"],
        mime_type=data["mime_type"],
        size=data["size"],
        url=data.get("url"),
    )


def message_to_dict(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "sender": message.sender.value,
        "sender_name": message.sender_name,
        "sender_id": message.sender_id,
        "content": message.content,
        "timestamp": _dump_dt(message.timestamp),
        "read": message.read,
        "attachments": [attachment_to_dict(a) for a in message.attachments],
    }


def message_from_dict(data: dict[str, Any]) -> Message:
    return Message(
        id=data["id"],
        conversation_id=data["conversation_id"],
        sender=Sender(data["sender"]),
        sender_name=data["sender_name"],
        sender_id=data.get("sender_id"),
        content=data["content"],
        timestamp=_load_dt(data["timestamp"]),
        read=data["read"],
        attachments=[attachment_from_dict(a) for a in data.get("attachments", [])],
    )


def note_to_dict(note: InternalNote) -> dict[str, Any]:
    return {
        "id": note.id,
        "agent_id": note.agent_id,
        "agent_name": note.agent_name,
        "content": note.content,
        "timestamp": _dump_dt(note.timestamp),
    }


def note_from_dict(data: dict[str, Any]) -> InternalNote:
    return InternalNote(
        id=data["id"],
        agent_id=data["agent_id"],
        agent_name=data["agent_name"],
        content=data["content"],
        timestamp=_load_dt(data["timestamp"]),
    )


def conversation_to_dict(conversation: Conversation) -> dict[str, Any]:
    """Serialize a conversation with its messages and notes."""
    rating = conversation.rating
    return {
        "id": conversation.id,
        "customer_id": conversation.customer_id,
        "customer_name": conversation.customer_name,
        "customer_phone": conversation.customer_phone,
        "status": conversation.status.value,
        "priority": conversation.priority.value,
        "category": conversation.category.value,
        "assigned_agent_id": conversation.assigned_agent_id,
        "assigned_agent_name": conversation.assigned_agent_name,
        "messages": [message_to_dict(m) for m in conversation.messages],
        "created_at": _dump_dt(conversation.created_at),
        "last_message_at": _dump_dt(conversation.last_message_at),
        "resolved_at": _dump_dt(conversation.resolved_at),
        "tags": list(conversation.tags),
        "internal_notes": [note_to_dict(n) for n in conversation.internal_notes],
        "rating": (
            {"score": rating.score, "comment": rating.comment} if rating else None
        ),
    }


def conversation_from_dict(data: dict[str, Any]) -> Conversation:
    """Deserialize a conversation, re-hydrating every timestamp."""
    rating = data.get("rating")
    return Conversation(
        id=data["id"],
        customer_id=data["customer_id"],
        customer_name=data["customer_name"],
        customer_phone=data["customer_phone"],
        status=ConversationStatus(data["status"]),
        priority=Priority(data["priority"]),
        category=Category(data["category"]),
        assigned_agent_id=data.get("assigned_agent_id"),
        assigned_agent_name=data.get("assigned_agent_name"),
        messages=[message_from_dict(m) for m in data["messages"]],
        created_at=_load_dt(data["created_at"]),
        last_message_at=_load_dt(data["last_message_at"]),
        resolved_at=_load_dt(data.get("resolved_at")),
        tags=list(data.get("tags") or []),
        internal_notes=[note_from_dict(n) for n in data.get("internal_notes") or []],
        rating=Rating(score=rating["score"], comment=rating.get("comment")) if rating else None,
    )


def principal_to_dict(principal: Principal) -> dict[str, Any]:
    """Snapshot of a signed-in customer or agent."""
    if isinstance(principal, Agent):
        return {
            "role": Role.AGENT.value,
            "id": principal.id,
            "name": principal.name,
            "username": principal.username,
            "email": principal.email,
            "status": principal.status.value,
        }
    return {
        "role": Role.CUSTOMER.value,
        "id": principal.id,
        "name": principal.name,
        "phone": principal.phone,
        "username": principal.username,
        "email": principal.email,
    }


def principal_from_dict(data: dict[str, Any]) -> Principal:
    if data["role"] == Role.AGENT.value:
        return Agent(
            id=data["id"],
            name=data["name"],
            username=data["username"],
            email=data.get("email"),
            status=AgentStatus(data.get("status", AgentStatus.ONLINE.value)),
        )
    return Customer(
        id=data["id"],
        name=data["name"],
        phone=data["phone"],
        username=data.get("username"),
        email=data.get("email"),
    )


def loan_application_to_dict(application: LoanApplication) -> dict[str, Any]:
    return {
        "id": application.id,
        "customer_id": application.customer_id,
        "type": application.type.value,
        "amount": application.amount,
        "status": application.status.value,
        "applied_date": application.applied_date,
        "last_updated": application.last_updated,
        "documents": list(application.documents),
    }


def loan_application_from_dict(data: dict[str, Any]) -> LoanApplication:
    return LoanApplication(
        id=data["id"],
        customer_id=data["customer_id"],
        type=LoanType(data["type"]),
        amount=data["amount"],
        status=LoanStatus(data["status"]),
        applied_date=data["applied_date"],
        last_updated=data["last_updated"],
        documents=list(data.get("documents") or []),
    )
