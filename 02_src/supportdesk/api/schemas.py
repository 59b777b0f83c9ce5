"""Request and response models for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..dialogue import ChatSession
from ..lifecycle import needs_rating
from ..models import (
    Agent,
    Attachment,
    Conversation,
    LoanApplication,
    Principal,
    QuickReply,
)
from ..storage.codec import (
    conversation_to_dict,
    loan_application_to_dict,
    principal_to_dict,
)


# Requests
class LoginRequest(BaseModel):
    username: str
    password: str


class PhoneLoginRequest(BaseModel):
    phone: str


class AttachmentIn(BaseModel):
    """Attachment metadata; file content is never uploaded."""

    id: str
    name: str
    mime_type: str
    size: int = Field(ge=0)
    url: str | None = None


class SendMessageRequest(BaseModel):
    text: str = ""
    attachments: list[AttachmentIn] = Field(default_factory=list)


class SelectOptionRequest(BaseModel):
    value: str


class RatingRequest(BaseModel):
    score: int = Field(ge=1, le=5)
    comment: str | None = None


class AgentActionRequest(BaseModel):
    agent_id: str


class AgentTextRequest(BaseModel):
    agent_id: str
    text: str = ""
    attachments: list[AttachmentIn] = Field(default_factory=list)


# Responses
class StatusResponse(BaseModel):
    status: str


class PrincipalResponse(BaseModel):
    id: str
    name: str
    role: str
    phone: str | None = None
    username: str | None = None
    email: str | None = None
    status: str | None = None


class AttachmentOut(BaseModel):
    id: str
    name: str
    mime_type: str
    size: int
    url: str | None = None


class MessageOut(BaseModel):
    id: str
    conversation_id: str
    sender: str
    sender_name: str
    sender_id: str | None = None
    content: str
    timestamp: datetime
    read: bool
    attachments: list[AttachmentOut] = Field(default_factory=list)


class NoteOut(BaseModel):
    id: str
    agent_id: str
    agent_name: str
    content: str
    timestamp: datetime


class RatingOut(BaseModel):
    score: int
    comment: str | None = None


class CustomerConversationOut(BaseModel):
    """Conversation as the customer sees it (no internal notes)."""

    id: str
    customer_id: str
    customer_name: str
    customer_phone: str
    status: str
    priority: str
    category: str
    assigned_agent_id: str | None = None
    assigned_agent_name: str | None = None
    messages: list[MessageOut]
    created_at: datetime
    last_message_at: datetime
    resolved_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    rating: RatingOut | None = None
    needs_rating: bool = False


class AgentConversationOut(CustomerConversationOut):
    """Conversation as the agent dashboard sees it."""

    internal_notes: list[NoteOut] = Field(default_factory=list)
    unread_count: int = 0


class BotOptionOut(BaseModel):
    id: str
    label: str
    value: str
    next_flow: str | None = None


class ChatTurnResponse(BaseModel):
    """Conversation plus the customer's chat session state."""

    conversation: CustomerConversationOut
    flow: str
    awaiting_input: bool
    options: list[BotOptionOut]


class CustomerConversationsResponse(BaseModel):
    conversations: list[CustomerConversationOut]
    has_active_ticket: bool


class LoanApplicationOut(BaseModel):
    id: str
    customer_id: str
    type: str
    amount: int
    status: str
    applied_date: str
    last_updated: str
    documents: list[str]


class QuickReplyOut(BaseModel):
    id: str
    title: str
    content: str
    category: str


class TraceEventResponse(BaseModel):
    id: str
    event_type: str
    actor: str
    data: dict[str, Any]
    timestamp: datetime


# Converters
def principal_out(principal: Principal) -> dict:
    data = principal_to_dict(principal)
    if not isinstance(principal, Agent):
        data.pop("status", None)
    return data


def customer_conversation_out(conversation: Conversation) -> dict:
    data = conversation_to_dict(conversation)
    data.pop("internal_notes")
    data["needs_rating"] = needs_rating(conversation)
    return data


def agent_conversation_out(conversation: Conversation, unread_count: int) -> dict:
    data = conversation_to_dict(conversation)
    data["needs_rating"] = needs_rating(conversation)
    data["unread_count"] = unread_count
    return data


def chat_turn_out(conversation: Conversation, session: ChatSession) -> dict:
    return {
        "conversation": customer_conversation_out(conversation),
        "flow": session.state.flow.value,
        "awaiting_input": session.state.awaiting_input,
        "options": [
            {
                "id": option.id,
                "label": option.label,
                "value": option.value,
                "next_flow": option.next_flow.value if option.next_flow else None,
            }
            for option in session.state.options
        ],
    }


def loan_application_out(application: LoanApplication) -> dict:
    return loan_application_to_dict(application)


def quick_reply_out(reply: QuickReply) -> dict:
    return {
        "id": reply.id,
        "title": reply.title,
        "content": reply.content,
        "category": reply.category,
    }


def attachments_in(items: list[AttachmentIn]) -> list[Attachment]:
    return [
        Attachment(
            id=item.id,
            name=item.name,
            mime_type=item.mime_type,
            size=item.size,
            url=item.url,
        )
        for item in items
    ]
