"""LifecycleController: business rules for conversation status changes."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from ..errors import (
    ActiveTicketConflictError,
    ConversationClosedError,
    ConversationNotFoundError,
    InvalidRatingError,
    InvalidTransitionError,
)
from ..logging_config import get_logger
from ..models import (
    Agent,
    Attachment,
    Conversation,
    ConversationStatus,
    Customer,
    InternalNote,
    Message,
    Rating,
    Sender,
)
from ..store import IConversationStore
from ..tracker import ITracker
from .classifier import Intent, bot_asks_for_more, classify, declines_more

logger = get_logger(__name__)

BOT_ID = "bot-1"
BOT_NAME = "KRUX Bot"
ATTACHMENT_ONLY_TEXT = "📎 Attached file(s)"
ALREADY_ACTIVE_MESSAGE = (
    "You already have an active ticket. "
    "Please wait for it to be resolved before creating a new one."
)


def new_message(
    conversation_id: str,
    sender: Sender,
    content: str,
    sender_id: str | None = None,
    sender_name: str | None = None,
    attachments: list[Attachment] | None = None,
) -> Message:
    """Build a message; only the customer's own messages start out read."""
    if sender_name is None:
        sender_name = BOT_NAME if sender == Sender.BOT else sender.value
    return Message(
        id=f"msg-{uuid.uuid4().hex}",
        conversation_id=conversation_id,
        sender=sender,
        sender_name=sender_name,
        sender_id=sender_id,
        content=content,
        timestamp=datetime.now(timezone.utc),
        read=sender == Sender.CUSTOMER,
        attachments=list(attachments or []),
    )


@dataclass(frozen=True)
class TextOutcome:
    """What a customer's free-text message did to its conversation."""

    intent: Intent
    resolved: bool = False
    activated: bool = False
    refused: bool = False


class ILifecycleController(Protocol):
    """Drives conversation status from customer text and agent actions."""

    async def handle_customer_text(
        self,
        conversation_id: str,
        customer: Customer,
        text: str,
        attachments: list[Attachment] | None = None,
    ) -> TextOutcome:
        """Classify, transition, append the customer message (and refusal)."""
        ...

    async def request_agent(self, conversation_id: str, reopen: bool = False) -> bool:
        """Promote to active unless the customer has another active ticket."""
        ...

    async def refuse_escalation(self, conversation_id: str) -> Message:
        """Tell the customer they already have an active ticket."""
        ...

    async def post_message(
        self,
        conversation_id: str,
        sender: Sender,
        content: str,
        sender_id: str | None = None,
        sender_name: str | None = None,
        attachments: list[Attachment] | None = None,
    ) -> Message:
        """Append a message to the conversation log."""
        ...

    async def post_bot_message(self, conversation_id: str, content: str) -> Message:
        """Append a bot message."""
        ...


class LifecycleController:
    """Applies resolution/escalation heuristics and explicit agent actions."""

    def __init__(self, store: IConversationStore, tracker: ITracker):
        self._store = store
        self._tracker = tracker

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def _set_status(
        self, conversation: Conversation, status: ConversationStatus, actor: str
    ) -> None:
        previous = conversation.status
        self._store.set_status(conversation.id, status)
        logger.info(
            "Conversation %s: %s -> %s (%s)",
            conversation.id,
            previous.value,
            status.value,
            actor,
        )
        await self._tracker.track(
            event_type="status_changed",
            actor=actor,
            data={
                "conversation_id": conversation.id,
                "from": previous.value,
                "to": status.value,
            },
        )

    # Messages
    async def post_message(
        self,
        conversation_id: str,
        sender: Sender,
        content: str,
        sender_id: str | None = None,
        sender_name: str | None = None,
        attachments: list[Attachment] | None = None,
    ) -> Message:
        """Append a message to the conversation log."""
        message = new_message(
            conversation_id, sender, content, sender_id, sender_name, attachments
        )
        self._store.append(conversation_id, message)
        await self._tracker.track(
            event_type="message_appended",
            actor=sender.value,
            data={
                "conversation_id": conversation_id,
                "message_id": message.id,
                "attachment_count": len(message.attachments),
            },
        )
        return message

    async def post_bot_message(self, conversation_id: str, content: str) -> Message:
        return await self.post_message(
            conversation_id, Sender.BOT, content, sender_id=BOT_ID, sender_name=BOT_NAME
        )

    # Customer side
    def _can_auto_resolve(self, conversation: Conversation) -> bool:
        return (
            conversation.status != ConversationStatus.RESOLVED
            and not conversation.assigned_agent_id
        )

    async def apply_customer_text(self, conversation_id: str, text: str) -> TextOutcome:
        """Run resolution then escalation rules for one customer message.

        Resolution is evaluated first. A message matching both keyword sets
        is resolved and then re-opened as an active ticket.
        """
        conversation = self._require(conversation_id)
        intent = classify(text)
        resolved = activated = refused = False

        if Intent.RESOLUTION in intent:
            if self._can_auto_resolve(conversation):
                await self._set_status(conversation, ConversationStatus.RESOLVED, "customer")
                resolved = True

            last_bot = next(
                (m for m in reversed(conversation.messages) if m.sender == Sender.BOT),
                None,
            )
            if (
                last_bot
                and bot_asks_for_more(last_bot.content)
                and declines_more(text)
                and self._can_auto_resolve(conversation)
            ):
                await self._set_status(conversation, ConversationStatus.RESOLVED, "customer")
                resolved = True

        if Intent.ESCALATION in intent:
            before = conversation.status
            if await self.request_agent(conversation_id, reopen=resolved):
                activated = (
                    before != ConversationStatus.ACTIVE
                    and conversation.status == ConversationStatus.ACTIVE
                )
            else:
                refused = True

        return TextOutcome(intent=intent, resolved=resolved, activated=activated, refused=refused)

    async def handle_customer_text(
        self,
        conversation_id: str,
        customer: Customer,
        text: str,
        attachments: list[Attachment] | None = None,
    ) -> TextOutcome:
        """Classify, transition, then append the customer message (and refusal)."""
        text = text.strip()
        outcome = await self.apply_customer_text(conversation_id, text)

        content = text or (ATTACHMENT_ONLY_TEXT if attachments else "")
        await self.post_message(
            conversation_id,
            Sender.CUSTOMER,
            content,
            sender_id=customer.id,
            sender_name=customer.name,
            attachments=attachments,
        )

        if outcome.refused:
            await self.refuse_escalation(conversation_id)

        return outcome

    async def request_agent(self, conversation_id: str, reopen: bool = False) -> bool:
        """Make this the customer's active ticket.

        Returns False, leaving status alone, when the customer already has
        another active ticket. Only waiting conversations are promoted, plus a
        conversation resolved by the same message when `reopen` is set.
        """
        conversation = self._require(conversation_id)

        existing = self._store.active_ticket_for(
            conversation.customer_id, exclude=conversation_id
        )
        if existing is not None:
            logger.info(
                "Escalation of %s refused: %s is already active",
                conversation_id,
                existing.id,
            )
            await self._tracker.track(
                event_type="escalation_refused",
                actor="customer",
                data={
                    "conversation_id": conversation_id,
                    "active_conversation_id": existing.id,
                },
            )
            return False

        promotable = conversation.status == ConversationStatus.WAITING or (
            reopen and conversation.status == ConversationStatus.RESOLVED
        )
        if promotable:
            await self._set_status(conversation, ConversationStatus.ACTIVE, "customer")
        return True

    async def refuse_escalation(self, conversation_id: str) -> Message:
        """Tell the customer they already have an active ticket."""
        return await self.post_bot_message(conversation_id, ALREADY_ACTIVE_MESSAGE)

    # Agent side
    async def pick_up(self, conversation_id: str, agent: Agent) -> Conversation:
        """Assign an agent to an unassigned open conversation.

        A waiting query becomes an active ticket, which is refused while
        the customer has another active ticket.
        """
        conversation = self._require(conversation_id)
        if conversation.assigned_agent_id or conversation.status not in (
            ConversationStatus.WAITING,
            ConversationStatus.ACTIVE,
        ):
            return conversation

        if conversation.status == ConversationStatus.WAITING:
            existing = self._store.active_ticket_for(
                conversation.customer_id, exclude=conversation_id
            )
            if existing is not None:
                raise ActiveTicketConflictError(conversation.customer_id, existing.id)

        self._store.assign_agent(conversation_id, agent.id, agent.name)
        await self._tracker.track(
            event_type="agent_assigned",
            actor=f"agent:{agent.id}",
            data={"conversation_id": conversation_id, "agent_name": agent.name},
        )

        if conversation.status == ConversationStatus.WAITING:
            await self._set_status(conversation, ConversationStatus.ACTIVE, f"agent:{agent.id}")

        return conversation

    async def open_for_agent(self, conversation_id: str, agent: Agent) -> Conversation:
        """Agent selects a conversation: pick it up and mark messages read."""
        conversation = await self.pick_up(conversation_id, agent)
        self._store.mark_read(conversation_id)
        return conversation

    async def agent_reply(
        self,
        conversation_id: str,
        agent: Agent,
        text: str,
        attachments: list[Attachment] | None = None,
    ) -> Message:
        """Append an agent message, picking the conversation up first."""
        conversation = self._require(conversation_id)
        if conversation.status == ConversationStatus.RESOLVED:
            raise ConversationClosedError(conversation_id)

        await self.pick_up(conversation_id, agent)
        text = text.strip()
        return await self.post_message(
            conversation_id,
            Sender.AGENT,
            text or (ATTACHMENT_ONLY_TEXT if attachments else ""),
            sender_id=agent.id,
            sender_name=agent.name,
            attachments=attachments,
        )

    async def resolve(self, conversation_id: str, agent: Agent) -> Conversation:
        """Agent resolves an active or escalated conversation."""
        conversation = await self.pick_up(conversation_id, agent)
        if conversation.status not in (
            ConversationStatus.ACTIVE,
            ConversationStatus.ESCALATED,
        ):
            raise InvalidTransitionError(
                conversation_id, conversation.status.value, ConversationStatus.RESOLVED.value
            )
        await self._set_status(conversation, ConversationStatus.RESOLVED, f"agent:{agent.id}")
        return conversation

    async def escalate(self, conversation_id: str, agent: Agent) -> Conversation:
        """Agent escalates an active conversation."""
        conversation = await self.pick_up(conversation_id, agent)
        if conversation.status != ConversationStatus.ACTIVE:
            raise InvalidTransitionError(
                conversation_id, conversation.status.value, ConversationStatus.ESCALATED.value
            )
        await self._set_status(conversation, ConversationStatus.ESCALATED, f"agent:{agent.id}")
        return conversation

    async def add_note(self, conversation_id: str, agent: Agent, text: str) -> InternalNote:
        """Append an agent-only note."""
        self._require(conversation_id)
        note = InternalNote(
            id=f"note-{uuid.uuid4().hex}",
            agent_id=agent.id,
            agent_name=agent.name,
            content=text.strip(),
            timestamp=datetime.now(timezone.utc),
        )
        self._store.add_note(conversation_id, note)
        await self._tracker.track(
            event_type="note_added",
            actor=f"agent:{agent.id}",
            data={"conversation_id": conversation_id, "note_id": note.id},
        )
        return note

    async def rate(
        self, conversation_id: str, score: int, comment: str | None = None
    ) -> Rating:
        """Store the customer's 1-5 rating of a resolved conversation."""
        conversation = self._require(conversation_id)
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise InvalidRatingError(f"Rating score must be between 1 and 5, got {score!r}")
        if conversation.status != ConversationStatus.RESOLVED:
            raise InvalidRatingError(f"Conversation {conversation_id} is not resolved")

        rating = Rating(score=score, comment=(comment or "").strip() or None)
        self._store.set_rating(conversation_id, rating)
        await self._tracker.track(
            event_type="rating_submitted",
            actor="customer",
            data={"conversation_id": conversation_id, "score": score},
        )
        return rating


def needs_rating(conversation: Conversation) -> bool:
    """Resolved by an agent and not rated yet."""
    return (
        conversation.status == ConversationStatus.RESOLVED
        and bool(conversation.assigned_agent_id)
        and conversation.rating is None
    )
