"""Tests for LifecycleController."""

import pytest

from supportdesk.errors import (
    ActiveTicketConflictError,
    ConversationClosedError,
    ConversationNotFoundError,
    InvalidRatingError,
    InvalidTransitionError,
)
from supportdesk.lifecycle import ALREADY_ACTIVE_MESSAGE, Intent, needs_rating
from supportdesk.models import Attachment, Category, ConversationStatus, Sender


class TestCustomerText:
    """Tests for handle_customer_text()."""

    async def test_plain_text_keeps_waiting(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        outcome = await controller.handle_customer_text(conversation_id, rahul, "LA-2024-001")

        conversation = store.get(conversation_id)
        assert outcome.intent == Intent.NONE
        assert conversation.status == ConversationStatus.WAITING
        assert conversation.messages[-1].sender == Sender.CUSTOMER
        assert conversation.messages[-1].content == "LA-2024-001"
        assert conversation.messages[-1].sender_id == rahul.id

    async def test_thanks_resolves(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        outcome = await controller.handle_customer_text(
            conversation_id, rahul, "Thanks, that's all"
        )

        conversation = store.get(conversation_id)
        assert outcome.resolved
        assert conversation.status == ConversationStatus.RESOLVED
        assert conversation.resolved_at is not None

    async def test_agent_request_activates(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        outcome = await controller.handle_customer_text(
            conversation_id, rahul, "I want to talk to an agent"
        )

        assert outcome.activated
        assert store.get(conversation_id).status == ConversationStatus.ACTIVE

    async def test_agent_request_refused_with_active_ticket(self, store, controller, rahul):
        """Test that a second active ticket is refused and the message kept."""
        first = store.create(rahul)
        await controller.request_agent(first)
        second = store.create(rahul)

        outcome = await controller.handle_customer_text(second, rahul, "connect to agent")

        conversation = store.get(second)
        assert outcome.refused
        assert conversation.status == ConversationStatus.WAITING
        assert [m.sender for m in conversation.messages] == [Sender.CUSTOMER, Sender.BOT]
        assert conversation.messages[-1].content == ALREADY_ACTIVE_MESSAGE
        assert store.get(first).status == ConversationStatus.ACTIVE

    async def test_other_customers_are_independent(self, store, controller, rahul, priya):
        await controller.request_agent(store.create(rahul))
        conversation_id = store.create(priya)

        outcome = await controller.handle_customer_text(conversation_id, priya, "talk to agent")
        assert outcome.activated

    async def test_overlap_resolves_then_reopens(self, store, controller, rahul):
        """Test a message carrying both intents."""
        conversation_id = store.create(rahul)
        outcome = await controller.handle_customer_text(
            conversation_id, rahul, "Thanks, connect to agent"
        )

        conversation = store.get(conversation_id)
        assert outcome.resolved and outcome.activated
        assert conversation.status == ConversationStatus.ACTIVE
        assert conversation.resolved_at is not None

    async def test_assigned_conversation_is_not_auto_resolved(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        await controller.pick_up(conversation_id, amit)

        outcome = await controller.handle_customer_text(conversation_id, rahul, "thanks")
        assert not outcome.resolved
        assert store.get(conversation_id).status == ConversationStatus.ACTIVE

    async def test_resolved_is_terminal_for_agent_requests(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        await controller.handle_customer_text(conversation_id, rahul, "thanks")

        await controller.handle_customer_text(conversation_id, rahul, "escalate please")
        assert store.get(conversation_id).status == ConversationStatus.RESOLVED

    async def test_attachment_only_message(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        attachment = Attachment(id="att-1", name="pan.jpg", mime_type="image/jpeg", size=10)

        await controller.handle_customer_text(conversation_id, rahul, "  ", [attachment])

        message = store.get(conversation_id).messages[-1]
        assert message.content
        assert message.attachments == [attachment]

    async def test_unknown_conversation(self, controller, rahul):
        with pytest.raises(ConversationNotFoundError):
            await controller.handle_customer_text("conv-missing", rahul, "hi")

    async def test_trace_write_failure_keeps_turn_whole(
        self, storage, store, controller, rahul
    ):
        """Test that a failed trace write neither raises nor drops the message."""
        await storage._conn.execute("DROP TABLE trace_events")
        await storage._conn.commit()
        conversation_id = store.create(rahul)

        outcome = await controller.handle_customer_text(
            conversation_id, rahul, "thanks, that's all"
        )

        conversation = store.get(conversation_id)
        assert outcome.resolved
        assert conversation.status == ConversationStatus.RESOLVED
        assert [m.content for m in conversation.messages] == ["thanks, that's all"]


class TestAgentActions:
    """Tests for explicit agent transitions."""

    async def test_pick_up_waiting(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        conversation = await controller.pick_up(conversation_id, amit)

        assert conversation.status == ConversationStatus.ACTIVE
        assert conversation.assigned_agent_id == amit.id
        assert conversation.category == Category.ESCALATION

    async def test_pick_up_refused_with_other_active_ticket(self, store, controller, rahul, amit):
        await controller.request_agent(store.create(rahul))
        waiting = store.create(rahul)

        with pytest.raises(ActiveTicketConflictError):
            await controller.pick_up(waiting, amit)
        assert store.get(waiting).assigned_agent_id is None

    async def test_pick_up_keeps_existing_assignment(self, store, controller, rahul, amit):
        from supportdesk.data import get_agent_by_id

        conversation_id = store.create(rahul)
        await controller.pick_up(conversation_id, amit)
        await controller.pick_up(conversation_id, get_agent_by_id("agent-2"))

        assert store.get(conversation_id).assigned_agent_id == amit.id

    async def test_open_marks_read(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        await controller.post_bot_message(conversation_id, "Hello")
        assert store.unread_count(conversation_id) == 1

        await controller.open_for_agent(conversation_id, amit)
        assert store.unread_count(conversation_id) == 0

    async def test_agent_reply(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        message = await controller.agent_reply(conversation_id, amit, "Hi Rahul")

        assert message.sender == Sender.AGENT
        assert message.sender_name == "Amit Kumar"
        assert message.read is False
        assert store.get(conversation_id).status == ConversationStatus.ACTIVE

    async def test_agent_reply_on_resolved_refused(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        await controller.pick_up(conversation_id, amit)
        await controller.resolve(conversation_id, amit)

        with pytest.raises(ConversationClosedError):
            await controller.agent_reply(conversation_id, amit, "One more thing")

    async def test_resolve_and_escalate(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        await controller.pick_up(conversation_id, amit)

        await controller.escalate(conversation_id, amit)
        assert store.get(conversation_id).status == ConversationStatus.ESCALATED

        await controller.resolve(conversation_id, amit)
        conversation = store.get(conversation_id)
        assert conversation.status == ConversationStatus.RESOLVED
        assert conversation.resolved_at is not None

    async def test_escalate_resolved_is_invalid(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        await controller.handle_customer_text(conversation_id, rahul, "thanks")

        with pytest.raises(InvalidTransitionError):
            await controller.escalate(conversation_id, amit)
        with pytest.raises(InvalidTransitionError):
            await controller.resolve(conversation_id, amit)

    async def test_add_note(self, store, controller, rahul, amit):
        conversation_id = store.create(rahul)
        note = await controller.add_note(conversation_id, amit, " Asked for ITR ")

        assert note.content == "Asked for ITR"
        assert store.get(conversation_id).internal_notes == [note]
        assert store.get(conversation_id).messages == []


class TestRatings:
    """Tests for rate() and needs_rating()."""

    async def _resolved_by_agent(self, store, controller, customer, agent):
        conversation_id = store.create(customer)
        await controller.pick_up(conversation_id, agent)
        await controller.resolve(conversation_id, agent)
        return conversation_id

    async def test_rate(self, store, controller, rahul, amit):
        conversation_id = await self._resolved_by_agent(store, controller, rahul, amit)
        assert needs_rating(store.get(conversation_id))

        rating = await controller.rate(conversation_id, 5, "  Helpful ")

        assert rating.score == 5
        assert rating.comment == "Helpful"
        assert not needs_rating(store.get(conversation_id))

    @pytest.mark.parametrize("score", [0, 6, True, 4.5])
    async def test_invalid_score(self, store, controller, rahul, amit, score):
        conversation_id = await self._resolved_by_agent(store, controller, rahul, amit)
        with pytest.raises(InvalidRatingError):
            await controller.rate(conversation_id, score)

    async def test_unresolved_cannot_be_rated(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        with pytest.raises(ValueError):
            await controller.rate(conversation_id, 3)

    async def test_bot_resolved_needs_no_rating(self, store, controller, rahul):
        conversation_id = store.create(rahul)
        await controller.handle_customer_text(conversation_id, rahul, "thanks")
        assert not needs_rating(store.get(conversation_id))
