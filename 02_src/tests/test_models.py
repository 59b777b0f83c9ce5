"""Tests for data models and mock data."""

import dataclasses
from datetime import datetime, timezone

import pytest

from supportdesk.data import (
    default_loan_applications,
    get_customer_by_phone,
    quick_replies,
    quick_reply_categories,
    verify_agent_credentials,
    verify_customer_credentials,
)
from supportdesk.lifecycle import BOT_NAME, new_message
from supportdesk.models import (
    Agent,
    AgentStatus,
    Category,
    Conversation,
    ConversationStatus,
    Customer,
    DialogueState,
    Flow,
    LoanStatus,
    LoanType,
    Priority,
    Role,
    Sender,
)


class TestPrincipals:
    """Tests for Customer and Agent."""

    def test_customer_role(self):
        """Test that a customer reports the customer role."""
        customer = Customer(id="c1", name="Test", phone="+910000000000")
        assert customer.role == Role.CUSTOMER
        assert customer.username is None

    def test_agent_defaults_online(self):
        agent = Agent(id="a1", name="Agent", username="agent")
        assert agent.role == Role.AGENT
        assert agent.status == AgentStatus.ONLINE

    def test_principals_are_immutable(self):
        """Test that an issued principal cannot be changed."""
        customer = Customer(id="c1", name="Test", phone="+910000000000")
        with pytest.raises(dataclasses.FrozenInstanceError):
            customer.name = "Other"


class TestConversation:
    """Tests for Conversation model."""

    def test_defaults(self):
        now = datetime.now(timezone.utc)
        conv = Conversation(
            id="conv-1",
            customer_id="cust-1",
            customer_name="Rahul Sharma",
            customer_phone="+919876543210",
            status=ConversationStatus.WAITING,
            priority=Priority.MEDIUM,
            category=Category.GENERAL,
            created_at=now,
            last_message_at=now,
        )
        assert conv.messages == []
        assert conv.internal_notes == []
        assert conv.tags == []
        assert conv.assigned_agent_id is None
        assert conv.resolved_at is None
        assert conv.rating is None

    def test_status_values(self):
        assert [s.value for s in ConversationStatus] == [
            "waiting",
            "active",
            "resolved",
            "escalated",
        ]


class TestNewMessage:
    """Tests for message construction."""

    def test_customer_message_starts_read(self):
        msg = new_message("conv-1", Sender.CUSTOMER, "Hi", sender_name="Rahul")
        assert msg.read is True
        assert msg.id.startswith("msg-")
        assert msg.timestamp.tzinfo is not None

    def test_bot_message_starts_unread(self):
        """Test that bot messages are unread and named after the bot."""
        msg = new_message("conv-1", Sender.BOT, "Hello")
        assert msg.read is False
        assert msg.sender_name == BOT_NAME

    def test_agent_name_defaults_to_sender_value(self):
        msg = new_message("conv-1", Sender.AGENT, "Hello")
        assert msg.sender_name == "agent"
        assert msg.attachments == []


class TestDialogueState:
    """Tests for DialogueState."""

    def test_starts_at_greeting(self):
        state = DialogueState(conversation_id="conv-1")
        assert state.flow == Flow.GREETING
        assert state.awaiting_input is False
        assert state.options == []


class TestMockData:
    """Tests for the mock credential store."""

    def test_customer_credentials(self):
        customer = verify_customer_credentials("rahul.sharma", "password123")
        assert customer is not None
        assert customer.id == "cust-1"

    def test_wrong_password_and_unknown_user_look_the_same(self):
        assert verify_customer_credentials("rahul.sharma", "wrong") is None
        assert verify_customer_credentials("nobody", "password123") is None

    def test_customer_cannot_sign_in_as_agent(self):
        assert verify_agent_credentials("rahul.sharma", "password123") is None
        assert verify_agent_credentials("amit.kumar", "password123").id == "agent-1"

    def test_phone_lookup(self):
        assert get_customer_by_phone("+919876543211").name == "Priya Patel"
        assert get_customer_by_phone("+910000000000") is None

    def test_loan_applications(self):
        """Test that the seeded applications match the demo data."""
        apps = {a.id: a for a in default_loan_applications()}
        assert apps["LA-2024-001"].type == LoanType.BUSINESS
        assert apps["LA-2024-001"].amount == 500000
        assert apps["LA-2024-001"].status == LoanStatus.UNDER_REVIEW
        assert apps["LA-2024-002"].customer_id == "cust-2"

    def test_loan_applications_are_fresh_copies(self):
        first = default_loan_applications()
        first[0].documents.append("extra.pdf")
        assert "extra.pdf" not in default_loan_applications()[0].documents

    def test_quick_replies_by_category(self):
        assert len(quick_replies()) == 6
        assert len(quick_replies("all")) == 6
        assert [r.id for r in quick_replies("documents")] == ["qr-2", "qr-3"]
        assert quick_reply_categories()[0] == "all"
