"""Tests for Application."""

import pytest

from supportdesk.app import Application
from supportdesk.config import TypingConfig
from supportdesk.data import get_customer_by_id
from supportdesk.models import ConversationStatus


@pytest.fixture
async def app():
    """Create and start an in-memory application without typing delays."""
    application = Application(db_path=":memory:", typing=TypingConfig.instant())
    await application.start()
    yield application
    await application.stop()


class TestApplicationStart:
    """Tests for Application.start()."""

    @pytest.mark.asyncio
    async def test_start_initializes_components(self, app):
        """Test that start initializes all components."""
        assert app._storage is not None
        assert app._tracker is not None
        assert app._store is not None
        assert app._engine is not None
        assert app._controller is not None
        assert app._auth is not None

    @pytest.mark.asyncio
    async def test_start_seeds_loan_applications(self, app):
        applications = await app.storage.load_loan_applications()
        assert {a.id for a in applications} == {"LA-2024-001", "LA-2024-002"}
        assert [a.id for a in app.loan_applications_for("cust-1")] == ["LA-2024-001"]

    @pytest.mark.asyncio
    async def test_engine_sees_loan_applications(self, app):
        assert "UNDER REVIEW" in app.engine.check_status("LA-2024-001").message


class TestApplicationProperties:
    """Tests for Application properties."""

    @pytest.mark.parametrize(
        "name", ["storage", "tracker", "store", "engine", "controller", "auth"]
    )
    def test_property_raises_when_not_started(self, name):
        """Test that components are unavailable before start()."""
        app = Application(db_path=":memory:")
        with pytest.raises(RuntimeError, match="Application not started"):
            getattr(app, name)


class TestConversations:
    """Tests for conversation creation, sessions and persistence."""

    @pytest.mark.asyncio
    async def test_new_conversation_greets_and_persists(self, app):
        session = await app.new_conversation(get_customer_by_id("cust-1"))

        saved = await app.storage.load_conversations()
        assert [c.id for c in saved] == [session.conversation_id]
        assert len(saved[0].messages) == 1
        events = await app.storage.get_trace_events(event_types=["conversation_created"])
        assert events[0].data["conversation_id"] == session.conversation_id

    @pytest.mark.asyncio
    async def test_session_is_reused(self, app):
        session = await app.new_conversation(get_customer_by_id("cust-1"))
        assert app.session(session.conversation_id) is session

        await app.close_session(session.conversation_id)
        assert app.session(session.conversation_id) is not session

    @pytest.mark.asyncio
    async def test_session_for_unknown_conversation(self, app):
        from supportdesk.errors import ConversationNotFoundError

        with pytest.raises(ConversationNotFoundError):
            app.session("conv-missing")

    @pytest.mark.asyncio
    async def test_every_turn_is_persisted(self, app):
        session = await app.new_conversation(get_customer_by_id("cust-1"))
        await session.select("agent")

        saved = await app.storage.load_conversations()
        assert saved[0].status == ConversationStatus.ACTIVE
        assert len(saved[0].messages) == 3


class TestRestart:
    """Tests for state surviving a restart."""

    @pytest.mark.asyncio
    async def test_conversations_and_sign_in_survive_restart(self, tmp_path):
        db_path = str(tmp_path / "supportdesk.db")

        first = Application(db_path=db_path, typing=TypingConfig.instant())
        await first.start()
        session = await first.new_conversation(get_customer_by_id("cust-1"))
        await first.auth.login_customer("rahul.sharma", "password123")
        await first.stop()

        second = Application(db_path=db_path, typing=TypingConfig.instant())
        await second.start()
        try:
            conversation = second.store.get(session.conversation_id)
            assert conversation is not None
            assert conversation.created_at.tzinfo is not None
            assert second.auth.current_user.id == "cust-1"
        finally:
            await second.stop()


class TestApplicationReset:
    """Tests for Application.reset()."""

    @pytest.mark.asyncio
    async def test_reset_clears_everything(self, app):
        await app.new_conversation(get_customer_by_id("cust-1"))
        await app.auth.login_customer("rahul.sharma", "password123")

        await app.reset()

        assert len(app.store) == 0
        assert app.auth.current_user is None
        assert await app.storage.load_conversations() == []
        assert len(await app.storage.load_loan_applications()) == 2
