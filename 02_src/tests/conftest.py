"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest_asyncio.fixture
async def storage():
    """Create in-memory storage for testing."""
    from supportdesk.storage import Storage

    st = Storage(":memory:")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def tracker(storage):
    """Create Tracker writing to in-memory storage."""
    from supportdesk.tracker import Tracker

    return Tracker(storage)


@pytest.fixture
def store():
    """Create an empty ConversationStore."""
    from supportdesk.store import ConversationStore

    return ConversationStore()


@pytest.fixture
def controller(store, tracker):
    """Create LifecycleController over the store."""
    from supportdesk.lifecycle import LifecycleController

    return LifecycleController(store, tracker)


@pytest.fixture
def engine():
    """Create DialogueEngine over the seeded loan applications."""
    from supportdesk.data import default_loan_applications
    from supportdesk.dialogue import DialogueEngine

    return DialogueEngine.from_applications(default_loan_applications())


@pytest.fixture
def typing_config():
    """Bot replies without typing delays."""
    from supportdesk.config import TypingConfig

    return TypingConfig.instant()


@pytest.fixture
def rahul():
    from supportdesk.data import get_customer_by_id

    return get_customer_by_id("cust-1")


@pytest.fixture
def priya():
    from supportdesk.data import get_customer_by_id

    return get_customer_by_id("cust-2")


@pytest.fixture
def amit():
    from supportdesk.data import get_agent_by_id

    return get_agent_by_id("agent-1")


@pytest_asyncio.fixture
async def make_session(store, controller, engine, typing_config):
    """Factory opening a chat session on a fresh conversation."""
    from supportdesk.dialogue import ChatSession

    sessions = []

    def factory(customer, typing=None):
        conversation_id = store.create(customer)
        session = ChatSession(
            conversation_id=conversation_id,
            customer=customer,
            store=store,
            controller=controller,
            engine=engine,
            typing=typing or typing_config,
        )
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        await session.close()
