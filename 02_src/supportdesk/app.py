"""Application bootstrap and lifecycle management."""

import os
from typing import Protocol

from .auth import AuthService
from .config import TypingConfig, resolve_db_path
from .data import default_loan_applications
from .dialogue import ChatSession, DialogueEngine
from .errors import ConversationNotFoundError
from .lifecycle import LifecycleController
from .logging_config import get_logger
from .models import Conversation, Customer, LoanApplication
from .storage import IStorage, Storage
from .store import ConversationStore
from .tracker import ITracker, Tracker

logger = get_logger(__name__)


class IApplication(Protocol):
    """Bootstrap, lifecycle and the components the API works with."""

    @property
    def storage(self) -> IStorage:
        ...

    @property
    def store(self) -> ConversationStore:
        ...

    @property
    def controller(self) -> LifecycleController:
        ...

    @property
    def auth(self) -> AuthService:
        ...

    async def start(self) -> None:
        """Initialize components in dependency order."""
        ...

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        ...

    async def reset(self) -> None:
        """Reset data between demo runs."""
        ...

    async def persist(self) -> None:
        """Mirror the conversation list to Storage."""
        ...

    async def new_conversation(self, customer: Customer) -> ChatSession:
        """Open a new query for the customer and greet them."""
        ...

    def session(self, conversation_id: str) -> ChatSession:
        """The open chat session for a conversation."""
        ...

    def loan_applications_for(self, customer_id: str) -> list[LoanApplication]:
        ...


class Application:
    """Main application bootstrap."""

    def __init__(self, db_path: str | None = None, typing: TypingConfig | None = None):
        env_db_path = os.getenv("DATABASE_URL") if db_path is None else db_path
        self._db_path = resolve_db_path(env_db_path)
        self._typing = typing or TypingConfig.from_env()

        # Components (will be initialized in start())
        self._storage: IStorage | None = None
        self._tracker: ITracker | None = None
        self._store: ConversationStore | None = None
        self._engine: DialogueEngine | None = None
        self._controller: LifecycleController | None = None
        self._auth: AuthService | None = None

        self._loan_applications: dict[str, LoanApplication] = {}
        self._sessions: dict[str, ChatSession] = {}

    async def start(self) -> None:
        """Initialize components in dependency order."""
        logger.info("Starting application")

        # 1. Storage (no dependencies)
        self._storage = Storage(self._db_path)
        await self._storage.init()
        logger.info("Storage initialized")

        # 2. Tracker (depends on Storage)
        self._tracker = Tracker(self._storage)

        # 3. ConversationStore, re-hydrated from Storage
        self._store = ConversationStore(await self._storage.load_conversations())
        logger.info("Loaded %s conversations", len(self._store))

        # 4. Loan applications and the DialogueEngine looking them up
        await self._load_loan_applications()
        self._engine = DialogueEngine(self._loan_applications.get)

        # 5. LifecycleController (depends on ConversationStore, Tracker)
        self._controller = LifecycleController(self._store, self._tracker)

        # 6. AuthService (depends on Storage, Tracker)
        self._auth = AuthService(self._storage, self._tracker)
        await self._auth.restore()

        logger.info("All components initialized successfully")

    async def stop(self) -> None:
        """Shutdown in reverse order."""
        await self._close_sessions()
        if self._store is not None and self._storage:
            await self.persist()
        if self._storage:
            await self._storage.close()
            logger.info("Storage closed")

    async def reset(self) -> None:
        """Drop all conversations, sessions and sign-ins; re-seed loan applications."""
        await self._close_sessions()

        if self._storage:
            await self._storage.clear()
            logger.info("Storage cleared")

        if self._store is not None:
            self._store.clear()

        if self._auth:
            await self._auth.logout()

        await self._load_loan_applications()
        logger.info("Reset complete")

    async def _load_loan_applications(self) -> None:
        applications = await self.storage.load_loan_applications()
        if not applications:
            applications = default_loan_applications()
            await self.storage.save_loan_applications(applications)
        self._loan_applications.clear()
        self._loan_applications.update({a.id: a for a in applications})

    async def _close_sessions(self) -> None:
        for session in list(self._sessions.values()):
            await session.close()
        self._sessions.clear()

    async def persist(self) -> None:
        """Mirror the conversation list to Storage (last write wins)."""
        if not await self.storage.save_conversations(self.store.snapshot()):
            logger.warning("Conversations not persisted; continuing with in-memory state")

    # Customer chat
    async def new_conversation(self, customer: Customer) -> ChatSession:
        """Open a new query for the customer and greet them."""
        conversation_id = self.store.create(customer)
        await self.tracker.track(
            event_type="conversation_created",
            actor=f"customer:{customer.id}",
            data={"conversation_id": conversation_id},
        )
        await self.persist()
        logger.info("Created conversation %s for %s", conversation_id, customer.id)

        session = self.session(conversation_id)
        await session.start()
        return session

    def session(self, conversation_id: str) -> ChatSession:
        """The open chat session for a conversation, created on first use."""
        existing = self._sessions.get(conversation_id)
        if existing is not None and not existing.closed:
            return existing

        conversation = self.store.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)

        session = ChatSession(
            conversation_id=conversation_id,
            customer=_customer_snapshot(conversation),
            store=self.store,
            controller=self.controller,
            engine=self.engine,
            typing=self._typing,
            on_change=self.persist,
        )
        self._sessions[conversation_id] = session
        return session

    async def close_session(self, conversation_id: str) -> None:
        session = self._sessions.pop(conversation_id, None)
        if session:
            await session.close()

    def loan_applications_for(self, customer_id: str) -> list[LoanApplication]:
        return [a for a in self._loan_applications.values() if a.customer_id == customer_id]

    @property
    def storage(self) -> IStorage:
        """Get storage instance."""
        if not self._storage:
            raise RuntimeError("Application not started")
        return self._storage

    @property
    def tracker(self) -> ITracker:
        if not self._tracker:
            raise RuntimeError("Application not started")
        return self._tracker

    @property
    def store(self) -> ConversationStore:
        """Get conversation store instance."""
        if self._store is None:
            raise RuntimeError("Application not started")
        return self._store

    @property
    def engine(self) -> DialogueEngine:
        if not self._engine:
            raise RuntimeError("Application not started")
        return self._engine

    @property
    def controller(self) -> LifecycleController:
        """Get lifecycle controller instance."""
        if not self._controller:
            raise RuntimeError("Application not started")
        return self._controller

    @property
    def auth(self) -> AuthService:
        if not self._auth:
            raise RuntimeError("Application not started")
        return self._auth


def _customer_snapshot(conversation: Conversation) -> Customer:
    return Customer(
        id=conversation.customer_id,
        name=conversation.customer_name,
        phone=conversation.customer_phone,
    )
