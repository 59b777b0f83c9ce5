"""ChatSession: one customer's open chat on one conversation."""

import asyncio
import random
from collections.abc import Awaitable, Callable

from ..config import TypingConfig
from ..errors import ConversationNotFoundError
from ..lifecycle import ILifecycleController, TextOutcome
from ..logging_config import get_logger
from ..models import (
    Attachment,
    BotOption,
    BotResponse,
    Customer,
    DialogueState,
    Flow,
    Message,
    Sender,
)
from ..store import IConversationStore
from .engine import AGENT_VALUE, IDialogueEngine

logger = get_logger(__name__)

ChangeCallback = Callable[[], Awaitable[None]]


class ChatSession:
    """Sequences customer, controller and bot turns for one conversation.

    Turns run one at a time under a per-session lock. Bot replies are written
    after a simulated typing delay by tasks owned by the session. close()
    cancels every such task, and a cancelled task never writes to the store.
    """

    def __init__(
        self,
        conversation_id: str,
        customer: Customer,
        store: IConversationStore,
        controller: ILifecycleController,
        engine: IDialogueEngine,
        typing: TypingConfig | None = None,
        on_change: ChangeCallback | None = None,
        rng: random.Random | None = None,
    ):
        self._conversation_id = conversation_id
        self._customer = customer
        self._store = store
        self._controller = controller
        self._engine = engine
        self._typing = typing or TypingConfig()
        self._on_change = on_change
        self._rng = rng or random.Random()

        self.state = DialogueState(conversation_id=conversation_id)
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    @property
    def conversation_id(self) -> str:
        return self._conversation_id

    @property
    def customer(self) -> Customer:
        return self._customer

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_typing(self) -> bool:
        """True while a bot reply is waiting out its typing delay."""
        return any(not task.done() for task in self._pending)

    async def start(self) -> None:
        """Greet the customer if the conversation has no messages yet."""
        conversation = self._store.get(self._conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(self._conversation_id)

        async with self._lock:
            if not conversation.messages:
                await self._run_flow(Flow.GREETING, delay=self._typing.greeting_delay)

    async def close(self) -> None:
        """Stop the session and drop any bot reply still being typed."""
        self._closed = True
        for task in list(self._pending):
            if task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Dropped pending bot reply for %s", self._conversation_id)
        self._pending.clear()

    async def send_text(
        self, text: str, attachments: list[Attachment] | None = None
    ) -> TextOutcome:
        """Handle a typed customer message and let the bot answer."""
        async with self._lock:
            self._ensure_open()

            outcome = await self._controller.handle_customer_text(
                self._conversation_id, self._customer, text, attachments
            )
            await self._changed()

            if outcome.refused:
                return outcome

            if self.state.awaiting_input and self.state.flow == Flow.STATUS_CHECK:
                self.state.awaiting_input = False
                await self._run_flow(Flow.STATUS_CHECK, user_input=text.strip())
            else:
                await self._run_flow(Flow.GENERAL_QUERY)

            return outcome

    async def select(self, value: str) -> BotOption:
        """Handle a click on a quick option, offered or from the main menu."""
        async with self._lock:
            self._ensure_open()

            option = next((o for o in self.state.options if o.value == value), None)
            if option is None:
                option = self._engine.option_for(value) or BotOption(
                    id=value, label=value, value=value
                )

            await self._controller.post_message(
                self._conversation_id,
                Sender.CUSTOMER,
                option.label,
                sender_id=self._customer.id,
                sender_name=self._customer.name,
            )
            self.state.options = []
            await self._changed()

            if option.value == AGENT_VALUE or option.next_flow == Flow.ESCALATION:
                if not await self._controller.request_agent(self._conversation_id):
                    await self._schedule(
                        self._typing.refusal_delay,
                        lambda: self._controller.refuse_escalation(self._conversation_id),
                    )
                    return option
                await self._changed()
                await self._run_flow(Flow.ESCALATION)
            elif option.next_flow:
                await self._run_flow(option.next_flow)
            else:
                await self._reply(lambda: self._engine.handle_selection(option.value))

            return option

    async def _run_flow(
        self, flow: Flow, user_input: str | None = None, delay: float | None = None
    ) -> None:
        self.state.flow = flow
        await self._reply(lambda: self._engine.respond(flow, user_input), delay)

    async def _reply(
        self, make_response: Callable[[], BotResponse], delay: float | None = None
    ) -> None:
        async def write() -> Message:
            response = make_response()
            message = await self._controller.post_bot_message(
                self._conversation_id, response.message
            )
            self.state.options = list(response.options)
            self.state.awaiting_input = response.requires_input
            if response.next_flow:
                self.state.flow = response.next_flow
            return message

        await self._schedule(self._typing_delay() if delay is None else delay, write)

    async def _schedule(
        self, delay: float, write: Callable[[], Awaitable[Message]]
    ) -> Message | None:
        """Run `write` after `delay` seconds unless the session closes first."""

        async def deferred() -> Message | None:
            if delay > 0:
                await asyncio.sleep(delay)
            if self._closed:
                return None
            message = await write()
            await self._changed()
            return message

        task = asyncio.create_task(deferred())
        self._pending.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if not self._closed:
                raise
            return None
        finally:
            self._pending.discard(task)

    def _typing_delay(self) -> float:
        return self._rng.uniform(self._typing.min_delay, self._typing.max_delay)

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Chat session closed")

    async def _changed(self) -> None:
        if self._on_change:
            await self._on_change()
