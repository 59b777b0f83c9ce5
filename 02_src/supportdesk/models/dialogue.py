"""Dialogue-related data models."""

from dataclasses import dataclass, field
from enum import Enum


class Flow(str, Enum):
    """Named states of the bot's scripted dialogue."""

    GREETING = "greeting"
    LOAN_APPLICATION = "loan_application"
    DOCUMENT_REQUIREMENTS = "document_requirements"
    STATUS_CHECK = "status_check"
    ESCALATION = "escalation"
    GENERAL_QUERY = "general_query"


@dataclass(frozen=True)
class BotOption:
    """A selectable quick option offered by the bot."""

    id: str
    label: str
    value: str
    next_flow: Flow | None = None


@dataclass(frozen=True)
class BotResponse:
    """What the bot says on its turn."""

    message: str
    options: tuple[BotOption, ...] = ()
    requires_input: bool = False
    input_type: str | None = None  # "text", "number", "phone"
    next_flow: Flow | None = None


@dataclass
class DialogueState:
    """Transient state of one open chat session."""

    conversation_id: str
    flow: Flow = Flow.GREETING
    awaiting_input: bool = False
    options: list[BotOption] = field(default_factory=list)
