"""Principal data models: customers and agents."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Role of a signed-in principal."""

    CUSTOMER = "customer"
    AGENT = "agent"


class AgentStatus(str, Enum):
    """Availability of a support agent."""

    ONLINE = "online"
    OFFLINE = "offline"
    BUSY = "busy"


@dataclass(frozen=True)
class Customer:
    """A customer identity issued by authentication."""

    id: str
    name: str
    phone: str
    username: str | None = None
    email: str | None = None

    @property
    def role(self) -> Role:
        return Role.CUSTOMER


@dataclass(frozen=True)
class Agent:
    """A support agent identity issued by authentication."""

    id: str
    name: str
    username: str
    email: str | None = None
    status: AgentStatus = AgentStatus.ONLINE

    @property
    def role(self) -> Role:
        return Role.AGENT


Principal = Customer | Agent
