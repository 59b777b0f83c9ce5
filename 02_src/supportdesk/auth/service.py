"""AuthService: credential checks and the signed-in principal."""

from typing import Protocol

from ..data import (
    get_customer_by_phone,
    verify_agent_credentials,
    verify_customer_credentials,
)
from ..errors import AuthenticationError
from ..logging_config import get_logger
from ..models import Agent, Customer, Principal
from ..storage import IStorage
from ..tracker import ITracker

logger = get_logger(__name__)


class IAuthService(Protocol):
    """Verifies credentials and remembers who is signed in."""

    async def login_customer(self, username: str, password: str) -> Customer | None:
        """Sign a customer in. None on bad credentials."""
        ...

    async def login_agent(self, username: str, password: str) -> Agent | None:
        """Sign an agent in. None on bad credentials."""
        ...

    async def logout(self) -> None:
        """Forget the signed-in principal."""
        ...


class AuthService:
    """Signs principals in against the mock credential tables."""

    def __init__(self, storage: IStorage, tracker: ITracker):
        self._storage = storage
        self._tracker = tracker
        self._user: Principal | None = None

    @property
    def current_user(self) -> Principal | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    async def restore(self) -> Principal | None:
        """Reload the signed-in principal saved by a previous run."""
        self._user = await self._storage.get_auth_user()
        if self._user:
            logger.info("Restored signed-in %s %s", self._user.role.value, self._user.id)
        return self._user

    async def _sign_in(self, principal: Principal) -> None:
        self._user = principal
        await self._storage.save_auth_user(principal)
        await self._tracker.track(
            event_type="user_logged_in",
            actor=f"{principal.role.value}:{principal.id}",
            data={"user_id": principal.id, "role": principal.role.value},
        )

    async def login_customer(self, username: str, password: str) -> Customer | None:
        """Sign a customer in. None on unknown user or wrong password alike."""
        customer = verify_customer_credentials(username, password)
        if customer is None:
            logger.info("Customer login failed")
            return None
        await self._sign_in(customer)
        return customer

    async def login_agent(self, username: str, password: str) -> Agent | None:
        """Sign an agent in. None on unknown user or wrong password alike."""
        agent = verify_agent_credentials(username, password)
        if agent is None:
            logger.info("Agent login failed")
            return None
        await self._sign_in(agent)
        return agent

    async def login_by_phone(self, phone: str) -> Customer | None:
        """Passwordless customer sign-in by registered phone number."""
        customer = get_customer_by_phone(phone)
        if customer is None:
            return None
        await self._sign_in(customer)
        return customer

    async def logout(self) -> None:
        """Forget the signed-in principal."""
        if self._user:
            await self._tracker.track(
                event_type="user_logged_out",
                actor=f"{self._user.role.value}:{self._user.id}",
                data={"user_id": self._user.id},
            )
        self._user = None
        await self._storage.clear_auth_user()

    def require_user(self) -> Principal:
        """The signed-in principal; raises AuthenticationError if there is none."""
        if self._user is None:
            raise AuthenticationError("Not signed in")
        return self._user
