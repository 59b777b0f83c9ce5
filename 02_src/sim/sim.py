"""SIM implementation - scripted customer scenario against the HTTP API."""

import asyncio
import random
from typing import Any, Protocol

import httpx

from supportdesk.logging_config import get_logger
from supportdesk.tracker import ITracker

logger = get_logger(__name__)

SCENARIO = "rahul_status_check"


class ISim(Protocol):
    """Drive the API the way a customer would."""

    async def start(self) -> None:
        """Start the scenario in the background."""
        ...

    async def stop(self) -> None:
        """Stop the scenario."""
        ...


class Sim:
    """Plays Rahul: status check, agent request, then a refused second ticket."""

    def __init__(
        self,
        api_url: str = "http://localhost:8000",
        tracker: ITracker | None = None,
        username: str = "rahul.sharma",
        password: str = "password123",
        pause: tuple[float, float] = (1.0, 3.0),
    ):
        self._api_url = api_url
        self._tracker = tracker
        self._username = username
        self._password = password
        self._pause = pause
        self._running = False
        self._task: asyncio.Task | None = None
        self._client: httpx.AsyncClient | None = None

    def set_tracker(self, tracker: ITracker) -> None:
        """Inject tracker for SIM trace events."""
        self._tracker = tracker

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return

        self._running = True
        self._client = httpx.AsyncClient(base_url=self._api_url, timeout=10.0)
        self._task = asyncio.create_task(self._run_scenario())

    async def stop(self) -> None:
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.debug("SIM task cancelled")
            self._task = None

        if self._client:
            await self._client.aclose()
            self._client = None

    async def _run_scenario(self) -> None:
        steps = 0
        try:
            await self._track("sim_started", {"scenario": SCENARIO})

            customer = await self._post(
                "/api/auth/customer/login",
                {"username": self._username, "password": self._password},
            )
            customer_id = customer["id"]

            turn = await self._post(f"/api/customers/{customer_id}/conversations")
            conversation_id = turn["conversation"]["id"]

            script = [
                ("options", {"value": "status"}),
                ("messages", {"text": "LA-2024-001"}),
                ("messages", {"text": "I want to talk to an agent"}),
            ]
            for endpoint, payload in script:
                if not self._running:
                    return
                await self._pause_between_turns()
                turn = await self._post(
                    f"/api/conversations/{conversation_id}/{endpoint}", payload
                )
                steps += 1
                self._log_bot_reply(turn)

            # Second query while the first ticket is still active: refused
            await self._pause_between_turns()
            turn = await self._post(f"/api/customers/{customer_id}/conversations")
            await self._pause_between_turns()
            turn = await self._post(
                f"/api/conversations/{turn['conversation']['id']}/options",
                {"value": "agent"},
            )
            steps += 1
            self._log_bot_reply(turn)

        except httpx.HTTPError as e:
            logger.error("SIM scenario error: %s", e)
        finally:
            self._running = False
            await self._track("sim_completed", {"scenario": SCENARIO, "steps": steps})

    async def _post(self, path: str, payload: dict | None = None) -> dict[str, Any]:
        if not self._client:
            raise RuntimeError("SIM not started")
        response = await self._client.post(path, json=payload)
        response.raise_for_status()
        logger.info("SIM: POST %s -> %s", path, response.status_code)
        return response.json()

    async def _pause_between_turns(self) -> None:
        await asyncio.sleep(random.uniform(*self._pause))

    async def _track(self, event_type: str, data: dict) -> None:
        if self._tracker:
            await self._tracker.track(event_type, "sim", data)

    def _log_bot_reply(self, turn: dict) -> None:
        messages = turn["conversation"]["messages"]
        if messages and messages[-1]["sender"] != "customer":
            logger.info("SIM: %s replied: %s", messages[-1]["sender_name"], messages[-1]["content"])
