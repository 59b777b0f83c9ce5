"""Control API routes: demo reset and the customer simulator."""

from typing import Any

from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ...logging_config import get_logger
from ..schemas import StatusResponse

logger = get_logger(__name__)

# Simulator registered by main.py
_sim_instance: Any = None


def set_sim_instance(sim: Any) -> None:
    global _sim_instance
    _sim_instance = sim


def get_sim_instance() -> Any:
    return _sim_instance


def create_control_router(app: IApplication) -> APIRouter:
    """Create control router."""
    router = APIRouter(prefix="/api/control", tags=["control"])

    def require_sim() -> Any:
        if _sim_instance is None:
            raise HTTPException(status_code=404, detail="SIM not configured")
        return _sim_instance

    @router.post("/reset", response_model=StatusResponse)
    async def reset_system() -> dict:
        """Drop conversations and sign-ins between demo runs."""
        try:
            await app.reset()
        except Exception as e:
            logger.exception("Reset failed")
            raise HTTPException(status_code=500, detail=str(e))
        return {"status": "ok"}

    @router.post("/sim/start", response_model=StatusResponse)
    async def start_sim() -> dict:
        sim = require_sim()
        try:
            await sim.start()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"status": "ok"}

    @router.post("/sim/stop", response_model=StatusResponse)
    async def stop_sim() -> dict:
        sim = require_sim()
        try:
            await sim.stop()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return {"status": "ok"}

    return router
