"""FastAPI application setup."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..app import Application
from .routes import auth, chat, control, dashboard, observability

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:5174"

# Global application instance
_app: Application | None = None


def get_app() -> Application:
    """Get the global application instance."""
    global _app
    if not _app:
        _app = Application()
    return _app


def create_fastapi_app(application: Application | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit `application` the process-wide instance is used.
    """
    application = application or get_app()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        await application.start()
        sim = control.get_sim_instance()
        if sim is not None and hasattr(sim, "set_tracker"):
            sim.set_tracker(application.tracker)
        yield
        await application.stop()

    fastapi_app = FastAPI(
        title="KRUX Support Desk API",
        description="Customer chat and agent dashboard for loan support",
        version="0.1.0",
        lifespan=lifespan,
    )

    origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(auth.create_auth_router(application))
    fastapi_app.include_router(chat.create_chat_router(application))
    fastapi_app.include_router(dashboard.create_dashboard_router(application))
    fastapi_app.include_router(observability.create_observability_router(application))
    fastapi_app.include_router(control.create_control_router(application))

    return fastapi_app
