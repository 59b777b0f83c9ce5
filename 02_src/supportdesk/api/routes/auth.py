"""Authentication API routes."""

from fastapi import APIRouter, HTTPException

from ...app import IApplication
from ...errors import AuthenticationError
from ..errors import http_error
from ..schemas import (
    LoginRequest,
    PhoneLoginRequest,
    PrincipalResponse,
    StatusResponse,
    principal_out,
)

INVALID_CREDENTIALS = "Invalid username or password"


def create_auth_router(app: IApplication) -> APIRouter:
    """Create auth router."""
    router = APIRouter(prefix="/api/auth", tags=["auth"])

    @router.post("/customer/login", response_model=PrincipalResponse)
    async def login_customer(request: LoginRequest) -> dict:
        """Sign a customer in with username and password."""
        customer = await app.auth.login_customer(request.username, request.password)
        if customer is None:
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
        return principal_out(customer)

    @router.post("/agent/login", response_model=PrincipalResponse)
    async def login_agent(request: LoginRequest) -> dict:
        """Sign an agent in with username and password."""
        agent = await app.auth.login_agent(request.username, request.password)
        if agent is None:
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)
        return principal_out(agent)

    @router.post("/phone-login", response_model=PrincipalResponse)
    async def login_by_phone(request: PhoneLoginRequest) -> dict:
        """Sign a customer in by registered phone number."""
        customer = await app.auth.login_by_phone(request.phone.strip())
        if customer is None:
            raise HTTPException(status_code=401, detail="Phone number not registered")
        return principal_out(customer)

    @router.post("/logout", response_model=StatusResponse)
    async def logout() -> dict:
        await app.auth.logout()
        return {"status": "ok"}

    @router.get("/me", response_model=PrincipalResponse)
    async def me() -> dict:
        """The signed-in principal."""
        try:
            return principal_out(app.auth.require_user())
        except AuthenticationError as e:
            raise http_error(e)

    return router
