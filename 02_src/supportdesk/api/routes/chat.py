"""Customer chat API routes."""

from fastapi import APIRouter, HTTPException, Query

from ...app import IApplication
from ...data import get_customer_by_id
from ...errors import SupportDeskError
from ...logging_config import get_logger
from ...models import Customer
from ...store import search
from ..errors import http_error
from ..schemas import (
    ChatTurnResponse,
    CustomerConversationOut,
    CustomerConversationsResponse,
    LoanApplicationOut,
    RatingRequest,
    SelectOptionRequest,
    SendMessageRequest,
    attachments_in,
    chat_turn_out,
    customer_conversation_out,
    loan_application_out,
)

logger = get_logger(__name__)


def _customer(customer_id: str) -> Customer:
    customer = get_customer_by_id(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
    return customer


def create_chat_router(app: IApplication) -> APIRouter:
    """Create customer chat router."""
    router = APIRouter(prefix="/api", tags=["chat"])

    @router.post(
        "/customers/{customer_id}/conversations",
        response_model=ChatTurnResponse,
        status_code=201,
    )
    async def create_conversation(customer_id: str) -> dict:
        """Open a new query; the bot greets the customer."""
        customer = _customer(customer_id)
        try:
            session = await app.new_conversation(customer)
            return chat_turn_out(app.store.get(session.conversation_id), session)
        except SupportDeskError as e:
            raise http_error(e)
        except Exception as e:
            logger.exception("Failed to create conversation for %s", customer_id)
            raise HTTPException(status_code=500, detail=str(e))

    @router.get(
        "/customers/{customer_id}/conversations",
        response_model=CustomerConversationsResponse,
    )
    async def list_conversations(
        customer_id: str,
        q: str | None = Query(None, description="Search text"),
    ) -> dict:
        """A customer's conversations, most recent activity first."""
        customer = _customer(customer_id)
        conversations = search(q, app.store.list_for_customer(customer.id))
        return {
            "conversations": [customer_conversation_out(c) for c in conversations],
            "has_active_ticket": app.store.has_active_ticket(customer.id),
        }

    @router.get(
        "/customers/{customer_id}/loan-applications",
        response_model=list[LoanApplicationOut],
    )
    async def list_loan_applications(customer_id: str) -> list[dict]:
        customer = _customer(customer_id)
        return [loan_application_out(a) for a in app.loan_applications_for(customer.id)]

    @router.get("/conversations/{conversation_id}", response_model=ChatTurnResponse)
    async def get_conversation(conversation_id: str) -> dict:
        """Conversation with the chat session's current options."""
        try:
            session = app.session(conversation_id)
            return chat_turn_out(app.store.get(conversation_id), session)
        except SupportDeskError as e:
            raise http_error(e)

    @router.post(
        "/conversations/{conversation_id}/messages", response_model=ChatTurnResponse
    )
    async def send_message(conversation_id: str, request: SendMessageRequest) -> dict:
        """Customer types a message; returns after the bot has answered."""
        if not request.text.strip() and not request.attachments:
            raise HTTPException(status_code=400, detail="Message text or attachment required")
        try:
            session = app.session(conversation_id)
            await session.send_text(request.text, attachments_in(request.attachments))
            return chat_turn_out(app.store.get(conversation_id), session)
        except SupportDeskError as e:
            raise http_error(e)
        except Exception as e:
            logger.exception("Failed to handle message for %s", conversation_id)
            raise HTTPException(status_code=500, detail=str(e))

    @router.post(
        "/conversations/{conversation_id}/options", response_model=ChatTurnResponse
    )
    async def select_option(conversation_id: str, request: SelectOptionRequest) -> dict:
        """Customer clicks a quick option."""
        try:
            session = app.session(conversation_id)
            await session.select(request.value)
            return chat_turn_out(app.store.get(conversation_id), session)
        except SupportDeskError as e:
            raise http_error(e)
        except Exception as e:
            logger.exception("Failed to handle option for %s", conversation_id)
            raise HTTPException(status_code=500, detail=str(e))

    @router.post(
        "/conversations/{conversation_id}/rating",
        response_model=CustomerConversationOut,
    )
    async def rate_conversation(conversation_id: str, request: RatingRequest) -> dict:
        """Customer rates a resolved conversation."""
        try:
            await app.controller.rate(conversation_id, request.score, request.comment)
            await app.persist()
            return customer_conversation_out(app.store.get(conversation_id))
        except SupportDeskError as e:
            raise http_error(e)

    return router
