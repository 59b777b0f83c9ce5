"""Agent dashboard API routes."""

from fastapi import APIRouter, HTTPException, Query

from ...app import IApplication
from ...data import get_agent_by_id, quick_replies
from ...errors import SupportDeskError
from ...logging_config import get_logger
from ...models import Agent
from ...store import search, sorted_by_activity
from ..errors import http_error
from ..schemas import (
    AgentActionRequest,
    AgentConversationOut,
    AgentTextRequest,
    QuickReplyOut,
    agent_conversation_out,
    attachments_in,
    quick_reply_out,
)

logger = get_logger(__name__)


def _agent(agent_id: str) -> Agent:
    agent = get_agent_by_id(agent_id)
    if agent is None:
        raise HTTPException(status_code=401, detail=f"Unknown agent {agent_id}")
    return agent


def create_dashboard_router(app: IApplication) -> APIRouter:
    """Create agent dashboard router."""
    router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

    def conversation_out(conversation_id: str) -> dict:
        return agent_conversation_out(
            app.store.get(conversation_id), app.store.unread_count(conversation_id)
        )

    @router.get("/conversations", response_model=list[AgentConversationOut])
    async def list_conversations(
        status: str | None = Query(None, description="all, assigned or a status"),
        agent_id: str | None = Query(None, description="Agent for the assigned filter"),
        q: str | None = Query(None, description="Search text"),
    ) -> list[dict]:
        """Every conversation, filtered and searched, most recent activity first."""
        conversations = sorted_by_activity(search(q, app.store.filter(status, agent_id)))
        return [
            agent_conversation_out(c, app.store.unread_count(c.id)) for c in conversations
        ]

    @router.post(
        "/conversations/{conversation_id}/open", response_model=AgentConversationOut
    )
    async def open_conversation(conversation_id: str, request: AgentActionRequest) -> dict:
        """Agent selects a conversation: pick it up and mark it read."""
        agent = _agent(request.agent_id)
        try:
            await app.controller.open_for_agent(conversation_id, agent)
            await app.persist()
            return conversation_out(conversation_id)
        except SupportDeskError as e:
            raise http_error(e)

    @router.post(
        "/conversations/{conversation_id}/reply", response_model=AgentConversationOut
    )
    async def reply(conversation_id: str, request: AgentTextRequest) -> dict:
        agent = _agent(request.agent_id)
        if not request.text.strip() and not request.attachments:
            raise HTTPException(status_code=400, detail="Message text or attachment required")
        try:
            await app.controller.agent_reply(
                conversation_id, agent, request.text, attachments_in(request.attachments)
            )
            await app.persist()
            return conversation_out(conversation_id)
        except SupportDeskError as e:
            raise http_error(e)
        except Exception as e:
            logger.exception("Failed to post agent reply to %s", conversation_id)
            raise HTTPException(status_code=500, detail=str(e))

    @router.post(
        "/conversations/{conversation_id}/resolve", response_model=AgentConversationOut
    )
    async def resolve(conversation_id: str, request: AgentActionRequest) -> dict:
        agent = _agent(request.agent_id)
        try:
            await app.controller.resolve(conversation_id, agent)
            await app.persist()
            return conversation_out(conversation_id)
        except SupportDeskError as e:
            raise http_error(e)

    @router.post(
        "/conversations/{conversation_id}/escalate", response_model=AgentConversationOut
    )
    async def escalate(conversation_id: str, request: AgentActionRequest) -> dict:
        agent = _agent(request.agent_id)
        try:
            await app.controller.escalate(conversation_id, agent)
            await app.persist()
            return conversation_out(conversation_id)
        except SupportDeskError as e:
            raise http_error(e)

    @router.post(
        "/conversations/{conversation_id}/notes", response_model=AgentConversationOut
    )
    async def add_note(conversation_id: str, request: AgentTextRequest) -> dict:
        """Attach an internal note the customer never sees."""
        agent = _agent(request.agent_id)
        if not request.text.strip():
            raise HTTPException(status_code=400, detail="Note text required")
        try:
            await app.controller.add_note(conversation_id, agent, request.text)
            await app.persist()
            return conversation_out(conversation_id)
        except SupportDeskError as e:
            raise http_error(e)

    @router.get("/quick-replies", response_model=list[QuickReplyOut])
    async def list_quick_replies(
        category: str | None = Query(None, description="Category or 'all'"),
    ) -> list[dict]:
        return [quick_reply_out(r) for r in quick_replies(category)]

    return router
