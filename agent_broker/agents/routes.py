"""
Agent Registry API Routes

FastAPI routers for the admin CRUD surface, the public card
endpoint and the health check. Errors raised by the registry are
translated to HTTP responses by the handlers in ``agent_broker.server``.
"""

import asyncio
import logging
from typing import Optional, List

from fastapi import APIRouter, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .models import (
    AgentRecordResponse, AgentListResponse,
    RegisterAgentRequest, UpdateAgentRequest,
)
from .registry import AgentRegistry
from .store import HealthChecker

logger = logging.getLogger("agent_broker.routes")

HEALTH_CHECK_TIMEOUT = 5.0


def parse_int(value: Optional[str], default: int) -> int:
    """Parse a query parameter, falling back to ``default`` on bad input."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def split_csv(value: Optional[str]) -> List[str]:
    """Split a comma-separated query parameter, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def create_admin_router(registry: AgentRegistry) -> APIRouter:
    """Create FastAPI router for agent administration."""

    router = APIRouter(prefix="/v1/admin/agents", tags=["admin"])

    @router.post("", status_code=201, response_model=AgentRecordResponse)
    def create_agent(request: RegisterAgentRequest):
        """Register a new agent card."""
        agent = registry.create(request.agent_id, request.agent_card, request.tags)
        return AgentRecordResponse.from_agent(agent)

    @router.get("", response_model=AgentListResponse)
    def list_agents(
        offset: Optional[str] = None,
        limit: Optional[str] = None,
        tags: Optional[str] = None,
        skills: Optional[str] = None,
        q: Optional[str] = None,
    ):
        """
        List registered agents.

        ``tags`` and ``skills`` are comma-separated; an agent matches if it has
        any of them. ``q`` is a case-insensitive search over name and description.
        """
        result = registry.list(
            offset=parse_int(offset, 0),
            limit=parse_int(limit, 0),
            tags=split_csv(tags),
            skills=split_csv(skills),
            query=q or "",
        )
        return AgentListResponse.from_result(result)

    @router.get("/{agent_id}", response_model=AgentRecordResponse)
    def get_agent(agent_id: str):
        """Get an agent by ID."""
        return AgentRecordResponse.from_agent(registry.get(agent_id))

    @router.put("/{agent_id}", response_model=AgentRecordResponse)
    def update_agent(agent_id: str, request: UpdateAgentRequest):
        """Replace an agent's card and tags."""
        agent = registry.update(agent_id, request.agent_card, request.tags)
        return AgentRecordResponse.from_agent(agent)

    @router.delete("/{agent_id}", status_code=204)
    def delete_agent(agent_id: str):
        """Delete an agent."""
        registry.delete(agent_id)
        return Response(status_code=204)

    return router


def create_public_router(registry: AgentRegistry) -> APIRouter:
    """Create router for unauthenticated agent card discovery."""

    router = APIRouter(prefix="/v1/agents", tags=["agents"])

    @router.get("/{agent_id}/card")
    def get_agent_card(agent_id: str):
        """Get the A2A agent card for an agent."""
        agent = registry.get(agent_id)
        return JSONResponse(content=agent.card.to_wire())

    return router


def create_health_router(checker: Optional[HealthChecker] = None) -> APIRouter:
    """Create /health router. Without a checker the service always reports healthy."""

    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def health():
        """Health check."""
        status_code = 200
        body = {"status": "healthy", "checks": {"registry": "up"}}

        if checker is not None:
            try:
                await asyncio.wait_for(
                    run_in_threadpool(checker.ping),
                    timeout=HEALTH_CHECK_TIMEOUT,
                )
            except Exception as e:
                logger.warning(f"Health check failed: {e!r}")
                status_code = 503
                body = {"status": "unhealthy", "checks": {"registry": "down"}}

        return JSONResponse(status_code=status_code, content=body)

    return router
