"""
Agent Registry

Core registry logic: validate, stamp and store agent registrations.
Stateless apart from the store it is given.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, List

from .models import AgentCard, AgentFilter, AgentListResult, RegisteredAgent, utc_now
from .store import AgentStore
from .validation import validate_agent_card, validate_agent_id

logger = logging.getLogger("agent_broker.registry")

DEFAULT_LIST_LIMIT = 20
MAX_LIST_LIMIT = 100


def _advance(previous: datetime) -> datetime:
    """Current time, forced past ``previous`` so updates always move forward."""
    now = utc_now()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class AgentRegistry:
    """
    Agent Registry

    Owns the business rules: ID and card validation, timestamps,
    embedding invalidation and list pagination defaults.
    Store errors propagate unchanged.
    """

    def __init__(self, store: AgentStore):
        self.store = store

    # =========================================================================
    # Agent CRUD
    # =========================================================================

    def create(
        self,
        agent_id: str,
        card: AgentCard,
        tags: Optional[List[str]] = None,
    ) -> RegisteredAgent:
        """Register a new agent."""
        validate_agent_id(agent_id)
        validate_agent_card(card)

        now = utc_now()
        agent = RegisteredAgent(
            id=agent_id,
            card=card,
            tags=list(tags or []),
            embedding=None,
            created_at=now,
            updated_at=now,
        )
        self.store.create_agent(agent)
        return agent

    def get(self, agent_id: str) -> RegisteredAgent:
        """Get an agent by ID."""
        return self.store.get_agent(agent_id)

    def list(
        self,
        offset: int = 0,
        limit: int = 0,
        tags: Optional[List[str]] = None,
        skills: Optional[List[str]] = None,
        query: str = "",
    ) -> AgentListResult:
        """
        List agents matching the criteria.

        ``limit`` defaults to 20 when not positive and is capped at 100;
        a negative ``offset`` is treated as 0.
        """
        if limit <= 0:
            limit = DEFAULT_LIST_LIMIT
        if limit > MAX_LIST_LIMIT:
            limit = MAX_LIST_LIMIT
        if offset < 0:
            offset = 0

        return self.store.list_agents(AgentFilter(
            offset=offset,
            limit=limit,
            tags=list(tags or []),
            skills=list(skills or []),
            query=query or "",
        ))

    def update(
        self,
        agent_id: str,
        card: AgentCard,
        tags: Optional[List[str]] = None,
    ) -> RegisteredAgent:
        """Replace an agent's card and tags. The ID is not re-validated."""
        validate_agent_card(card)

        agent = self.store.get_agent(agent_id)
        agent.card = card
        agent.tags = list(tags or [])
        # A vector computed for the previous card no longer describes this one
        agent.embedding = None
        agent.updated_at = _advance(agent.updated_at)

        self.store.update_agent(agent)
        return agent

    def delete(self, agent_id: str) -> None:
        """Delete an agent."""
        self.store.delete_agent(agent_id)
