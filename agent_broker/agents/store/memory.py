"""
In-memory agent storage.

Reference backend used by tests and single-process deployments.
One lock serializes every operation.
"""

import logging
import threading
from typing import Dict

from ...errors import AgentExistsError, AgentNotFoundError
from ..models import AgentFilter, AgentListResult, RegisteredAgent
from .base import select_agents

logger = logging.getLogger("agent_broker.store.memory")


class MemoryStore:
    """Dict-backed AgentStore. Records are deep-copied on the way in and out."""

    def __init__(self):
        # dicts keep insertion order, which breaks created_at ties
        self._agents: Dict[str, RegisteredAgent] = {}
        self._lock = threading.Lock()

    def ping(self) -> None:
        return None

    def close(self) -> None:
        return None

    def create_agent(self, agent: RegisteredAgent) -> None:
        with self._lock:
            if agent.id in self._agents:
                raise AgentExistsError(agent.id)
            self._agents[agent.id] = agent.model_copy(deep=True)
        logger.info(f"Created agent: {agent.id}")

    def get_agent(self, agent_id: str) -> RegisteredAgent:
        with self._lock:
            agent = self._agents.get(agent_id)
            if agent is None:
                raise AgentNotFoundError(agent_id)
            return agent.model_copy(deep=True)

    def list_agents(self, agent_filter: AgentFilter) -> AgentListResult:
        with self._lock:
            result = select_agents(self._agents.values(), agent_filter)
            result.agents = [a.model_copy(deep=True) for a in result.agents]
            return result

    def update_agent(self, agent: RegisteredAgent) -> None:
        with self._lock:
            if agent.id not in self._agents:
                raise AgentNotFoundError(agent.id)
            self._agents[agent.id] = agent.model_copy(deep=True)
        logger.info(f"Updated agent: {agent.id}")

    def delete_agent(self, agent_id: str) -> None:
        with self._lock:
            if agent_id not in self._agents:
                raise AgentNotFoundError(agent_id)
            del self._agents[agent_id]
        logger.info(f"Deleted agent: {agent_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)
