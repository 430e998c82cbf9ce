"""
Agent Store Contract

Every storage backend implements AgentStore and must behave identically;
tests/test_store_conformance.py runs the same suite against each one.
"""

from typing import Iterable, List, Protocol, runtime_checkable

from ..models import AgentFilter, AgentListResult, RegisteredAgent


@runtime_checkable
class HealthChecker(Protocol):
    """Anything that can report backend reachability."""

    def ping(self) -> None:
        """Raise StorageUnavailableError if the backend is unreachable."""
        ...


@runtime_checkable
class AgentStore(HealthChecker, Protocol):
    """Persistence for registered agents."""

    def close(self) -> None:
        """Release resources. Safe to call more than once."""
        ...

    def create_agent(self, agent: RegisteredAgent) -> None:
        """Store a new agent. Raises AgentExistsError if the ID is taken."""
        ...

    def get_agent(self, agent_id: str) -> RegisteredAgent:
        """Fetch an agent. Raises AgentNotFoundError if absent."""
        ...

    def list_agents(self, agent_filter: AgentFilter) -> AgentListResult:
        """Return one page of agents matching the filter."""
        ...

    def update_agent(self, agent: RegisteredAgent) -> None:
        """Replace a stored agent. Raises AgentNotFoundError if absent."""
        ...

    def delete_agent(self, agent_id: str) -> None:
        """Remove an agent. Raises AgentNotFoundError if absent."""
        ...


def select_agents(
    agents: Iterable[RegisteredAgent],
    agent_filter: AgentFilter,
) -> AgentListResult:
    """
    Filter, sort and paginate agents.

    ``agents`` must be in insertion order: records created at the same
    instant keep that order after sorting newest-first.
    """
    matched: List[RegisteredAgent] = [a for a in agents if agent_filter.matches(a)]
    # sorted() is stable with reverse=True, so ties keep insertion order
    matched = sorted(matched, key=lambda a: a.created_at, reverse=True)

    offset = max(agent_filter.offset, 0)
    limit = max(agent_filter.limit, 0)
    return AgentListResult(
        agents=matched[offset:offset + limit],
        total=len(matched),
        offset=agent_filter.offset,
        limit=agent_filter.limit,
    )
