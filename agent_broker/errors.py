"""
Agent Broker Errors

Exception hierarchy shared by the registry, the stores and the HTTP layer.
Stores raise these unchanged; the HTTP layer maps each class to a status code.
"""

from dataclasses import dataclass
from typing import List, Dict


class BrokerError(Exception):
    """Base class for all agent broker errors."""


class AgentNotFoundError(BrokerError):
    """The requested agent does not exist."""

    def __init__(self, agent_id: str):
        self.agent_id = agent_id
        super().__init__(f"agent with ID '{agent_id}' not found")


class AgentExistsError(BrokerError):
    """An agent with the same ID is already registered."""

    def __init__(self, agent_id: str):
        self.agent_id = agent_id
        super().__init__(f"agent with ID '{agent_id}' already exists")


@dataclass(frozen=True)
class Violation:
    """A single validation failure."""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


class AgentValidationError(BrokerError):
    """
    One or more validation failures.

    Violations are kept in the order they were detected; ``str()`` joins
    their messages with ", ".
    """

    def __init__(self, violations: List[Violation]):
        self.violations = list(violations)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return ", ".join(v.message for v in self.violations)


class StorageUnavailableError(BrokerError):
    """The storage backend could not be reached."""


class MalformedInputError(BrokerError):
    """A request body could not be decoded."""


class EmbeddingError(BrokerError):
    """The embedding provider failed or returned an unusable response."""
