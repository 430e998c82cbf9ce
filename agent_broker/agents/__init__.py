"""
Agent Broker Registry

Stores A2A agent cards and serves lookups and filtered listings.
Agents are validated on the way in and persisted through a
pluggable store (in-memory or ChromaDB).
"""

from .models import (
    AgentCard, AgentSkill, AgentProvider, AgentCapabilities,
    RegisteredAgent, AgentFilter, AgentListResult,
    RegisterAgentRequest, UpdateAgentRequest,
    AgentRecordResponse, AgentListResponse, PaginationInfo, ErrorResponse,
)
from .validation import validate_agent_card, validate_agent_id
from .registry import AgentRegistry
from .store import AgentStore, HealthChecker, MemoryStore, ChromaStore, ChromaOptions

__all__ = [
    "AgentCard",
    "AgentSkill",
    "AgentProvider",
    "AgentCapabilities",
    "RegisteredAgent",
    "AgentFilter",
    "AgentListResult",
    "RegisterAgentRequest",
    "UpdateAgentRequest",
    "AgentRecordResponse",
    "AgentListResponse",
    "PaginationInfo",
    "ErrorResponse",
    "validate_agent_card",
    "validate_agent_id",
    "AgentRegistry",
    "AgentStore",
    "HealthChecker",
    "MemoryStore",
    "ChromaStore",
    "ChromaOptions",
]
