"""Agent storage backends."""

from .base import AgentStore, HealthChecker, select_agents
from .memory import MemoryStore
from .chroma import ChromaStore, ChromaOptions

__all__ = [
    "AgentStore",
    "HealthChecker",
    "select_agents",
    "MemoryStore",
    "ChromaStore",
    "ChromaOptions",
]
