"""Shared fixtures for agent broker tests."""

import uuid
from datetime import datetime, timezone
from typing import Optional, List

import chromadb
import pytest
from chromadb.config import Settings as ChromaSettings

from agent_broker.agents import (
    AgentCard,
    AgentSkill,
    RegisteredAgent,
    MemoryStore,
    ChromaStore,
    ChromaOptions,
)

TEST_DIMENSIONS = 4


def valid_card(name: str = "Test Agent", description: str = "A test agent",
               skills: Optional[List[AgentSkill]] = None) -> AgentCard:
    return AgentCard(
        name=name,
        description=description,
        url="http://localhost:9000",
        version="1.0.0",
        skills=skills or [AgentSkill(id="skill-1", name="Skill One")],
    )


def make_agent(agent_id: str, created_at: datetime = None, tags: List[str] = None,
               **card_fields) -> RegisteredAgent:
    now = created_at or datetime.now(timezone.utc)
    return RegisteredAgent(
        id=agent_id,
        card=valid_card(**card_fields),
        tags=["test"] if tags is None else tags,
        created_at=now,
        updated_at=now,
    )


def ephemeral_chroma_store(collection: str = None) -> ChromaStore:
    """A ChromaStore on an in-process Chroma with its own collection."""
    # Ephemeral clients in one process share state; unique names isolate tests
    client = chromadb.EphemeralClient(settings=ChromaSettings(anonymized_telemetry=False))
    options = ChromaOptions(
        collection=collection or f"agents-{uuid.uuid4().hex[:12]}",
        dimensions=TEST_DIMENSIONS,
    )
    return ChromaStore(options, client=client)


@pytest.fixture(params=["memory", "chroma"])
def store(request):
    """Every store implementation, one at a time."""
    if request.param == "memory":
        s = MemoryStore()
    else:
        s = ephemeral_chroma_store()
    yield s
    s.close()


@pytest.fixture
def memory_store():
    return MemoryStore()
