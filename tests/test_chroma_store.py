"""ChromaDB-specific store behaviour not covered by the contract tests."""

import uuid

import pytest

from agent_broker.agents import ChromaStore, ChromaOptions, AgentFilter
from agent_broker.errors import StorageUnavailableError

from .conftest import ephemeral_chroma_store, make_agent


class UnreachableClient:
    """Stands in for a chromadb client whose server is down."""

    def heartbeat(self):
        raise ConnectionError("connection refused")

    def get_or_create_collection(self, **kwargs):
        raise AssertionError("collection must not be opened after a failed heartbeat")


def test_construction_fails_fast_when_unreachable():
    with pytest.raises(StorageUnavailableError):
        ChromaStore(ChromaOptions(), client=UnreachableClient())


def test_construction_fails_against_closed_port():
    with pytest.raises(StorageUnavailableError):
        ChromaStore(ChromaOptions(host="127.0.0.1", port=1))


def test_ping_after_close():
    store = ephemeral_chroma_store()
    store.ping()
    store.close()

    with pytest.raises(StorageUnavailableError):
        store.ping()


def test_placeholder_vector_is_not_returned():
    store = ephemeral_chroma_store()
    store.create_agent(make_agent("plain"))

    assert store.get_agent("plain").embedding is None
    assert all(a.embedding is None for a in store.list_agents(AgentFilter(limit=10)).agents)


def test_wrong_embedding_dimensions_rejected():
    store = ephemeral_chroma_store()
    agent = make_agent("agent-1")
    agent.embedding = [1.0, 2.0]

    with pytest.raises(ValueError):
        store.create_agent(agent)

    assert store.list_agents(AgentFilter(limit=10)).total == 0


def test_records_survive_reopen():
    """A second store on the same collection sees the same agents, in the same order."""
    collection = f"agents-{uuid.uuid4().hex[:12]}"
    first = ephemeral_chroma_store(collection)
    created_at = make_agent("x").created_at
    for agent_id in ["agent-b", "agent-a", "agent-c"]:
        first.create_agent(make_agent(agent_id, created_at=created_at))
    first.close()

    second = ephemeral_chroma_store(collection)
    result = second.list_agents(AgentFilter(limit=10))

    assert [a.id for a in result.agents] == ["agent-b", "agent-a", "agent-c"]


def test_update_keeps_tie_position():
    store = ephemeral_chroma_store()
    created_at = make_agent("x").created_at
    for agent_id in ["agent-1", "agent-2", "agent-3"]:
        store.create_agent(make_agent(agent_id, created_at=created_at))

    agent = store.get_agent("agent-1")
    agent.tags = ["changed"]
    store.update_agent(agent)

    result = store.list_agents(AgentFilter(limit=10))
    assert [a.id for a in result.agents] == ["agent-1", "agent-2", "agent-3"]


def test_operations_after_close_fail():
    store = ephemeral_chroma_store()
    store.create_agent(make_agent("agent-1"))
    store.close()

    with pytest.raises(StorageUnavailableError):
        store.get_agent("agent-1")
    with pytest.raises(StorageUnavailableError):
        store.list_agents(AgentFilter(limit=10))
    with pytest.raises(StorageUnavailableError):
        store.create_agent(make_agent("agent-2"))
    with pytest.raises(StorageUnavailableError):
        store.update_agent(make_agent("agent-1"))
    with pytest.raises(StorageUnavailableError):
        store.delete_agent("agent-1")
