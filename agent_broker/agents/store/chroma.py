"""
ChromaDB agent storage.

Production backend. Each agent is one entry in a Chroma collection:
- document: JSON of the agent record (card, tags, timestamps)
- metadata: insertion sequence and whether a real embedding is stored
- embedding: the agent's vector, or a zero placeholder when it has none

Chroma requires a vector for every entry, so agents without an embedding
carry a placeholder that is never handed back to callers.
"""

import json
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, List, Dict, Any

import chromadb
import httpx
from chromadb.config import Settings as ChromaSettings

from ...errors import AgentExistsError, AgentNotFoundError, StorageUnavailableError
from ..models import AgentFilter, AgentListResult, RegisteredAgent
from .base import select_agents

logger = logging.getLogger("agent_broker.store.chroma")

_RECORD_FIELDS = {"id", "card", "tags", "created_at", "updated_at"}


@dataclass
class ChromaOptions:
    """Connection and collection settings for ChromaStore."""
    host: str = "localhost"
    port: int = 8000
    ssl: bool = False
    # Sent as "Authorization: Bearer <api_key>" when set
    api_key: Optional[str] = None
    collection: str = "agents"
    # Length of stored vectors; match the embedding model
    dimensions: int = 384


def connect(options: ChromaOptions):
    """Open an HTTP client to a Chroma server."""
    headers = {}
    if options.api_key:
        headers["Authorization"] = f"Bearer {options.api_key}"
    try:
        return chromadb.HttpClient(
            host=options.host,
            port=options.port,
            ssl=options.ssl,
            headers=headers,
            settings=ChromaSettings(anonymized_telemetry=False),
        )
    except Exception as e:
        raise StorageUnavailableError(
            f"failed to create chroma client for {options.host}:{options.port}: {e}"
        ) from e


@contextmanager
def _storage_errors():
    try:
        yield
    except httpx.TransportError as e:
        raise StorageUnavailableError(f"chroma request failed: {e}") from e


class ChromaStore:
    """
    AgentStore backed by a Chroma collection.

    Construction fails fast: if the server does not answer the initial
    heartbeat, StorageUnavailableError is raised and no store is returned.
    """

    def __init__(self, options: ChromaOptions = None, client=None):
        self.options = options or ChromaOptions()
        self._client = client if client is not None else connect(self.options)
        self._collection = None
        # Serializes check-then-write sequences and the insertion counter
        self._lock = threading.Lock()
        self._last_seq = 0

        try:
            self.ping()
        except StorageUnavailableError:
            self.close()
            raise

        with _storage_errors():
            self._collection = self._client.get_or_create_collection(
                name=self.options.collection,
                embedding_function=None,
            )
        logger.info(
            f"Chroma store ready (collection: {self.options.collection}, "
            f"dimensions: {self.options.dimensions})"
        )

    # =========================================================================
    # Health
    # =========================================================================

    def ping(self) -> None:
        if self._client is None:
            raise StorageUnavailableError("chroma store is closed")
        try:
            self._client.heartbeat()
        except Exception as e:
            raise StorageUnavailableError(f"chroma health check failed: {e}") from e

    def close(self) -> None:
        # Chroma clients hold no resources that need explicit release
        self._client = None
        self._collection = None

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    def create_agent(self, agent: RegisteredAgent) -> None:
        collection = self._open_collection()
        with self._lock, _storage_errors():
            if self._exists(collection, agent.id):
                raise AgentExistsError(agent.id)
            collection.add(
                ids=[agent.id],
                embeddings=[self._vector(agent)],
                documents=[self._document(agent)],
                metadatas=[self._metadata(agent, self._next_seq())],
            )
        logger.info(f"Created agent: {agent.id}")

    def get_agent(self, agent_id: str) -> RegisteredAgent:
        collection = self._open_collection()
        with _storage_errors():
            result = collection.get(
                ids=[agent_id],
                include=["documents", "metadatas", "embeddings"],
            )
        agents = self._decode(result)
        if not agents:
            raise AgentNotFoundError(agent_id)
        return agents[0]

    def list_agents(self, agent_filter: AgentFilter) -> AgentListResult:
        collection = self._open_collection()
        with _storage_errors():
            result = collection.get(include=["documents", "metadatas", "embeddings"])
        return select_agents(self._decode(result), agent_filter)

    def update_agent(self, agent: RegisteredAgent) -> None:
        collection = self._open_collection()
        with self._lock, _storage_errors():
            existing = collection.get(ids=[agent.id], include=["metadatas"])
            if not existing["ids"]:
                raise AgentNotFoundError(agent.id)
            seq = existing["metadatas"][0]["seq"]
            collection.update(
                ids=[agent.id],
                embeddings=[self._vector(agent)],
                documents=[self._document(agent)],
                metadatas=[self._metadata(agent, seq)],
            )
        logger.info(f"Updated agent: {agent.id}")

    def delete_agent(self, agent_id: str) -> None:
        collection = self._open_collection()
        with self._lock, _storage_errors():
            if not self._exists(collection, agent_id):
                raise AgentNotFoundError(agent_id)
            collection.delete(ids=[agent_id])
        logger.info(f"Deleted agent: {agent_id}")

    # =========================================================================
    # Encoding
    # =========================================================================

    def _open_collection(self):
        collection = self._collection
        if collection is None:
            raise StorageUnavailableError("chroma store is closed")
        return collection

    @staticmethod
    def _exists(collection, agent_id: str) -> bool:
        result = collection.get(ids=[agent_id], include=["metadatas"])
        return bool(result["ids"])

    def _next_seq(self) -> int:
        """Strictly increasing insertion sequence, used to break created_at ties.

        Caller holds ``_lock``.
        """
        self._last_seq = max(time.time_ns(), self._last_seq + 1)
        return self._last_seq

    def _vector(self, agent: RegisteredAgent) -> List[float]:
        if agent.embedding is None:
            return [0.0] * self.options.dimensions
        if len(agent.embedding) != self.options.dimensions:
            raise ValueError(
                f"embedding for agent '{agent.id}' has {len(agent.embedding)} "
                f"dimensions, store expects {self.options.dimensions}"
            )
        return list(agent.embedding)

    @staticmethod
    def _document(agent: RegisteredAgent) -> str:
        return agent.model_dump_json(include=_RECORD_FIELDS)

    @staticmethod
    def _metadata(agent: RegisteredAgent, seq: int) -> Dict[str, Any]:
        return {"seq": seq, "has_embedding": agent.embedding is not None}

    @staticmethod
    def _decode(result) -> List[RegisteredAgent]:
        """Turn a Chroma get() result into agents, in insertion order."""
        ids = result["ids"] or []
        documents = result["documents"]
        metadatas = result["metadatas"]
        embeddings = result["embeddings"]

        rows = []
        for i in range(len(ids)):
            metadata = metadatas[i] or {}
            agent = RegisteredAgent.model_validate(json.loads(documents[i]))
            if metadata.get("has_embedding") and embeddings is not None:
                agent.embedding = [float(x) for x in embeddings[i]]
            rows.append((metadata.get("seq", 0), agent))

        rows.sort(key=lambda row: row[0])
        return [agent for _, agent in rows]
