"""
Agent Broker Server

FastAPI application for the agent registry.
"""

import time
import logging
from typing import Optional, Dict, Tuple, Type
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .config import BrokerConfig, load_config
from .errors import (
    BrokerError, AgentNotFoundError, AgentExistsError, AgentValidationError,
    StorageUnavailableError, MalformedInputError, EmbeddingError,
)
from .agents import AgentRegistry, AgentStore, MemoryStore, ChromaStore, ChromaOptions
from .agents.routes import create_admin_router, create_public_router, create_health_router
from .embedding import Embedder, OpenAIEmbeddingClient

logger = logging.getLogger("agent_broker")
request_logger = logging.getLogger("agent_broker.http")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Error class -> (HTTP status, error code)
ERROR_RESPONSES: Dict[Type[BrokerError], Tuple[int, str]] = {
    AgentNotFoundError: (404, "AGENT_NOT_FOUND"),
    AgentExistsError: (409, "AGENT_EXISTS"),
    AgentValidationError: (400, "VALIDATION_ERROR"),
    MalformedInputError: (400, "INVALID_JSON"),
    StorageUnavailableError: (503, "STORAGE_UNAVAILABLE"),
    EmbeddingError: (502, "EMBEDDING_ERROR"),
}


def setup_logging(level: str = "INFO") -> None:
    """Configure process-wide logging. Call once at startup."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


# =============================================================================
# Component Factories
# =============================================================================

def build_embedder(config: BrokerConfig) -> Optional[OpenAIEmbeddingClient]:
    """Create the embedding client if enabled."""
    if not config.embedding.enabled:
        return None
    return OpenAIEmbeddingClient(
        url=config.embedding.url,
        dimensions=config.embedding.dimensions,
        model=config.embedding.model,
        timeout=config.embedding.timeout,
    )


def build_store(config: BrokerConfig, embedder: Embedder = None) -> AgentStore:
    """
    Create the configured store.

    Raises StorageUnavailableError if an external backend cannot be reached.
    """
    if config.store.backend == "chroma":
        chroma = config.store.chroma
        dimensions = embedder.dimensions() if embedder else config.embedding.dimensions
        return ChromaStore(ChromaOptions(
            host=chroma.host,
            port=chroma.port,
            ssl=chroma.ssl,
            api_key=chroma.api_key,
            collection=chroma.collection,
            dimensions=dimensions,
        ))
    return MemoryStore()


def error_response(exc: BrokerError) -> JSONResponse:
    """Render a broker error as {code, message[, details]}."""
    status_code, code = 500, "INTERNAL_ERROR"
    for cls in type(exc).__mro__:
        if cls in ERROR_RESPONSES:
            status_code, code = ERROR_RESPONSES[cls]
            break

    body = {"code": code, "message": str(exc)}
    if isinstance(exc, AgentValidationError):
        body["details"] = [v.to_dict() for v in exc.violations]
    return JSONResponse(status_code=status_code, content=body)


# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    config: BrokerConfig = None,
    store: AgentStore = None,
    embedder: Embedder = None,
) -> FastAPI:
    """
    Create FastAPI application.

    ``store`` and ``embedder`` override what ``config`` would build.
    Building an external store connects immediately, so an unreachable
    backend fails here rather than on the first request.
    """
    config = config or BrokerConfig()

    if embedder is None:
        embedder = build_embedder(config)
    if store is None:
        store = build_store(config, embedder)

    registry = AgentRegistry(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info(f"Agent Broker starting (store: {type(store).__name__})")
        yield
        logger.info("Agent Broker shutting down...")
        store.close()
        if embedder is not None and hasattr(embedder, "close"):
            embedder.close()

    app = FastAPI(
        title="Agent Broker",
        description="Registry and discovery service for A2A agent cards",
        version=__version__,
        lifespan=lifespan,
    )

    # Store components in app state
    app.state.config = config
    app.state.store = store
    app.state.registry = registry
    app.state.embedder = embedder

    # =========================================================================
    # Error Handling
    # =========================================================================

    @app.exception_handler(BrokerError)
    async def handle_broker_error(request: Request, exc: BrokerError):
        if isinstance(exc, StorageUnavailableError):
            logger.error(f"{request.method} {request.url.path}: {exc}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "invalid request body") if errors else "invalid request body"
        return error_response(MalformedInputError(f"invalid request body: {detail}"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"code": "INTERNAL_ERROR", "message": "internal server error"},
        )

    # =========================================================================
    # Request Logging
    # =========================================================================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)
        client = request.client.host if request.client else "-"
        request_logger.info(
            f"{request.method} {request.url.path} {response.status_code} "
            f"{duration_ms}ms {client}"
        )
        return response

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(create_health_router(store))
    app.include_router(create_admin_router(registry))
    app.include_router(create_public_router(registry))

    return app


# =============================================================================
# Main
# =============================================================================

def main(config_path: str = None, host: str = None, port: int = None):
    """Run the Agent Broker server."""
    import uvicorn

    config = load_config(config_path)
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port

    setup_logging(config.logging.level)
    logger.info(
        f"Starting agent-broker on {config.server.host}:{config.server.port} "
        f"(log level: {config.logging.level})"
    )

    app = create_app(config)

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
