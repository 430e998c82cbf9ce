"""
Configuration management for Agent Broker.

Supports YAML configuration with environment variable expansion.
PORT and LOG_LEVEL in the environment override the file.
"""

import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import yaml


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"


@dataclass
class ChromaConfig:
    """ChromaDB connection configuration."""
    host: str = "localhost"
    port: int = 8000
    ssl: bool = False
    api_key: Optional[str] = None
    collection: str = "agents"


@dataclass
class StoreConfig:
    """Agent storage configuration."""
    backend: str = "memory"  # memory | chroma
    chroma: ChromaConfig = field(default_factory=ChromaConfig)


@dataclass
class EmbeddingConfig:
    """Embedding provider configuration (OpenAI-compatible API)."""
    enabled: bool = False
    url: str = "http://localhost:8081"
    model: Optional[str] = None
    dimensions: int = 384
    timeout: float = 30.0


@dataclass
class BrokerConfig:
    """Root configuration for Agent Broker."""
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)


LOG_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values."""
    if isinstance(value, str):
        # Match ${VAR} or $VAR patterns
        pattern = r'\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)'

        def replace(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        return re.sub(pattern, replace, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(v) for v in value]
    return value


def parse_bool(value: Any, default: bool = False) -> bool:
    """Interpret a YAML or env-expanded value as a boolean."""
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_log_level(value: Optional[str], default: str) -> str:
    """Map a level name (debug/info/warn/warning/error, any case) to a logging level name."""
    if not value:
        return default
    return LOG_LEVELS.get(value.lower(), default)


def apply_env_overrides(config: BrokerConfig, environ: Dict[str, str] = None) -> BrokerConfig:
    """Apply PORT and LOG_LEVEL from the environment. Unparseable values are ignored."""
    environ = os.environ if environ is None else environ

    port = environ.get("PORT")
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            pass

    config.logging.level = parse_log_level(environ.get("LOG_LEVEL"), config.logging.level)
    return config


def parse_config(data: Dict[str, Any]) -> BrokerConfig:
    """Build a config from an already-loaded mapping."""
    data = expand_env_vars(data or {})

    server_data = data.get("server") or {}
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 8080)),
    )

    logging_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=parse_log_level(logging_data.get("level"), "INFO"),
    )

    store_data = data.get("store") or {}
    chroma_data = store_data.get("chroma") or {}
    store = StoreConfig(
        backend=store_data.get("backend", "memory"),
        chroma=ChromaConfig(
            host=chroma_data.get("host", "localhost"),
            port=int(chroma_data.get("port", 8000)),
            ssl=parse_bool(chroma_data.get("ssl")),
            api_key=chroma_data.get("api_key") or None,
            collection=chroma_data.get("collection", "agents"),
        ),
    )
    if store.backend not in ("memory", "chroma"):
        raise ValueError(f"Unknown store backend: {store.backend}")

    embedding_data = data.get("embedding") or {}
    embedding = EmbeddingConfig(
        enabled=parse_bool(embedding_data.get("enabled")),
        url=embedding_data.get("url", "http://localhost:8081"),
        model=embedding_data.get("model"),
        dimensions=int(embedding_data.get("dimensions", 384)),
        timeout=float(embedding_data.get("timeout", 30.0)),
    )

    return BrokerConfig(
        server=server,
        logging=logging_config,
        store=store,
        embedding=embedding,
    )


def load_config(path: str | Path = None) -> BrokerConfig:
    """Load configuration from a YAML file (or defaults), then apply env overrides."""
    if path is None:
        return apply_env_overrides(BrokerConfig())

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    return apply_env_overrides(parse_config(raw))


def create_default_config() -> str:
    """Generate default configuration YAML."""
    return """# Agent Broker Configuration

server:
  host: 0.0.0.0
  port: 8080

logging:
  level: info  # debug | info | warn | error

# Agent storage
store:
  backend: memory  # memory | chroma
  # chroma:
  #   host: localhost
  #   port: 8000
  #   ssl: false
  #   api_key: ${CHROMA_API_KEY}
  #   collection: agents

# OpenAI-compatible embeddings provider (sizes the vector collection)
embedding:
  enabled: false
  # url: http://localhost:8081
  # model: text-embedding-3-small
  # dimensions: 1536
"""
