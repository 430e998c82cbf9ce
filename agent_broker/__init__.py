"""
Agent Broker - Registry and Discovery for A2A Agents

Stores agent cards, serves them by ID and lists them by tag,
skill and free-text query over an HTTP API.
"""

__version__ = "0.1.0"

from .config import BrokerConfig, load_config
from .server import create_app

__all__ = [
    "__version__",
    "BrokerConfig",
    "load_config",
    "create_app",
]
