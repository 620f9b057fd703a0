"""
Agent orchestration: server connections, tool catalog and the agentic loop
"""

from orchestrator.catalog import ToolCatalog
from orchestrator.connection import ServerConnection
from orchestrator.exceptions import (
    ChatError,
    ChatTimeoutError,
    JsonRpcError,
    ReasoningEngineError,
    ServerConnectionError,
    ServerNotFoundError,
    ToolCallLimitExceeded,
    ToolExecutionError,
    ToolNotFoundError,
)
from orchestrator.main import AgentOrchestrator
from orchestrator.models import ToolDescriptor

__all__ = [
    "AgentOrchestrator",
    "ServerConnection",
    "ToolCatalog",
    "ToolDescriptor",
    "ChatError",
    "ChatTimeoutError",
    "JsonRpcError",
    "ReasoningEngineError",
    "ServerConnectionError",
    "ServerNotFoundError",
    "ToolCallLimitExceeded",
    "ToolExecutionError",
    "ToolNotFoundError",
]
