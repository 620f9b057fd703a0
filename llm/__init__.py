"""
Reasoning engine clients used by the agent orchestrator
"""

from llm.base_client import BaseLLMClient, LLMError
from llm.llm_client import LLMClient
from llm.models import ConversationTurn, EngineReply, Role, ToolCall, ToolDeclaration

__all__ = [
    "BaseLLMClient",
    "LLMError",
    "LLMClient",
    "ConversationTurn",
    "EngineReply",
    "Role",
    "ToolCall",
    "ToolDeclaration",
]
