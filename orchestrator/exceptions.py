"""
Errors raised by the agent orchestrator

Every failure of a chat call derives from ChatError, so callers can show the
message and keep the session going.
"""
from typing import Optional


class ChatError(Exception):
    """Base class for orchestrator failures"""


class ServerConnectionError(ChatError):
    """A tool server could not be reached or answered with something unusable"""


class JsonRpcError(ServerConnectionError):
    """A tool server answered with a JSON-RPC error object"""

    def __init__(self, code: int, message: str, data: Optional[object] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"JSON-RPC error {code}: {message}")


class ToolNotFoundError(ChatError):
    pass


class ServerNotFoundError(ChatError):
    pass


class ToolExecutionError(ChatError):
    pass


class ReasoningEngineError(ChatError):
    pass


class ToolCallLimitExceeded(ChatError):
    pass


class ChatTimeoutError(ChatError):
    pass
