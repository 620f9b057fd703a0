import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from llm.base_client import BaseLLMClient, LLMError
from llm.models import ConversationTurn, ToolCall
from orchestrator.catalog import ToolCatalog
from orchestrator.connection import ServerConnection
from orchestrator.exceptions import (
    ChatTimeoutError,
    ReasoningEngineError,
    ServerConnectionError,
    ServerNotFoundError,
    ToolCallLimitExceeded,
    ToolExecutionError,
    ToolNotFoundError,
)
from orchestrator.models import ToolDescriptor

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_CALLS = 10
DEFAULT_CHAT_TIMEOUT = 30.0  # seconds, including all nested tool calls


class AgentOrchestrator:
    """
    Runs the agentic loop for one chat session.

    The orchestrator owns the conversation history and a catalog of the
    tools advertised by its server connections. It is meant to be used by
    one caller at a time; create one instance per session.
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        max_tool_calls: int = DEFAULT_MAX_TOOL_CALLS,
        chat_timeout: float = DEFAULT_CHAT_TIMEOUT,
    ):
        """
        Initialize the orchestrator.

        Args:
            llm_client: Client for the reasoning engine
            max_tool_calls: Most tool calls a single chat may make before failing
            chat_timeout: Bound in seconds for a whole chat call
        """
        self.llm_client = llm_client
        self.max_tool_calls = max_tool_calls
        self.chat_timeout = chat_timeout
        self.connections: Dict[str, ServerConnection] = {}
        self.catalog = ToolCatalog()
        self.history: List[ConversationTurn] = []

    async def add_server_connection(
        self,
        server_id: str,
        url: str,
        transport: str = "http",
        timeout: float = 30.0,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> List[ToolDescriptor]:
        """
        Connect to a tool server and load the tools it advertises.

        Args:
            server_id: A friendly name for the server connection
            url: The server's JSON-RPC endpoint
            transport: Transport kind, only "http" is supported
            timeout: Timeout in seconds for each request to the server
            http_transport: Optional httpx transport

        Returns:
            The tools loaded from the server

        Raises:
            ServerConnectionError: If the handshake or tool listing fails
        """
        if server_id in self.connections:
            raise ValueError(f"Server {server_id} is already connected")

        connection = ServerConnection(server_id, url, transport, timeout=timeout, http_transport=http_transport)

        logger.info(f"Connecting to MCP server {server_id} at {url}")
        await connection.initialize()
        tools = await connection.list_tools()

        self.catalog.register(tools)
        self.connections[server_id] = connection

        logger.info(f"Connected to MCP server {server_id}, loaded {len(tools)} tools")
        return tools

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self.catalog)

    async def chat(self, message: str) -> str:
        """
        Answer one user message, calling tools as the reasoning engine asks.

        The new turns are added to the history only once a final answer has
        been produced; a failed chat leaves the history untouched.

        Args:
            message: The user's message

        Returns:
            The final text answer

        Raises:
            ChatError: If the engine, a tool, or the time budget fails
        """
        logger.info(f"User: {message}")
        turns = [ConversationTurn.user(message)]

        try:
            answer = await asyncio.wait_for(self._run_loop(turns), timeout=self.chat_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Chat timed out after {self.chat_timeout}s")
            raise ChatTimeoutError(f"Chat timed out after {self.chat_timeout:g} seconds")

        self.history.extend(turns)
        logger.info(f"Assistant: {answer}")
        return answer

    async def _run_loop(self, turns: List[ConversationTurn]) -> str:
        tool_calls = 0

        while True:
            try:
                reply = await self.llm_client.generate(self.history + turns, self.catalog.declarations())
            except LLMError as e:
                raise ReasoningEngineError(str(e))

            if not reply.is_tool_call:
                answer = reply.text or ""
                turns.append(ConversationTurn.assistant(answer))
                return answer

            if tool_calls >= self.max_tool_calls:
                logger.error(f"Reasoning engine exceeded {self.max_tool_calls} tool calls")
                raise ToolCallLimitExceeded(f"Tool-call limit exceeded ({self.max_tool_calls})")
            tool_calls += 1

            call = reply.tool_call
            result = await self._execute_tool(call)

            turns.append(ConversationTurn.tool_call(call))
            turns.append(ConversationTurn.tool_result(call.tool_name, result))

    async def _execute_tool(self, call: ToolCall) -> str:
        descriptor = self.catalog.get(call.tool_name)
        if descriptor is None:
            raise ToolNotFoundError(f"Tool not found: {call.tool_name}")

        connection = self.connections.get(descriptor.server_id)
        if connection is None:
            raise ServerNotFoundError(f"Server not found: {descriptor.server_id}")

        logger.info(f"Calling {call.tool_name} on {descriptor.server_id} with arguments: {call.arguments}")
        try:
            result = await connection.call_tool(call.tool_name, call.arguments)
        except ServerConnectionError as e:
            logger.error(f"Error executing tool call {call.tool_name} on {descriptor.server_id}: {str(e)}")
            raise ToolExecutionError(f"Tool execution failed: {str(e)}")

        logger.info(f"Tool result from {call.tool_name}: {result}")
        return result
