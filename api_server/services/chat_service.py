"""
Chat session service for the API server
"""
import asyncio
import os
import uuid
from typing import Dict, Optional, Tuple

import httpx
from loguru import logger

from llm.base_client import BaseLLMClient
from llm.llm_client import LLMClient
from orchestrator.exceptions import ServerConnectionError
from orchestrator.main import AgentOrchestrator


def parse_servers(value: str) -> Dict[str, str]:
    """
    Parse "name=url,name=url" into a mapping of server id to URL
    """
    servers = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ValueError(f"Invalid server entry '{item}', expected name=url")
        name, url = item.split("=", 1)
        servers[name.strip()] = url.strip()
    return servers


class ChatService:
    """
    Keeps one orchestrator per chat session.

    Chats within a session are serialized; different sessions run
    independently.

    Sessions are never evicted: every new session id a client sends keeps
    an orchestrator and a lock in memory until end_session is called for it.
    """

    def __init__(
        self,
        llm_client: BaseLLMClient,
        servers: Dict[str, str],
        max_tool_calls: int = 10,
        chat_timeout: float = 30.0,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.llm_client = llm_client
        self.servers = dict(servers)
        self.max_tool_calls = max_tool_calls
        self.chat_timeout = chat_timeout
        self.http_transport = http_transport
        self.sessions: Dict[str, AgentOrchestrator] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @classmethod
    async def from_env(cls) -> "ChatService":
        """Build the service from environment variables"""
        provider = os.getenv("LLM_PROVIDER", "gemini")
        logger.info(f"Initializing {provider} LLM client")

        llm_client = await LLMClient.create(
            provider=provider,
            model=os.getenv("LLM_MODEL") or None,
            api_base=os.getenv("LLM_API_BASE") or None,
            api_key=os.getenv("GEMINI_API_KEY") or None,
            temperature=float(os.getenv("TEMPERATURE", "0.2")),
            max_tokens=int(os.getenv("MAX_TOKENS", "2048")),
        )

        return cls(
            llm_client,
            parse_servers(os.getenv("MCP_SERVERS", "crypto=http://localhost:4000")),
            max_tool_calls=int(os.getenv("MAX_TOOL_CALLS", "10")),
            chat_timeout=float(os.getenv("CHAT_TIMEOUT", "30")),
        )

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        if session_id not in self._locks:
            self._locks[session_id] = asyncio.Lock()
        return self._locks[session_id]

    async def _create_session(self, session_id: str) -> AgentOrchestrator:
        orchestrator = AgentOrchestrator(
            self.llm_client,
            max_tool_calls=self.max_tool_calls,
            chat_timeout=self.chat_timeout,
        )

        for server_id, url in self.servers.items():
            try:
                await orchestrator.add_server_connection(server_id, url, http_transport=self.http_transport)
            except (ServerConnectionError, ValueError) as e:
                # Keep going with the servers that did connect
                logger.error(f"Session {session_id}: failed to connect to {server_id}: {str(e)}")

        logger.info(f"Created session {session_id} with {len(orchestrator.connections)} servers")
        return orchestrator

    async def get_session(self, session_id: str) -> AgentOrchestrator:
        if session_id not in self.sessions:
            self.sessions[session_id] = await self._create_session(session_id)
        return self.sessions[session_id]

    async def chat(self, message: str, session_id: Optional[str] = None) -> Tuple[str, str]:
        """
        Send a message to a session, creating the session if needed.

        Returns:
            Tuple of (session_id, answer)

        Raises:
            ChatError: If the chat call fails
        """
        session_id = session_id or uuid.uuid4().hex

        async with self._lock_for(session_id):
            orchestrator = await self.get_session(session_id)
            answer = await orchestrator.chat(message)

        return session_id, answer

    def end_session(self, session_id: str) -> bool:
        self._locks.pop(session_id, None)
        return self.sessions.pop(session_id, None) is not None
