"""
Base LLM Client Interface

This module defines the abstract base class for LLM client implementations,
allowing for multiple backends (Gemini, Ollama, etc.)

A client is an opaque capability for the orchestrator: given the
conversation history and the tool catalog it returns either final text or
a single tool call request.
"""
import abc
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from llm.models import ConversationTurn, EngineReply, ToolDeclaration

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions about cryptocurrencies. "
    "When the user asks for current prices, call the available tools instead of guessing. "
    "Coin ids are lowercase names such as bitcoin, ethereum or solana. "
    "Summarize tool results clearly and mention when a source was unavailable."
)


class LLMError(RuntimeError):
    """Raised when the LLM cannot be called or its answer cannot be read"""


class BaseLLMClient(abc.ABC):
    """
    Abstract base class for LLM clients.

    Implementations translate the conversation into their provider's request
    format, call it, and read the reply back into an EngineReply.
    """
    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        system_prompt: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the base LLM client.

        Args:
            model: The model identifier to use
            temperature: Controls randomness in response generation
            max_tokens: Maximum number of tokens to generate
            system_prompt: Optional system prompt to guide the LLM
            timeout: Timeout for API requests in seconds
            transport: Optional httpx transport (used to fake the provider)
        """
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT
        self.timeout = timeout
        self.transport = transport

    async def generate(
        self, history: Sequence[ConversationTurn], tools: Sequence[ToolDeclaration]
    ) -> EngineReply:
        """
        Ask the LLM for the next step of the conversation.

        Args:
            history: The full conversation so far
            tools: Tools the LLM may call

        Returns:
            Either the final text or a tool call request

        Raises:
            LLMError: If the call fails or the answer cannot be parsed
        """
        payload = self._build_payload(history, tools)

        try:
            response = await self._call_llm(payload)
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling {self.model}: {e.response.status_code} - {e.response.text}")
            raise LLMError(f"LLM API error {e.response.status_code}: {e.response.text}")
        except httpx.TimeoutException:
            logger.error(f"Timeout calling {self.model}")
            raise LLMError("LLM request timed out")
        except httpx.HTTPError as e:
            logger.error(f"Network error calling {self.model}: {str(e)}")
            raise LLMError(f"Network error: {str(e)}")
        except ValueError:
            raise LLMError("Failed to parse LLM response")

        try:
            return self._parse_reply(response)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.error(f"Unexpected response format from {self.model}: {response}")
            raise LLMError(f"Failed to parse LLM response: {str(e)}")

    async def _post_json(self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", **(headers or {})},
            )
            response.raise_for_status()
            return response.json()

    def _build_payload(
        self, history: Sequence[ConversationTurn], tools: Sequence[ToolDeclaration]
    ) -> Dict[str, Any]:
        messages = [self._format_turn(turn) for turn in history]
        return self._wrap_payload(messages, list(tools))

    @abc.abstractmethod
    def _format_turn(self, turn: ConversationTurn) -> Dict[str, Any]:
        """
        Convert one conversation turn into the provider's message format.
        """
        pass

    @abc.abstractmethod
    def _wrap_payload(self, messages: List[Dict[str, Any]], tools: List[ToolDeclaration]) -> Dict[str, Any]:
        """
        Build the request body around the converted messages.
        """
        pass

    @abc.abstractmethod
    async def _call_llm(self, payload: Dict[str, Any]) -> Any:
        """
        Send the request to the provider. Must be implemented by subclasses.

        Args:
            payload: The request body built by _wrap_payload

        Returns:
            The decoded JSON response
        """
        pass

    @abc.abstractmethod
    def _parse_reply(self, response: Any) -> EngineReply:
        """
        Read the decoded response into an EngineReply.
        """
        pass
