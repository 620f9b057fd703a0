"""
Local LLM Clients

This module provides implementations for local LLM clients, including:
- OllamaClient: For interfacing with Ollama's chat API with tool calling
"""
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from llm.base_client import BaseLLMClient
from llm.models import (
    ConversationTurn,
    EngineReply,
    ToolCall,
    ToolCallContent,
    ToolDeclaration,
    ToolResultContent,
)

logger = logging.getLogger(__name__)


class OllamaClient(BaseLLMClient):
    """
    Client for running models using Ollama

    This client interfaces with the Ollama service to run models.
    Requires Ollama to be installed and running, with a model that
    supports tool calling.
    """
    def __init__(
        self,
        model_name: str = "llama3.1",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.2,
        max_tokens: int = 2048,
        system_prompt: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Ollama client.

        Args:
            model_name: Name of the model in Ollama
            base_url: URL of the Ollama API server
            temperature: Controls randomness in response generation
            max_tokens: Maximum number of tokens to generate
            system_prompt: Optional system prompt to guide the LLM
            timeout: Timeout for API requests in seconds
            transport: Optional httpx transport
        """
        super().__init__(model_name, temperature, max_tokens, system_prompt, timeout, transport)

        self.base_url = base_url.rstrip("/")

    def _format_turn(self, turn: ConversationTurn) -> Dict[str, Any]:
        content = turn.content

        if isinstance(content, ToolCallContent):
            return {
                "role": "assistant",
                "content": "",
                "tool_calls": [{
                    "function": {"name": content.call.tool_name, "arguments": content.call.arguments}
                }],
            }

        if isinstance(content, ToolResultContent):
            return {"role": "tool", "content": content.result, "tool_name": content.tool_name}

        return {"role": turn.role.value, "content": content.text}

    def _wrap_payload(self, messages: List[Dict[str, Any]], tools: List[ToolDeclaration]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "system", "content": self.system_prompt}] + messages,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens
            },
            "stream": False
        }
        if tools:
            payload["tools"] = [{"type": "function", "function": tool.model_dump()} for tool in tools]
        return payload

    async def _call_llm(self, payload: Dict[str, Any]) -> Any:
        """
        Call the Ollama API to generate a response.

        Args:
            payload: The chat request body

        Returns:
            The decoded response
        """
        return await self._post_json(f"{self.base_url}/api/chat", payload)

    def _parse_reply(self, response: Any) -> EngineReply:
        message = response["message"]

        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            function = tool_calls[0]["function"]
            arguments = function.get("arguments") or {}
            # OpenAI-style servers send the arguments as a JSON string
            if isinstance(arguments, str):
                arguments = json.loads(arguments)
            logger.info(f"Ollama calling tool: {function['name']}")
            return EngineReply(tool_call=ToolCall(tool_name=function["name"], arguments=arguments))

        return EngineReply(text=message.get("content") or "")
