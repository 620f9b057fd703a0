"""
Gemini Client

Calls the Gemini generateContent API with function declarations.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from llm.base_client import BaseLLMClient, LLMError
from llm.models import (
    ConversationTurn,
    EngineReply,
    ToolCall,
    ToolCallContent,
    ToolDeclaration,
    ToolResultContent,
)

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient(BaseLLMClient):
    """
    Client for Google's Gemini models

    Gemini names the assistant role "model" and returns tool calls as
    functionCall parts; tool results go back as functionResponse parts.
    """
    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-2.0-flash",
        base_url: str = GEMINI_API_URL,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        system_prompt: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("api_key is required for the gemini provider")

        super().__init__(model_name, temperature, max_tokens, system_prompt, timeout, transport)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def _format_turn(self, turn: ConversationTurn) -> Dict[str, Any]:
        content = turn.content

        if isinstance(content, ToolCallContent):
            return {
                "role": "model",
                "parts": [{"functionCall": {"name": content.call.tool_name, "args": content.call.arguments}}],
            }

        if isinstance(content, ToolResultContent):
            return {
                "role": "user",
                "parts": [{
                    "functionResponse": {
                        "name": content.tool_name,
                        "response": {"result": content.result},
                    }
                }],
            }

        role = "user" if turn.role.value == "user" else "model"
        return {"role": role, "parts": [{"text": content.text}]}

    def _wrap_payload(self, messages: List[Dict[str, Any]], tools: List[ToolDeclaration]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "contents": messages,
            "systemInstruction": {"parts": [{"text": self.system_prompt}]},
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }
        if tools:
            payload["tools"] = [{"function_declarations": [tool.model_dump() for tool in tools]}]
        return payload

    async def _call_llm(self, payload: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        return await self._post_json(url, payload, headers={"x-goog-api-key": self.api_key})

    def _parse_reply(self, response: Any) -> EngineReply:
        candidates = response.get("candidates") or []
        if not candidates:
            raise LLMError(f"Gemini returned no candidates: {response.get('promptFeedback', response)}")

        parts = candidates[0]["content"]["parts"]

        # A function call takes precedence over any text in the same reply
        for part in parts:
            if "functionCall" in part:
                call = part["functionCall"]
                logger.info(f"Gemini calling tool: {call['name']}")
                return EngineReply(tool_call=ToolCall(tool_name=call["name"], arguments=call.get("args") or {}))

        texts = [part["text"] for part in parts if "text" in part]
        if not texts:
            raise LLMError("Gemini reply has neither text nor a function call")
        return EngineReply(text="".join(texts))
