"""
LLM Client Factory Module

This module provides a unified interface for creating LLM clients
for the supported providers.
"""
import logging
from typing import Optional

from llm.base_client import BaseLLMClient
from llm.gemini_client import GEMINI_API_URL, GeminiClient
from llm.local_llm import OllamaClient

logger = logging.getLogger(__name__)

PROVIDERS = ("gemini", "ollama")


class LLMClient:
    """
    Factory class for creating LLM clients based on the selected provider.
    """

    @staticmethod
    async def create(
        provider: str = "gemini",
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 2048,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> BaseLLMClient:
        """
        Create an LLM client for the specified provider.

        Args:
            provider: The LLM provider to use ('gemini', 'ollama')
            model: The model to use, defaults to the provider's default
            api_base: Base URL for the API (for local/custom endpoints)
            api_key: API key for the provider (if needed)
            temperature: Controls randomness in response generation
            max_tokens: Maximum number of tokens to generate
            system_prompt: Optional system prompt to guide the LLM
            **kwargs: Additional provider-specific parameters (timeout, transport)

        Returns:
            An instance of BaseLLMClient for the specified provider
        """
        provider = provider.lower()
        logger.info(f"Creating {provider} LLM client")

        if provider == "gemini":
            if not api_key:
                raise ValueError("api_key is required for the gemini provider")

            return GeminiClient(
                api_key=api_key,
                model_name=model or "gemini-2.0-flash",
                base_url=api_base or GEMINI_API_URL,
                temperature=temperature,
                max_tokens=max_tokens,
                system_prompt=system_prompt,
                timeout=kwargs.get("timeout", 30.0),
                transport=kwargs.get("transport"),
            )

        elif provider == "ollama":
            return OllamaClient(
                model_name=model or "llama3.1",
                base_url=api_base or "http://localhost:11434",
                temperature=temperature,
                max_tokens=max_tokens,
                system_prompt=system_prompt,
                timeout=kwargs.get("timeout", 120.0),
                transport=kwargs.get("transport"),
            )

        else:
            raise ValueError(f"Unsupported LLM provider: {provider}")
