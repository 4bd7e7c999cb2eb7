"""LLM provider abstraction layer for supportdesk.

This package provides a unified interface for multiple LLM providers:
- GeminiProvider: Google Gemini API
- OllamaProvider: Local LLM via Ollama

All providers implement the LLMProvider protocol: token counting, session
creation, and streamed message exchange.

Usage:
    from supportdesk.llm import get_llm_provider

    # Create provider from environment config
    provider = get_llm_provider()

    # Or with explicit config
    provider = get_llm_provider({"service": "ollama", "model": "llama3"})
"""

from supportdesk.llm.base import ChatSessionHandle, LLMProvider, StreamChunk, UsageStats
from supportdesk.llm.factory import get_llm_provider
from supportdesk.llm.gemini import GeminiProvider
from supportdesk.llm.ollama import OllamaProvider

__all__ = [
    "ChatSessionHandle",
    "LLMProvider",
    "StreamChunk",
    "UsageStats",
    "GeminiProvider",
    "OllamaProvider",
    "get_llm_provider",
]
