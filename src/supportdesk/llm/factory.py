"""Factory function for creating LLM provider instances."""

import logging
import os

from dotenv import load_dotenv

from supportdesk.constants import DEFAULT_LLM_SERVICE, DEFAULT_OLLAMA_HOST, get_default_model
from supportdesk.llm.base import LLMProvider
from supportdesk.llm.gemini import GeminiProvider
from supportdesk.llm.ollama import OllamaProvider

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_llm_provider(config: dict | None = None) -> LLMProvider:
    """Factory function to create an LLM provider instance.

    Args:
        config: Optional configuration dictionary. If None, uses environment variables.
                Expected keys:
                - 'service': Provider type (default: from LLM_SERVICE env, or "gemini")
                - 'host': Ollama host URL (default: from OLLAMA_HOST env)
                - 'model': Model name (default: from LLM_MODEL env or provider default)
                - 'api_key': Gemini API key (default: from GEMINI_API_KEY / API_KEY env)

    Returns:
        LLMProvider: An instance implementing the LLMProvider protocol.
    """
    if config is None:
        config = {}

    service_type = config.get("service") or os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)
    model = config.get("model") or get_default_model(service_type)

    if service_type == "gemini":
        return GeminiProvider(model=model, api_key=config.get("api_key"))

    if service_type == "ollama":
        host = config.get("host") or os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST)
        return OllamaProvider(host=host, model=model)

    raise ValueError(f"Unsupported service type: {service_type}")
