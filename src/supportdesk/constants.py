"""Application-wide constants and defaults for SupportDesk.

This module provides a single source of truth for configuration defaults,
magic numbers, and other constants used throughout the application.
"""

import os
from pathlib import Path

# =============================================================================
# File Upload Limits
# =============================================================================
MAX_UPLOAD_SIZE_BYTES = 50 * 1024 * 1024  # 50MB

# Extensions decoded as text without further checks (also inside zip archives)
TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "json", "ts", "js", "tsx", "jsx",
        "cpp", "c", "h", "hpp", "py", "sh", "java",
        "html", "css", "scss", "xml", "yaml", "yml",
        "sql", "rs", "go", "rb", "php",
    }
)

# Archive paths containing this marker are resource-fork noise
HIDDEN_METADATA_MARKER = "__MACOSX"

# =============================================================================
# LLM Settings
# =============================================================================
DEFAULT_LLM_SERVICE = "gemini"
DEFAULT_TEMPERATURE = 0.2  # Low temperature for factual answers

MODEL_DEFAULTS = {
    "gemini": "gemini-3-flash-preview",
    "ollama": "llama3",
}

# =============================================================================
# Pricing (USD per million tokens, approximate Gemini Flash tier)
# =============================================================================
INPUT_RATE_PER_1M = 0.075
OUTPUT_RATE_PER_1M = 0.30

# =============================================================================
# Knowledge Base Storage
# =============================================================================
KB_STORAGE_KEY = "smartsdk_kbs"
DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024  # Browser local storage is ~5MB
DEFAULT_STORAGE_DIR = Path.home() / ".supportdesk"

# =============================================================================
# Support Agent
# =============================================================================
DEFAULT_SUPPORT_CONTACT = "support@example.com"

# =============================================================================
# Default URLs and Hosts
# =============================================================================
DEFAULT_OLLAMA_HOST = "http://localhost:11434"


def get_default_model(service: str | None = None) -> str:
    """Get the model name to use for a given LLM service.

    Checks the LLM_MODEL environment variable first, then falls back
    to service-specific defaults.

    Args:
        service: The LLM service name ("gemini" or "ollama").
                If None, uses LLM_SERVICE env var or defaults to "gemini".

    Returns:
        str: The model name to use.
    """
    env_model = os.getenv("LLM_MODEL")
    if env_model:
        return env_model

    if service is None:
        service = os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)

    return MODEL_DEFAULTS.get(service, MODEL_DEFAULTS[DEFAULT_LLM_SERVICE])


def get_storage_dir() -> Path:
    """Directory holding persisted knowledge bases (KB_STORAGE_DIR)."""
    env_dir = os.getenv("KB_STORAGE_DIR")
    return Path(env_dir).expanduser() if env_dir else DEFAULT_STORAGE_DIR


def get_storage_quota() -> int:
    """Maximum size in bytes of a single storage slot (KB_STORAGE_QUOTA_BYTES)."""
    return int(os.getenv("KB_STORAGE_QUOTA_BYTES", str(DEFAULT_STORAGE_QUOTA_BYTES)))


def get_support_contact() -> str:
    """Contact address quoted in the out-of-scope fallback reply."""
    return os.getenv("SUPPORT_CONTACT", DEFAULT_SUPPORT_CONTACT)


def estimate_cost(input_tokens: int, output_tokens: int) -> dict[str, float]:
    """Estimate API cost for the given token counts.

    Args:
        input_tokens: Cumulative prompt tokens
        output_tokens: Cumulative completion tokens

    Returns:
        dict with input_cost, output_cost and total_cost in USD
    """
    input_cost = (input_tokens / 1_000_000) * INPUT_RATE_PER_1M
    output_cost = (output_tokens / 1_000_000) * OUTPUT_RATE_PER_1M
    return {
        "input_cost": input_cost,
        "output_cost": output_cost,
        "total_cost": input_cost + output_cost,
    }
