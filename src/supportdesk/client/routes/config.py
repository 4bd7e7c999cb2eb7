"""Shared configuration for route modules."""

from dataclasses import dataclass
from typing import Any

from supportdesk.service.workspace import Workspace


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    This replaces global variables with a proper configuration object
    that can be passed around and tested more easily.
    """

    workspace: Workspace | None = None
    llm_provider: Any = None


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(
    workspace: Workspace | None = None,
    llm_provider: Any = None,
) -> None:
    """Initialize the shared route configuration.

    Args:
        workspace: Workspace controller owning application state
        llm_provider: LLM provider instance
    """
    if workspace is not None:
        _config.workspace = workspace
    if llm_provider is not None:
        _config.llm_provider = llm_provider
