"""Health check and usage API routes."""

import logging

from flask import Blueprint, jsonify

from supportdesk.client.routes.config import get_config
from supportdesk.constants import INPUT_RATE_PER_1M, OUTPUT_RATE_PER_1M

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    config = get_config()
    provider = config.llm_provider
    return jsonify(
        {
            "status": "healthy",
            "llm_provider": "initialized" if provider else "not initialized",
            "model": getattr(provider, "model", None),
            "session_active": bool(config.workspace and config.workspace.session.active),
        }
    )


@health_bp.route("/api/usage", methods=["GET"])
def usage():
    """Token usage and estimated cost of the current session.

    Returns:
        JSON with token counts, costs in USD and the per-million rates used
    """
    data = get_config().workspace.usage()
    data["rates"] = {"input_per_1m": INPUT_RATE_PER_1M, "output_per_1m": OUTPUT_RATE_PER_1M}
    return jsonify(data)
