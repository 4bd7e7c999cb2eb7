"""Session lifecycle and streaming chat API routes."""

import logging

from flask import Blueprint, Response, jsonify, request, stream_with_context

from supportdesk.client.routes.config import get_config
from supportdesk.errors import SessionInitError
from supportdesk.service.async_helpers import iterate_async, run_async
from supportdesk.service.exchange import check_turn, stream_turn

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


@chat_bp.route("/api/session", methods=["GET"])
def session_state():
    """Return the current session state, including the streaming buffer.

    Returns:
        JSON with active flag, messages, streaming text and token usage
    """
    workspace = get_config().workspace
    data = workspace.session.state.to_dict()
    data["usage"] = workspace.usage()
    data["document_count"] = len(workspace.documents)
    return jsonify(data)


@chat_bp.route("/api/session/start", methods=["POST"])
def start_session():
    """Open a session grounded in the current workspace documents.

    Returns:
        JSON with the new session state, 400 when there is nothing to start,
        or 502 when the provider session could not be created
    """
    workspace = get_config().workspace
    logger.info("🚀 Received session start request")

    if not workspace.documents:
        return jsonify({"success": False, "error": "Upload documents before starting"}), 400
    if workspace.session.active:
        return jsonify({"success": False, "error": "Session already active"}), 409

    try:
        started = run_async(workspace.start_session())
    except SessionInitError as e:
        logger.error(f"❌ Failed to start session: {e}")
        return jsonify({"success": False, "error": str(e)}), 502

    if not started:
        return jsonify({"success": False, "error": "Session could not be started"}), 409

    return jsonify({"success": True, "session": workspace.session.state.to_dict()})


@chat_bp.route("/api/session/reset", methods=["POST"])
def reset_session():
    """Close the session; uploaded documents are kept."""
    get_config().workspace.reset_session()
    return jsonify({"success": True})


@chat_bp.route("/api/workspace/reset", methods=["POST"])
def reset_workspace():
    """Close the session and clear all documents."""
    get_config().workspace.full_reset()
    return jsonify({"success": True})


@chat_bp.route("/api/chat", methods=["POST"])
def chat():
    """Send a message to the active session and stream the reply.

    Request:
        {"message": "How do I initialize the SDK?"}

    Response:
        text/plain body streamed fragment by fragment. The finalized message
        (or an error-flagged message) is available from /api/session afterwards.

    Returns:
        Streamed response, or JSON error when the turn is rejected
    """
    workspace = get_config().workspace
    data = request.get_json(silent=True)
    if not data or "message" not in data:
        logger.warning("❌ Missing 'message' field in request")
        return jsonify({"error": "Missing 'message' field in request"}), 400

    message = data["message"]
    reason = check_turn(workspace.session, message)
    if reason is not None:
        logger.warning(f"⚠️ Chat request rejected: {reason}")
        return jsonify({"error": reason}), 409

    fragments = iterate_async(stream_turn(workspace.session, message))
    return Response(stream_with_context(fragments), mimetype="text/plain")
