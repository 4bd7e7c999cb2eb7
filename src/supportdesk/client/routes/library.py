"""Knowledge-base library API routes: save, list, load and delete snapshots."""

import logging

from flask import Blueprint, jsonify, request

from supportdesk.client.routes.config import get_config
from supportdesk.client.routes.upload import document_summary
from supportdesk.errors import QuotaExceededError, StorageError

logger = logging.getLogger(__name__)

library_bp = Blueprint("library", __name__)

QUOTA_EXCEEDED_MESSAGE = (
    "Cannot save Knowledge Base: Storage limit exceeded. "
    "Please try removing old Knowledge Bases or uploading fewer/smaller files."
)


@library_bp.route("/api/knowledge-bases", methods=["GET"])
def list_knowledge_bases():
    """List saved knowledge bases in the order they were saved."""
    store = get_config().workspace.store
    return jsonify({"knowledge_bases": [kb.summary() for kb in store.list()]})


@library_bp.route("/api/knowledge-bases/draft", methods=["POST"])
def begin_save():
    """Start naming a new knowledge base.

    Returns:
        JSON with a proposed default name, or 400 if the workspace is empty
    """
    name = get_config().workspace.begin_save()
    if name is None:
        return jsonify({"success": False, "error": "No documents to save"}), 400
    return jsonify({"success": True, "name": name})


@library_bp.route("/api/knowledge-bases/draft", methods=["DELETE"])
def cancel_save():
    get_config().workspace.cancel_save()
    return jsonify({"success": True})


@library_bp.route("/api/knowledge-bases", methods=["POST"])
def save_knowledge_base():
    """Save the workspace documents as a named knowledge base.

    Request:
        {"name": "SDK Docs v2"}

    Returns:
        JSON with the saved record summary; 400 for a blank name or empty
        workspace, 507 when storage is full, 500 for other storage failures
    """
    workspace = get_config().workspace
    data = request.get_json(silent=True) or {}
    name = data.get("name", "")

    try:
        record = workspace.save_knowledge_base(name)
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except QuotaExceededError as e:
        logger.error(f"❌ Storage quota exceeded while saving: {e}")
        return jsonify({"success": False, "error": QUOTA_EXCEEDED_MESSAGE}), 507
    except StorageError as e:
        logger.error(f"❌ Error saving knowledge base: {e}", exc_info=True)
        return jsonify(
            {"success": False, "error": "Failed to save Knowledge Base. Please try again."}
        ), 500

    return jsonify({"success": True, "knowledge_base": record.summary()})


@library_bp.route("/api/knowledge-bases/<kb_id>", methods=["GET"])
def get_knowledge_base(kb_id: str):
    record = get_config().workspace.store.get(kb_id)
    if record is None:
        return jsonify({"error": "Knowledge Base not found"}), 404
    data = record.summary()
    data["documents"] = [document_summary(doc) for doc in record.documents]
    return jsonify(data)


@library_bp.route("/api/knowledge-bases/<kb_id>/load", methods=["POST"])
def load_knowledge_base(kb_id: str):
    """Replace the workspace documents with a saved knowledge base.

    Any active session is reset first.
    """
    workspace = get_config().workspace
    try:
        documents = workspace.load_knowledge_base(kb_id)
    except KeyError:
        return jsonify({"success": False, "error": "Knowledge Base not found"}), 404

    logger.info(f"📚 Loaded knowledge base {kb_id} ({len(documents)} files)")
    return jsonify(
        {"success": True, "documents": [document_summary(doc) for doc in documents]}
    )


@library_bp.route("/api/knowledge-bases/<kb_id>", methods=["DELETE"])
def delete_knowledge_base(kb_id: str):
    workspace = get_config().workspace
    try:
        deleted = workspace.delete_knowledge_base(kb_id)
    except StorageError as e:
        logger.error(f"❌ Error deleting knowledge base: {e}", exc_info=True)
        return jsonify({"success": False, "error": "Failed to delete Knowledge Base."}), 500

    if not deleted:
        return jsonify({"success": False, "error": "Knowledge Base not found"}), 404
    return jsonify({"success": True})
