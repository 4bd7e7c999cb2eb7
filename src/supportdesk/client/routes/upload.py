"""Upload and document management API routes."""

import logging

from flask import Blueprint, jsonify, request

from supportdesk.client.routes.config import get_config
from supportdesk.knowledge.models import Document
from supportdesk.knowledge.normalizer import Upload
from supportdesk.service.async_helpers import run_async
from supportdesk.service.workspace import WorkspaceLockedError

logger = logging.getLogger(__name__)

upload_bp = Blueprint("upload", __name__)


def document_summary(document: Document) -> dict:
    """Describe a document without its content."""
    return {
        "id": document.id,
        "name": document.name,
        "size": document.size,
        "type": document.media_type,
    }


@upload_bp.route("/api/documents", methods=["GET"])
def list_documents():
    """List the documents currently in the workspace.

    Returns:
        JSON response with document summaries in knowledge-base order
    """
    workspace = get_config().workspace
    return jsonify({"documents": [document_summary(doc) for doc in workspace.documents]})


@upload_bp.route("/api/upload", methods=["POST"])
def upload_documents():
    """Add uploaded files and zip archives to the workspace.

    Expects multipart form data with:
        - files: One or more text files or zip archives

    Returns:
        JSON response with the added documents and any per-file failures
    """
    logger.info("📤 Received document upload request")
    workspace = get_config().workspace

    try:
        if "files" not in request.files:
            logger.warning("❌ No files in request")
            return jsonify({"success": False, "error": "No files provided"}), 400

        files = [f for f in request.files.getlist("files") if f.filename]
        if not files:
            logger.warning("❌ No files selected")
            return jsonify({"success": False, "error": "No files selected"}), 400

        logger.info(f"📄 Files received: {len(files)}")
        uploads = [
            Upload(name=f.filename, data=f.read(), media_type=f.mimetype or "")
            for f in files
        ]

        report = run_async(workspace.add_uploads(uploads))

        return jsonify(
            {
                "success": True,
                "added": [document_summary(doc) for doc in report.documents],
                "failures": [
                    {"filename": name, "error": reason} for name, reason in report.failures
                ],
                "total_documents": len(workspace.documents),
            }
        )

    except WorkspaceLockedError as e:
        logger.warning(f"⚠️ Upload rejected: {e}")
        return jsonify({"success": False, "error": str(e)}), 409
    except Exception as e:
        logger.error(f"❌ Error in upload handler: {e}", exc_info=True)
        return jsonify({"success": False, "error": f"Internal server error: {str(e)}"}), 500


@upload_bp.route("/api/documents/<doc_id>", methods=["DELETE"])
def remove_document(doc_id: str):
    """Remove a single document from the workspace."""
    workspace = get_config().workspace
    try:
        removed = workspace.remove_document(doc_id)
    except WorkspaceLockedError as e:
        return jsonify({"success": False, "error": str(e)}), 409

    if not removed:
        return jsonify({"success": False, "error": "Document not found"}), 404
    return jsonify({"success": True, "total_documents": len(workspace.documents)})


@upload_bp.route("/api/documents", methods=["DELETE"])
def clear_documents():
    """Remove all documents from the workspace."""
    workspace = get_config().workspace
    try:
        workspace.clear_documents()
    except WorkspaceLockedError as e:
        return jsonify({"success": False, "error": str(e)}), 409
    return jsonify({"success": True, "total_documents": 0})
