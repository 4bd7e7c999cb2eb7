"""Flask web application for the knowledge-base support chat.

This module wires the upload, session, chat, library and health blueprints
to a single Workspace controller that owns the uploaded documents, the
active LLM session and the saved knowledge bases.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask

from supportdesk.client.routes import (
    chat_bp,
    health_bp,
    init_config,
    library_bp,
    pages_bp,
    upload_bp,
)
from supportdesk.constants import (
    DEFAULT_LLM_SERVICE,
    DEFAULT_OLLAMA_HOST,
    MAX_UPLOAD_SIZE_BYTES,
    get_default_model,
    get_storage_dir,
    get_storage_quota,
    get_support_contact,
)
from supportdesk.knowledge.store import FileStorageBackend, KnowledgeBaseStore
from supportdesk.llm import get_llm_provider
from supportdesk.service.workspace import Workspace

# Configure logging
log_level = os.getenv("LOG_LEVEL", "DEBUG")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_SIZE_BYTES

# Register blueprints
app.register_blueprint(pages_bp)
app.register_blueprint(upload_bp)
app.register_blueprint(chat_bp)
app.register_blueprint(library_bp)
app.register_blueprint(health_bp)


def initialize_services() -> Workspace:
    """Create the LLM provider, knowledge-base store and workspace on startup."""
    logger.info("🔧 Initializing services...")

    service = os.getenv("LLM_SERVICE", DEFAULT_LLM_SERVICE)
    llm_config = {
        "service": service,
        "host": os.getenv("OLLAMA_HOST", DEFAULT_OLLAMA_HOST),
        "model": get_default_model(service),
    }
    logger.debug(f"LLM config: {llm_config}")
    llm_provider = get_llm_provider(llm_config)
    logger.info("✅ LLM provider initialized successfully")

    storage_dir = get_storage_dir()
    store = KnowledgeBaseStore(FileStorageBackend(storage_dir, get_storage_quota()))
    store.load()
    logger.info(f"✅ Knowledge-base storage: {storage_dir}")

    workspace = Workspace(llm_provider, store, support_contact=get_support_contact())
    init_config(workspace=workspace, llm_provider=llm_provider)
    return workspace


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting SupportDesk Flask application...")

    print("📦 Initializing services...")
    initialize_services()
    print("✅ Services initialized successfully")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    # Single-threaded: one session, one turn in flight
    app.run(host=host, port=port, debug=debug, threaded=False)


if __name__ == "__main__":
    main()
