"""Flask route blueprints for the supportdesk client application."""

from supportdesk.client.routes.chat import chat_bp
from supportdesk.client.routes.config import get_config, init_config
from supportdesk.client.routes.health import health_bp
from supportdesk.client.routes.library import library_bp
from supportdesk.client.routes.pages import pages_bp
from supportdesk.client.routes.upload import upload_bp

__all__ = [
    "chat_bp",
    "health_bp",
    "library_bp",
    "pages_bp",
    "upload_bp",
    "init_config",
    "get_config",
]
