"""Page routes for serving HTML templates."""

from flask import Blueprint, render_template

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def index():
    """Serve the support chat interface.

    Returns:
        HTML page with upload sidebar, knowledge-base library and chat
    """
    return render_template("chat.html")
