"""SupportDesk: technical-support chat grounded in an uploaded knowledge base."""

__version__ = "0.1.0"
