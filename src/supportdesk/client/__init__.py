"""Web and command-line clients for supportdesk."""
