"""Session, streaming exchange and workspace services for supportdesk."""
