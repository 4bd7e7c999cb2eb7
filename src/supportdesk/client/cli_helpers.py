"""Helper functions for CLI commands."""

import asyncio
from datetime import datetime
from pathlib import Path

import click

from supportdesk.constants import get_storage_dir, get_storage_quota
from supportdesk.knowledge.models import Document, KnowledgeBase
from supportdesk.knowledge.normalizer import load_directory, normalize_uploads_report
from supportdesk.knowledge.store import FileStorageBackend, KnowledgeBaseStore


def open_store() -> KnowledgeBaseStore:
    """Open the knowledge-base store configured by the environment.

    Returns:
        KnowledgeBaseStore with all saved records loaded
    """
    store = KnowledgeBaseStore(FileStorageBackend(get_storage_dir(), get_storage_quota()))
    store.load()
    return store


def ingest_directory(directory: Path) -> list[Document]:
    """Normalize every file under a directory, reporting skipped files.

    Args:
        directory: Directory to read

    Returns:
        Accepted documents in path order
    """
    uploads = load_directory(directory)
    report = asyncio.run(normalize_uploads_report(uploads))
    for name, reason in report.failures:
        click.echo(f"  ✗ Skipped {name}: {reason}", err=True)
    return report.documents


def format_knowledge_base(index: int, kb: KnowledgeBase) -> str:
    """Format a saved knowledge base for display.

    Args:
        index: Result number (1-based)
        kb: The saved record

    Returns:
        Formatted line for display
    """
    created = datetime.fromtimestamp(kb.created_at / 1000).strftime("%Y-%m-%d %H:%M")
    return f"{index}. {kb.name} [{kb.id}] - {len(kb.documents)} files, saved {created}"


def format_usage(usage: dict) -> str:
    return (
        f"Tokens in/out: {usage['input_tokens']:,}/{usage['output_tokens']:,} "
        f"(est. ${usage['total_cost']:.6f})"
    )
