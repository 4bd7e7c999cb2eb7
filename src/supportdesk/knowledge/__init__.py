"""Knowledge-base ingestion, assembly and persistence.

This package turns uploads into documents and documents into context:
- normalizer: uploads and zip archives to an ordered Document list
- assembler: Document list to a delimited context and system instruction
- store: named snapshots persisted to durable key-value storage

Usage:
    from supportdesk.knowledge import Upload, normalize_uploads, assemble

    documents = await normalize_uploads([Upload("readme.md", b"Hello")])
    instruction = assemble(documents)
"""

from supportdesk.knowledge.assembler import assemble, build_context, build_system_instruction
from supportdesk.knowledge.models import ChatMessage, Document, KnowledgeBase, Role
from supportdesk.knowledge.normalizer import (
    IngestionReport,
    Upload,
    normalize_uploads,
    normalize_uploads_report,
)
from supportdesk.knowledge.store import FileStorageBackend, KnowledgeBaseStore, StorageBackend

__all__ = [
    # Models
    "ChatMessage",
    "Document",
    "KnowledgeBase",
    "Role",
    # Normalizer
    "IngestionReport",
    "Upload",
    "normalize_uploads",
    "normalize_uploads_report",
    # Assembler
    "assemble",
    "build_context",
    "build_system_instruction",
    # Store
    "FileStorageBackend",
    "KnowledgeBaseStore",
    "StorageBackend",
]
