"""Persistence of named knowledge-base snapshots.

All records live in a single storage slot holding a JSON array. Every save
and delete rewrites the complete array first and only then updates the
in-memory index, so a failed write never leaves a partially applied change
visible.
"""

from __future__ import annotations

import errno
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from supportdesk.constants import KB_STORAGE_KEY
from supportdesk.errors import QuotaExceededError, StorageError
from supportdesk.knowledge.models import Document, KnowledgeBase

logger = logging.getLogger(__name__)

_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


class StorageBackend(Protocol):
    """Durable key-value storage holding string values."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Replace the value stored under key.

        Raises:
            QuotaExceededError: If the write is rejected for capacity reasons
            StorageError: For any other write failure
        """
        ...


class FileStorageBackend:
    """Stores each key as a JSON file inside a directory.

    Writes go to a temporary file that is atomically moved into place, so a
    failed write leaves the previous value untouched.
    """

    def __init__(self, directory: Path, quota_bytes: int | None = None) -> None:
        """Initialize the backend.

        Args:
            directory: Directory holding the slot files (created on first write)
            quota_bytes: Maximum encoded size of a single value, None for no limit
        """
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        encoded = value.encode("utf-8")
        if self.quota_bytes is not None and len(encoded) > self.quota_bytes:
            raise QuotaExceededError(
                f"Value of {len(encoded)} bytes exceeds storage quota of {self.quota_bytes} bytes"
            )

        tmp_name = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "wb") as f:
                f.write(encoded)
            os.replace(tmp_name, self._path(key))
            tmp_name = None
        except OSError as e:
            if e.errno in _QUOTA_ERRNOS:
                raise QuotaExceededError(f"Storage is full: {e}") from e
            raise StorageError(f"Failed to write {self._path(key)}: {e}") from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


class KnowledgeBaseStore:
    """In-memory index of saved knowledge bases backed by durable storage."""

    def __init__(self, backend: StorageBackend, key: str = KB_STORAGE_KEY) -> None:
        self.backend = backend
        self.key = key
        self._records: list[KnowledgeBase] = []

    def load(self) -> list[KnowledgeBase]:
        """Read the full record set from storage, replacing the in-memory index.

        Unreadable or unparseable storage is logged and treated as empty.

        Returns:
            list[KnowledgeBase]: The loaded records in stored order
        """
        try:
            raw = self.backend.get_item(self.key)
        except StorageError as e:
            logger.error(f"❌ Failed to read saved knowledge bases: {e}")
            raw = None

        records: list[KnowledgeBase] = []
        if raw:
            try:
                records = [KnowledgeBase.from_dict(item) for item in json.loads(raw)]
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.error(f"❌ Failed to parse saved knowledge bases: {e}")
                records = []

        self._records = records
        logger.info(f"📚 Loaded {len(records)} saved knowledge base(s)")
        return self.list()

    def list(self) -> list[KnowledgeBase]:
        """Return all records in insertion order."""
        return list(self._records)

    def get(self, kb_id: str) -> KnowledgeBase | None:
        return next((kb for kb in self._records if kb.id == kb_id), None)

    def load_documents(self, kb_id: str) -> list[Document]:
        """Return a copy of a saved record's documents.

        Raises:
            KeyError: If no record has this id
        """
        record = self.get(kb_id)
        if record is None:
            raise KeyError(kb_id)
        return list(record.documents)

    def save(self, name: str, documents: list[Document]) -> KnowledgeBase:
        """Persist a new named snapshot of the given documents.

        Args:
            name: Label for the knowledge base (must not be blank)
            documents: Documents to snapshot (must not be empty)

        Returns:
            KnowledgeBase: The new record

        Raises:
            ValueError: If the name is blank or there are no documents
            QuotaExceededError: If storage is out of capacity
            StorageError: If the write fails for any other reason
        """
        if not name or not name.strip():
            raise ValueError("Please enter a name for the Knowledge Base.")
        if not documents:
            raise ValueError("Cannot save an empty Knowledge Base.")

        record = KnowledgeBase(name=name.strip(), documents=list(documents))
        updated = [*self._records, record]

        self._write(updated)
        self._records = updated
        logger.info(f"💾 Saved knowledge base '{record.name}' ({len(record.documents)} files)")
        return record

    def delete(self, kb_id: str) -> bool:
        """Remove one record by id.

        Returns:
            True if a record was removed, False if the id was unknown

        Raises:
            StorageError: If the updated set could not be written
        """
        updated = [kb for kb in self._records if kb.id != kb_id]
        if len(updated) == len(self._records):
            return False

        self._write(updated)
        self._records = updated
        logger.info(f"🗑️ Deleted knowledge base {kb_id}")
        return True

    def _write(self, records: list[KnowledgeBase]) -> None:
        payload = json.dumps([kb.to_dict() for kb in records])
        try:
            self.backend.set_item(self.key, payload)
        except StorageError:
            raise
        except Exception as e:
            if "quota" in str(e).lower():
                raise QuotaExceededError(str(e)) from e
            raise StorageError(f"Failed to write knowledge bases: {e}") from e
