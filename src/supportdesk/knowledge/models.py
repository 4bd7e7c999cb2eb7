"""Data models for knowledge-base documents, saved snapshots and chat messages."""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


def new_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid.uuid4().hex


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Document:
    """A single named text document in a knowledge base.

    Attributes:
        name: Path-like name; archive entries keep their internal directory
              structure (e.g. "src/main.cpp")
        content: Decoded text content
        size: Byte size of the upload, or character count for archive entries
        media_type: Declared or inferred media type
        id: Opaque identifier generated at ingestion
    """

    name: str
    content: str
    size: int
    media_type: str = "text/plain"
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "size": self.size,
            "type": self.media_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        """Build a Document from its persisted JSON shape."""
        return cls(
            id=str(data.get("id") or new_id()),
            name=data["name"],
            content=data.get("content", ""),
            size=int(data.get("size", 0)),
            media_type=data.get("type", "text/plain"),
        )


@dataclass
class KnowledgeBase:
    """A named, persisted snapshot of a document list.

    The documents list is owned by this record; callers receive copies.

    Attributes:
        name: User-supplied label
        documents: Ordered documents; order determines context assembly
        id: Record identifier
        created_at: Creation time in epoch milliseconds
    """

    name: str
    documents: list[Document] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "files": [doc.to_dict() for doc in self.documents],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KnowledgeBase":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            created_at=int(data.get("createdAt", 0)),
            documents=[Document.from_dict(item) for item in data.get("files", [])],
        )

    def summary(self) -> dict[str, Any]:
        """Listing view without document contents."""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "file_count": len(self.documents),
        }


@dataclass
class ChatMessage:
    """One message in a conversation."""

    role: Role
    text: str
    is_error: bool = False
    id: str = field(default_factory=new_id)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "isError": self.is_error,
        }
