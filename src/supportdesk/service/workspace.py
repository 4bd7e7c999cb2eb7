"""Workspace controller: the single owner of application state.

The workspace holds the live document list, the session manager, the
knowledge-base store and the save-naming state. Clients (web routes, CLI)
mutate state only through the operations defined here.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from supportdesk.constants import estimate_cost
from supportdesk.knowledge.models import ChatMessage, Document, KnowledgeBase
from supportdesk.knowledge.normalizer import IngestionReport, Upload, normalize_uploads_report
from supportdesk.knowledge.store import KnowledgeBaseStore
from supportdesk.llm.base import LLMProvider
from supportdesk.service.exchange import send_turn
from supportdesk.service.session import SessionManager

logger = logging.getLogger(__name__)


class WorkspaceLockedError(RuntimeError):
    """Documents cannot change while a session is active."""


class Workspace:
    """Application state and the operations that mutate it."""

    def __init__(
        self,
        provider: LLMProvider,
        store: KnowledgeBaseStore,
        support_contact: str | None = None,
    ) -> None:
        self.documents: list[Document] = []
        self.session = SessionManager(provider, support_contact=support_contact)
        self.store = store
        self.save_name: str | None = None

    # ==================================================================
    # Documents
    # ==================================================================

    def _ensure_unlocked(self) -> None:
        if self.session.active:
            raise WorkspaceLockedError("Reset the session before changing documents.")

    async def add_uploads(self, uploads: list[Upload]) -> IngestionReport:
        """Normalize uploads and append the resulting documents.

        Raises:
            WorkspaceLockedError: If a session is active
        """
        self._ensure_unlocked()
        report = await normalize_uploads_report(uploads)
        self.documents = [*self.documents, *report.documents]
        logger.info(f"📄 Workspace now holds {len(self.documents)} document(s)")
        return report

    def remove_document(self, doc_id: str) -> bool:
        self._ensure_unlocked()
        remaining = [doc for doc in self.documents if doc.id != doc_id]
        removed = len(remaining) != len(self.documents)
        self.documents = remaining
        return removed

    def clear_documents(self) -> None:
        """Remove all documents and abandon any in-progress save."""
        self._ensure_unlocked()
        self.documents = []
        self.cancel_save()

    # ==================================================================
    # Session
    # ==================================================================

    async def start_session(self) -> bool:
        return await self.session.start(list(self.documents))

    def reset_session(self) -> None:
        self.session.reset()

    def full_reset(self) -> None:
        """Reset the session and clear the whole workspace."""
        self.session.reset()
        self.documents = []
        self.cancel_save()

    async def send_message(
        self, text: str, on_fragment: Callable[[str], None] | None = None
    ) -> ChatMessage | None:
        return await send_turn(self.session, text, on_fragment)

    def usage(self) -> dict[str, Any]:
        """Token counters and estimated cost for the current session."""
        state = self.session.state
        return {
            "input_tokens": state.total_input_tokens,
            "output_tokens": state.total_output_tokens,
            **estimate_cost(state.total_input_tokens, state.total_output_tokens),
        }

    # ==================================================================
    # Knowledge bases
    # ==================================================================

    def begin_save(self) -> str | None:
        """Start naming a new knowledge base and propose a default name.

        Returns:
            The proposed name, or None if there are no documents to save
        """
        if not self.documents:
            return None
        now = datetime.now()
        self.save_name = f"SDK Docs - {now:%Y-%m-%d} {now:%H:%M}"
        return self.save_name

    def cancel_save(self) -> None:
        self.save_name = None

    def save_knowledge_base(self, name: str) -> KnowledgeBase:
        """Persist the current documents under a name.

        Raises:
            ValueError: If the name is blank or there are no documents
            QuotaExceededError: If storage is full
            StorageError: If the write fails
        """
        record = self.store.save(name, self.documents)
        self.save_name = None
        return record

    def load_knowledge_base(self, kb_id: str) -> list[Document]:
        """Replace the live documents with a saved knowledge base.

        An active session is reset first.

        Raises:
            KeyError: If the id is unknown
        """
        documents = self.store.load_documents(kb_id)
        if self.session.active:
            logger.info("🔄 Loading a knowledge base resets the active session")
            self.session.reset()
        self.documents = documents
        self.cancel_save()
        return self.documents

    def delete_knowledge_base(self, kb_id: str) -> bool:
        return self.store.delete(kb_id)
