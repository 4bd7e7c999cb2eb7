"""Pytest configuration and shared fixtures for the test suite."""

import io
import os
import zipfile

import pytest

from supportdesk.constants import get_default_model
from supportdesk.knowledge.models import Document
from supportdesk.knowledge.store import KnowledgeBaseStore
from supportdesk.llm.base import StreamChunk, UsageStats
from supportdesk.llm.gemini import GeminiProvider
from supportdesk.service.workspace import Workspace


# Service availability checks
def gemini_available() -> bool:
    """Check if a Gemini API key is configured.

    Returns:
        True if GEMINI_API_KEY or API_KEY is set, False otherwise
    """
    return bool(os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"))


class FakeChatSession:
    """Provider session that replays canned chunks, optionally failing afterwards."""

    def __init__(self, chunks: list[StreamChunk] | None = None, error: Exception | None = None):
        self.chunks = chunks or []
        self.error = error
        self.sent: list[str] = []

    async def send_stream(self, text: str):
        self.sent.append(text)
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


class FakeProvider:
    """In-memory LLMProvider recording what it was asked to do."""

    model = "fake-model"

    def __init__(
        self,
        token_count: int = 120,
        session: FakeChatSession | None = None,
        count_error: Exception | None = None,
        create_error: Exception | None = None,
    ):
        self.token_count = token_count
        self.session = session or FakeChatSession()
        self.count_error = count_error
        self.create_error = create_error
        self.counted: list[str] = []
        self.created: list[tuple[str, float]] = []

    async def count_tokens(self, text: str) -> int:
        self.counted.append(text)
        if self.count_error is not None:
            raise self.count_error
        return self.token_count

    async def create_session(self, system_instruction: str, temperature: float):
        self.created.append((system_instruction, temperature))
        if self.create_error is not None:
            raise self.create_error
        return self.session


class MemoryBackend:
    """Dict-backed StorageBackend that can be told to fail writes."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.fail_with: Exception | None = None
        self.writes = 0

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.writes += 1
        self.data[key] = value


@pytest.fixture
def gemini_provider():
    """Provide a GeminiProvider, skip if no API key is configured.

    Returns:
        GeminiProvider instance using the default model
    """
    if not gemini_available():
        pytest.skip("Gemini API key not configured")
    return GeminiProvider(model=get_default_model("gemini"))


@pytest.fixture
def make_chunks():
    """Factory fixture building a text stream terminated by a usage report.

    Returns:
        Function taking fragments and optional prompt/output token counts
    """

    def _make(fragments: list[str], prompt_tokens: int = 50, output_tokens: int = 20):
        chunks = [StreamChunk(text=fragment) for fragment in fragments]
        chunks.append(
            StreamChunk(
                usage=UsageStats(
                    prompt_token_count=prompt_tokens,
                    candidates_token_count=output_tokens,
                    total_token_count=prompt_tokens + output_tokens,
                )
            )
        )
        return chunks

    return _make


@pytest.fixture
def fake_session():
    """Factory fixture creating FakeChatSession instances."""
    return FakeChatSession


@pytest.fixture
def fake_provider():
    """Factory fixture creating FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def kb_store(memory_backend) -> KnowledgeBaseStore:
    """KnowledgeBaseStore backed by an in-memory backend."""
    store = KnowledgeBaseStore(memory_backend)
    store.load()
    return store


@pytest.fixture
def sample_documents() -> list[Document]:
    """Two small documents in upload order."""
    return [
        Document(name="readme.md", content="Hello", size=5),
        Document(name="guide.txt", content="World", size=5),
    ]


@pytest.fixture
def workspace(kb_store):
    """Workspace with a FakeProvider whose turns stream a short answer."""
    session = FakeChatSession(
        chunks=[
            StreamChunk(text="Use "),
            StreamChunk(text="init()."),
            StreamChunk(usage=UsageStats(prompt_token_count=40, candidates_token_count=8)),
        ]
    )
    return Workspace(FakeProvider(session=session), kb_store)


@pytest.fixture
def make_zip():
    """Factory fixture building an in-memory zip archive.

    Returns:
        Function taking {archive_path: content} (None content = directory entry)
        and returning the archive bytes
    """

    def _make(entries: dict[str, bytes | str | None]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for path, content in entries.items():
                if content is None:
                    archive.writestr(zipfile.ZipInfo(path if path.endswith("/") else path + "/"), b"")
                else:
                    archive.writestr(path, content)
        return buffer.getvalue()

    return _make
