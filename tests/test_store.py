"""Tests for knowledge-base persistence."""

import errno
import json

import pytest

from supportdesk.errors import QuotaExceededError, StorageError
from supportdesk.knowledge.models import Document, KnowledgeBase
from supportdesk.knowledge.store import FileStorageBackend, KnowledgeBaseStore


class TestKnowledgeBaseStore:
    """Tests for KnowledgeBaseStore."""

    def test_save_then_load_returns_equal_documents(self, kb_store, sample_documents):
        record = kb_store.save("SDK Docs", sample_documents)

        loaded = kb_store.load_documents(record.id)

        assert [(d.name, d.content) for d in loaded] == [("readme.md", "Hello"), ("guide.txt", "World")]

    def test_saved_record_is_isolated_from_live_list(self, kb_store, sample_documents):
        live = list(sample_documents)
        record = kb_store.save("SDK Docs", live)

        live.append(Document(name="extra.md", content="Extra", size=5))
        live.clear()

        assert [d.name for d in kb_store.load_documents(record.id)] == ["readme.md", "guide.txt"]

    def test_loaded_documents_are_a_copy(self, kb_store, sample_documents):
        record = kb_store.save("SDK Docs", sample_documents)

        kb_store.load_documents(record.id).clear()

        assert len(kb_store.load_documents(record.id)) == 2

    def test_list_in_insertion_order(self, kb_store, sample_documents):
        kb_store.save("first", sample_documents)
        kb_store.save("second", sample_documents)

        assert [kb.name for kb in kb_store.list()] == ["first", "second"]

    def test_name_is_trimmed(self, kb_store, sample_documents):
        assert kb_store.save("  Docs  ", sample_documents).name == "Docs"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, kb_store, memory_backend, sample_documents, name):
        with pytest.raises(ValueError):
            kb_store.save(name, sample_documents)

        assert kb_store.list() == []
        assert memory_backend.writes == 0

    def test_empty_documents_rejected(self, kb_store):
        with pytest.raises(ValueError):
            kb_store.save("Docs", [])

    def test_quota_error_leaves_list_unchanged(self, kb_store, memory_backend, sample_documents):
        kb_store.save("existing", sample_documents)
        memory_backend.fail_with = QuotaExceededError("full")

        with pytest.raises(QuotaExceededError):
            kb_store.save("new", sample_documents)

        assert [kb.name for kb in kb_store.list()] == ["existing"]

    def test_quota_message_from_foreign_error_is_recognized(self, kb_store, memory_backend, sample_documents):
        memory_backend.fail_with = RuntimeError("QuotaExceededError: the quota has been exceeded")

        with pytest.raises(QuotaExceededError):
            kb_store.save("new", sample_documents)

    def test_generic_write_failure_is_storage_error(self, kb_store, memory_backend, sample_documents):
        memory_backend.fail_with = RuntimeError("disk on fire")

        with pytest.raises(StorageError) as exc_info:
            kb_store.save("new", sample_documents)

        assert not isinstance(exc_info.value, QuotaExceededError)
        assert kb_store.list() == []

    def test_delete_removes_one_record(self, kb_store, sample_documents):
        keep = kb_store.save("keep", sample_documents)
        drop = kb_store.save("drop", sample_documents)

        assert kb_store.delete(drop.id) is True
        assert [kb.id for kb in kb_store.list()] == [keep.id]

    def test_delete_unknown_id(self, kb_store, memory_backend):
        assert kb_store.delete("missing") is False
        assert memory_backend.writes == 0

    def test_failed_delete_keeps_record(self, kb_store, memory_backend, sample_documents):
        record = kb_store.save("keep", sample_documents)
        memory_backend.fail_with = OSError("read-only")

        with pytest.raises(StorageError):
            kb_store.delete(record.id)

        assert kb_store.get(record.id) is not None

    def test_load_documents_unknown_id(self, kb_store):
        with pytest.raises(KeyError):
            kb_store.load_documents("missing")

    def test_persisted_shape_and_reload(self, memory_backend, sample_documents):
        store = KnowledgeBaseStore(memory_backend)
        record = store.save("SDK Docs", sample_documents)

        payload = json.loads(memory_backend.data["smartsdk_kbs"])
        assert payload[0]["name"] == "SDK Docs"
        assert payload[0]["createdAt"] == record.created_at
        assert [f["name"] for f in payload[0]["files"]] == ["readme.md", "guide.txt"]
        assert payload[0]["files"][0]["type"] == "text/plain"

        reopened = KnowledgeBaseStore(memory_backend)
        reopened.load()
        assert [d.name for d in reopened.load_documents(record.id)] == ["readme.md", "guide.txt"]

    def test_empty_media_type_survives_reload(self, memory_backend):
        store = KnowledgeBaseStore(memory_backend)
        record = store.save("Images", [Document(name="Dockerfile", content="FROM x", size=6, media_type="")])

        reopened = KnowledgeBaseStore(memory_backend)
        reopened.load()

        assert reopened.load_documents(record.id)[0].media_type == ""

    def test_listing_on_fresh_store(self, memory_backend):
        store = KnowledgeBaseStore(memory_backend)

        assert store.list() == []
        assert store.load() == []

    def test_unparseable_storage_loads_empty(self, memory_backend):
        memory_backend.data["smartsdk_kbs"] = "{not json"
        store = KnowledgeBaseStore(memory_backend)

        assert store.load() == []


class TestFileStorageBackend:
    """Tests for FileStorageBackend."""

    def test_missing_key_returns_none(self, tmp_path):
        assert FileStorageBackend(tmp_path).get_item("nothing") is None

    def test_write_then_read(self, tmp_path):
        backend = FileStorageBackend(tmp_path / "nested")

        backend.set_item("slot", '["a"]')

        assert backend.get_item("slot") == '["a"]'
        assert [p.name for p in (tmp_path / "nested").iterdir()] == ["slot.json"]

    def test_quota_rejects_oversized_value(self, tmp_path):
        backend = FileStorageBackend(tmp_path, quota_bytes=10)
        backend.set_item("slot", "small")

        with pytest.raises(QuotaExceededError):
            backend.set_item("slot", "x" * 11)

        assert backend.get_item("slot") == "small"

    def test_disk_full_maps_to_quota_error(self, tmp_path, monkeypatch):
        backend = FileStorageBackend(tmp_path)

        def no_space(*args, **kwargs):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr("supportdesk.knowledge.store.os.replace", no_space)

        with pytest.raises(QuotaExceededError):
            backend.set_item("slot", "value")
        assert list(tmp_path.iterdir()) == []

    def test_store_over_file_backend_round_trip(self, tmp_path, sample_documents):
        store = KnowledgeBaseStore(FileStorageBackend(tmp_path))
        record = store.save("Docs", sample_documents)

        reopened = KnowledgeBaseStore(FileStorageBackend(tmp_path))
        records = reopened.load()

        assert [kb.id for kb in records] == [record.id]
        assert isinstance(records[0], KnowledgeBase)
