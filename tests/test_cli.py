"""Tests for the CLI module."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from supportdesk.client.cli import chat, delete, list_kbs, save, show
from supportdesk.errors import QuotaExceededError


@pytest.fixture
def docs_dir(tmp_path):
    """Directory with two text files and one binary file."""
    directory = tmp_path / "docs"
    directory.mkdir()
    (directory / "guide.md").write_text("# Guide")
    (directory / "setup.txt").write_text("Run setup")
    (directory / "logo.png").write_bytes(b"\x89PNG\x00\x00")
    return directory


class TestListCLI:
    """Tests for the list command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @patch("supportdesk.client.cli.open_store")
    def test_list_empty(self, mock_open_store, kb_store):
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(list_kbs)

        assert result.exit_code == 0
        assert "No saved knowledge bases yet." in result.output

    @patch("supportdesk.client.cli.open_store")
    def test_list_records(self, mock_open_store, kb_store, sample_documents):
        kb_store.save("SDK v1", sample_documents)
        kb_store.save("SDK v2", sample_documents[:1])
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(list_kbs)

        assert result.exit_code == 0
        assert "2 saved knowledge base(s)" in result.output
        assert "1. SDK v1" in result.output
        assert "2. SDK v2" in result.output
        assert "1 files" in result.output


class TestSaveCLI:
    """Tests for the save command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @patch("supportdesk.client.cli.open_store")
    def test_save_directory(self, mock_open_store, kb_store, docs_dir):
        """Test saving a directory skips the binary file and stores the rest."""
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(save, [str(docs_dir), "--name", "Docs"])

        assert result.exit_code == 0
        assert "Found 2 document(s)" in result.output
        assert "✓ Saved 'Docs'" in result.output
        record = kb_store.list()[0]
        assert [d.name for d in record.documents] == ["guide.md", "setup.txt"]

    @patch("supportdesk.client.cli.open_store")
    def test_save_empty_directory(self, mock_open_store, kb_store, tmp_path):
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(save, [str(tmp_path), "-n", "Empty"])

        assert result.exit_code == 0
        assert "No text documents found" in result.output
        mock_open_store.assert_not_called()

    @patch("supportdesk.client.cli.open_store")
    def test_save_quota_exceeded(self, mock_open_store, kb_store, memory_backend, docs_dir):
        memory_backend.fail_with = QuotaExceededError("full")
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(save, [str(docs_dir), "--name", "Docs"])

        assert result.exit_code != 0
        assert "Storage limit exceeded" in result.output
        assert kb_store.list() == []

    def test_save_requires_name(self, docs_dir):
        result = self.runner.invoke(save, [str(docs_dir)])

        assert result.exit_code != 0
        assert "Missing option" in result.output

    def test_save_nonexistent_directory(self):
        result = self.runner.invoke(save, ["/nonexistent/path", "--name", "x"])

        assert result.exit_code != 0


class TestShowAndDeleteCLI:
    """Tests for the show and delete commands."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @patch("supportdesk.client.cli.open_store")
    def test_show(self, mock_open_store, kb_store, sample_documents):
        record = kb_store.save("SDK v1", sample_documents)
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(show, [record.id])

        assert result.exit_code == 0
        assert "SDK v1 (2 files)" in result.output
        assert "readme.md (5 bytes)" in result.output

    @patch("supportdesk.client.cli.open_store")
    def test_show_unknown(self, mock_open_store, kb_store):
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(show, ["missing"])

        assert result.exit_code != 0
        assert "not found" in result.output

    @patch("supportdesk.client.cli.open_store")
    def test_delete_with_yes(self, mock_open_store, kb_store, sample_documents):
        record = kb_store.save("SDK v1", sample_documents)
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(delete, [record.id, "--yes"])

        assert result.exit_code == 0
        assert "✓ Deleted 'SDK v1'" in result.output
        assert kb_store.list() == []

    @patch("supportdesk.client.cli.open_store")
    def test_delete_declined(self, mock_open_store, kb_store, sample_documents):
        record = kb_store.save("SDK v1", sample_documents)
        mock_open_store.return_value = kb_store

        result = self.runner.invoke(delete, [record.id], input="n\n")

        assert result.exit_code == 0
        assert "Deletion cancelled." in result.output
        assert len(kb_store.list()) == 1


class TestChatCLI:
    """Tests for the interactive chat command."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    def test_chat_requires_source(self):
        result = self.runner.invoke(chat, [])

        assert result.exit_code != 0
        assert "Provide a DIRECTORY or --kb" in result.output

    @patch("supportdesk.client.cli.get_llm_provider")
    @patch("supportdesk.client.cli.open_store")
    def test_chat_over_directory(
        self, mock_open_store, mock_get_provider, kb_store, fake_provider, fake_session, make_chunks, docs_dir
    ):
        """Test one question and answer followed by exit."""
        provider = fake_provider(session=fake_session(chunks=make_chunks(["Run ", "setup."])))
        mock_open_store.return_value = kb_store
        mock_get_provider.return_value = provider

        result = self.runner.invoke(chat, [str(docs_dir)], input="How do I install?\nexit\n")

        assert result.exit_code == 0
        assert "analyzed your 2 document(s)" in result.output
        assert "Run setup." in result.output
        assert "Tokens in/out: 170/20" in result.output
        assert provider.session.sent == ["How do I install?"]
        mock_get_provider.assert_called_once_with({"service": None, "model": None})

    @patch("supportdesk.client.cli.get_llm_provider")
    @patch("supportdesk.client.cli.open_store")
    def test_chat_from_saved_kb(
        self, mock_open_store, mock_get_provider, kb_store, fake_provider, sample_documents
    ):
        record = kb_store.save("SDK v1", sample_documents)
        provider = fake_provider()
        mock_open_store.return_value = kb_store
        mock_get_provider.return_value = provider

        result = self.runner.invoke(chat, ["--kb", record.id, "--service", "ollama"], input="quit\n")

        assert result.exit_code == 0
        assert "--- Document: readme.md ---" in provider.created[0][0]
        mock_get_provider.assert_called_once_with({"service": "ollama", "model": None})

    @patch("supportdesk.client.cli.get_llm_provider")
    @patch("supportdesk.client.cli.open_store")
    def test_chat_session_failure(
        self, mock_open_store, mock_get_provider, kb_store, fake_provider, docs_dir
    ):
        mock_open_store.return_value = kb_store
        mock_get_provider.return_value = fake_provider(create_error=RuntimeError("API_KEY is missing"))

        result = self.runner.invoke(chat, [str(docs_dir)])

        assert result.exit_code != 0
        assert "Failed to start session: API_KEY is missing" in result.output
