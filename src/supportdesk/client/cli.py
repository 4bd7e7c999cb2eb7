"""Command-line interface for SupportDesk using Click."""

import asyncio
from pathlib import Path

import click
from dotenv import load_dotenv

from supportdesk.client.cli_helpers import (
    format_knowledge_base,
    format_usage,
    ingest_directory,
    open_store,
)
from supportdesk.errors import QuotaExceededError, SessionInitError, StorageError
from supportdesk.llm import get_llm_provider
from supportdesk.service.workspace import Workspace

# Load environment variables
load_dotenv()

EXIT_COMMANDS = {"exit", "quit", ":q"}


@click.command()
def list_kbs() -> None:
    """List saved knowledge bases.

    Example:
        supportdesk-list
    """
    store = open_store()
    records = store.list()
    if not records:
        click.echo("No saved knowledge bases yet.")
        return

    click.echo(f"📚 {len(records)} saved knowledge base(s):\n")
    for i, kb in enumerate(records, 1):
        click.echo(format_knowledge_base(i, kb))


@click.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option("--name", "-n", type=str, required=True, help="Name for the knowledge base")
def save(directory: Path, name: str) -> None:
    """Save the text files under DIRECTORY as a named knowledge base.

    Example:
        supportdesk-save docs/ --name "SDK Docs v2"
    """
    documents = ingest_directory(directory)
    if not documents:
        click.echo(f"No text documents found in '{directory}'")
        return

    click.echo(f"Found {len(documents)} document(s)")
    store = open_store()
    try:
        record = store.save(name, documents)
    except ValueError as e:
        click.echo(f"✗ {e}", err=True)
        raise click.Abort()
    except QuotaExceededError as e:
        click.echo(f"✗ Cannot save Knowledge Base: Storage limit exceeded ({e})", err=True)
        raise click.Abort()
    except StorageError as e:
        click.echo(f"✗ Failed to save Knowledge Base: {e}", err=True)
        raise click.Abort()

    click.echo(f"✓ Saved '{record.name}' [{record.id}]")


@click.command()
@click.argument("kb_id", type=str)
def show(kb_id: str) -> None:
    """Show the documents in a saved knowledge base.

    Example:
        supportdesk-show 3f2a...
    """
    record = open_store().get(kb_id)
    if record is None:
        click.echo(f"✗ Knowledge base '{kb_id}' not found", err=True)
        raise click.Abort()

    click.echo(f"📚 {record.name} ({len(record.documents)} files)\n")
    for doc in record.documents:
        click.echo(f"  • {doc.name} ({doc.size} bytes)")


@click.command()
@click.argument("kb_id", type=str)
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def delete(kb_id: str, yes: bool) -> None:
    """Delete a saved knowledge base.

    Example:
        supportdesk-delete 3f2a...
        supportdesk-delete 3f2a... --yes
    """
    store = open_store()
    record = store.get(kb_id)
    if record is None:
        click.echo(f"✗ Knowledge base '{kb_id}' not found", err=True)
        raise click.Abort()

    if not yes and not click.confirm(f"Delete knowledge base '{record.name}'?", default=False):
        click.echo("Deletion cancelled.")
        return

    try:
        store.delete(kb_id)
    except StorageError as e:
        click.echo(f"✗ Failed to delete Knowledge Base: {e}", err=True)
        raise click.Abort()
    click.echo(f"✓ Deleted '{record.name}'")


@click.command()
@click.argument(
    "directory",
    required=False,
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.option("--kb", "kb_id", type=str, default=None, help="Saved knowledge base id to load")
@click.option("--service", type=str, default=None, help="LLM service (gemini or ollama)")
@click.option("--model", type=str, default=None, help="Model name override")
def chat(directory: Path | None, kb_id: str | None, service: str | None, model: str | None) -> None:
    """Chat with the support agent over DIRECTORY or a saved knowledge base.

    Type 'exit' or 'quit' to end the session.

    Example:
        supportdesk-chat docs/
        supportdesk-chat --kb 3f2a... --service ollama
    """
    if directory is None and kb_id is None:
        raise click.UsageError("Provide a DIRECTORY or --kb")

    store = open_store()
    provider = get_llm_provider({"service": service, "model": model})
    workspace = Workspace(provider, store)

    if kb_id is not None:
        try:
            workspace.load_knowledge_base(kb_id)
        except KeyError:
            click.echo(f"✗ Knowledge base '{kb_id}' not found", err=True)
            raise click.Abort()
    if directory is not None:
        workspace.documents = [*workspace.documents, *ingest_directory(directory)]

    if not workspace.documents:
        click.echo("No documents to chat about.")
        return

    try:
        asyncio.run(workspace.start_session())
    except SessionInitError as e:
        click.echo(f"✗ Failed to start session: {e}", err=True)
        raise click.Abort()

    click.echo(f"🤖 {workspace.session.state.messages[0].text}\n")

    while True:
        text = click.prompt("You", prompt_suffix="> ", default="", show_default=False)
        if text.strip().lower() in EXIT_COMMANDS:
            break
        if not text.strip():
            continue

        click.echo("🤖 ", nl=False)
        reply = asyncio.run(
            workspace.send_message(text, on_fragment=lambda t: click.echo(t, nl=False))
        )
        if reply is not None and reply.is_error:
            click.echo(f"✗ {reply.text}", err=True)
        else:
            click.echo("")
        click.echo(f"   {format_usage(workspace.usage())}\n")

    click.echo(format_usage(workspace.usage()))


if __name__ == "__main__":
    chat()
