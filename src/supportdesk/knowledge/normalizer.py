"""Upload normalization: turn raw files and zip archives into text documents.

Each upload is classified as a zip container or a single file. Archive
entries are filtered (directories, resource-fork metadata and dot-files are
skipped) and decoded concurrently; single files are accepted when they carry
a known text extension or media type, or when a best-effort decode contains
no NUL characters. Any per-item failure is logged and the item omitted.
"""

import asyncio
import io
import logging
import mimetypes
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path

from supportdesk.constants import HIDDEN_METADATA_MARKER, TEXT_EXTENSIONS
from supportdesk.errors import IngestionSkip
from supportdesk.knowledge.models import Document

logger = logging.getLogger(__name__)


@dataclass
class Upload:
    """A raw uploaded blob.

    Attributes:
        name: Filename as provided by the client
        data: Raw byte payload
        media_type: Declared media type (may be empty)
    """

    name: str
    data: bytes
    media_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class IngestionReport:
    """Outcome of normalizing a batch of uploads.

    Attributes:
        documents: Accepted documents in upload / archive order
        failures: (name, reason) pairs for uploads or archives that were skipped
    """

    documents: list[Document] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)


def get_extension(filename: str) -> str:
    """Return the lowercased text after the last dot, or "" if there is none."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def is_text_file(filename: str) -> bool:
    """Check whether the filename carries a recognized text/code extension.

    Args:
        filename: The filename or archive path to check

    Returns:
        True if the extension is in the allow-list, False otherwise
    """
    return get_extension(filename) in TEXT_EXTENSIONS


def is_zip_upload(upload: Upload) -> bool:
    return upload.name.lower().endswith(".zip") or "zip" in (upload.media_type or "")


def looks_binary(text: str) -> bool:
    """Crude binary check: decoded text containing a NUL character."""
    return "\0" in text


def _should_skip_entry(info: zipfile.ZipInfo) -> bool:
    return (
        info.is_dir()
        or HIDDEN_METADATA_MARKER in info.filename
        or info.filename.startswith(".")
    )


async def _decode_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> Document | None:
    try:
        raw = await asyncio.to_thread(archive.read, info)
        content = raw.decode("utf-8")
    except (UnicodeDecodeError, zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError) as e:
        skip = IngestionSkip(info.filename, str(e))
        logger.warning(f"⚠️ Skipping archive entry {skip}")
        return None

    return Document(
        name=info.filename,
        content=content,
        size=len(content),
        media_type="text/plain",
    )


async def extract_archive(upload: Upload) -> list[Document]:
    """Extract text documents from a zip upload.

    Entries are decoded concurrently but returned in archive enumeration order.

    Args:
        upload: The zip upload

    Returns:
        list[Document]: One document per retained text entry (may be empty)

    Raises:
        zipfile.BadZipFile: If the payload cannot be opened as an archive
    """
    with zipfile.ZipFile(io.BytesIO(upload.data)) as archive:
        entries = [
            info
            for info in archive.infolist()
            if not _should_skip_entry(info) and is_text_file(info.filename)
        ]
        logger.debug(f"📦 {upload.name}: {len(entries)} text entries to decode")
        results = await asyncio.gather(*(_decode_entry(archive, info) for info in entries))

    return [doc for doc in results if doc is not None]


def decode_single_file(upload: Upload) -> Document:
    """Decode a non-archive upload into a document.

    Args:
        upload: The upload to decode

    Returns:
        Document: The decoded document

    Raises:
        IngestionSkip: If the upload cannot be decoded or looks binary
    """
    if is_text_file(upload.name) or (upload.media_type or "").startswith("text/"):
        try:
            content = upload.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestionSkip(upload.name, f"not valid UTF-8 ({e.reason})") from e
        media_type = upload.media_type or "text/plain"
    else:
        # Unknown type: read as text anyway and reject anything with NUL bytes
        content = upload.data.decode("utf-8", errors="replace")
        if looks_binary(content):
            raise IngestionSkip(upload.name, "likely binary file")
        media_type = upload.media_type

    return Document(
        name=upload.name,
        content=content,
        size=upload.size,
        media_type=media_type,
    )


async def normalize_uploads_report(uploads: list[Upload]) -> IngestionReport:
    """Normalize a batch of uploads, collecting failures alongside documents.

    Args:
        uploads: Uploads in the order they were provided

    Returns:
        IngestionReport: Accepted documents and per-upload failures
    """
    report = IngestionReport()

    for upload in uploads:
        if is_zip_upload(upload):
            try:
                docs = await extract_archive(upload)
            except Exception as e:
                logger.error(f"❌ Error processing zip file {upload.name}: {e}")
                report.failures.append((upload.name, f"Failed to process zip file: {upload.name}"))
                continue
            logger.info(f"📦 Extracted {len(docs)} document(s) from {upload.name}")
            report.documents.extend(docs)
            continue

        try:
            report.documents.append(decode_single_file(upload))
        except IngestionSkip as skip:
            logger.warning(f"⚠️ Skipping upload {skip}")
            report.failures.append((skip.name, skip.reason))

    logger.info(f"✅ Normalized {len(uploads)} upload(s) into {len(report.documents)} document(s)")
    return report


async def normalize_uploads(uploads: list[Upload]) -> list[Document]:
    """Normalize a batch of uploads into an ordered document list.

    The result is meant to be appended to the caller's existing collection.

    Args:
        uploads: Uploads in the order they were provided

    Returns:
        list[Document]: Accepted documents
    """
    report = await normalize_uploads_report(uploads)
    return report.documents


def load_directory(directory: Path) -> list[Upload]:
    """Wrap every regular file under a directory as an Upload.

    Files are visited in sorted path order and named by their path relative
    to the directory, so nested files keep their structure like archive entries.
    Hidden files and anything under a hidden directory are ignored.

    Args:
        directory: Root directory to scan

    Returns:
        list[Upload]: One upload per non-hidden file
    """
    uploads = []
    for path in sorted(p for p in directory.rglob("*") if p.is_file()):
        relative_path = path.relative_to(directory)
        if any(part.startswith(".") for part in relative_path.parts):
            continue
        relative = relative_path.as_posix()
        media_type, _ = mimetypes.guess_type(path.name)
        uploads.append(Upload(name=relative, data=path.read_bytes(), media_type=media_type or ""))
    return uploads
