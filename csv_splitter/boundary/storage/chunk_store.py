"""
Chunk store for per-caller CSV chunk files.

Persists, lists, reads, deletes and serves chunk files under
{root}/{namespace}/. Writes go through a staging batch so a split either
commits every chunk or none of them.

Dependencies: csv_splitter.core
System role: File-system boundary for chunk persistence
"""

import logging
import os
import re
import shutil
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from csv_splitter.core import csv_codec
from csv_splitter.core.exceptions import (
    ChunkNotFoundError,
    InvalidInputError,
    StorageIOError,
)
from csv_splitter.core.filename_guard import ensure_safe
from csv_splitter.core.splitter import SealedChunk
from csv_splitter.models.chunk import ChunkMetadata, ChunkView

logger = logging.getLogger(__name__)

CHUNK_SUFFIX = ".csv"
STAGING_PREFIX = ".staging-"
CHUNK_FILENAME_RE = re.compile(
    r"^(?P<stem>.+)_(?P<operation_id>\d{14}-[0-9a-f]{8})_chunk_(?P<number>\d+)\.csv$"
)


@dataclass
class ChunkDownload:
    """Resolved chunk file ready to be streamed."""

    path: Path
    filename: str
    size: int
    media_type: str = "text/csv"


def new_operation_id() -> str:
    """UTC timestamp plus random suffix, unique per split operation."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


def sanitize_stem(original_filename: str) -> str:
    """
    Reduce an uploaded filename to a safe stem.

    Keeps alphanumerics, hyphens and underscores of the name without its
    extension; falls back to "data".
    """
    name = Path(original_filename.replace("\\", "/")).name
    base_name = name.rsplit(".", 1)[0] if "." in name else name
    safe_name = "".join(c for c in base_name if c.isalnum() or c in "-_")
    return safe_name or "data"


def build_chunk_filename(stem: str, operation_id: str, chunk_number: int) -> str:
    """Format: {stem}_{operation_id}_chunk_{NNN}.csv"""
    return f"{stem}_{operation_id}_chunk_{chunk_number:03d}{CHUNK_SUFFIX}"


def parse_chunk_filename(filename: str) -> tuple[str, str, int]:
    """
    Extract (original filename, operation id, chunk number).

    Files not produced by this store report chunk number 0 and an empty
    operation id.
    """
    match = CHUNK_FILENAME_RE.match(filename)
    if not match:
        return filename, "", 0
    return (
        f"{match.group('stem')}{CHUNK_SUFFIX}",
        match.group("operation_id"),
        int(match.group("number")),
    )


@dataclass
class ChunkBatch:
    """
    All-or-nothing write batch for one split operation.

    Chunks are written to a hidden staging directory and only moved into
    the namespace directory on commit. Leaving the context manager with an
    exception discards everything staged.
    """

    store: "ChunkStore"
    namespace: str
    original_filename: str
    operation_id: str = field(default_factory=new_operation_id)
    staged: list[ChunkMetadata] = field(default_factory=list)
    committed: bool = False

    def __post_init__(self) -> None:
        self.stem = sanitize_stem(self.original_filename)
        self.namespace_dir = self.store.namespace_dir(self.namespace)
        self.staging_dir = self.namespace_dir / f"{STAGING_PREFIX}{self.operation_id}"
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise StorageIOError(
                f"Failed to create staging directory: {e}",
                operation="write",
                details={"namespace": self.namespace},
            ) from e

    def __enter__(self) -> "ChunkBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None or not self.committed:
            self.discard()

    def add(self, chunk: SealedChunk) -> ChunkMetadata:
        """
        Stage one sealed chunk.

        Args:
            chunk: Sealed chunk from the splitter engine

        Returns:
            ChunkMetadata: Metadata pointing at the final (post-commit) path

        Raises:
            StorageIOError: If the staged file cannot be written
        """
        if self.committed:
            raise StorageIOError("Batch already committed", operation="write")

        filename = build_chunk_filename(self.stem, self.operation_id, chunk.chunk_number)
        content = chunk.encode()
        staged_path = self.staging_dir / filename
        try:
            with open(staged_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise StorageIOError(
                f"Failed to write chunk {filename}: {e}",
                operation="write",
                details={"namespace": self.namespace, "filename": filename},
            ) from e

        metadata = ChunkMetadata(
            filename=filename,
            original_filename=f"{self.stem}{CHUNK_SUFFIX}",
            chunk_number=chunk.chunk_number,
            row_count=chunk.row_count,
            file_size=csv_codec.byte_size(content),
            created_at=datetime.now(timezone.utc),
            file_path=str(self.namespace_dir / filename),
        )
        self.staged.append(metadata)
        return metadata

    def commit(self) -> list[ChunkMetadata]:
        """
        Move every staged chunk into the namespace directory.

        Returns:
            list[ChunkMetadata]: Metadata of the committed chunks in order

        Raises:
            StorageIOError: If a move fails; already moved chunks are removed
        """
        moved: list[Path] = []
        try:
            for metadata in self.staged:
                target = self.namespace_dir / metadata.filename
                os.replace(self.staging_dir / metadata.filename, target)
                moved.append(target)
        except OSError as e:
            for path in moved:
                path.unlink(missing_ok=True)
            raise StorageIOError(
                f"Failed to commit chunks: {e}",
                operation="write",
                details={"namespace": self.namespace, "operation_id": self.operation_id},
            ) from e

        self.committed = True
        shutil.rmtree(self.staging_dir, ignore_errors=True)
        logger.info(
            "Committed chunk batch",
            extra={
                "namespace": self.namespace,
                "operation_id": self.operation_id,
                "chunk_count": len(self.staged),
            },
        )
        return list(self.staged)

    def discard(self) -> None:
        """Remove the staging directory and everything in it."""
        if self.staging_dir.exists():
            shutil.rmtree(self.staging_dir, ignore_errors=True)
            logger.info(
                "Discarded chunk batch",
                extra={
                    "namespace": self.namespace,
                    "operation_id": self.operation_id,
                    "staged_count": len(self.staged),
                },
            )
        if not self.committed:
            self.staged = []


class ChunkStore:
    """File-system chunk storage scoped by caller namespace."""

    def __init__(self, root_dir: Path | str) -> None:
        """
        Initialize chunk store.

        Args:
            root_dir: Directory holding one subdirectory per namespace
        """
        self._root = Path(root_dir).resolve()

    @property
    def root(self) -> Path:
        """Resolved storage root."""
        return self._root

    def namespace_dir(self, namespace: str) -> Path:
        """Directory for a namespace; the token must be a single safe segment."""
        ensure_safe(namespace, field="namespace")
        return self._root / namespace

    def begin_batch(self, namespace: str, original_filename: str) -> ChunkBatch:
        """Open an all-or-nothing write batch for one split operation."""
        return ChunkBatch(store=self, namespace=namespace, original_filename=original_filename)

    def write(
        self, namespace: str, chunk: SealedChunk, original_filename: str
    ) -> ChunkMetadata:
        """Persist a single chunk as its own committed batch."""
        with self.begin_batch(namespace, original_filename) as batch:
            batch.add(chunk)
            return batch.commit()[0]

    def list_chunks(self, namespace: str) -> list[ChunkMetadata]:
        """
        List committed chunks of a namespace.

        Ordered by operation id (chronological), then chunk number, then
        filename. Staging directories are never listed.

        Raises:
            StorageIOError: If the directory cannot be read
        """
        user_dir = self.namespace_dir(namespace)
        if not user_dir.is_dir():
            return []

        chunks: list[tuple[str, ChunkMetadata]] = []
        try:
            for path in user_dir.iterdir():
                if not path.is_file() or not path.name.endswith(CHUNK_SUFFIX):
                    continue
                try:
                    chunks.append(self._describe(path))
                except FileNotFoundError:
                    # Deleted by a concurrent request
                    continue
        except OSError as e:
            raise StorageIOError(
                f"Failed to list chunks: {e}",
                operation="list",
                details={"namespace": namespace},
            ) from e

        chunks.sort(key=lambda item: (item[0], item[1].chunk_number, item[1].filename))
        return [metadata for _, metadata in chunks]

    def read(self, namespace: str, filename: str) -> ChunkView:
        """
        Decode a stored chunk.

        Raises:
            InvalidInputError: Unsafe filename or path outside the namespace
            ChunkNotFoundError: File does not exist
            StorageIOError: Unexpected I/O failure
        """
        path = self._resolve(namespace, filename)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                decoded = csv_codec.decode(csv_codec.iter_rows(f))
        except FileNotFoundError as e:
            raise ChunkNotFoundError(filename, namespace) from e
        except OSError as e:
            raise StorageIOError(
                f"Failed to read chunk: {e}",
                operation="read",
                details={"namespace": namespace, "filename": filename},
            ) from e

        _, _, chunk_number = parse_chunk_filename(filename)
        return ChunkView(
            headers=decoded.header_block,
            rows=decoded.data_rows,
            total_rows=len(decoded.data_rows),
            chunk_number=chunk_number,
        )

    def delete(self, namespace: str, filename: str) -> None:
        """
        Delete a stored chunk. Deleting a missing chunk is an error.

        Raises:
            InvalidInputError: Unsafe filename or path outside the namespace
            ChunkNotFoundError: File does not exist
            StorageIOError: Unexpected I/O failure
        """
        path = self._resolve(namespace, filename)
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise ChunkNotFoundError(filename, namespace) from e
        except OSError as e:
            raise StorageIOError(
                f"Failed to delete chunk: {e}",
                operation="delete",
                details={"namespace": namespace, "filename": filename},
            ) from e

    def download(self, namespace: str, filename: str) -> ChunkDownload:
        """
        Resolve a chunk for verbatim streaming.

        Raises:
            InvalidInputError: Unsafe filename or path outside the namespace
            ChunkNotFoundError: File does not exist
            StorageIOError: Unexpected I/O failure
        """
        path = self._resolve(namespace, filename)
        try:
            size = path.stat().st_size
        except FileNotFoundError as e:
            raise ChunkNotFoundError(filename, namespace) from e
        except OSError as e:
            raise StorageIOError(
                f"Failed to stat chunk: {e}",
                operation="download",
                details={"namespace": namespace, "filename": filename},
            ) from e
        if not path.is_file():
            raise ChunkNotFoundError(filename, namespace)
        return ChunkDownload(path=path, filename=filename, size=size)

    def delete_all(self, namespace: str) -> int:
        """
        Delete every committed chunk of a namespace.

        Removes the namespace directory once it is empty.

        Returns:
            int: Number of chunk files removed
        """
        user_dir = self.namespace_dir(namespace)
        if not user_dir.is_dir():
            return 0

        deleted = 0
        try:
            for path in user_dir.iterdir():
                if path.is_file() and path.name.endswith(CHUNK_SUFFIX):
                    path.unlink(missing_ok=True)
                    deleted += 1
            self._remove_if_empty(user_dir)
        except OSError as e:
            raise StorageIOError(
                f"Failed to delete chunks: {e}",
                operation="delete",
                details={"namespace": namespace},
            ) from e
        return deleted

    def cleanup_expired(self, max_age_hours: int) -> int:
        """
        Remove chunk files older than max_age_hours across all namespaces.
        Abandoned staging directories past the same cutoff are removed too.

        Failures in one namespace are logged and do not stop the sweep.

        Returns:
            int: Number of chunk files removed
        """
        if not self._root.is_dir():
            return 0

        cutoff = time.time() - max_age_hours * 3600
        deleted = 0
        stale_batches = 0
        for user_dir in self._root.iterdir():
            if not user_dir.is_dir():
                continue
            try:
                for path in user_dir.iterdir():
                    if path.is_dir() and path.name.startswith(STAGING_PREFIX):
                        # Left behind by a split that never finished
                        if path.stat().st_mtime < cutoff:
                            shutil.rmtree(path, ignore_errors=True)
                            stale_batches += 1
                        continue
                    if not path.is_file() or not path.name.endswith(CHUNK_SUFFIX):
                        continue
                    if path.stat().st_mtime < cutoff:
                        path.unlink(missing_ok=True)
                        deleted += 1
                self._remove_if_empty(user_dir)
            except OSError as e:
                logger.warning(
                    "Failed to clean up namespace",
                    extra={"namespace": user_dir.name, "error": str(e)},
                )
        if deleted or stale_batches:
            logger.info(
                "Removed expired chunks",
                extra={
                    "deleted": deleted,
                    "stale_batches": stale_batches,
                    "max_age_hours": max_age_hours,
                },
            )
        return deleted

    def _resolve(self, namespace: str, filename: str) -> Path:
        """
        Guard the filename, then verify the canonical path stays inside the
        namespace. Directories (staging batches included) are never chunks.
        """
        ensure_safe(filename)
        user_dir = self.namespace_dir(namespace).resolve()
        path = (user_dir / filename).resolve()
        if path.parent != user_dir:
            raise InvalidInputError(
                "Invalid file path",
                field="filename",
                details={"value": filename},
            )
        if path.exists() and not path.is_file():
            raise ChunkNotFoundError(filename, namespace)
        return path

    def _describe(self, path: Path) -> tuple[str, ChunkMetadata]:
        """Build listing metadata from a stored file; returns (sort key, metadata)."""
        stats = path.stat()
        original_filename, operation_id, chunk_number = parse_chunk_filename(path.name)
        with open(path, encoding="utf-8", newline="") as f:
            total_rows = sum(1 for _ in csv_codec.iter_rows(f))
        metadata = ChunkMetadata(
            filename=path.name,
            original_filename=original_filename,
            chunk_number=chunk_number,
            row_count=max(total_rows - csv_codec.HEADER_ROW_COUNT, 0),
            file_size=stats.st_size,
            created_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
            file_path=str(path),
        )
        return operation_id, metadata

    @staticmethod
    def _remove_if_empty(directory: Path) -> None:
        if not any(directory.iterdir()):
            directory.rmdir()
