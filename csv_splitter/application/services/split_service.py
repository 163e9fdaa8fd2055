"""
Split service orchestrator.

Coordinates the splitter engine and the chunk store for one caller
namespace: split, list, read, delete, download and cleanup.

Dependencies: csv_splitter.core, csv_splitter.boundary.storage
System role: CSV splitting orchestration
"""

import io
import logging
from typing import BinaryIO, TextIO

from csv_splitter.boundary.storage.chunk_store import ChunkDownload, ChunkStore
from csv_splitter.core import csv_codec
from csv_splitter.core.exceptions import CsvParseError, InvalidInputError
from csv_splitter.core.splitter import ProgressCallback, SplitterEngine
from csv_splitter.models.chunk import ChunkMetadata, ChunkView, InMemorySplit, SplitResult

logger = logging.getLogger(__name__)

SOURCE_ENCODING = "utf-8-sig"


class SplitService:
    """
    Split service orchestrator.

    Streams an uploaded CSV through the splitter engine into a staged
    chunk batch, committing only when the whole source parsed cleanly.
    """

    def __init__(self, store: ChunkStore, engine: SplitterEngine | None = None) -> None:
        """
        Initialize split service.

        Args:
            store: Chunk store rooted at the configured chunks directory
            engine: Optional SplitterEngine (created if None)
        """
        self.store = store
        self.engine = engine or SplitterEngine()

    def split_upload(
        self,
        namespace: str,
        source: BinaryIO | TextIO,
        original_filename: str,
        rows_per_chunk: int,
        on_progress: ProgressCallback | None = None,
    ) -> SplitResult:
        """
        Split a CSV source and persist its chunks.

        Steps:
        1. Open a staging batch in the caller's namespace
        2. Stream rows through the engine, staging each sealed chunk
        3. Commit the batch once the source is exhausted

        Args:
            namespace: Caller namespace token
            source: Binary (UTF-8) or text stream of the uploaded CSV
            original_filename: Uploaded filename, used for chunk names
            rows_per_chunk: Maximum data rows per chunk
            on_progress: Optional progress callback

        Returns:
            SplitResult: Committed chunks and totals, or success=False with
                the error when the source is invalid or malformed

        Raises:
            StorageIOError: If chunks cannot be written or committed
        """
        logger.info(
            "Splitting CSV upload",
            extra={
                "namespace": namespace,
                "original_filename": original_filename,
                "rows_per_chunk": rows_per_chunk,
            },
        )

        text_stream, wrapper = self._as_text(source)
        total_rows = 0
        try:
            with self.store.begin_batch(namespace, original_filename) as batch:
                rows = csv_codec.iter_rows(text_stream)
                for chunk in self.engine.iter_chunks(rows, rows_per_chunk, on_progress):
                    batch.add(chunk)
                    total_rows += chunk.row_count
                chunks = batch.commit()

        except InvalidInputError as e:
            logger.warning(
                "CSV split rejected",
                extra={"namespace": namespace, "error": str(e)},
            )
            return SplitResult(success=False, error=e.message, error_type="invalid_input")

        except CsvParseError as e:
            logger.error(
                "CSV split aborted on parse failure",
                extra={
                    "namespace": namespace,
                    "line_number": e.line_number,
                    "rows_before_failure": total_rows,
                    "error": str(e),
                },
            )
            return SplitResult(success=False, error=e.message, error_type="parse_failure")

        finally:
            if wrapper is not None:
                wrapper.detach()

        logger.info(
            "CSV split completed",
            extra={
                "namespace": namespace,
                "total_rows": total_rows,
                "total_chunks": len(chunks),
            },
        )
        return SplitResult(
            success=True,
            chunks=chunks,
            total_rows=total_rows,
            total_chunks=len(chunks),
        )

    def split_in_memory(self, text: str, rows_per_chunk: int) -> InMemorySplit:
        """Split CSV text into encoded payloads without persisting them."""
        return self.engine.split_to_payloads(text, rows_per_chunk)

    def list_chunks(self, namespace: str) -> list[ChunkMetadata]:
        """List committed chunks of a namespace."""
        chunks = self.store.list_chunks(namespace)
        logger.info(
            "Chunks listed",
            extra={"namespace": namespace, "chunk_count": len(chunks)},
        )
        return chunks

    def read_chunk(self, namespace: str, filename: str) -> ChunkView:
        """Decode one chunk of a namespace."""
        return self.store.read(namespace, filename)

    def delete_chunk(self, namespace: str, filename: str) -> None:
        """Delete one chunk of a namespace."""
        self.store.delete(namespace, filename)
        logger.info(
            "Chunk deleted",
            extra={"namespace": namespace, "chunk_filename": filename},
        )

    def download_chunk(self, namespace: str, filename: str) -> ChunkDownload:
        """Resolve one chunk for download."""
        return self.store.download(namespace, filename)

    def delete_all_chunks(self, namespace: str) -> int:
        """Delete every chunk of a namespace."""
        deleted = self.store.delete_all(namespace)
        logger.info(
            "All chunks deleted",
            extra={"namespace": namespace, "deleted": deleted},
        )
        return deleted

    def cleanup_expired(self, max_age_hours: int) -> int:
        """Remove chunks older than max_age_hours in every namespace."""
        return self.store.cleanup_expired(max_age_hours)

    @staticmethod
    def _as_text(source: BinaryIO | TextIO) -> tuple[TextIO, io.TextIOWrapper | None]:
        """Wrap a binary stream for CSV parsing; text streams pass through."""
        if isinstance(source, io.TextIOBase):
            return source, None
        wrapper = io.TextIOWrapper(source, encoding=SOURCE_ENCODING, newline="")
        return wrapper, wrapper
