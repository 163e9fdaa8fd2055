"""
Splitter engine.

Single-pass split of a row stream into chunks of at most rows_per_chunk
data rows, each prefixed with the source's two header rows. Only the
in-progress chunk is held in memory.

Dependencies: csv_splitter.core.csv_codec
System role: Core splitting algorithm shared by the stored and in-memory paths
"""

import io
import logging
from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass

from csv_splitter.core import csv_codec
from csv_splitter.core.csv_codec import HEADER_ROW_COUNT, Row
from csv_splitter.core.exceptions import InvalidInputError
from csv_splitter.models.chunk import InMemorySplit, SplitProgress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SplitProgress], None]


@dataclass
class SealedChunk:
    """A completed chunk: header block plus its slice of data rows."""

    chunk_number: int
    header_block: list[Row]
    data_rows: list[Row]

    @property
    def row_count(self) -> int:
        """Data rows in the chunk, header rows excluded."""
        return len(self.data_rows)

    def encode(self) -> str:
        """Serialize the chunk as CSV text."""
        return csv_codec.encode(self.header_block, self.data_rows)


class SplitterEngine:
    """Split a lazy sequence of CSV rows into bounded chunks."""

    def iter_chunks(
        self,
        rows: Iterable[Row],
        rows_per_chunk: int,
        on_progress: ProgressCallback | None = None,
    ) -> Generator[SealedChunk, None, list[Row]]:
        """
        Yield sealed chunks in source order.

        Args:
            rows: Parsed source rows, the first two being the header block
            rows_per_chunk: Maximum data rows per chunk (must be >= 1)
            on_progress: Called after each seal with cumulative counts

        Yields:
            SealedChunk: Chunks numbered from 1; only the last may be short

        Returns:
            list[Row]: The header block, as the generator's return value

        Raises:
            InvalidInputError: If rows_per_chunk < 1 or the source has fewer
                than two rows
            CsvParseError: Propagated from the row source
        """
        if rows_per_chunk < 1:
            raise InvalidInputError(
                "Rows per chunk must be a positive integer",
                field="rows_per_chunk",
                details={"value": rows_per_chunk},
            )

        header_block: list[Row] = []
        buffer: list[Row] = []
        chunk_number = 0
        rows_processed = 0

        for row in rows:
            if len(header_block) < HEADER_ROW_COUNT:
                header_block.append(row)
                continue

            buffer.append(row)
            rows_processed += 1

            if len(buffer) >= rows_per_chunk:
                chunk_number += 1
                sealed = SealedChunk(chunk_number, header_block, buffer)
                buffer = []
                if on_progress:
                    on_progress(
                        SplitProgress(chunks_sealed=chunk_number, rows_processed=rows_processed)
                    )
                yield sealed

        if len(header_block) < HEADER_ROW_COUNT:
            raise InvalidInputError(
                "CSV source must contain the two header rows",
                field="file",
                details={"rows_found": len(header_block)},
            )

        if buffer:
            chunk_number += 1
            sealed = SealedChunk(chunk_number, header_block, buffer)
            if on_progress:
                on_progress(
                    SplitProgress(
                        chunks_sealed=chunk_number,
                        rows_processed=rows_processed,
                        is_final=True,
                    )
                )
            yield sealed
        elif on_progress:
            on_progress(
                SplitProgress(
                    chunks_sealed=chunk_number,
                    rows_processed=rows_processed,
                    is_final=True,
                )
            )

        logger.debug(
            "Split stream exhausted",
            extra={"chunks": chunk_number, "rows_processed": rows_processed},
        )
        return header_block

    def split_to_payloads(
        self,
        text: str,
        rows_per_chunk: int,
        on_progress: ProgressCallback | None = None,
    ) -> InMemorySplit:
        """
        Split fully loaded CSV text into encoded chunk payloads.

        Nothing is persisted; each payload repeats the two header rows.

        Args:
            text: Source CSV text
            rows_per_chunk: Maximum data rows per chunk
            on_progress: Optional progress callback

        Returns:
            InMemorySplit: Payloads, header rows and totals
        """
        rows = csv_codec.iter_rows(io.StringIO(text, newline=""))
        chunks = self.iter_chunks(rows, rows_per_chunk, on_progress)
        payloads: list[str] = []
        total_rows = 0

        while True:
            try:
                chunk = next(chunks)
            except StopIteration as exhausted:
                header_block = exhausted.value
                break
            total_rows += chunk.row_count
            payloads.append(chunk.encode())

        return InMemorySplit(
            chunks=payloads,
            headers=header_block,
            total_rows=total_rows,
            total_chunks=len(payloads),
        )
