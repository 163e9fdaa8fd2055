"""
Unit tests for the splitter engine.

Tests chunk counts and bounds, header preservation, reconstruction of the
source order, progress reporting and precondition failures.
Dependencies: pytest, csv_splitter.core.splitter
System role: Splitting algorithm validation
"""

import io
import math
from unittest.mock import patch

import pytest

from csv_splitter.core import csv_codec
from csv_splitter.core.exceptions import CsvParseError, InvalidInputError
from csv_splitter.core.splitter import SplitterEngine

HEADERS = [["Human Header", "Second"], ["tech_header", "second"]]


def source_rows(data_row_count: int) -> list[list[str]]:
    return HEADERS + [[f"r{i}", str(i)] for i in range(data_row_count)]


@pytest.fixture
def engine() -> SplitterEngine:
    return SplitterEngine()


class TestIterChunks:
    """Test suite for SplitterEngine.iter_chunks."""

    @pytest.mark.parametrize(
        "data_rows,rows_per_chunk",
        [(0, 1), (1, 1), (5, 2), (6, 2), (7, 3), (10, 10), (9, 100), (100, 7)],
    )
    def test_chunk_count_and_bounds(
        self, engine: SplitterEngine, data_rows: int, rows_per_chunk: int
    ) -> None:
        chunks = list(engine.iter_chunks(source_rows(data_rows), rows_per_chunk))

        assert len(chunks) == math.ceil(data_rows / rows_per_chunk)
        for chunk in chunks[:-1]:
            assert chunk.row_count == rows_per_chunk
        if chunks:
            assert 1 <= chunks[-1].row_count <= rows_per_chunk

    def test_five_rows_in_chunks_of_two(self, engine: SplitterEngine) -> None:
        chunks = list(engine.iter_chunks(source_rows(5), 2))

        assert [chunk.row_count for chunk in chunks] == [2, 2, 1]
        assert [chunk.chunk_number for chunk in chunks] == [1, 2, 3]
        assert sum(chunk.row_count for chunk in chunks) == 5

    def test_header_only_source_yields_no_chunks(self, engine: SplitterEngine) -> None:
        assert list(engine.iter_chunks(source_rows(0), 10)) == []

    def test_every_chunk_repeats_header_block(self, engine: SplitterEngine) -> None:
        for chunk in engine.iter_chunks(source_rows(9), 4):
            decoded = csv_codec.decode(csv_codec.parse_text(chunk.encode()))
            assert decoded.header_block == HEADERS

    def test_concatenated_chunks_reconstruct_source(self, engine: SplitterEngine) -> None:
        rows = source_rows(23)

        rebuilt = [row for chunk in engine.iter_chunks(rows, 5) for row in chunk.data_rows]

        assert rebuilt == rows[2:]

    def test_consumes_lazily(self, engine: SplitterEngine) -> None:
        consumed = []

        def rows():
            for row in source_rows(6):
                consumed.append(row)
                yield row

        chunks = engine.iter_chunks(rows(), 2)
        first = next(chunks)

        assert first.chunk_number == 1
        assert len(consumed) == 4

    def test_rejects_non_positive_chunk_size(self, engine: SplitterEngine) -> None:
        with pytest.raises(InvalidInputError) as exc_info:
            list(engine.iter_chunks(source_rows(3), 0))

        assert exc_info.value.details["field"] == "rows_per_chunk"

    @pytest.mark.parametrize("row_count", [0, 1])
    def test_rejects_source_shorter_than_header_block(
        self, engine: SplitterEngine, row_count: int
    ) -> None:
        with pytest.raises(InvalidInputError, match="two header rows"):
            list(engine.iter_chunks(HEADERS[:row_count], 5))

    def test_parse_error_propagates_after_sealed_chunks(self, engine: SplitterEngine) -> None:
        text = csv_codec.encode(HEADERS, [["a", "1"], ["b", "2"], ["c", "3"], ["d", "4"]])
        text += '"broken,5\r\n'
        sealed = []

        with pytest.raises(CsvParseError):
            for chunk in engine.iter_chunks(csv_codec.iter_rows(_stream(text)), 2):
                sealed.append(chunk)

        assert [chunk.chunk_number for chunk in sealed] == [1, 2]


class TestProgress:
    """Test suite for progress callbacks."""

    def test_progress_after_each_seal(self, engine: SplitterEngine) -> None:
        events = []

        list(engine.iter_chunks(source_rows(5), 2, on_progress=events.append))

        assert [(e.chunks_sealed, e.rows_processed, e.is_final) for e in events] == [
            (1, 2, False),
            (2, 4, False),
            (3, 5, True),
        ]

    def test_final_notification_when_last_chunk_is_full(self, engine: SplitterEngine) -> None:
        events = []

        list(engine.iter_chunks(source_rows(4), 2, on_progress=events.append))

        assert events[-1].is_final is True
        assert (events[-1].chunks_sealed, events[-1].rows_processed) == (2, 4)

    def test_final_notification_for_empty_source(self, engine: SplitterEngine) -> None:
        events = []

        list(engine.iter_chunks(source_rows(0), 2, on_progress=events.append))

        assert len(events) == 1
        assert events[0].is_final is True
        assert events[0].chunks_sealed == 0

    def test_returns_header_block_when_exhausted(self, engine: SplitterEngine) -> None:
        chunks = engine.iter_chunks(source_rows(0), 2)

        with pytest.raises(StopIteration) as exc_info:
            next(chunks)

        assert exc_info.value.value == HEADERS


class TestSplitToPayloads:
    """Test suite for the in-memory split."""

    def test_payloads_carry_headers_and_totals(self, engine: SplitterEngine) -> None:
        text = csv_codec.encode(HEADERS, [[f"r{i}", str(i)] for i in range(5)])

        result = engine.split_to_payloads(text, 2)

        assert result.total_rows == 5
        assert result.total_chunks == 3
        assert result.headers == HEADERS
        assert all(payload.startswith("Human Header,Second\r\ntech_header,second\r\n") for payload in result.chunks)

    def test_header_only_source(self, engine: SplitterEngine) -> None:
        result = engine.split_to_payloads(csv_codec.encode(HEADERS, []), 2)

        assert result.chunks == []
        assert result.total_rows == 0
        assert result.headers == HEADERS

    def test_source_parsed_once(self, engine: SplitterEngine) -> None:
        text = csv_codec.encode(HEADERS, [])

        with patch.object(csv_codec, "parse_text", side_effect=AssertionError("reparsed")):
            result = engine.split_to_payloads(text, 2)

        assert result.headers == HEADERS


def _stream(text: str) -> io.StringIO:
    return io.StringIO(text, newline="")
