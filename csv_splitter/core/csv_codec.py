"""
Chunk codec.

Parses delimited text into rows and serializes a header block plus data rows
back to text. Uses one dialect for both directions: comma delimiter,
double-quote escaping, minimal quoting, CRLF row terminator.

Dependencies: csv (stdlib)
System role: Row (de)serialization for the splitter engine and chunk store
"""

import csv
import io
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import TextIO

from csv_splitter.core.exceptions import CsvParseError

HEADER_ROW_COUNT = 2

# Cells have no size cap (csv module default is 131072 chars)
FIELD_SIZE_LIMIT = min(sys.maxsize, 2**31 - 1)
csv.field_size_limit(FIELD_SIZE_LIMIT)

Row = list[str]


class ChunkDialect(csv.Dialect):
    """Delimited-text dialect used on disk and on the wire."""

    delimiter = ","
    quotechar = '"'
    doublequote = True
    skipinitialspace = False
    lineterminator = "\r\n"
    quoting = csv.QUOTE_MINIMAL
    strict = True


@dataclass
class DecodedChunk:
    """Header block and data rows of a decoded chunk or source."""

    header_block: list[Row] = field(default_factory=list)
    data_rows: list[Row] = field(default_factory=list)


def iter_rows(stream: TextIO) -> Iterator[Row]:
    """
    Lazily parse rows from a text stream.

    Blank lines are skipped. Quoted fields may span lines.

    Args:
        stream: Text stream opened with newline=""

    Yields:
        Row: One parsed row at a time

    Raises:
        CsvParseError: On malformed quoting or undecodable input
    """
    reader = csv.reader(stream, dialect=ChunkDialect)
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise CsvParseError(
                f"Malformed CSV near line {reader.line_num}: {e}",
                line_number=reader.line_num,
            ) from e
        except UnicodeDecodeError as e:
            raise CsvParseError(
                f"Source is not valid UTF-8 text near line {reader.line_num + 1}",
                line_number=reader.line_num + 1,
            ) from e
        if not row:
            continue
        yield row


def parse_text(text: str) -> list[Row]:
    """Parse a fully loaded text into rows."""
    return list(iter_rows(io.StringIO(text, newline="")))


def decode(raw_rows: Iterable[Row]) -> DecodedChunk:
    """
    Split rows into the header block and data rows.

    The first two rows are taken as headers without inspection. Fewer than
    two rows yields a short header block and no data rows.
    """
    rows = list(raw_rows)
    return DecodedChunk(
        header_block=rows[:HEADER_ROW_COUNT],
        data_rows=rows[HEADER_ROW_COUNT:],
    )


def encode(header_block: Iterable[Row], data_rows: Iterable[Row]) -> str:
    """Serialize header rows followed by data rows."""
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, dialect=ChunkDialect)
    writer.writerows(header_block)
    writer.writerows(data_rows)
    return buffer.getvalue()


def byte_size(text: str) -> int:
    """UTF-8 encoded size of text."""
    return len(text.encode("utf-8"))
