"""
Chunk domain models and schemas.

Request/response schemas for split, list, view and delete operations.
Serialized with camelCase aliases to match the browser client contract.

Dependencies: pydantic
System role: CSV splitter API contracts
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChunkMetadata(CamelModel):
    """Listing view of one persisted chunk file."""

    filename: str = Field(description="Generated chunk filename")
    original_filename: str = Field(description="Filename of the uploaded source CSV")
    chunk_number: int = Field(description="1-based position of the chunk in its source")
    row_count: int = Field(description="Data rows in the chunk, header rows excluded")
    file_size: int = Field(description="Serialized size in bytes")
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    file_path: str = Field(description="Storage path of the chunk file")


class SplitProgress(CamelModel):
    """Progress snapshot emitted after each sealed chunk."""

    chunks_sealed: int
    rows_processed: int
    is_final: bool = False


class SplitResult(CamelModel):
    """Summary of one split operation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    success: bool
    chunks: list[ChunkMetadata] = Field(default_factory=list)
    total_rows: int = 0
    total_chunks: int = 0
    error: str | None = None
    error_type: str | None = Field(
        default=None,
        description="invalid_input or parse_failure when success is False",
    )


class ChunkView(CamelModel):
    """Decoded contents of a stored chunk."""

    headers: list[list[str]]
    rows: list[list[str]]
    total_rows: int
    chunk_number: int


class ChunkListResponse(CamelModel):
    """Chunk listing for the caller's namespace."""

    chunks: list[ChunkMetadata]


class DeleteChunkResponse(CamelModel):
    """Response for single chunk deletion."""

    success: bool = True


class DeleteAllChunksResponse(CamelModel):
    """Response for deleting every chunk of a namespace."""

    success: bool = True
    deleted: int = 0


class InMemorySplit(CamelModel):
    """Chunk payloads produced without touching storage."""

    chunks: list[str] = Field(description="Encoded CSV payloads, each with the header block")
    headers: list[list[str]] = Field(description="The two header rows of the source")
    total_rows: int
    total_chunks: int
