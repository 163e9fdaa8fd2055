"""
CSV splitter API endpoints.

Routes:
- POST /csv-splitter/split - Split an uploaded CSV into stored chunks
- GET /csv-splitter/chunks - List the caller's chunks
- DELETE /csv-splitter/chunks - Delete all of the caller's chunks
- GET /csv-splitter/chunk/{filename} - View a chunk as JSON
- DELETE /csv-splitter/chunk/{filename} - Delete a chunk
- GET /csv-splitter/download/{filename} - Download a chunk as text/csv

Dependencies: csv_splitter.application.services, csv_splitter.models
System role: CSV splitter HTTP API
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Response, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from csv_splitter.api.deps.dependencies import (
    get_settings_dependency,
    get_split_service,
    get_storage_identity,
)
from csv_splitter.application.services.split_service import SplitService
from csv_splitter.boundary.identity import StorageIdentity, attach_session_cookie
from csv_splitter.configs import Settings
from csv_splitter.core.exceptions import InvalidInputError
from csv_splitter.models.chunk import (
    ChunkListResponse,
    ChunkView,
    DeleteAllChunksResponse,
    DeleteChunkResponse,
    SplitProgress,
    SplitResult,
)

from .csv_splitter_error_handling import handle_chunk_errors
from .csv_splitter_validators import check_filename, parse_rows_per_chunk, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/csv-splitter", tags=["csv-splitter"])


def _failure_response(
    result: SplitResult,
    background_tasks: BackgroundTasks,
    identity: StorageIdentity,
    settings: Settings,
) -> JSONResponse:
    """Render a failed SplitResult: 400 for invalid input, 500 otherwise."""
    status_code = 400 if result.error_type == "invalid_input" else 500
    failure = JSONResponse(
        status_code=status_code,
        content=result.model_dump(by_alias=True, mode="json"),
        background=background_tasks,
    )
    attach_session_cookie(failure, identity, settings.splitter)
    return failure


def _log_progress(progress: SplitProgress) -> None:
    logger.debug(
        "Split progress",
        extra={
            "chunks_sealed": progress.chunks_sealed,
            "rows_processed": progress.rows_processed,
            "is_final": progress.is_final,
        },
    )


@router.post("/split", response_model=SplitResult)
@handle_chunk_errors
async def split_csv(
    response: Response,
    background_tasks: BackgroundTasks,
    file: UploadFile | None = File(default=None),
    rows_per_chunk: str | None = Form(default=None, alias="rowsPerChunk"),
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
    settings: Settings = Depends(get_settings_dependency),
) -> SplitResult | JSONResponse:
    """
    Split an uploaded CSV into chunks stored under the caller's namespace.

    Every chunk repeats the source's two header rows. Expired chunks of all
    callers are swept in the background after the response.

    Args:
        file: Multipart CSV upload
        rows_per_chunk: Maximum data rows per chunk (default 10000)
        identity: Caller namespace (injected)
        split_service: Injected SplitService
        settings: Injected settings

    Returns:
        SplitResult: Chunk metadata and totals. Failures are a SplitResult
            body with success=False: 400 for a missing, non-CSV or empty
            file, a bad chunk size or a too-short source; 500 for a
            malformed CSV.

    Raises:
        HTTPException(500): Storage failure
    """
    try:
        upload = validate_upload(file)
        chunk_size = parse_rows_per_chunk(rows_per_chunk, settings.splitter)
    except InvalidInputError as e:
        logger.warning("Split request rejected", extra={"error": str(e)})
        rejected = SplitResult(success=False, error=e.message, error_type="invalid_input")
        return _failure_response(rejected, background_tasks, identity, settings)

    logger.info(
        "Split request received",
        extra={
            "namespace": identity.namespace,
            "file_name": upload.filename,
            "file_size": upload.size,
            "rows_per_chunk": chunk_size,
        },
    )

    background_tasks.add_task(
        split_service.cleanup_expired, settings.splitter.retention_hours
    )

    result = await run_in_threadpool(
        split_service.split_upload,
        identity.namespace,
        upload.file,
        upload.filename,
        chunk_size,
        _log_progress,
    )

    if not result.success:
        return _failure_response(result, background_tasks, identity, settings)

    attach_session_cookie(response, identity, settings.splitter)
    return result


@router.get("/chunks", response_model=ChunkListResponse)
@handle_chunk_errors
async def list_chunks(
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
) -> ChunkListResponse:
    """
    List the caller's committed chunks.

    Ordered by split operation (oldest first), then chunk number.

    Raises:
        HTTPException(500): Storage failure
    """
    chunks = await run_in_threadpool(split_service.list_chunks, identity.namespace)
    return ChunkListResponse(chunks=chunks)


@router.delete("/chunks", response_model=DeleteAllChunksResponse)
@handle_chunk_errors
async def delete_all_chunks(
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
) -> DeleteAllChunksResponse:
    """
    Delete every chunk of the caller.

    Raises:
        HTTPException(500): Storage failure
    """
    deleted = await run_in_threadpool(split_service.delete_all_chunks, identity.namespace)
    return DeleteAllChunksResponse(deleted=deleted)


@router.get("/chunk/{filename:path}", response_model=ChunkView)
@handle_chunk_errors
async def read_chunk(
    filename: str,
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
) -> ChunkView:
    """
    Return a chunk's header rows and data rows as JSON.

    Args:
        filename: Chunk filename (percent-decoded by the router)
        identity: Caller namespace (injected)
        split_service: Injected SplitService

    Raises:
        HTTPException(400): Unsafe filename
        HTTPException(404): Chunk not found
        HTTPException(500): Storage failure
    """
    name = check_filename(filename)
    return await run_in_threadpool(split_service.read_chunk, identity.namespace, name)


@router.delete("/chunk/{filename:path}", response_model=DeleteChunkResponse)
@handle_chunk_errors
async def delete_chunk(
    filename: str,
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
) -> DeleteChunkResponse:
    """
    Delete one chunk.

    Raises:
        HTTPException(400): Unsafe filename
        HTTPException(404): Chunk not found
        HTTPException(500): Storage failure
    """
    name = check_filename(filename)
    await run_in_threadpool(split_service.delete_chunk, identity.namespace, name)
    return DeleteChunkResponse(success=True)


@router.get("/download/{filename:path}", response_class=FileResponse)
@handle_chunk_errors
async def download_chunk(
    filename: str,
    identity: StorageIdentity = Depends(get_storage_identity),
    split_service: SplitService = Depends(get_split_service),
) -> FileResponse:
    """
    Stream a chunk file verbatim as a CSV attachment.

    Raises:
        HTTPException(400): Unsafe filename or path escape
        HTTPException(404): Chunk not found
        HTTPException(500): Storage failure
    """
    name = check_filename(filename)
    download = await run_in_threadpool(split_service.download_chunk, identity.namespace, name)
    return FileResponse(
        download.path,
        media_type=download.media_type,
        filename=download.filename,
    )
