"""
Shared test fixtures and configuration for entire test suite.

Provides: temp chunk stores, settings pointing at tmp_path, CSV builders,
and a TestClient with settings overridden.
Dependencies: pytest, fastapi
System role: Test infrastructure and fixture management
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from csv_splitter.api.deps.dependencies import get_settings_dependency
from csv_splitter.api.main import create_app
from csv_splitter.application.services.split_service import SplitService
from csv_splitter.boundary.storage.chunk_store import ChunkStore
from csv_splitter.configs import Settings
from csv_splitter.configs.splitter import SplitterSettings
from csv_splitter.core import csv_codec

HEADER_ROWS = [
    ["Subject ID", "Visit Date", "Notes, free text"],
    ["subject_id", "visit_date", "notes"],
]


def build_csv(data_row_count: int, header_rows: list[list[str]] | None = None) -> str:
    """Build CSV text with two header rows and numbered data rows."""
    headers = HEADER_ROWS if header_rows is None else header_rows
    rows = [[f"S-{i:04d}", f"2024-01-{(i % 28) + 1:02d}", f"note {i}"] for i in range(data_row_count)]
    return csv_codec.encode(headers, rows)


@pytest.fixture
def make_csv():
    """Factory for CSV text with N data rows."""
    return build_csv


@pytest.fixture
def chunks_dir(tmp_path: Path) -> Path:
    """Root directory for chunk storage in tests."""
    return tmp_path / "csv-chunks"


@pytest.fixture
def chunk_store(chunks_dir: Path) -> ChunkStore:
    """Chunk store rooted in a temp directory."""
    return ChunkStore(chunks_dir)


@pytest.fixture
def split_service(chunk_store: ChunkStore) -> SplitService:
    """Split service over the temp chunk store."""
    return SplitService(store=chunk_store)


@pytest.fixture
def namespace() -> str:
    """A caller namespace token."""
    return "session_" + "ab" * 16


@pytest.fixture
def test_settings(chunks_dir: Path) -> Settings:
    """Settings with chunk storage redirected to the temp directory."""
    return Settings(splitter=SplitterSettings(chunks_dir=chunks_dir))


@pytest.fixture
def client(test_settings: Settings) -> TestClient:
    """TestClient with settings overridden."""
    app = create_app()
    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    return TestClient(app)
