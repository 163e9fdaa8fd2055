import io
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from csv_splitter.api.deps.dependencies import get_split_service
from csv_splitter.core.exceptions import StorageIOError

BASE = "/api/v1/csv-splitter"


def upload(client: TestClient, text: str, filename: str = "visits.csv", rows_per_chunk=None):
    data = {} if rows_per_chunk is None else {"rowsPerChunk": str(rows_per_chunk)}
    files = {"file": (filename, io.BytesIO(text.encode("utf-8")), "text/csv")}
    return client.post(f"{BASE}/split", files=files, data=data)


def assert_rejected(response, error=None):
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "invalid_input"
    assert body["chunks"] == []
    if error is not None:
        assert body["error"] == error
    else:
        assert body["error"]


def test_split_list_read_download_delete(client, make_csv):
    response = upload(client, make_csv(5), rows_per_chunk=2)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalRows"] == 5
    assert body["totalChunks"] == 3
    assert [c["rowCount"] for c in body["chunks"]] == [2, 2, 1]
    assert body["chunks"][0]["originalFilename"] == "visits.csv"
    filenames = [c["filename"] for c in body["chunks"]]

    listed = client.get(f"{BASE}/chunks")
    assert listed.status_code == 200
    assert [c["filename"] for c in listed.json()["chunks"]] == filenames

    view = client.get(f"{BASE}/chunk/{filenames[0]}")
    assert view.status_code == 200
    assert view.json()["chunkNumber"] == 1
    assert view.json()["totalRows"] == 2
    assert len(view.json()["headers"]) == 2

    download = client.get(f"{BASE}/download/{filenames[2]}")
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/csv")
    assert "attachment" in download.headers["content-disposition"]
    assert len(download.content) == body["chunks"][2]["fileSize"]

    deleted = client.delete(f"{BASE}/chunk/{filenames[0]}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    remaining = client.get(f"{BASE}/chunks").json()["chunks"]
    assert [c["filename"] for c in remaining] == filenames[1:]


def test_split_sets_session_cookie(client, make_csv):
    response = upload(client, make_csv(1))

    assert response.status_code == 200
    assert "csv-splitter-session" in response.cookies


def test_default_rows_per_chunk(client, make_csv):
    response = upload(client, make_csv(3))

    assert response.json()["totalChunks"] == 1


def test_sessions_do_not_share_chunks(client, make_csv):
    upload(client, make_csv(2))

    other = TestClient(client.app)
    assert other.get(f"{BASE}/chunks").json() == {"chunks": []}


def test_split_without_file(client):
    response = client.post(f"{BASE}/split", data={"rowsPerChunk": "10"})

    assert_rejected(response, "No file provided")


def test_split_rejects_non_csv(client):
    response = upload(client, "a,b\r\nc,d\r\n", filename="visits.txt")

    assert_rejected(response, "File must be a CSV file (.csv extension required)")


def test_split_accepts_uppercase_extension(client, make_csv):
    response = upload(client, make_csv(1), filename="VISITS.CSV")

    assert response.status_code == 200


def test_split_rejects_empty_file(client):
    response = upload(client, "")

    assert_rejected(response, "File is empty")


@pytest.mark.parametrize("rows_per_chunk", [0, -5, 1_000_001, "ten"])
def test_split_rejects_bad_rows_per_chunk(client, make_csv, rows_per_chunk):
    response = upload(client, make_csv(3), rows_per_chunk=rows_per_chunk)

    assert_rejected(response)


def test_rejected_upload_sets_session_cookie(client):
    response = upload(client, "")

    assert "csv-splitter-session" in response.cookies


def test_split_too_short_source(client):
    response = upload(client, "just,one,row\r\n")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "invalid_input"


def test_split_malformed_csv(client, make_csv):
    response = upload(client, make_csv(4) + 'x,"broken"quote,y\r\n', rows_per_chunk=2)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["errorType"] == "parse_failure"
    assert client.get(f"{BASE}/chunks").json() == {"chunks": []}


def test_split_storage_failure(client):
    service = MagicMock()
    service.split_upload.side_effect = StorageIOError("disk full", operation="write")
    client.app.dependency_overrides[get_split_service] = lambda: service

    response = upload(client, "a,b\r\nc,d\r\n")

    assert response.status_code == 500


@pytest.mark.parametrize("filename", ["..secret.csv", "..%5Csecret.csv", "..%2Fsecret.csv"])
def test_traversal_rejected(client, make_csv, filename):
    upload(client, make_csv(1))

    assert client.get(f"{BASE}/chunk/{filename}").status_code == 400
    assert client.delete(f"{BASE}/chunk/{filename}").status_code == 400
    assert client.get(f"{BASE}/download/{filename}").status_code == 400


def test_missing_chunk_is_404(client):
    for response in (
        client.get(f"{BASE}/chunk/missing.csv"),
        client.delete(f"{BASE}/chunk/missing.csv"),
        client.get(f"{BASE}/download/missing.csv"),
    ):
        assert response.status_code == 404
        assert response.json()["detail"] == "File not found"


def test_delete_all_chunks(client, make_csv):
    upload(client, make_csv(5), rows_per_chunk=2)

    response = client.delete(f"{BASE}/chunks")

    assert response.status_code == 200
    assert response.json() == {"success": True, "deleted": 3}
    assert client.get(f"{BASE}/chunks").json() == {"chunks": []}


def session_dir(client, chunks_dir):
    return chunks_dir / f"session_{client.cookies['csv-splitter-session']}"


def test_directory_in_namespace_is_404(client, make_csv, chunks_dir):
    upload(client, make_csv(1))
    (session_dir(client, chunks_dir) / ".staging-leftover").mkdir()

    for response in (
        client.get(f"{BASE}/chunk/.staging-leftover"),
        client.delete(f"{BASE}/chunk/.staging-leftover"),
        client.get(f"{BASE}/download/.staging-leftover"),
    ):
        assert response.status_code == 404
        assert response.json()["detail"] == "File not found"


def test_percent_in_stored_name_is_reachable(client, make_csv, chunks_dir):
    upload(client, make_csv(1))
    stored = session_dir(client, chunks_dir) / "a%41.csv"
    stored.write_text("h\r\nt\r\nx\r\n", encoding="utf-8")

    response = client.get(f"{BASE}/download/a%2541.csv")

    assert response.status_code == 200
    assert response.content == b"h\r\nt\r\nx\r\n"
