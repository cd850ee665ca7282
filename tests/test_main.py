"""Tests for Upload Relay API endpoints."""

import io
import zipfile
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
from fastapi.testclient import TestClient

from src.upload_relay.config import settings
from src.upload_relay.exceptions import ArchiveError
from src.upload_relay.main import app

client = TestClient(app)

RELAY = "src.upload_relay.services.relay_service"
LINK = "https://file.io/AbCdEf"


def _multipart(fields: list[tuple[str, str]], boundary: str = "relayboundary") -> tuple[bytes, str]:
    """Hand-built multipart body with text fields only (no file parts)."""
    chunks = [
        f'--{boundary}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'
        for name, value in fields
    ]
    chunks.append(f"--{boundary}--\r\n")
    return "".join(chunks).encode(), f"multipart/form-data; boundary={boundary}"


def _archive_names(mock_upload: AsyncMock) -> list[str]:
    archive = mock_upload.await_args.args[0]
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        return zf.namelist()


# ──────────────────────────────────────────────
# Health
# ──────────────────────────────────────────────
def test_health_check() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ──────────────────────────────────────────────
# POST /upload – success
# ──────────────────────────────────────────────
@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_upload_uses_filenames_without_names(mock_upload: AsyncMock) -> None:
    response = client.post(
        "/upload",
        files=[
            ("files", ("a.png", b"first", "image/png")),
            ("files", ("b.png", b"second", "image/png")),
        ],
    )

    assert response.status_code == 200
    assert response.json() == {"url": LINK}
    assert _archive_names(mock_upload) == ["a.png", "b.png"]


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_upload_repeated_names_field(mock_upload: AsyncMock) -> None:
    response = client.post(
        "/upload",
        data={"names[]": ["ראשון.jpg", "second.jpg"]},
        files=[
            ("photo", ("a.png", b"first", "image/png")),
            ("other", ("b.png", b"second", "image/png")),
        ],
    )

    assert response.status_code == 200
    assert _archive_names(mock_upload) == ["ראשון.jpg", "second.jpg"]


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_upload_json_names_are_sanitized(mock_upload: AsyncMock) -> None:
    response = client.post(
        "/upload",
        data={"names": '["x?y"]'},
        files={"file": ("a.png", b"content", "image/png")},
    )

    assert response.status_code == 200
    assert _archive_names(mock_upload) == ["x_y"]


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_upload_entry_content_preserved(mock_upload: AsyncMock) -> None:
    client.post("/upload", files={"file": ("a.txt", b"hello relay", "text/plain")})

    archive = mock_upload.await_args.args[0]
    with zipfile.ZipFile(io.BytesIO(archive)) as zf:
        assert zf.read("a.txt") == b"hello relay"


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_upload_alias_path(mock_upload: AsyncMock) -> None:
    response = client.post("/api/upload", files={"file": ("a.png", b"x", "image/png")})
    assert response.status_code == 200
    assert response.json() == {"url": LINK}


# ──────────────────────────────────────────────
# POST /upload – caller errors
# ──────────────────────────────────────────────
@patch(f"{RELAY}.parse_multipart")
def test_non_post_is_rejected_without_parsing(mock_parse: MagicMock) -> None:
    for method in ("GET", "PUT", "DELETE", "PATCH"):
        response = client.request(method, "/upload", content=b"anything")
        assert response.status_code == 405
        assert response.json() == {"error": "Method Not Allowed"}
    mock_parse.assert_not_called()


def test_non_multipart_is_rejected() -> None:
    response = client.post("/upload", json={"names": ["a.png"]})
    assert response.status_code == 400
    assert response.json() == {"error": "Expected multipart/form-data"}


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock)
@patch(f"{RELAY}.build_archive")
def test_no_files_is_rejected_before_archiving(mock_build: MagicMock, mock_upload: AsyncMock) -> None:
    body, content_type = _multipart([("names", '["a.png"]')])
    response = client.post("/upload", content=body, headers={"content-type": content_type})

    assert response.status_code == 400
    assert response.json() == {"error": "No files"}
    mock_build.assert_not_called()
    mock_upload.assert_not_called()


def test_malformed_multipart_is_rejected() -> None:
    response = client.post(
        "/upload",
        content=b"not really multipart",
        headers={"content-type": "multipart/form-data"},
    )
    assert response.status_code == 400
    assert "error" in response.json()


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock)
def test_payload_too_large(mock_upload: AsyncMock) -> None:
    with patch.object(settings, "max_upload_size", 4):
        response = client.post("/upload", files={"file": ("a.png", b"too many bytes", "image/png")})

    assert response.status_code == 413
    assert "error" in response.json()
    mock_upload.assert_not_called()


# ──────────────────────────────────────────────
# POST /upload – upstream and internal errors
# ──────────────────────────────────────────────
def test_upstream_html_body_is_reported() -> None:
    html = "<html>" + "x" * 1000 + "</html>"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=html.encode(), headers={"content-type": "text/html"})

    mock_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with patch("src.upload_relay.services.filehost_service.create_client", return_value=mock_client):
        response = client.post("/upload", files={"file": ("a.png", b"x", "image/png")})

    assert response.status_code == 502
    data = response.json()
    assert data["error"]
    assert data["status"] == 200
    assert data["contentType"] == "text/html"
    assert data["bodyPreview"].startswith("<html>")
    assert len(data["bodyPreview"]) <= 300


@patch(f"{RELAY}.build_archive", side_effect=ArchiveError("Failed to build archive: stream error"))
def test_archive_failure_is_500(mock_build: MagicMock) -> None:
    response = client.post("/upload", files={"file": ("a.png", b"x", "image/png")})
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to build archive: stream error"}


@patch(f"{RELAY}.resolve_names", side_effect=RuntimeError("unexpected"))
def test_unexpected_error_is_generic_500(mock_resolve: MagicMock) -> None:
    response = client.post("/upload", files={"file": ("a.png", b"x", "image/png")})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@patch(f"{RELAY}.build_archive", side_effect=RuntimeError("unexpected"))
def test_unexpected_error_keeps_cors_headers(mock_build: MagicMock) -> None:
    origin = settings.cors_origins_list[0]
    response = client.post(
        "/upload",
        files={"file": ("a.png", b"x", "image/png")},
        headers={"origin": origin},
    )
    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == origin
    assert response.json() == {"error": "Internal server error"}


@patch(f"{RELAY}.upload_archive", new_callable=AsyncMock, return_value=LINK)
def test_deeply_nested_names_falls_back_to_filenames(mock_upload: AsyncMock) -> None:
    response = client.post(
        "/upload",
        data={"names": "[" * 100000},
        files={"file": ("a.png", b"x", "image/png")},
    )
    assert response.status_code == 200
    assert _archive_names(mock_upload) == ["a.png"]


def test_unknown_route_uses_error_envelope() -> None:
    response = client.get("/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
