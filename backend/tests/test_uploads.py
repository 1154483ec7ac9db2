"""Tests for uploads, the PDF proxy and the storage check."""

import io

import httpx
import pytest
from PIL import Image

from galaxy_chat.api.deps import get_http_client
from galaxy_chat.core.config import settings
from galaxy_chat.core.sandbox import SandboxError, resolve_sandboxed_path, upload_path_from_url


def _png_bytes(size=(8, 5)):
    buf = io.BytesIO()
    Image.new("RGB", size, "blue").save(buf, format="PNG")
    return buf.getvalue()


def _override_http(client, handler):
    async def fake_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            yield http

    client.app.dependency_overrides[get_http_client] = fake_http_client


# --- Uploads ---


def test_upload_image_locally(client):
    response = client.post("/api/upload/", files={"file": ("photo.png", _png_bytes(), "image/png")})
    assert response.status_code == 200
    data = response.json()
    assert data["url"].startswith("/uploads/")
    assert data["url"].endswith(".png")
    assert (data["width"], data["height"]) == (8, 5)
    assert data["format"] == "png"

    # Served back from the uploads mount
    served = client.get(data["url"])
    assert served.status_code == 200
    assert served.content == _png_bytes()


def test_upload_pdf_locally(client):
    response = client.post("/api/upload/", files={"file": ("doc.pdf", b"%PDF-1.4 test", "application/pdf")})
    assert response.status_code == 200
    data = response.json()
    assert data["width"] is None
    assert data["size"] == len(b"%PDF-1.4 test")
    assert (settings.uploads_dir / data["public_id"]).exists()


def test_upload_rejects_unsupported_type(client):
    response = client.post("/api/upload/", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400
    assert "text/plain is not allowed" in response.json()["detail"]


def test_upload_rejects_large_file(client):
    client.app.state.model_registry.config.max_file_size_mb = 0
    response = client.post("/api/upload/", files={"file": ("photo.png", _png_bytes(), "image/png")})
    assert response.status_code == 400
    assert "exceeds maximum allowed size" in response.json()["detail"]


# --- PDF proxy ---


def test_pdf_proxy(client):
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.4 remote")

    _override_http(client, handler)
    response = client.get("/api/pdf-proxy/", params={"url": "https://res.cloudinary.com/demo/doc.pdf"})
    assert response.status_code == 200
    assert response.content == b"%PDF-1.4 remote"
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == "inline"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert seen == ["https://res.cloudinary.com/demo/doc.pdf"]


def test_pdf_proxy_passes_upstream_status(client):
    _override_http(client, lambda request: httpx.Response(404))
    response = client.get("/api/pdf-proxy/", params={"url": "https://example.com/missing.pdf"})
    assert response.status_code == 404


def test_pdf_proxy_network_error(client):
    def handler(request):
        raise httpx.ConnectError("unreachable")

    _override_http(client, handler)
    response = client.get("/api/pdf-proxy/", params={"url": "https://example.com/doc.pdf"})
    assert response.status_code == 502


@pytest.mark.parametrize("params", [{}, {"url": "file:///etc/passwd"}])
def test_pdf_proxy_rejects_bad_url(client, params):
    response = client.get("/api/pdf-proxy/", params=params)
    assert response.status_code == 400


# --- Storage check ---


def test_storage_check_not_configured(client):
    response = client.get("/api/storage/check")
    assert response.status_code == 400
    data = response.json()
    assert data["configured"] is False
    assert data["storage"] == "local"
    assert data["env_check"] == {
        "cloudinary_cloud_name": False,
        "cloudinary_api_key": False,
        "cloudinary_api_secret": False,
    }
    assert data["instructions"]


def test_placeholder_credentials_are_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "demo")
    monkeypatch.setattr(settings, "cloudinary_api_key", "your_api_key")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "secret")
    assert settings.cloudinary_configured is False

    monkeypatch.setattr(settings, "cloudinary_api_key", "1234")
    assert settings.cloudinary_configured is True


# --- Sandbox ---


def test_sandbox_blocks_escape():
    with pytest.raises(SandboxError):
        resolve_sandboxed_path("../outside.txt")
    with pytest.raises(SandboxError):
        upload_path_from_url("/uploads/../../etc/passwd")


def test_upload_url_maps_into_data_dir():
    path = upload_path_from_url("/uploads/cat.png")
    assert path == (settings.data_dir / "uploads" / "cat.png").resolve()
    with pytest.raises(SandboxError):
        upload_path_from_url("https://example.com/cat.png")
