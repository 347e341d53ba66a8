from fastapi import status
from fastapi.testclient import TestClient

from tests.conftest import make_settings
from tests.consts import TEST_FRONTEND_URL, TEST_JPEG_CONTENT, TEST_PDF_CONTENT, TEST_PNG_CONTENT
from uploads_api.main import create_app

SIX_MB_JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * (6 * 1024 * 1024)


def test__upload_without_file(client: TestClient):
    response = client.post("/api/upload", data={"caption": "no image here"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "No file uploaded"}


def test__upload_with_empty_body(client: TestClient):
    response = client.post("/api/upload")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "No file uploaded"}


def test__upload_pdf_is_rejected_and_nothing_is_written(client: TestClient, uploads_dir):
    for name in ["report.pdf", "report.png"]:
        response = client.post(
            "/api/upload", files={"image": (name, TEST_PDF_CONTENT, "application/pdf")}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Unsupported file type"}
    assert list(uploads_dir.iterdir()) == []


def test__upload_with_disallowed_extension(client: TestClient):
    response = client.post(
        "/api/upload", files={"image": ("picture.webp", TEST_PNG_CONTENT, "image/png")}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Unsupported file type"}


def test__upload_too_large_never_reaches_storage(remote_client: TestClient, fake_cloudinary, uploads_dir):
    response = remote_client.post(
        "/api/upload", files={"image": ("huge.jpg", SIX_MB_JPEG, "image/jpeg")}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "File too large (max 5MB)"}
    assert fake_cloudinary.uploaded == []
    assert list(uploads_dir.iterdir()) == []


def test__upload_fails_when_disk_is_unusable(tmp_path):
    blocker = tmp_path / "uploads"
    blocker.write_text("not a directory")

    with TestClient(create_app(make_settings(blocker))) as client:
        response = client.post(
            "/api/upload", files={"image": ("ok.png", TEST_PNG_CONTENT, "image/png")}
        )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Failed to save file"}
    assert str(tmp_path) not in response.text


def test__list_fails_when_cloudinary_fails(remote_client: TestClient, failing_cloudinary):
    response = remote_client.get("/api/upload")

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Failed to list uploaded files"}


def test__unexpected_errors_become_generic_500(client: TestClient, monkeypatch):
    async def explode(file):
        raise RuntimeError("/secret/path exploded")

    monkeypatch.setattr(client.app.state.upload_orchestrator, "handle_upload", explode)

    response = client.post(
        "/api/upload",
        files={"image": ("ok.jpg", TEST_JPEG_CONTENT, "image/jpeg")},
        headers={"Origin": TEST_FRONTEND_URL},
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Internal server error"}
    assert "secret" not in response.text
    assert response.headers["Access-Control-Allow-Origin"] == TEST_FRONTEND_URL


def test__cors_rejects_unknown_origin(client: TestClient):
    response = client.options(
        "/api/upload",
        headers={"Origin": "http://evil.test", "Access-Control-Request-Method": "POST"},
    )

    assert "Access-Control-Allow-Origin" not in response.headers
