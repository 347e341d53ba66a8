import pytest
from fastapi.testclient import TestClient

from tests.consts import (
    TEST_API_KEY,
    TEST_API_SECRET,
    TEST_BACKEND_URL,
    TEST_CLOUD_NAME,
    TEST_FOLDER,
    TEST_FRONTEND_URL,
)
from tests.fixtures.cloudinary_fixtures import failing_cloudinary, fake_cloudinary  # noqa: F401
from uploads_api.config.settings import Settings
from uploads_api.main import create_app


def make_settings(uploads_dir, remote: bool = False) -> Settings:
    credentials = {
        "cloudinary_api_key": TEST_API_KEY if remote else None,
        "cloudinary_api_secret": TEST_API_SECRET if remote else None,
        "cloudinary_cloud_name": TEST_CLOUD_NAME if remote else None,
    }
    return Settings(
        _env_file=None,
        app_env="test",
        uploads_dir=str(uploads_dir),
        backend_url=TEST_BACKEND_URL,
        frontend_url=TEST_FRONTEND_URL,
        cloudinary_folder=TEST_FOLDER,
        **credentials,
    )


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def local_settings(uploads_dir) -> Settings:
    return make_settings(uploads_dir, remote=False)


@pytest.fixture
def remote_settings(uploads_dir) -> Settings:
    return make_settings(uploads_dir, remote=True)


@pytest.fixture
def client(local_settings):
    with TestClient(create_app(local_settings)) as test_client:
        yield test_client


@pytest.fixture
def remote_client(remote_settings):
    with TestClient(create_app(remote_settings)) as test_client:
        yield test_client
