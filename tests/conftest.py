import base64
import os

# Must be set before importing app, so that nothing a test does can reach the
# real data directory even if a dependency override is missed.
os.environ.setdefault("HANDOFF_DATA_DIR", os.path.join(os.path.dirname(__file__), ".data"))

import pytest
from fastapi.testclient import TestClient

from app import app, get_repository, get_screenshots
from repository import TaskRepository
from screenshots import ScreenshotStore
from storage import JsonBucketStorage

from tests.helpers import PNG_BYTES


@pytest.fixture
def png_b64():
    return base64.b64encode(PNG_BYTES).decode()


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def screenshots(tmp_path):
    path = tmp_path / "screenshots"
    path.mkdir()
    return ScreenshotStore(path)


@pytest.fixture
def storage(data_dir):
    return JsonBucketStorage(data_dir)


@pytest.fixture
def repo(storage, screenshots):
    return TaskRepository(storage, screenshots)


@pytest.fixture
def client(repo, screenshots):
    """
    A TestClient whose repository and screenshot store point at per-test
    temp directories.

    TestClient is intentionally used without the context manager so the app's
    startup bootstrap does not run against the configured data directory.
    """
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_screenshots] = lambda: screenshots
    yield TestClient(app, raise_server_exceptions=True)
    app.dependency_overrides.clear()
