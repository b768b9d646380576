import pytest
from fastapi.testclient import TestClient

from apps.blog.main import create_app
from apps.blog.store import InMemoryPostStore, StoreError


class FailingPostStore(InMemoryPostStore):
    """Store whose every database call fails"""

    async def create(self, fields):
        raise StoreError("connection refused")

    async def list_all(self, limit=None, offset=0):
        raise StoreError("connection refused")

    async def get_by_id(self, post_id):
        raise StoreError("connection refused")

    async def delete_by_id(self, post_id):
        raise StoreError("connection refused")

    async def ping(self):
        return False


@pytest.fixture
def store():
    return InMemoryPostStore()


@pytest.fixture
def static_dir(tmp_path):
    build = tmp_path / "build"
    (build / "assets").mkdir(parents=True)
    (build / "index.html").write_text("<html>blog index</html>")
    (build / "assets" / "app.js").write_text("console.log('blog');")
    (tmp_path / "secret.txt").write_text("do not serve")
    return str(build)


@pytest.fixture
def client(store, static_dir):
    app = create_app(store=store, static_dir=static_dir, github_proxy=True)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def failing_client(static_dir):
    app = create_app(store=FailingPostStore(), static_dir=static_dir)
    with TestClient(app) as test_client:
        yield test_client
