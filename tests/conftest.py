"""Pytest configuration and fixtures."""

import pytest

from soutu.utils.errors import FileReferenceNotFound
from soutu.utils.media_proxy import MediaDeliveryHandler, ProxySettings, UrlIssuer
from soutu.utils.session import create_all_tables, initialize_session
from soutu.utils.signing import SigningKey
from soutu.utils.telegram_files import UpstreamFile

# Configure pytest-asyncio to auto-detect async tests
pytest_plugins = ("pytest_asyncio",)

START_TIME = 1_700_000_000


class FakeClock:
    """Manually advanced stand-in for ``time.time``."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return float(self.now)

    def advance(self, seconds: int) -> None:
        self.now += seconds


class FakeResolver:
    """File path resolver backed by a dict."""

    def __init__(self, paths=None, error=None):
        self.paths = dict(paths or {})
        self.error = error
        self.calls = []

    async def resolve(self, file_id: str) -> str:
        self.calls.append(file_id)
        if self.error is not None:
            raise self.error
        path = self.paths.get(file_id)
        if not path:
            raise FileReferenceNotFound(f"No file path for {file_id}")
        return path


class FakeFetcher:
    """Fetcher that returns a canned upstream response."""

    def __init__(self, body=b"\xff\xd8jpeg-bytes", headers=None, error=None):
        self.body = body
        self.headers = headers if headers is not None else {
            "Content-Type": "image/jpeg",
            "Content-Length": str(len(body)),
            "Set-Cookie": "session=abc",
            "Cache-Control": "private, no-store",
            "Connection": "keep-alive",
            "ETag": '"abc123"',
        }
        self.error = error
        self.calls = []

    async def fetch(self, file_path: str) -> UpstreamFile:
        self.calls.append(file_path)
        if self.error is not None:
            raise self.error
        return UpstreamFile(body=self.body, headers=dict(self.headers))


@pytest.fixture(autouse=True)
def database(tmp_path):
    """Fresh SQLite database per test."""
    initialize_session(database_url=f"sqlite:///{tmp_path / 'test.db'}")
    create_all_tables()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def signing_key():
    return SigningKey(b"test-proxy-secret")


@pytest.fixture
def settings():
    return ProxySettings(base_url="https://img.example.com")


@pytest.fixture
def resolver():
    return FakeResolver({"file-a": "photos/file_a.jpg", "file-b": "photos/file_b.jpg"})


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def issuer(signing_key, settings, clock):
    return UrlIssuer(signing_key, settings, clock=clock)


@pytest.fixture
def handler(signing_key, settings, resolver, fetcher, clock):
    return MediaDeliveryHandler(signing_key, settings, resolver, fetcher, clock=clock)
