"""
FormBridge - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_store:        In-memory ContentStore with sha tracking and a write log
    ├── price_service:     SubmissionService for the price variant, no retry waits
    ├── catalog_service:   SubmissionService for the catalog variant, no retry waits
    ├── catalog_client:    HTTPX AsyncClient against an app serving the catalog form
    └── price_client:      HTTPX AsyncClient against an app serving the price form
"""

import itertools
import json
import os
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

# Settings are read at import time; keep tests off any real token or .env values
os.environ["GITHUB_TOKEN"] = "test-token-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from formbridge.config import Settings  # noqa: E402
from formbridge.exceptions import (  # noqa: E402
    RemoteNotFoundError,
    RemoteStoreError,
    RemoteWriteConflictError,
)
from formbridge.services.content_store import ContentStore, StoredFile, WriteResult  # noqa: E402
from formbridge.services.submission_service import SubmissionService  # noqa: E402
from formbridge.services.variants import CatalogVariant, PriceVariant  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Test Double
# ══════════════════════════════════════════════════════════════════════════

class FakeContentStore(ContentStore):
    """
    In-memory stand-in for the GitHub repository.

    Enforces the same conditional-write rules as the contents API: updating an
    existing file needs its current sha, anything else is a conflict. Every
    read and write attempt is recorded, including rejected ones.
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, Tuple[bytes, str]] = {}
        self.reads: List[str] = []
        self.writes: List[Dict[str, Any]] = []
        self.failing_reads: Set[str] = set()
        self.failing_writes: Set[str] = set()
        self.before_write: Optional[Callable[[str], None]] = None
        self.reachable = True
        self._shas = itertools.count(1)
        for path, content in (files or {}).items():
            self.put(path, content)

    def put(self, path: str, content: bytes) -> str:
        """Write directly, bypassing the conditional-write rules (another client)."""
        sha = f"sha-{next(self._shas)}"
        self.files[path] = (content, sha)
        return sha

    def sha(self, path: str) -> str:
        return self.files[path][1]

    def records(self, path: str) -> List[Any]:
        return json.loads(self.files[path][0].decode("utf-8"))

    def writes_to(self, path: str) -> List[Dict[str, Any]]:
        return [w for w in self.writes if w["path"] == path]

    def simulate_concurrent_append(self, path: str, record: Any, times: int = 1) -> None:
        """Have another writer append ``record`` right before our next ``times`` writes."""
        remaining = {"count": times}

        def hook(target: str) -> None:
            if target != path or remaining["count"] == 0:
                return
            remaining["count"] -= 1
            existing = self.records(path) if path in self.files else []
            existing.append(record)
            self.put(path, json.dumps(existing).encode("utf-8"))

        self.before_write = hook

    async def read(self, path: str, missing_ok: bool = False) -> Optional[StoredFile]:
        self.reads.append(path)
        if path in self.failing_reads:
            raise RemoteStoreError(message="HTTP 502", path=path, status_code=502)
        if path not in self.files:
            if missing_ok:
                return None
            raise RemoteNotFoundError(path=path)
        content, sha = self.files[path]
        return StoredFile(path=path, content=content, sha=sha)

    async def write(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None,
    ) -> WriteResult:
        self.writes.append({"path": path, "content": content, "message": message, "sha": sha})
        if self.before_write is not None:
            self.before_write(path)
        if path in self.failing_writes:
            raise RemoteStoreError(message="HTTP 502", path=path, status_code=502)

        current = self.files.get(path)
        if current is None and sha is not None:
            raise RemoteWriteConflictError(path=path, sha=sha, status_code=409)
        if current is not None and current[1] != sha:
            raise RemoteWriteConflictError(path=path, sha=sha, status_code=409 if sha else 422)

        new_sha = self.put(path, content)
        return WriteResult(path=path, sha=new_sha, commit_sha=f"commit-{new_sha}")

    async def check(self) -> bool:
        return self.reachable


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_store():
    return FakeContentStore()


@pytest.fixture
def price_service(fake_store):
    return SubmissionService(fake_store, PriceVariant(), max_attempts=3, min_wait=0, max_wait=0)


@pytest.fixture
def catalog_service(fake_store):
    return SubmissionService(fake_store, CatalogVariant(), max_attempts=3, min_wait=0, max_wait=0)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


def make_settings(variant: str) -> Settings:
    return Settings(
        github_token="test-token-not-real",
        submission_variant=variant,
        conflict_retry_attempts=3,
        conflict_retry_min_wait=0,
        conflict_retry_max_wait=0,
    )


async def _client_for(variant: str, store: FakeContentStore):
    from formbridge.main import create_app

    app = create_app(config=make_settings(variant), store=store)
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def catalog_client(fake_store):
    """
    HTTPX AsyncClient talking to a catalog-variant app backed by ``fake_store``.

    Usage:
        async def test_submit(catalog_client, fake_store):
            response = await catalog_client.post("/submit", data={...})
    """
    client = await _client_for("catalog", fake_store)
    async with client:
        yield client


@pytest_asyncio.fixture
async def price_client(fake_store):
    client = await _client_for("price", fake_store)
    async with client:
        yield client
