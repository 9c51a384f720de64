"""
Shared fixtures: an in-memory Redis double, signed tokens and a test app.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from jose import jwt  # type: ignore[import-untyped]

from nexuslearn.configs.config import config
from nexuslearn.core.job_queue import RedisJobQueue
from nexuslearn.core.job_store import RedisJobStore
from nexuslearn.core.rate_limit import limiter
from nexuslearn.storage.local_storage import LocalStorage

TEST_JWT_SECRET = "test-secret"


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the job store and queue."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.zsets: dict[str, dict[str, float]] = {}

    async def ping(self) -> bool:
        return True

    async def set(self, key: str, value: str) -> bool:
        self.values[key] = value
        return True

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def zadd(self, key: str, mapping: dict[str, float]) -> int:
        self.zsets.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def zrevrange(self, key: str, start: int, end: int) -> list[str]:
        members = sorted(
            self.zsets.get(key, {}).items(), key=lambda item: item[1], reverse=True
        )
        names = [name for name, _ in members]
        return names[start : None if end == -1 else end + 1]

    async def rpush(self, key: str, *values: str) -> int:
        items = self.lists.setdefault(key, [])
        items.extend(values)
        return len(items)

    async def blpop(self, key: str, timeout: int = 0) -> tuple[str, str] | None:
        items = self.lists.get(key)
        if not items:
            return None
        return key, items.pop(0)

    async def llen(self, key: str) -> int:
        return len(self.lists.get(key, []))

    async def scan(
        self, cursor: int = 0, match: str | None = None, count: int | None = None
    ) -> tuple[int, list[str]]:
        keys = [k for k in self.values if match is None or fnmatch.fnmatch(k, match)]
        return 0, keys


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Disable rate limits and the Postgres mirror; sign tokens with a known secret."""
    monkeypatch.setattr(limiter, "enabled", False)
    monkeypatch.setattr("nexuslearn.core.job_store.db_enabled", False)
    monkeypatch.setattr(config, "auth_jwt_secret", TEST_JWT_SECRET)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis: FakeRedis) -> RedisJobStore:
    return RedisJobStore(redis_client=fake_redis)  # type: ignore[arg-type]


@pytest.fixture
def queue(fake_redis: FakeRedis) -> RedisJobQueue:
    return RedisJobQueue(redis_client=fake_redis)  # type: ignore[arg-type]


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage")


def make_token(claims: dict[str, Any], algorithm: str = "HS256") -> str:
    return jwt.encode(claims, TEST_JWT_SECRET, algorithm=algorithm)


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    def _headers(user_id: str = "user-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token({'sub': user_id})}"}

    return _headers


def make_pdf(lines: list[str]) -> bytes:
    """Build a one-page PDF showing ``lines`` in Helvetica."""
    content = "\n".join(
        f"BT /F1 12 Tf 72 {720 - idx * 20} Td ({line}) Tj ET"
        for idx, line in enumerate(lines)
    ).encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_at
    return bytes(out)


@pytest.fixture
def client() -> TestClient:
    from server import app

    return TestClient(app)


@pytest.fixture
def token_factory() -> Callable[..., str]:
    return make_token


@pytest.fixture
def pdf_factory() -> Callable[[list[str]], bytes]:
    return make_pdf
