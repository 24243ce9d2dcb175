"""Shared fixtures: a fake extraction delegate and an app factory for tests."""
from __future__ import annotations

import asyncio
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from title_service.browser.schema import PageTitle
from title_service.core.settings import Settings
from title_service.main import create_app


class FakeExtractor:
    """Stands in for the browser. Records every call it receives."""

    def __init__(self, result: Optional[PageTitle] = None, error: Optional[BaseException] = None, delay: float = 0.0):
        self.result = result or PageTitle(title="Example Domain", status=200)
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []
        self.completed = False
        self.saw_cancel = False

    async def extract_title(self, url, *, nav_timeout_ms, wait_until, cancel=None):
        self.calls.append({"url": url, "nav_timeout_ms": nav_timeout_ms, "wait_until": wait_until})
        if self.delay:
            await asyncio.sleep(self.delay)
        self.saw_cancel = bool(cancel is not None and cancel.is_set())
        self.completed = True
        if self.error is not None:
            raise self.error
        return self.result


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def client_factory():
    clients: list[TestClient] = []

    def _make(extractor, **overrides) -> TestClient:
        app = create_app(make_settings(**overrides), extractor=extractor)
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)
