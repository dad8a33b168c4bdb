"""Pytest configuration and fixtures."""

import json
from typing import Callable, Optional

import httpx
import pytest

from excel_relay.config import Settings
from excel_relay.main import create_app


def completion(content: str) -> dict:
    """Minimal chat-completion body with one choice."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class StubUpstream:
    """Mock chat-completion endpoint that records every request it receives."""

    def __init__(self, handler: Optional[Callable] = None):
        self.calls: list[httpx.Request] = []
        self._handler = handler or (lambda request: httpx.Response(200, json=completion("ok")))

    def __call__(self, request: httpx.Request):
        self.calls.append(request)
        return self._handler(request)

    @property
    def called(self) -> bool:
        return bool(self.calls)

    @property
    def last_body(self) -> dict:
        return json.loads(self.calls[-1].content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(**overrides) -> Settings:
    values = {"groq_api_key": "test-key", "groq_url": "https://upstream.test/chat/completions"}
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def stub():
    return StubUpstream()


@pytest.fixture
def make_client():
    """Build a TestClient around a fresh app wired to a stub upstream."""
    from fastapi.testclient import TestClient

    clients = []

    def _make(stub: StubUpstream, **overrides) -> TestClient:
        app = create_app(settings=make_settings(**overrides), transport=stub.transport())
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
