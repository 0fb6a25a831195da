from __future__ import annotations

from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

import mistral_client.serve.fastapi_app as app_mod
from mistral_client.common.errors import ProviderError
from mistral_client.common.schema import FimCompletionRequest, FinishReason, Response, TokenUsage


class _FakeClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[FimCompletionRequest] = []

    def fim_completion(self, request: FimCompletionRequest) -> Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return Response(
            content="\n    return a + b",
            token_usage=TokenUsage(5, 6, 11),
            finish_reason=FinishReason.STOP,
        )


@pytest.fixture
def http() -> Iterator[Callable[[_FakeClient], TestClient]]:
    def make(fake: _FakeClient) -> TestClient:
        app_mod.app.dependency_overrides[app_mod.get_client] = lambda: fake
        return TestClient(app_mod.app)

    yield make
    app_mod.app.dependency_overrides.clear()


def test_health_ok() -> None:
    client = TestClient(app_mod.app)
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data.get("status") == "ok"


def test_complete_with_fake_client(http: Callable[[_FakeClient], TestClient]) -> None:
    fake = _FakeClient()
    r = http(fake).post("/complete", json={"prompt": "def add(a, b):", "stop": ["\n\n"]})

    assert r.status_code == 200
    data = r.json()
    assert data["text"] == "\n    return a + b"
    assert data["finish_reason"] == "stop"
    assert data["prompt_tokens"] == 5
    assert data["completion_tokens"] == 6
    assert data["total_tokens"] == 11
    assert fake.requests[0].suffix == ""
    assert fake.requests[0].stop == ("\n\n",)


def test_blank_prompt_is_422_without_calling_upstream(http: Callable[[_FakeClient], TestClient]) -> None:
    fake = _FakeClient()
    r = http(fake).post("/complete", json={"prompt": " "})

    assert r.status_code == 422
    assert fake.requests == []


def test_complete_maps_provider_error_to_502(http: Callable[[_FakeClient], TestClient]) -> None:
    r = http(_FakeClient(ProviderError(500, "boom"))).post("/complete", json={"prompt": "x"})

    assert r.status_code == 502


def test_overrides_are_cleared_between_tests() -> None:
    assert app_mod.get_client not in app_mod.app.dependency_overrides
