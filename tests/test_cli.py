from __future__ import annotations

import argparse
from typing import Any

import pytest

import mistral_client.cli as cli_mod
from mistral_client.common.schema import FimCompletionRequest, FinishReason, Response, TokenUsage


class _FakeClient:
    requests: list[FimCompletionRequest] = []

    def __init__(self, config: Any) -> None:
        self.config = config

    def __enter__(self) -> "_FakeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        return None

    def fim_completion(self, request: FimCompletionRequest) -> Response:
        self.requests.append(request)
        return Response("return 1", TokenUsage(2, 3, 5), FinishReason.STOP)

    def stream_fim_completion(self, request, on_event, on_complete, on_error):  # noqa: ANN001
        self.requests.append(request)
        for delta in ("return", " 1"):
            on_event(delta)
        on_complete(Response("return 1", TokenUsage(2, 3, 5), FinishReason.STOP))


def _args(**overrides: Any) -> argparse.Namespace:
    values: dict[str, Any] = {
        "prompt": "def f():",
        "suffix": "",
        "model": None,
        "temperature": None,
        "max_tokens": None,
        "stop": None,
        "stream": False,
        "config": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture(autouse=True)
def _fake_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_AI_API_KEY", "k")
    monkeypatch.setattr(cli_mod, "MistralClient", _FakeClient)
    monkeypatch.setattr(cli_mod, "setup_logging", lambda: None)
    _FakeClient.requests = []


def test_blocking_completion_prints_content(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.run(_args(stop=["\n\n"])) == 0

    assert capsys.readouterr().out == "return 1\n"
    assert _FakeClient.requests[0].stop == ("\n\n",)


def test_streaming_completion_prints_deltas(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.run(_args(stream=True, suffix="print(f())")) == 0

    assert capsys.readouterr().out == "return 1\n"
    assert _FakeClient.requests[0].suffix == "print(f())"


def test_main_reports_blank_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_AI_API_KEY", "")

    assert cli_mod.main(["--prompt", "x"]) == 1
