from __future__ import annotations

import logging

import pytest

from mistral_client.common.logging_setup import setup_logging


@pytest.fixture
def _restore_root() -> None:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("_restore_root")
def test_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_LOG_LEVEL", "debug")

    setup_logging()

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.usefixtures("_restore_root")
def test_unknown_level_name_falls_back_to_info() -> None:
    setup_logging("chatty")

    assert logging.getLogger().level == logging.INFO
    assert len(logging.getLogger().handlers) == 1
