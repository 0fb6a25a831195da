from __future__ import annotations

import pytest

from mistral_client.api.retry import backoff_delay, with_retry
from mistral_client.common.errors import DecodeError, ProviderError, TransportError, ValidationError


class _Flaky:
    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.mark.parametrize("failures", [0, 1, 2])
def test_succeeds_after_n_failures(failures: int) -> None:
    action = _Flaky(failures, TransportError("down"))

    assert with_retry(action, max_retries=3, backoff=0) == "ok"
    assert action.calls == failures + 1


@pytest.mark.parametrize("error", [TransportError("down"), ProviderError(500), DecodeError("bad json")])
def test_gives_up_after_max_retries_plus_one(error: Exception) -> None:
    action = _Flaky(100, error)

    with pytest.raises(type(error)) as info:
        with_retry(action, max_retries=3, backoff=0)

    assert action.calls == 4
    assert info.value.attempts == 4


def test_validation_error_is_not_retried() -> None:
    action = _Flaky(100, ValidationError("blank"))

    with pytest.raises(ValidationError):
        with_retry(action, max_retries=3, backoff=0)
    assert action.calls == 1


def test_sleeps_between_attempts_only() -> None:
    slept: list[float] = []
    action = _Flaky(2, ProviderError(502))

    with_retry(action, max_retries=3, backoff=1.0, sleep=slept.append)

    assert len(slept) == 2
    assert 0.9 <= slept[0] <= 1.1
    assert 1.8 <= slept[1] <= 2.2


def test_zero_backoff_never_sleeps() -> None:
    assert backoff_delay(5, 0) == 0.0
