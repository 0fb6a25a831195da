from __future__ import annotations

from pathlib import Path

import pytest

from mistral_client.common.config import DEFAULT_BASE_URL, ClientConfig, load_config
from mistral_client.common.errors import ValidationError


def test_defaults() -> None:
    config = ClientConfig(api_key="k")

    assert config.base_url == DEFAULT_BASE_URL
    assert config.timeout == 60.0
    assert config.max_retries == 3
    assert config.log_requests is False
    assert config.log_responses is False
    assert config.model_name == "codestral-latest"
    assert config.embedding_model_name == "mistral-embed"


@pytest.mark.parametrize("key", ["", "   ", None])
def test_blank_key_rejected(key: str | None) -> None:
    with pytest.raises(ValidationError):
        ClientConfig(api_key=key)  # type: ignore[arg-type]


def test_negative_retries_rejected() -> None:
    with pytest.raises(ValidationError):
        ClientConfig(api_key="k", max_retries=-1)


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_AI_API_KEY", "env-key")
    monkeypatch.setenv("MISTRAL_AI_MAX_RETRIES", "5")
    monkeypatch.setenv("MISTRAL_AI_MODEL", "open-codestral-mamba")

    config = ClientConfig.from_env(timeout=5.0)

    assert config.api_key == "env-key"
    assert config.max_retries == 5
    assert config.model_name == "open-codestral-mamba"
    assert config.timeout == 5.0


def test_load_config_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_AI_API_KEY", "env-key")
    path = tmp_path / "client.yaml"
    path.write_text(
        "base_url: http://localhost:9000/v1\nmax_retries: 1\nlog_requests: true\nunknown: 3\n",
        encoding="utf-8",
    )

    config = load_config(str(path))

    assert config.api_key == "env-key"
    assert config.base_url == "http://localhost:9000/v1"
    assert config.max_retries == 1
    assert config.log_requests is True


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "client.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_config(str(path))
