"""Client configuration: one immutable value per client, from code, env or YAML."""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any

import yaml

from mistral_client.common.errors import ValidationError
from mistral_client.common.schema import CodeModelName, EmbeddingModelName

DEFAULT_BASE_URL = "https://api.mistral.ai/v1"


@dataclass(frozen=True)
class ClientConfig:
    """
    Settings fixed at client construction.

    Args:
        api_key: Bearer key sent with every request. Must not be blank.
        base_url: API root; operation paths are appended to it.
        timeout: Connect/read timeout in seconds, applied per HTTP call.
        max_retries: Extra attempts for blocking calls (attempts = max_retries + 1).
        retry_backoff: Base delay in seconds between attempts; 0 retries immediately.
        log_requests: Log outgoing method, URL and body.
        log_responses: Log status and body of responses.
        model_name: Completion model used when a request leaves `model` unset.
        embedding_model_name: Embedding model used when a request leaves `model` unset.
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 60.0
    max_retries: int = 3
    retry_backoff: float = 1.0
    log_requests: bool = False
    log_responses: bool = False
    model_name: str = CodeModelName.CODESTRAL_LATEST.value
    embedding_model_name: str = EmbeddingModelName.MISTRAL_EMBED.value

    def __post_init__(self) -> None:
        if self.api_key is None or not str(self.api_key).strip():
            raise ValidationError("api_key cannot be null or blank")
        if self.max_retries < 0:
            raise ValidationError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ValidationError("timeout must be positive")
        if self.retry_backoff < 0:
            raise ValidationError("retry_backoff must be >= 0")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from MISTRAL_AI_* environment variables."""
        values: dict[str, Any] = {
            "api_key": os.getenv("MISTRAL_AI_API_KEY", ""),
            "base_url": os.getenv("MISTRAL_AI_BASE_URL", DEFAULT_BASE_URL),
            "timeout": float(os.getenv("MISTRAL_AI_TIMEOUT", "60")),
            "max_retries": int(os.getenv("MISTRAL_AI_MAX_RETRIES", "3")),
            "model_name": os.getenv("MISTRAL_AI_MODEL", CodeModelName.CODESTRAL_LATEST.value),
        }
        values.update(overrides)
        return cls(**values)


_YAML_KEYS = (
    "api_key",
    "base_url",
    "timeout",
    "max_retries",
    "retry_backoff",
    "log_requests",
    "log_responses",
    "model_name",
    "embedding_model_name",
)


def load_config(path: str) -> ClientConfig:
    """
    Load a client config from a YAML file.

    Unknown keys are ignored. A missing `api_key` falls back to MISTRAL_AI_API_KEY
    so key material can stay out of the file.

    Args:
        path: YAML config path.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValidationError(f"config file {path} must contain a mapping")
    values = {k: raw[k] for k in _YAML_KEYS if k in raw}
    values.setdefault("api_key", os.getenv("MISTRAL_AI_API_KEY", ""))
    return ClientConfig(**values)
