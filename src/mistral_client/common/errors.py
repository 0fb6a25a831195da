"""Error taxonomy shared by the client, the streaming reader and the proxy."""
from __future__ import annotations


class MistralClientError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(MistralClientError):
    """Caller-supplied input is invalid. Raised before any network call."""


class RemoteCallError(MistralClientError):
    """A remote call failed. `attempts` is set once retries are exhausted."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
        self.attempts = 1


class TransportError(RemoteCallError):
    """Connection refused, DNS failure, timeout or a stream cut short."""


class ProviderError(RemoteCallError):
    """Non-2xx status or an error body reported by the provider."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"provider returned HTTP {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class DecodeError(RemoteCallError):
    """Response body is not the JSON we expected."""


def ensure_not_blank(value: str | None, name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{name} cannot be null or blank")
    return value
