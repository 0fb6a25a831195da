"""Pydantic models and dataclasses for request/response types.

Requests and wire DTOs are pydantic models whose field names are the
snake_case wire names. Requests are frozen; wire DTOs ignore unknown fields
so new provider fields never break parsing. The caller-facing result types
(`Response`, `TokenUsage`, `StreamEvent`) are plain frozen dataclasses.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mistral_client.common.errors import ensure_not_blank


class CodeModelName(str, Enum):
    CODESTRAL_LATEST = "codestral-latest"
    OPEN_CODESTRAL_MAMBA = "open-codestral-mamba"


class ChatModelName(str, Enum):
    OPEN_MISTRAL_7B = "open-mistral-7b"
    OPEN_MIXTRAL_8X7B = "open-mixtral-8x7b"
    OPEN_MIXTRAL_8X22B = "open-mixtral-8x22b"
    MISTRAL_SMALL_LATEST = "mistral-small-latest"
    MISTRAL_MEDIUM_LATEST = "mistral-medium-latest"
    MISTRAL_LARGE_LATEST = "mistral-large-latest"


class EmbeddingModelName(str, Enum):
    MISTRAL_EMBED = "mistral-embed"


class FinishReason(str, Enum):
    """Provider-neutral reason a generation stopped."""
    STOP = "stop"
    LENGTH = "length"
    TOOL_EXECUTION = "tool_execution"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


# --- requests ---------------------------------------------------------------

class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ChatMessage(_Request):
    role: Literal["system", "user", "assistant", "tool"]
    content: str


class FimCompletionRequest(_Request):
    """Fill-in-the-middle request: the model writes what goes between prompt and suffix."""
    model: str | None = None
    prompt: str
    suffix: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None
    min_tokens: int | None = None
    top_p: float | None = None
    random_seed: int | None = None
    stop: tuple[str, ...] | None = None
    stream: bool = False

    @field_validator("prompt", mode="before")
    @classmethod
    def _prompt_not_blank(cls, value: object) -> object:
        # raises the package ValidationError, which pydantic does not wrap
        if value is None or isinstance(value, str):
            ensure_not_blank(value, "prompt")
        return value


class ChatCompletionRequest(_Request):
    model: str | None = None
    messages: tuple[ChatMessage, ...]
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    random_seed: int | None = None
    safe_prompt: bool | None = None
    stop: tuple[str, ...] | None = None
    stream: bool = False


class EmbeddingRequest(_Request):
    model: str | None = None
    input: tuple[str, ...]
    encoding_format: str = "float"


CompletionRequest = Union[FimCompletionRequest, ChatCompletionRequest]


# --- wire responses ---------------------------------------------------------

class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UsageInfo(_Wire):
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class WireMessage(_Wire):
    role: str | None = None
    content: str | None = None


class ChatCompletionChoice(_Wire):
    index: int = 0
    message: WireMessage | None = None
    delta: WireMessage | None = None
    text: str | None = None
    finish_reason: str | None = None


class ChatCompletionResponse(_Wire):
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[ChatCompletionChoice] = Field(default_factory=list)
    usage: UsageInfo | None = None


class EmbeddingData(_Wire):
    index: int = 0
    embedding: list[float] = Field(default_factory=list)


class EmbeddingResponse(_Wire):
    id: str | None = None
    model: str | None = None
    data: list[EmbeddingData] = Field(default_factory=list)
    usage: UsageInfo | None = None


class ModelCard(_Wire):
    id: str
    object: str | None = None
    created: int | None = None
    owned_by: str | None = None


class ModelListResponse(_Wire):
    object: str | None = None
    data: list[ModelCard] = Field(default_factory=list)


# --- caller-facing results --------------------------------------------------

@dataclass(frozen=True)
class TokenUsage:
    """Token accounting for one request."""
    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class Response:
    """Result of one blocking or completed streaming call."""
    content: str | list[list[float]]
    token_usage: TokenUsage | None = None
    finish_reason: FinishReason | None = None


@dataclass(frozen=True)
class StreamEvent:
    """One decoded streaming frame."""
    content: str = ""
    token_usage: TokenUsage | None = None
    finish_reason: FinishReason | None = None

    @property
    def is_terminal(self) -> bool:
        return self.finish_reason is not None
