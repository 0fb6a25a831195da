"""Translation between typed requests/results and the JSON wire format.

All functions are pure. Absent optional fields map to None; unknown fields are
ignored by the wire models.
"""
from __future__ import annotations
import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from mistral_client.common.errors import DecodeError
from mistral_client.common.schema import (
    ChatCompletionChoice,
    ChatCompletionResponse,
    EmbeddingResponse,
    FinishReason,
    ModelListResponse,
    Response,
    StreamEvent,
    TokenUsage,
    UsageInfo,
)

LOGGER = logging.getLogger("mistral_client.api.mapper")

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "model_length": FinishReason.LENGTH,
    "tool_calls": FinishReason.TOOL_EXECUTION,
    "content_filter": FinishReason.CONTENT_FILTER,
}


def to_wire(request: BaseModel) -> dict[str, Any]:
    """Serialize a request, dropping unset fields. Tuples become JSON arrays."""
    return request.model_dump(mode="json", exclude_none=True)


def finish_reason_from(value: str | None) -> FinishReason | None:
    if value is None:
        return None
    return _FINISH_REASONS.get(value.lower(), FinishReason.OTHER)


def token_usage_from(usage: UsageInfo | None) -> TokenUsage | None:
    """
    Map wire usage, enforcing total == input + output.

    A provider total that disagrees with the sum is replaced by the sum.
    """
    if usage is None:
        return None
    input_tokens = usage.prompt_tokens or 0
    output_tokens = usage.completion_tokens or 0
    total = input_tokens + output_tokens
    if usage.total_tokens is not None and usage.total_tokens != total:
        LOGGER.warning(
            "Provider reported total_tokens=%s but prompt+completion=%s; using the sum",
            usage.total_tokens,
            total,
        )
    return TokenUsage(input_tokens=input_tokens, output_tokens=output_tokens, total_tokens=total)


def _choice_text(choice: ChatCompletionChoice) -> str | None:
    for part in (choice.delta, choice.message):
        if part is not None and part.content is not None:
            return part.content
    return choice.text


def response_from_completion(resp: ChatCompletionResponse) -> Response:
    """Build a Response from the first choice."""
    if not resp.choices:
        raise DecodeError("completion response has no choices")
    choice = resp.choices[0]
    return Response(
        content=_choice_text(choice) or "",
        token_usage=token_usage_from(resp.usage),
        finish_reason=finish_reason_from(choice.finish_reason),
    )


def response_from_embeddings(resp: EmbeddingResponse) -> Response:
    vectors = [d.embedding for d in sorted(resp.data, key=lambda d: d.index)]
    return Response(content=vectors, token_usage=token_usage_from(resp.usage))


def stream_event_from(chunk: ChatCompletionResponse) -> StreamEvent:
    if not chunk.choices:
        # usage-only frames carry no choice
        return StreamEvent(token_usage=token_usage_from(chunk.usage))
    choice = chunk.choices[0]
    return StreamEvent(
        content=_choice_text(choice) or "",
        token_usage=token_usage_from(chunk.usage),
        finish_reason=finish_reason_from(choice.finish_reason),
    )


def _parse(model: type[BaseModel], payload: str | bytes) -> Any:
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"malformed JSON body: {e}", cause=e) from e
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DecodeError(f"unexpected {model.__name__} shape: {e}", cause=e) from e


def parse_completion(payload: str | bytes) -> ChatCompletionResponse:
    return _parse(ChatCompletionResponse, payload)


def parse_embeddings(payload: str | bytes) -> EmbeddingResponse:
    return _parse(EmbeddingResponse, payload)


def parse_models(payload: str | bytes) -> ModelListResponse:
    return _parse(ModelListResponse, payload)


def parse_chunk(payload: str) -> ChatCompletionResponse:
    return _parse(ChatCompletionResponse, payload)
