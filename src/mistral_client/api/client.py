"""HTTP client for the Mistral AI API.

Operations:
- POST /chat/completions   (blocking and streaming)
- POST /fim/completions    (blocking and streaming)
- POST /embeddings
- GET  /models

Blocking calls are retried up to `config.max_retries` times on transport,
provider and decode failures. Streaming calls are attempted once.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, TypeVar

import httpx
from pydantic import BaseModel

from mistral_client.api import mapper
from mistral_client.api.retry import with_retry
from mistral_client.api.streaming import OnComplete, OnError, OnEvent, StreamingCall
from mistral_client.common.config import ClientConfig
from mistral_client.common.errors import (
    ProviderError,
    TransportError,
    ValidationError,
    ensure_not_blank,
)
from mistral_client.common.schema import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionRequest,
    EmbeddingRequest,
    FimCompletionRequest,
    ModelCard,
    Response,
)

LOGGER = logging.getLogger("mistral_client.api.client")

CHAT_PATH = "chat/completions"
FIM_PATH = "fim/completions"
EMBEDDINGS_PATH = "embeddings"
MODELS_PATH = "models"

T = TypeVar("T")
R = TypeVar("R", bound=BaseModel)


class MistralClient:
    """
    Blocking and streaming access to one Mistral AI account.

    The client owns a single `httpx.Client` (connection pool) for its lifetime.
    Requests share no other state, so one instance may serve concurrent callers.

    Args:
        config: Immutable client settings.
        transport: Optional httpx transport, e.g. `httpx.MockTransport` in tests.
    """

    def __init__(self, config: ClientConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        event_hooks: dict[str, list[Callable[..., Any]]] = {"request": [], "response": []}
        if config.log_requests:
            event_hooks["request"].append(self._log_request)
        if config.log_responses:
            event_hooks["response"].append(self._log_response)
        self._http = httpx.Client(
            base_url=config.base_url.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
            event_hooks=event_hooks,
        )

    def __enter__(self) -> "MistralClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        self._http.close()

    # --- blocking -----------------------------------------------------------

    def chat_completion(self, request: ChatCompletionRequest) -> Response:
        payload = self._completion_payload(self._check_chat(request), stream=False)
        return self._retrying(
            lambda: mapper.response_from_completion(self._post(CHAT_PATH, payload, mapper.parse_completion))
        )

    def chat_completion_raw(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """Chat completion with every returned choice, not just the first."""
        payload = self._completion_payload(self._check_chat(request), stream=False)
        return self._retrying(lambda: self._post(CHAT_PATH, payload, mapper.parse_completion))

    def fim_completion(self, request: FimCompletionRequest) -> Response:
        """
        Fill-in-the-middle completion.

        Args:
            request: Prompt, optional suffix and sampling parameters.

        Returns:
            Content of the first choice with usage and finish reason.

        Raises:
            ValidationError: Blank prompt. No request is sent.
            RemoteCallError: Last failure once retries are exhausted.
        """
        payload = self._completion_payload(self._check_fim(request), stream=False)
        # an empty choice list is a decode failure and is retried like one
        return self._retrying(
            lambda: mapper.response_from_completion(self._post(FIM_PATH, payload, mapper.parse_completion))
        )

    def fim_completion_raw(self, request: FimCompletionRequest) -> ChatCompletionResponse:
        """FIM completion with every returned choice, not just the first."""
        payload = self._completion_payload(self._check_fim(request), stream=False)
        return self._retrying(lambda: self._post(FIM_PATH, payload, mapper.parse_completion))

    def embeddings(self, request: EmbeddingRequest) -> Response:
        """Embed every input string. `Response.content` holds one vector per input, in order."""
        if not request.input:
            raise ValidationError("input cannot be empty")
        for i, text in enumerate(request.input):
            ensure_not_blank(text, f"input[{i}]")
        if request.model is None:
            request = request.model_copy(update={"model": self.config.embedding_model_name})
        payload = mapper.to_wire(request)
        resp = self._retrying(lambda: self._post(EMBEDDINGS_PATH, payload, mapper.parse_embeddings))
        return mapper.response_from_embeddings(resp)

    def list_models(self) -> list[ModelCard]:
        resp = self._retrying(lambda: self._send("GET", MODELS_PATH, None, mapper.parse_models))
        return resp.data

    # --- streaming ----------------------------------------------------------

    def stream_chat_completion(
        self,
        request: ChatCompletionRequest,
        on_event: OnEvent,
        on_complete: OnComplete,
        on_error: OnError,
    ) -> StreamingCall:
        return self.open_stream(request, on_event, on_complete, on_error).run()

    def stream_fim_completion(
        self,
        request: FimCompletionRequest,
        on_event: OnEvent,
        on_complete: OnComplete,
        on_error: OnError,
    ) -> StreamingCall:
        """
        Stream a FIM completion, reading it to the end on this thread.

        Validation errors are raised directly; every other failure goes to
        `on_error`. Exactly one of `on_complete` / `on_error` fires.
        """
        return self.open_stream(request, on_event, on_complete, on_error).run()

    def open_stream(
        self,
        request: CompletionRequest,
        on_event: OnEvent,
        on_complete: OnComplete,
        on_error: OnError,
    ) -> StreamingCall:
        """
        Prepare a streaming call without starting it.

        Run it with `call.run()`, possibly on another thread, and stop it with
        `call.cancel()`.
        """
        if isinstance(request, FimCompletionRequest):
            path, request = FIM_PATH, self._check_fim(request)
        else:
            path, request = CHAT_PATH, self._check_chat(request)
        payload = self._completion_payload(request, stream=True)
        return StreamingCall(self._http, path, payload, on_event, on_complete, on_error)

    # --- internals ----------------------------------------------------------

    def _check_fim(self, request: FimCompletionRequest) -> FimCompletionRequest:
        ensure_not_blank(request.prompt, "prompt")
        return request

    def _check_chat(self, request: ChatCompletionRequest) -> ChatCompletionRequest:
        if not request.messages:
            raise ValidationError("messages cannot be empty")
        return request

    def _completion_payload(self, request: CompletionRequest, stream: bool) -> dict[str, Any]:
        update: dict[str, Any] = {"stream": stream}
        if request.model is None:
            update["model"] = self.config.model_name
        return mapper.to_wire(request.model_copy(update=update))

    def _retrying(self, action: Callable[[], T]) -> T:
        return with_retry(action, self.config.max_retries, self.config.retry_backoff)

    def _post(self, path: str, payload: dict[str, Any], parse: Callable[[bytes], R]) -> R:
        return self._send("POST", path, payload, parse)

    def _send(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None,
        parse: Callable[[bytes], R],
    ) -> R:
        try:
            response = self._http.request(method, path, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}", cause=e) from e
        if not response.is_success:
            raise ProviderError(response.status_code, response.text)
        return parse(response.content)

    def _log_request(self, request: httpx.Request) -> None:
        # headers are not logged; they carry the API key
        body = request.content.decode("utf-8", errors="replace")
        LOGGER.info("Request: %s %s body=%s", request.method, request.url, body)

    def _log_response(self, response: httpx.Response) -> None:
        # body is not read here so streaming responses stay lazy
        LOGGER.info(
            "Response: %s %s status=%s",
            response.request.method,
            response.request.url,
            response.status_code,
        )
