"""Server-sent-event reader for streaming completions.

A `StreamingCall` moves IDLE -> CONNECTING -> STREAMING and ends in exactly one
of COMPLETED, FAILED or CANCELLED. Deltas are delivered to `on_event` on the
thread that runs the call, in arrival order. COMPLETED fires `on_complete`
once, FAILED fires `on_error` once, CANCELLED fires nothing. Streaming calls
are never retried.
"""
from __future__ import annotations
import logging
import threading
from enum import Enum
from typing import Any, Callable

import httpx

from mistral_client.api.mapper import parse_chunk, stream_event_from
from mistral_client.common.errors import DecodeError, ProviderError, TransportError
from mistral_client.common.schema import FinishReason, Response, TokenUsage

LOGGER = logging.getLogger("mistral_client.api.streaming")

DONE_SENTINEL = "[DONE]"

OnEvent = Callable[[str], Any]
OnComplete = Callable[[Response], Any]
OnError = Callable[[BaseException], Any]


class StreamState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_TERMINAL = frozenset({StreamState.COMPLETED, StreamState.FAILED, StreamState.CANCELLED})


def sse_data(line: str) -> str | None:
    """
    Extract the payload of one event-stream line.

    Returns None for blank lines, comments and non-data fields. Bare JSON
    lines (no `data:` prefix) are passed through.
    """
    line = line.strip()
    if not line or line.startswith(":"):
        return None
    if line.startswith("data:"):
        return line[len("data:"):].strip()
    field = line.split(":", 1)[0]
    if field in ("event", "id", "retry"):
        return None
    return line


class StreamingCall:
    """One streaming request and its callbacks."""

    def __init__(
        self,
        http: httpx.Client,
        path: str,
        payload: dict[str, Any],
        on_event: OnEvent,
        on_complete: OnComplete,
        on_error: OnError,
    ) -> None:
        self._http = http
        self._path = path
        self._payload = payload
        self._on_event = on_event
        self._on_complete = on_complete
        self._on_error = on_error
        # reentrant so on_event may call cancel() while a delta is being delivered
        self._lock = threading.RLock()
        self._state = StreamState.IDLE
        self._response: httpx.Response | None = None

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state in _TERMINAL

    def run(self) -> "StreamingCall":
        """Open the stream and read it to the end on the calling thread."""
        with self._lock:
            if self._state is StreamState.CANCELLED:
                return self
            if self._state is not StreamState.IDLE:
                raise RuntimeError(f"stream already started (state={self._state.value})")
            self._state = StreamState.CONNECTING

        try:
            result = self._consume()
        except (httpx.HTTPError, httpx.StreamError) as e:
            self._fail(TransportError(f"stream transport failed: {e}", cause=e))
        except Exception as e:
            # provider/decode errors and anything raised by on_event
            self._fail(e)
        else:
            if result is not None:
                self._complete(result)
        return self

    def cancel(self) -> bool:
        """
        Stop the stream and suppress every further callback.

        Safe to call from another thread or from inside `on_event`. From another
        thread it waits for a delta that is being delivered, after which no
        further callback fires.

        Returns:
            False when the call had already finished.
        """
        with self._lock:
            if self._state in _TERMINAL:
                return False
            self._state = StreamState.CANCELLED
            response = self._response
        LOGGER.debug("Stream to %s cancelled", self._path)
        if response is not None:
            response.close()
        return True

    def _consume(self) -> Response | None:
        content: list[str] = []
        usage: TokenUsage | None = None
        finish_reason: FinishReason | None = None
        terminated = False

        with self._http.stream("POST", self._path, json=self._payload) as response:
            with self._lock:
                if self._state is StreamState.CANCELLED:
                    return None
                self._response = response
            if not response.is_success:
                body = response.read().decode("utf-8", errors="replace")
                raise ProviderError(response.status_code, body)
            self._advance(StreamState.STREAMING)

            for line in response.iter_lines():
                if self._state is StreamState.CANCELLED:
                    return None
                data = sse_data(line)
                if data is None:
                    continue
                if data == DONE_SENTINEL:
                    terminated = True
                    break
                chunk = parse_chunk(data)
                if chunk.object == "error":
                    raise ProviderError(response.status_code, data)
                if not chunk.choices and chunk.usage is None:
                    raise DecodeError(f"stream frame has neither choices nor usage: {data[:200]}")
                event = stream_event_from(chunk)
                if event.token_usage is not None:
                    usage = event.token_usage
                if event.finish_reason is not None:
                    finish_reason = event.finish_reason
                if event.content:
                    content.append(event.content)
                    if not self._deliver(event.content):
                        return None

        if self._state is StreamState.CANCELLED:
            return None
        if not terminated and finish_reason is None:
            raise TransportError("stream closed before a terminal frame")
        return Response(content="".join(content), token_usage=usage, finish_reason=finish_reason)

    def _deliver(self, delta: str) -> bool:
        with self._lock:
            if self._state is StreamState.CANCELLED:
                return False
            self._on_event(delta)
            return True

    def _advance(self, state: StreamState) -> bool:
        with self._lock:
            if self._state in _TERMINAL:
                return False
            self._state = state
            return True

    def _complete(self, result: Response) -> None:
        if self._advance(StreamState.COMPLETED):
            self._on_complete(result)

    def _fail(self, error: BaseException) -> None:
        if self._advance(StreamState.FAILED):
            LOGGER.warning("Stream to %s failed: %s", self._path, error)
            self._on_error(error)
        else:
            LOGGER.debug("Ignoring error after stream ended (%s): %s", self._state.value, error)
