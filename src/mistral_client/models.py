"""Language/embedding model adapters over `MistralClient`.

Each adapter fixes a model name and sampling parameters at construction and
builds a fresh immutable request per call. The FIM suffix is a call
argument, so one adapter can be shared between threads.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from mistral_client.api.client import MistralClient
from mistral_client.api.streaming import OnComplete, OnError, OnEvent, StreamingCall
from mistral_client.common.schema import (
    CodeModelName,
    EmbeddingModelName,
    EmbeddingRequest,
    FimCompletionRequest,
    Response,
)


@dataclass(frozen=True)
class CompletionModel:
    """Blocking fill-in-the-middle completion with fixed sampling parameters."""
    client: MistralClient
    model_name: str = CodeModelName.CODESTRAL_LATEST.value
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    random_seed: int | None = None
    stops: tuple[str, ...] | None = None

    def request(self, prompt: str, suffix: str = "") -> FimCompletionRequest:
        return FimCompletionRequest(
            model=self.model_name,
            prompt=prompt,
            suffix=suffix,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            top_p=self.top_p,
            random_seed=self.random_seed,
            stop=self.stops,
        )

    def generate(self, prompt: str, suffix: str = "") -> Response:
        """
        Generate the code between `prompt` and `suffix`.

        Args:
            prompt: Text/code before the gap. Must not be blank.
            suffix: Optional text/code after the gap.
        """
        return self.client.fim_completion(self.request(prompt, suffix))


@dataclass(frozen=True)
class StreamingCompletionModel:
    """Streaming fill-in-the-middle completion, token by token."""
    client: MistralClient
    model_name: str = CodeModelName.CODESTRAL_LATEST.value
    temperature: float | None = None
    max_tokens: int | None = None
    min_tokens: int | None = 0
    top_p: float | None = None
    random_seed: int | None = None
    stops: tuple[str, ...] | None = None

    def request(self, prompt: str, suffix: str = "") -> FimCompletionRequest:
        return FimCompletionRequest(
            model=self.model_name,
            prompt=prompt,
            suffix=suffix,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            min_tokens=self.min_tokens,
            top_p=self.top_p,
            random_seed=self.random_seed,
            stop=self.stops,
            stream=True,
        )

    def generate(
        self,
        prompt: str,
        on_event: OnEvent,
        on_complete: OnComplete,
        on_error: OnError,
        suffix: str = "",
    ) -> StreamingCall:
        return self.client.stream_fim_completion(
            self.request(prompt, suffix), on_event, on_complete, on_error
        )


@dataclass(frozen=True)
class EmbeddingModel:
    client: MistralClient
    model_name: str = EmbeddingModelName.MISTRAL_EMBED.value

    def embed_all(self, texts: Sequence[str]) -> Response:
        return self.client.embeddings(EmbeddingRequest(model=self.model_name, input=tuple(texts)))

    def embed(self, text: str) -> list[float]:
        content = self.embed_all([text]).content
        return content[0]  # type: ignore[return-value]
