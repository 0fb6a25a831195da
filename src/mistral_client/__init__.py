"""
Mistral AI client package.

Provides:
- A retrying HTTP client for chat, fill-in-the-middle, embeddings and model listing
- Server-sent-event streaming with exactly-once completion/error callbacks
- Completion/embedding model adapters, a CLI and a FastAPI proxy
"""
from mistral_client.api.client import MistralClient
from mistral_client.api.streaming import StreamingCall, StreamState
from mistral_client.common.config import ClientConfig, load_config
from mistral_client.common.errors import (
    DecodeError,
    MistralClientError,
    ProviderError,
    RemoteCallError,
    TransportError,
    ValidationError,
)
from mistral_client.common.schema import (
    ChatCompletionRequest,
    ChatMessage,
    ChatModelName,
    CodeModelName,
    EmbeddingModelName,
    EmbeddingRequest,
    FimCompletionRequest,
    FinishReason,
    Response,
    StreamEvent,
    TokenUsage,
)

__all__ = [
    "ChatCompletionRequest",
    "ChatMessage",
    "ChatModelName",
    "ClientConfig",
    "CodeModelName",
    "DecodeError",
    "EmbeddingModelName",
    "EmbeddingRequest",
    "FimCompletionRequest",
    "FinishReason",
    "MistralClient",
    "MistralClientError",
    "ProviderError",
    "RemoteCallError",
    "Response",
    "StreamEvent",
    "StreamState",
    "StreamingCall",
    "TokenUsage",
    "TransportError",
    "ValidationError",
    "load_config",
]
