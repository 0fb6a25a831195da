"""FastAPI proxy exposing FIM completion over a `MistralClient`.

Endpoints:
- GET /health
- POST /complete  { "prompt": "...", "suffix": "..." }
"""
from __future__ import annotations
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from mistral_client.api.client import MistralClient
from mistral_client.common.config import ClientConfig
from mistral_client.common.errors import MistralClientError, ProviderError, ValidationError
from mistral_client.common.logging_setup import setup_logging
from mistral_client.common.schema import CodeModelName, FimCompletionRequest

LOGGER = logging.getLogger("mistral_client.serve.app")

MODEL_ID = os.getenv("MISTRAL_AI_MODEL", CodeModelName.CODESTRAL_LATEST.value)
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.2"))
MAX_TOKENS = int(os.getenv("MAX_TOKENS", "256"))

_client: MistralClient | None = None


class CompleteIn(BaseModel):
    prompt: str
    suffix: str = ""
    stop: list[str] | None = None


class CompleteOut(BaseModel):
    text: str
    finish_reason: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


def get_client() -> MistralClient:
    """Client shared by all requests, created on first use from MISTRAL_AI_* env vars."""
    global _client
    if _client is None:
        try:
            _client = MistralClient(ClientConfig.from_env(model_name=MODEL_ID))
        except ValidationError as e:
            LOGGER.error("Cannot build Mistral client: %s", e)
            raise HTTPException(status_code=503, detail="Mistral client not configured")
    return _client


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    if not os.getenv("MISTRAL_AI_API_KEY", "").strip():
        LOGGER.warning("MISTRAL_AI_API_KEY is not set; /complete will return 503")
    yield
    global _client
    if _client is not None:
        _client.close()
        _client = None


app = FastAPI(lifespan=lifespan)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "model": MODEL_ID}


@app.post("/complete", response_model=CompleteOut)
def complete(body: CompleteIn, client: MistralClient = Depends(get_client)) -> CompleteOut:
    try:
        request = FimCompletionRequest(
            model=MODEL_ID,
            prompt=body.prompt,
            suffix=body.suffix,
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
            stop=tuple(body.stop) if body.stop else None,
        )
        resp = client.fim_completion(request)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ProviderError as e:
        LOGGER.error("Mistral returned HTTP %s after %s attempt(s)", e.status_code, e.attempts)
        raise HTTPException(status_code=502, detail="Upstream Mistral error")
    except MistralClientError as e:
        LOGGER.error("Mistral request failed: %s", e)
        raise HTTPException(status_code=502, detail="Upstream Mistral error")

    usage = resp.token_usage
    return CompleteOut(
        text=str(resp.content),
        finish_reason=resp.finish_reason.value if resp.finish_reason else None,
        prompt_tokens=usage.input_tokens if usage else None,
        completion_tokens=usage.output_tokens if usage else None,
        total_tokens=usage.total_tokens if usage else None,
    )
