"""Command-line code completion against the Mistral AI FIM endpoint.

Reads the client config from a YAML file when `--config` is given, otherwise
from MISTRAL_AI_* environment variables.
"""
from __future__ import annotations
import argparse
import logging
import sys

from mistral_client.api.client import MistralClient
from mistral_client.common.config import ClientConfig, load_config
from mistral_client.common.errors import MistralClientError
from mistral_client.common.logging_setup import setup_logging
from mistral_client.common.schema import FimCompletionRequest, Response

LOGGER = logging.getLogger("mistral_client.cli")


def _log_usage(resp: Response) -> None:
    usage = resp.token_usage
    reason = resp.finish_reason.value if resp.finish_reason else None
    if usage is None:
        LOGGER.info("finish=%s (no usage reported)", reason)
    else:
        LOGGER.info(
            "finish=%s | in=%s out=%s total=%s",
            reason,
            usage.input_tokens,
            usage.output_tokens,
            usage.total_tokens,
        )


def run(args: argparse.Namespace) -> int:
    config = load_config(args.config) if args.config else ClientConfig.from_env()
    request = FimCompletionRequest(
        model=args.model,
        prompt=args.prompt,
        suffix=args.suffix,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        stop=tuple(args.stop) if args.stop else None,
    )
    with MistralClient(config) as client:
        if not args.stream:
            resp = client.fim_completion(request)
            print(resp.content)
            _log_usage(resp)
            return 0

        failures: list[BaseException] = []

        def on_event(delta: str) -> None:
            print(delta, end="", flush=True)

        def on_complete(resp: Response) -> None:
            print()
            _log_usage(resp)

        client.stream_fim_completion(request, on_event, on_complete, failures.append)
        if failures:
            LOGGER.error("Stream failed: %s", failures[0])
            return 1
        return 0


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    ap = argparse.ArgumentParser(description="Fill-in-the-middle code completion with Mistral AI")
    ap.add_argument("--prompt", required=True, help="Code before the gap")
    ap.add_argument("--suffix", default="", help="Code after the gap")
    ap.add_argument("--model", default=None, help="Model name (defaults to the config's model)")
    ap.add_argument("--temperature", type=float, default=None)
    ap.add_argument("--max-tokens", type=int, default=None)
    ap.add_argument("--stop", action="append", help="Stop sequence; may be repeated")
    ap.add_argument("--stream", action="store_true", help="Print tokens as they arrive")
    ap.add_argument("--config", default=None, help="YAML config path")
    args = ap.parse_args(argv)

    try:
        return run(args)
    except MistralClientError as e:
        LOGGER.error("%s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
