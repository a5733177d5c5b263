"""httpx-backed CompactifAI client."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Mapping, TypeVar

import httpx

from compactifai.client import BaseClient
from compactifai.config import ClientOptions, PartialOptions, resolve_options
from compactifai.errors import (
    ClientError,
    DeserializationError,
    RequestTimeoutError,
    TransportError,
)
from compactifai.types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    TranscriptionRequest,
    TranscriptionResponse,
    parse_model_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHAT_COMPLETIONS_PATH = "/chat/completions"
COMPLETIONS_PATH = "/completions"
TRANSCRIPTIONS_PATH = "/audio/transcriptions"
MODELS_PATH = "/models"


class CompactifAIClient(BaseClient):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        options: ClientOptions | PartialOptions | Mapping[str, Any] | None = None,
        environ: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._options = resolve_options(api_key, base_url, options=options, environ=environ)
        self._client = httpx.AsyncClient(
            base_url=self._options.base_url,
            timeout=float(self._options.timeout_seconds),
            headers={"Authorization": f"Bearer {self._options.api_key}"},
            transport=transport,
        )

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def default_model(self) -> str:
        return self._options.default_model

    async def create_chat_completion(
        self, request: ChatCompletionRequest, *, timeout: float | None = None
    ) -> ChatCompletionResponse:
        return await self._execute(
            "POST",
            CHAT_COMPLETIONS_PATH,
            ChatCompletionResponse.from_dict,
            json=request.to_dict(),
            timeout=timeout,
        )

    async def create_completion(
        self, request: CompletionRequest, *, timeout: float | None = None
    ) -> CompletionResponse:
        return await self._execute(
            "POST",
            COMPLETIONS_PATH,
            CompletionResponse.from_dict,
            json=request.to_dict(),
            timeout=timeout,
        )

    async def create_transcription(
        self, request: TranscriptionRequest, *, timeout: float | None = None
    ) -> TranscriptionResponse:
        data, files = request.to_form()
        return await self._execute(
            "POST",
            TRANSCRIPTIONS_PATH,
            TranscriptionResponse.from_dict,
            data=data,
            files=files,
            timeout=timeout,
        )

    async def list_models(self, *, timeout: float | None = None) -> list[ModelInfo]:
        return await self._execute("GET", MODELS_PATH, parse_model_list, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CompactifAIClient":
        return self

    async def _execute(
        self,
        method: str,
        path: str,
        parse: Callable[[dict[str, Any]], T],
        *,
        json: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes]] | None = None,
        timeout: float | None = None,
    ) -> T:
        deadline = self._options.timeout_seconds if timeout is None else timeout
        start = time.monotonic()
        try:
            # httpx timeouts apply per read/write; the deadline covers the whole exchange.
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    path,
                    json=json,
                    data=data,
                    files=files,
                    timeout=deadline,
                ),
                deadline,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise RequestTimeoutError(f"{method} {path} timed out", cause=exc) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}", cause=exc) from exc
        latency_ms = int((time.monotonic() - start) * 1000)
        logger.debug("%s %s -> %s in %d ms", method, path, response.status_code, latency_ms)

        if response.status_code < 200 or response.status_code >= 300:
            raise ClientError(
                f"CompactifAI API error: {response.status_code} {response.reason_phrase}".rstrip(),
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise DeserializationError(
                f"Response from {path} is not valid JSON",
                status_code=response.status_code,
                response_body=response.text,
                cause=exc,
            ) from exc
        if not isinstance(payload, dict):
            raise DeserializationError(
                f"Response from {path} is not a JSON object",
                status_code=response.status_code,
                response_body=response.text,
            )
        try:
            return parse(payload)
        except DeserializationError as exc:
            exc.status_code = response.status_code
            exc.response_body = response.text
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DeserializationError(
                f"Unexpected response shape from {path}: {exc}",
                status_code=response.status_code,
                response_body=response.text,
                cause=exc,
            ) from exc
