"""Mock client for offline runs of the CLI and benchmarks."""

from __future__ import annotations

import asyncio
import hashlib
import time
from typing import Iterable

from compactifai.catalog import DEFAULT_CHAT_MODEL, load_model_catalog
from compactifai.client import BaseClient
from compactifai.types import (
    ChatChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    CompletionChoice,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    TranscriptionRequest,
    TranscriptionResponse,
    Usage,
)


class MockClient(BaseClient):
    def __init__(
        self,
        *,
        default_model: str = DEFAULT_CHAT_MODEL,
        latency_ms: int = 15,
        jitter_ms: int = 10,
    ) -> None:
        self.default_model = default_model
        self._latency_ms = latency_ms
        self._jitter_ms = jitter_ms

    async def create_chat_completion(
        self, request: ChatCompletionRequest, *, timeout: float | None = None
    ) -> ChatCompletionResponse:
        parts = [request.model] + [f"{m.role}:{m.content}" for m in request.messages]
        seed = _stable_seed(parts)
        await asyncio.sleep(self._delay_s(seed))
        text = _mock_text(seed, request.model)
        prompt_text = " ".join(message.content for message in request.messages)
        return ChatCompletionResponse(
            choices=[ChatChoice(index=0, message=ChatMessage.assistant(text), finish_reason="stop")],
            usage=_mock_usage(prompt_text, text),
            id=f"mock-{seed.hex()[:12]}",
            object="chat.completion",
            created=int(time.time()),
            model=request.model,
        )

    async def create_completion(
        self, request: CompletionRequest, *, timeout: float | None = None
    ) -> CompletionResponse:
        seed = _stable_seed([request.model, request.prompt])
        await asyncio.sleep(self._delay_s(seed))
        text = _mock_text(seed, request.model)
        return CompletionResponse(
            choices=[CompletionChoice(index=0, text=text, finish_reason="stop")],
            usage=_mock_usage(request.prompt, text),
            id=f"mock-{seed.hex()[:12]}",
            object="text_completion",
            created=int(time.time()),
            model=request.model,
        )

    async def create_transcription(
        self, request: TranscriptionRequest, *, timeout: float | None = None
    ) -> TranscriptionResponse:
        seed = hashlib.sha256(request.file_content).digest()
        await asyncio.sleep(self._delay_s(seed))
        return TranscriptionResponse(
            text=f"mock transcription of {request.file_name} ({len(request.file_content)} bytes).",
            language=request.language,
        )

    async def list_models(self, *, timeout: float | None = None) -> list[ModelInfo]:
        return [ModelInfo(id=item.id, object="model", owned_by="compactifai") for item in load_model_catalog()]

    def _delay_s(self, seed: bytes) -> float:
        jitter = seed[1] % max(1, self._jitter_ms + 1)
        return (self._latency_ms + jitter) / 1000.0


def _stable_seed(parts: Iterable[str]) -> bytes:
    hasher = hashlib.sha256()
    for part in parts:
        hasher.update(part.encode("utf-8"))
    return hasher.digest()


def _mock_text(seed: bytes, model: str) -> str:
    return f"Mock reply {seed.hex()[:8]} from {model}."


def _mock_usage(prompt_text: str, text: str) -> Usage:
    prompt_tokens = max(1, len(prompt_text) // 4)
    completion_tokens = max(1, len(text) // 4)
    return Usage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
    )
