"""Client interface, convenience helpers, and the client factory."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from compactifai.catalog import DEFAULT_TRANSCRIPTION_MODEL
from compactifai.errors import ClientError, FileAccessError
from compactifai.types import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    TranscriptionRequest,
    TranscriptionResponse,
)


@runtime_checkable
class CompactifAIClientProtocol(Protocol):
    async def create_chat_completion(
        self, request: ChatCompletionRequest, *, timeout: float | None = None
    ) -> ChatCompletionResponse:
        """Execute a chat completion request."""

    async def create_completion(
        self, request: CompletionRequest, *, timeout: float | None = None
    ) -> CompletionResponse:
        """Execute a text completion request."""

    async def create_transcription(
        self, request: TranscriptionRequest, *, timeout: float | None = None
    ) -> TranscriptionResponse:
        """Transcribe an audio payload."""

    async def list_models(self, *, timeout: float | None = None) -> list[ModelInfo]:
        """Return the models available to this API key."""

    async def chat(
        self,
        message: str,
        model: str | None = None,
        system_prompt: str | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        """Single-turn chat returning the reply text."""

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        """Single prompt completion returning the generated text."""

    async def transcribe_file(
        self,
        file_path: str | Path,
        language: str | None = None,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> str:
        """Transcribe a local audio file."""

    async def aclose(self) -> None:
        """Release any underlying client resources."""


class BaseClient:
    """Convenience helpers shared by every client implementation.

    Subclasses provide the four API operations and ``default_model``; the
    helpers only compose them and let every error propagate unchanged.
    """

    default_model: str

    async def create_chat_completion(
        self, request: ChatCompletionRequest, *, timeout: float | None = None
    ) -> ChatCompletionResponse:
        raise NotImplementedError

    async def create_completion(
        self, request: CompletionRequest, *, timeout: float | None = None
    ) -> CompletionResponse:
        raise NotImplementedError

    async def create_transcription(
        self, request: TranscriptionRequest, *, timeout: float | None = None
    ) -> TranscriptionResponse:
        raise NotImplementedError

    async def list_models(self, *, timeout: float | None = None) -> list[ModelInfo]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

    async def chat(
        self,
        message: str,
        model: str | None = None,
        system_prompt: str | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        request = build_chat_request(message, model or self.default_model, system_prompt)
        response = await self.create_chat_completion(request, timeout=timeout)
        if not response.choices:
            raise ClientError("No choices returned in chat completion response.")
        return response.choices[0].message.content

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        max_tokens: int | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        request = CompletionRequest(model=model or self.default_model, prompt=prompt, max_tokens=max_tokens)
        response = await self.create_completion(request, timeout=timeout)
        if not response.choices:
            raise ClientError("No choices returned in completion response.")
        return response.choices[0].text

    async def transcribe_file(
        self,
        file_path: str | Path,
        language: str | None = None,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> str:
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise FileAccessError(f"Cannot read audio file: {path}", path=str(path), cause=exc) from exc
        request = TranscriptionRequest(
            model=model or DEFAULT_TRANSCRIPTION_MODEL,
            file_content=content,
            file_name=path.name,
            language=language,
        )
        response = await self.create_transcription(request, timeout=timeout)
        return response.text

    async def __aenter__(self) -> "BaseClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def build_chat_request(
    message: str,
    model: str,
    system_prompt: str | None = None,
) -> ChatCompletionRequest:
    messages: list[ChatMessage] = []
    if system_prompt:
        messages.append(ChatMessage.system(system_prompt))
    messages.append(ChatMessage.user(message))
    return ChatCompletionRequest(model=model, messages=messages)


def create_client(mode: str = "remote", **kwargs: Any) -> CompactifAIClientProtocol:
    """Build a new, independent client.

    ``mode="remote"`` accepts the ``CompactifAIClient`` constructor arguments
    (``api_key``, ``base_url``, ``options``, ``environ``, ``transport``);
    ``mode="mock"`` accepts the ``MockClient`` arguments.
    """
    if mode == "mock":
        from compactifai.mock import MockClient

        return MockClient(**kwargs)
    if mode == "remote":
        from compactifai.remote import CompactifAIClient

        return CompactifAIClient(**kwargs)
    raise ValueError(f"Unsupported client mode: {mode}")
