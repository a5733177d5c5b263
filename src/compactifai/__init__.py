"""Async Python client for the CompactifAI inference API."""

from compactifai.catalog import DEFAULT_CHAT_MODEL, DEFAULT_TRANSCRIPTION_MODEL, MODELS, model_id
from compactifai.client import BaseClient, CompactifAIClientProtocol, build_chat_request, create_client
from compactifai.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    SECTION_NAME,
    ClientOptions,
    PartialOptions,
    load_options_file,
    resolve_options,
)
from compactifai.errors import (
    ClientError,
    CompactifAIError,
    ConfigurationError,
    DeserializationError,
    FileAccessError,
    RequestTimeoutError,
    TransportError,
)
from compactifai.mock import MockClient
from compactifai.remote import CompactifAIClient
from compactifai.types import (
    ChatChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ChatRole,
    CompletionChoice,
    CompletionRequest,
    CompletionResponse,
    ModelInfo,
    TranscriptionRequest,
    TranscriptionResponse,
    Usage,
)

__all__ = [
    "BaseClient",
    "ChatChoice",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRole",
    "ClientError",
    "ClientOptions",
    "CompactifAIClient",
    "CompactifAIClientProtocol",
    "CompactifAIError",
    "CompletionChoice",
    "CompletionRequest",
    "CompletionResponse",
    "ConfigurationError",
    "DEFAULT_BASE_URL",
    "DEFAULT_CHAT_MODEL",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_TRANSCRIPTION_MODEL",
    "DeserializationError",
    "FileAccessError",
    "MODELS",
    "MockClient",
    "ModelInfo",
    "PartialOptions",
    "RequestTimeoutError",
    "SECTION_NAME",
    "TranscriptionRequest",
    "TranscriptionResponse",
    "TransportError",
    "Usage",
    "build_chat_request",
    "create_client",
    "load_options_file",
    "model_id",
    "resolve_options",
]
