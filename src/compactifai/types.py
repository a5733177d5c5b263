"""Request/response records for the CompactifAI API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from compactifai.errors import DeserializationError


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.SYSTEM.value, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.USER.value, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=ChatRole.ASSISTANT.value, content=content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatMessage":
        content = data.get("content")
        return cls(role=str(data["role"]), content="" if content is None else str(content))


def _add_optional(body: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        body[key] = value


@dataclass
class ChatCompletionRequest:
    model: str
    messages: list[ChatMessage] = field(default_factory=list)
    temperature: float | None = None
    max_tokens: int | None = None
    stream: bool = False

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
        }
        _add_optional(body, "temperature", self.temperature)
        _add_optional(body, "max_tokens", self.max_tokens)
        body["stream"] = self.stream
        return body

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatCompletionRequest":
        return cls(
            model=data["model"],
            messages=[ChatMessage.from_dict(item) for item in data.get("messages") or []],
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
            stream=bool(data.get("stream", False)),
        )


@dataclass
class CompletionRequest:
    model: str
    prompt: str
    temperature: float | None = None
    max_tokens: int | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "prompt": self.prompt,
        }
        _add_optional(body, "temperature", self.temperature)
        _add_optional(body, "max_tokens", self.max_tokens)
        return body

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletionRequest":
        return cls(
            model=data["model"],
            prompt=data["prompt"],
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
        )


@dataclass
class TranscriptionRequest:
    model: str
    file_content: bytes
    file_name: str
    language: str | None = None

    def to_form(self) -> tuple[dict[str, str], dict[str, tuple[str, bytes]]]:
        """Split the request into multipart form fields and the file part."""
        data = {"model": self.model}
        if self.language:
            data["language"] = self.language
        files = {"file": (self.file_name, self.file_content)}
        return data, files


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Usage":
        return cls(
            prompt_tokens=int(data.get("prompt_tokens") or 0),
            completion_tokens=int(data.get("completion_tokens") or 0),
            total_tokens=int(data.get("total_tokens") or 0),
        )


@dataclass(frozen=True)
class ChatChoice:
    index: int
    message: ChatMessage
    finish_reason: str | None = None


@dataclass(frozen=True)
class CompletionChoice:
    index: int
    text: str
    finish_reason: str | None = None


@dataclass
class ChatCompletionResponse:
    choices: list[ChatChoice]
    usage: Usage | None = None
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChatCompletionResponse":
        choices = []
        for fallback_index, raw in enumerate(_require_list(data, "choices")):
            message = _require_dict(raw, "message")
            try:
                parsed = ChatMessage.from_dict(message)
            except KeyError as exc:
                raise DeserializationError(f"Chat choice message missing field: {exc}") from exc
            choices.append(
                ChatChoice(
                    index=_choice_index(raw, fallback_index),
                    message=parsed,
                    finish_reason=raw.get("finish_reason"),
                )
            )
        return cls(
            choices=choices,
            usage=_parse_usage(data),
            id=data.get("id"),
            object=data.get("object"),
            created=data.get("created"),
            model=data.get("model"),
        )


@dataclass
class CompletionResponse:
    choices: list[CompletionChoice]
    usage: Usage | None = None
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompletionResponse":
        choices = []
        for fallback_index, raw in enumerate(_require_list(data, "choices")):
            if not isinstance(raw, dict) or "text" not in raw:
                raise DeserializationError("Completion choice missing 'text'.")
            text = raw.get("text")
            choices.append(
                CompletionChoice(
                    index=_choice_index(raw, fallback_index),
                    text="" if text is None else str(text),
                    finish_reason=raw.get("finish_reason"),
                )
            )
        return cls(
            choices=choices,
            usage=_parse_usage(data),
            id=data.get("id"),
            object=data.get("object"),
            created=data.get("created"),
            model=data.get("model"),
        )


@dataclass(frozen=True)
class TranscriptionResponse:
    text: str
    language: str | None = None
    duration: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptionResponse":
        text = data.get("text")
        if not isinstance(text, str):
            raise DeserializationError("Transcription response missing 'text'.")
        return cls(text=text, language=data.get("language"), duration=data.get("duration"))


@dataclass(frozen=True)
class ModelInfo:
    id: str
    object: str | None = None
    created: int | None = None
    owned_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelInfo":
        model_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(model_id, str):
            raise DeserializationError("Model entry missing 'id'.")
        return cls(
            id=model_id,
            object=data.get("object"),
            created=data.get("created"),
            owned_by=data.get("owned_by"),
        )


def parse_model_list(data: dict[str, Any]) -> list[ModelInfo]:
    return [ModelInfo.from_dict(item) for item in _require_list(data, "data")]


def _require_list(data: Any, key: str) -> list[Any]:
    value = data.get(key) if isinstance(data, dict) else None
    if not isinstance(value, list):
        raise DeserializationError(f"Response missing required list '{key}'.")
    return value


def _require_dict(data: Any, key: str) -> dict[str, Any]:
    value = data.get(key) if isinstance(data, dict) else None
    if not isinstance(value, dict):
        raise DeserializationError(f"Response missing required object '{key}'.")
    return value


def _parse_usage(data: dict[str, Any]) -> Usage | None:
    raw = data.get("usage")
    if not isinstance(raw, dict):
        return None
    return Usage.from_dict(raw)


def _choice_index(raw: dict[str, Any], fallback: int) -> int:
    index = raw.get("index")
    if isinstance(index, int):
        return index
    return fallback
