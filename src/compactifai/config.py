"""Client configuration and its resolution rules.

Values are resolved per field with the precedence

    explicit argument > options object / settings section > environment > default

The API key has no built-in default; failing to find one anywhere raises
``ConfigurationError``.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from compactifai.catalog import DEFAULT_CHAT_MODEL
from compactifai.env import read_env_section
from compactifai.errors import ConfigurationError

SECTION_NAME = "CompactifAI"
DEFAULT_BASE_URL = "https://api.compactif.ai/v1"
DEFAULT_TIMEOUT_SECONDS = 30

SECTION_KEYS = ("ApiKey", "BaseUrl", "DefaultModel", "TimeoutSeconds")


@dataclass(frozen=True)
class PartialOptions:
    """Options object where every field is optional; unset fields fall through."""

    api_key: str | None = None
    base_url: str | None = None
    default_model: str | None = None
    timeout_seconds: int | None = None

    def to_section(self) -> dict[str, Any]:
        section: dict[str, Any] = {}
        if self.api_key:
            section["ApiKey"] = self.api_key
        if self.base_url:
            section["BaseUrl"] = self.base_url
        if self.default_model:
            section["DefaultModel"] = self.default_model
        if self.timeout_seconds is not None:
            section["TimeoutSeconds"] = self.timeout_seconds
        return section


@dataclass(frozen=True)
class ClientOptions:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    default_model: str = DEFAULT_CHAT_MODEL
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigurationError("An API key is required.")
        _validate_timeout(self.timeout_seconds)

    def to_section(self) -> dict[str, Any]:
        return {
            "ApiKey": self.api_key,
            "BaseUrl": self.base_url,
            "DefaultModel": self.default_model,
            "TimeoutSeconds": self.timeout_seconds,
        }

    def masked_api_key(self) -> str:
        return f"{self.api_key[:8]}..."

    def __repr__(self) -> str:
        return (
            f"ClientOptions(api_key='{self.masked_api_key()}', base_url='{self.base_url}', "
            f"default_model='{self.default_model}', timeout_seconds={self.timeout_seconds})"
        )


def resolve_options(
    api_key: str | None = None,
    base_url: str | None = None,
    *,
    options: ClientOptions | PartialOptions | Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ClientOptions:
    explicit: dict[str, Any] = {}
    if api_key:
        explicit["ApiKey"] = api_key
    if base_url:
        explicit["BaseUrl"] = base_url

    layers = [explicit, _options_section(options), read_env_section(environ)]

    def pick(key: str) -> Any:
        for layer in layers:
            value = layer.get(key)
            if value is not None and value != "":
                return value
        return None

    resolved_key = pick("ApiKey")
    if not resolved_key:
        raise ConfigurationError(
            "No API key configured. Pass api_key, set ApiKey in the "
            f"{SECTION_NAME} options, or set COMPACTIFAI_API_KEY."
        )
    timeout = pick("TimeoutSeconds")
    return ClientOptions(
        api_key=str(resolved_key),
        base_url=str(pick("BaseUrl") or DEFAULT_BASE_URL),
        default_model=str(pick("DefaultModel") or DEFAULT_CHAT_MODEL),
        timeout_seconds=DEFAULT_TIMEOUT_SECONDS if timeout is None else _coerce_timeout(timeout),
    )


def load_options_file(path: Path) -> dict[str, Any]:
    """Read a JSON settings file and return its CompactifAI section."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Settings file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Invalid settings file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object.")
    section = raw.get(SECTION_NAME, raw)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{SECTION_NAME}' in {path} must be an object.")
    return {key: section[key] for key in SECTION_KEYS if key in section}


def _options_section(options: ClientOptions | PartialOptions | Mapping[str, Any] | None) -> dict[str, Any]:
    if options is None:
        return {}
    if isinstance(options, (ClientOptions, PartialOptions)):
        return options.to_section()
    return {key: options[key] for key in SECTION_KEYS if key in options}


def _coerce_timeout(value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ConfigurationError(f"TimeoutSeconds must be an integer, got {value!r}.")
    try:
        timeout = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"TimeoutSeconds must be an integer, got {value!r}.") from exc
    _validate_timeout(timeout)
    return timeout


def _validate_timeout(timeout: int) -> None:
    if timeout <= 0:
        raise ConfigurationError(f"TimeoutSeconds must be greater than 0, got {timeout}.")
