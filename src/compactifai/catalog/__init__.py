"""Built-in catalog of CompactifAI model identifiers."""

from __future__ import annotations

from dataclasses import dataclass
import json
from importlib import resources
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class CatalogItem:
    name: str
    id: str
    description: str
    slim: bool
    default_for: str | None


def load_model_catalog() -> list[CatalogItem]:
    data = resources.files(__name__).joinpath("models.json").read_text(encoding="utf-8")
    return _validate_catalog(json.loads(data))


def _validate_catalog(data: Any) -> list[CatalogItem]:
    if not isinstance(data, list):
        raise ValueError("Catalog must be a list of items.")
    items: list[CatalogItem] = []
    for idx, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise ValueError(f"Catalog item {idx} must be an object.")
        name = raw.get("name")
        model_id = raw.get("id")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Catalog item {idx} missing 'name'.")
        if not isinstance(model_id, str) or not model_id.strip():
            raise ValueError(f"Catalog item {idx} missing 'id'.")
        description = raw.get("description")
        if not isinstance(description, str):
            description = ""
        default_for = raw.get("default")
        items.append(
            CatalogItem(
                name=name.strip(),
                id=model_id.strip(),
                description=description.strip(),
                slim=bool(raw.get("slim", False)),
                default_for=default_for if isinstance(default_for, str) else None,
            )
        )
    if not items:
        raise ValueError("Catalog is empty.")
    return items


def _default_for(items: list[CatalogItem], purpose: str) -> str:
    for item in items:
        if item.default_for == purpose:
            return item.id
    raise ValueError(f"Catalog has no default {purpose} model.")


_ITEMS = load_model_catalog()

MODELS: Mapping[str, str] = MappingProxyType({item.name: item.id for item in _ITEMS})
DEFAULT_CHAT_MODEL = _default_for(_ITEMS, "chat")
DEFAULT_TRANSCRIPTION_MODEL = _default_for(_ITEMS, "transcription")


def model_id(name: str) -> str:
    """Resolve a logical model name to its wire identifier.

    Wire identifiers already present in the catalog are returned unchanged.
    """
    if name in MODELS:
        return MODELS[name]
    if name in MODELS.values():
        return name
    raise KeyError(f"Unknown model: {name}")
