from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from compactifai.env import ENV_SECTION_KEYS
from compactifai.remote import CompactifAIClient


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv first so teardown also removes values written straight to os.environ.
    for name in ENV_SECTION_KEYS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def make_client() -> Callable[..., CompactifAIClient]:
    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> CompactifAIClient:
        kwargs.setdefault("api_key", "test-api-key")
        kwargs.setdefault("environ", {})
        return CompactifAIClient(transport=httpx.MockTransport(handler), **kwargs)

    return factory
