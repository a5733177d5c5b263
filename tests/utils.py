from __future__ import annotations

import json
from typing import Any

import httpx


def chat_payload(*contents: str, usage: dict[str, int] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "cai-llama-3-1-8b-slim",
        "choices": [
            {"index": index, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
            for index, content in enumerate(contents)
        ],
    }
    if usage is not None:
        payload["usage"] = usage
    return payload


def completion_payload(*texts: str) -> dict[str, Any]:
    return {
        "id": "cmpl-1",
        "object": "text_completion",
        "model": "cai-llama-3-1-8b-slim",
        "choices": [{"index": index, "text": text, "finish_reason": "length"} for index, text in enumerate(texts)],
    }


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload).encode("utf-8"))
