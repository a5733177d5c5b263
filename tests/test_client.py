from __future__ import annotations

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from compactifai.catalog import DEFAULT_TRANSCRIPTION_MODEL
from compactifai.client import CompactifAIClientProtocol, create_client
from compactifai.errors import (
    ClientError,
    ConfigurationError,
    DeserializationError,
    FileAccessError,
    RequestTimeoutError,
    TransportError,
)
from compactifai.mock import MockClient
from compactifai.remote import CompactifAIClient
from compactifai.types import ChatCompletionRequest, ChatMessage, CompletionRequest, ModelInfo
from tests.utils import chat_payload, completion_payload, json_response

ERROR_BODY = '{"error":"Invalid request"}'


def _bad_request(request: httpx.Request) -> httpx.Response:
    return httpx.Response(400, text=ERROR_BODY)


def test_constructor_requires_api_key() -> None:
    with pytest.raises(ConfigurationError):
        CompactifAIClient(environ={})


def test_constructor_with_key_and_base_url() -> None:
    client = CompactifAIClient("test-api-key", "https://custom.api.com/v1", environ={})
    assert client.options.base_url == "https://custom.api.com/v1"
    assert client.options.api_key == "test-api-key"


def test_factory_builds_independent_clients() -> None:
    first = create_client(api_key="test-api-key", environ={})
    second = create_client(options={"ApiKey": "test-api-key", "TimeoutSeconds": 120}, environ={})
    assert isinstance(first, CompactifAIClient)
    assert isinstance(first, CompactifAIClientProtocol)
    assert first is not second
    assert second.options.timeout_seconds == 120
    assert isinstance(create_client("mock"), MockClient)
    with pytest.raises(ValueError):
        create_client("nope")


@pytest.mark.asyncio
async def test_chat_returns_first_choice(make_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(chat_payload("Paris"))

    client = make_client(handler)
    async with client:
        answer = await client.chat("What is the capital of France?")
    assert answer == "Paris"

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://api.compactif.ai/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-api-key"
    body = json.loads(request.content)
    assert body["model"] == client.default_model
    assert body["messages"] == [{"role": "user", "content": "What is the capital of France?"}]
    assert body["stream"] is False


@pytest.mark.asyncio
async def test_chat_sends_system_prompt_and_model(make_client) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return json_response(chat_payload("ok"))

    client = make_client(handler)
    await client.chat("Hello", model="llama-3-1-8b", system_prompt="Be concise.")
    await client.aclose()
    assert bodies[0]["model"] == "llama-3-1-8b"
    assert [message["role"] for message in bodies[0]["messages"]] == ["system", "user"]


@pytest.mark.asyncio
async def test_chat_without_choices_fails(make_client) -> None:
    client = make_client(lambda request: json_response(chat_payload()))
    with pytest.raises(ClientError) as excinfo:
        await client.chat("Anything?")
    assert "No choices" in excinfo.value.message
    await client.aclose()


@pytest.mark.asyncio
async def test_http_error_keeps_status_and_raw_body(make_client) -> None:
    client = make_client(_bad_request)
    request = ChatCompletionRequest(model="m", messages=[ChatMessage.user("hi")])
    operations = [
        lambda: client.create_chat_completion(request),
        lambda: client.create_completion(CompletionRequest(model="m", prompt="p")),
        lambda: client.list_models(),
        lambda: client.chat("hi"),
        lambda: client.complete("p"),
    ]
    for operation in operations:
        with pytest.raises(ClientError) as excinfo:
            await operation()
        assert excinfo.value.status_code == 400
        assert excinfo.value.response_body == ERROR_BODY
        assert not isinstance(excinfo.value, DeserializationError)
    await client.aclose()


@pytest.mark.asyncio
async def test_invalid_json_is_deserialization_error(make_client) -> None:
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(DeserializationError) as excinfo:
        await client.chat("hi")
    assert excinfo.value.status_code == 200
    assert excinfo.value.response_body == "<html>oops</html>"
    await client.aclose()


@pytest.mark.asyncio
async def test_missing_fields_is_deserialization_error(make_client) -> None:
    client = make_client(lambda request: json_response({"object": "chat.completion"}))
    with pytest.raises(DeserializationError):
        await client.create_chat_completion(ChatCompletionRequest(model="m", messages=[]))
    await client.aclose()


@pytest.mark.asyncio
async def test_non_object_json_is_deserialization_error(make_client) -> None:
    client = make_client(lambda request: json_response(["not", "an", "object"]))
    with pytest.raises(DeserializationError):
        await client.list_models()
    await client.aclose()


@pytest.mark.asyncio
async def test_connection_failure_is_transport_error(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    with pytest.raises(TransportError) as excinfo:
        await client.chat("hi")
    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.cause, httpx.ConnectError)
    assert excinfo.value.__cause__ is excinfo.value.cause
    assert not isinstance(excinfo.value, RequestTimeoutError)
    await client.aclose()


@pytest.mark.asyncio
async def test_timeout_is_timeout_error(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(handler)
    with pytest.raises(RequestTimeoutError) as excinfo:
        await client.complete("p", timeout=0.5)
    assert isinstance(excinfo.value, ClientError)
    assert excinfo.value.status_code is None
    await client.aclose()


@pytest.mark.asyncio
async def test_per_call_timeout_reaches_transport(make_client) -> None:
    timeouts: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        timeouts.append(request.extensions["timeout"])
        return json_response({"data": []})

    client = make_client(handler, options={"TimeoutSeconds": 12})
    await client.list_models()
    await client.list_models(timeout=2.5)
    await client.aclose()
    assert timeouts[0]["read"] == 12
    assert timeouts[1]["read"] == 2.5


async def _start_slow_server(body: bytes, delay: float = 0.4):
    """Serve one 200 response whose body is written a byte at a time."""
    handlers: list[asyncio.Task] = []

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        handlers.append(asyncio.current_task())
        try:
            head = await reader.readuntil(b"\r\n\r\n")
            for line in head.decode("latin-1").split("\r\n"):
                name, _, value = line.partition(":")
                if name.lower() == "content-length":
                    await reader.readexactly(int(value))
            writer.write(
                b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: application/json\r\n"
                + f"Content-Length: {len(body)}\r\n".encode()
                + b"Connection: close\r\n\r\n"
            )
            await writer.drain()
            for offset in range(len(body)):
                writer.write(body[offset : offset + 1])
                await writer.drain()
                await asyncio.sleep(delay)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    return server, handlers


async def _stop_slow_server(server: asyncio.AbstractServer, handlers: list[asyncio.Task]) -> None:
    for task in handlers:
        task.cancel()
    await asyncio.gather(*handlers, return_exceptions=True)
    server.close()
    await server.wait_closed()


@pytest.mark.asyncio
async def test_slow_response_hits_client_deadline() -> None:
    server, handlers = await _start_slow_server(json.dumps(chat_payload("Paris")).encode())
    port = server.sockets[0].getsockname()[1]
    client = CompactifAIClient(
        api_key="test-api-key",
        base_url=f"http://127.0.0.1:{port}/v1",
        options={"TimeoutSeconds": 1},
        environ={},
    )
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        with pytest.raises(RequestTimeoutError) as excinfo:
            await client.chat("capital?")
    finally:
        await client.aclose()
        await _stop_slow_server(server, handlers)
    assert loop.time() - start < 2.5
    assert excinfo.value.status_code is None
    assert excinfo.value.cause is not None


@pytest.mark.asyncio
async def test_slow_response_hits_per_call_deadline() -> None:
    server, handlers = await _start_slow_server(json.dumps({"data": []}).encode(), delay=0.2)
    port = server.sockets[0].getsockname()[1]
    client = CompactifAIClient(
        api_key="test-api-key",
        base_url=f"http://127.0.0.1:{port}/v1",
        environ={},
    )
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        with pytest.raises(RequestTimeoutError):
            await client.list_models(timeout=0.5)
    finally:
        await client.aclose()
        await _stop_slow_server(server, handlers)
    assert loop.time() - start < 2.0


@pytest.mark.asyncio
async def test_complete_returns_first_text(make_client) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        assert request.url.path == "/v1/completions"
        return json_response(completion_payload("one", "two"))

    client = make_client(handler)
    assert await client.complete("Write a haiku:", max_tokens=50) == "one"
    await client.aclose()
    assert bodies[0]["max_tokens"] == 50
    assert bodies[0]["prompt"] == "Write a haiku:"


@pytest.mark.asyncio
async def test_complete_without_choices_fails(make_client) -> None:
    client = make_client(lambda request: json_response(completion_payload()))
    with pytest.raises(ClientError):
        await client.complete("p")
    await client.aclose()


@pytest.mark.asyncio
async def test_list_models(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/v1/models"
        return json_response({"object": "list", "data": [{"id": "a", "owned_by": "x"}, {"id": "b"}]})

    client = make_client(handler)
    models = await client.list_models()
    await client.aclose()
    assert [model.id for model in models] == ["a", "b"]
    assert models[0] == ModelInfo(id="a", owned_by="x")


@pytest.mark.asyncio
async def test_list_models_empty_is_valid(make_client) -> None:
    client = make_client(lambda request: json_response({"object": "list", "data": []}))
    assert await client.list_models() == []
    await client.aclose()


@pytest.mark.asyncio
async def test_transcribe_file_posts_multipart(make_client, tmp_path: Path) -> None:
    audio = tmp_path / "clip.mp3"
    audio.write_bytes(b"\x00\x01\x02audio")
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response({"text": "hello world"})

    client = make_client(handler)
    assert await client.transcribe_file(audio, language="en") == "hello world"
    await client.aclose()

    request = seen[0]
    assert request.url.path == "/v1/audio/transcriptions"
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    content = request.content
    assert b'filename="clip.mp3"' in content
    assert b"\x00\x01\x02audio" in content
    assert DEFAULT_TRANSCRIPTION_MODEL.encode() in content
    assert b'name="language"' in content


@pytest.mark.asyncio
async def test_transcribe_missing_file_fails_before_network(make_client, tmp_path: Path) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return json_response({"text": "unreachable"})

    client = make_client(handler)
    with pytest.raises(FileAccessError) as excinfo:
        await client.transcribe_file(tmp_path / "missing.wav")
    await client.aclose()
    assert calls == []
    assert isinstance(excinfo.value.cause, FileNotFoundError)


@pytest.mark.asyncio
async def test_transcription_error_propagates(make_client, tmp_path: Path) -> None:
    audio = tmp_path / "clip.wav"
    audio.write_bytes(b"RIFF")
    client = make_client(lambda request: httpx.Response(413, text="too large"))
    with pytest.raises(ClientError) as excinfo:
        await client.transcribe_file(audio)
    await client.aclose()
    assert excinfo.value.status_code == 413
    assert excinfo.value.response_body == "too large"


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_client(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        prompt = json.loads(request.content)["messages"][-1]["content"]
        return json_response(chat_payload(prompt.upper()))

    client = make_client(handler)
    replies = await asyncio.gather(*(client.chat(f"q{i}") for i in range(5)))
    await client.aclose()
    assert replies == [f"Q{i}" for i in range(5)]
