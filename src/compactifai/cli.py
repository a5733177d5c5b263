"""CLI entrypoint for compactifai."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, NoReturn, TypeVar

from rich.logging import RichHandler
import typer

from compactifai.bench import ScenarioResult, run_benchmarks
from compactifai.catalog import DEFAULT_CHAT_MODEL, load_model_catalog, model_id
from compactifai.client import CompactifAIClientProtocol, create_client
from compactifai.config import load_options_file, resolve_options
from compactifai.env import load_dotenv
from compactifai.errors import ClientError, CompactifAIError, FileAccessError
from compactifai.types import ChatCompletionRequest, ChatMessage, CompletionRequest
from compactifai.ui.console import get_err_console
from compactifai.ui.progress import status_spinner
from compactifai.ui.render import (
    render_banner,
    render_benchmark_table,
    render_catalog,
    render_error,
    render_info,
    render_model_list,
    render_reply,
    render_step_header,
    render_success,
    render_summary_table,
)

T = TypeVar("T")

app = typer.Typer(add_completion=False, help="Command-line client for the CompactifAI API.")
config_app = typer.Typer(add_completion=False, help="Inspect the resolved client configuration.")
app.add_typer(config_app, name="config")


@dataclass(frozen=True)
class CliState:
    settings: dict[str, Any] | None
    mock: bool


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", "-c", help="JSON settings file with a CompactifAI section."),
    mock: bool = typer.Option(False, "--mock", help="Use the offline mock client."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP exchanges."),
) -> None:
    """CompactifAI API client."""
    load_dotenv()
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=get_err_console(), show_path=False)],
        )
    settings = None
    if config is not None:
        try:
            settings = load_options_file(config)
        except CompactifAIError as exc:
            _fail(exc)
    ctx.obj = CliState(settings=settings, mock=mock)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command("models")
def models(
    ctx: typer.Context,
    limit: int = typer.Option(0, "--limit", "-n", help="Show at most N models (0 = all)."),
    catalog: bool = typer.Option(False, "--catalog", help="Show the built-in catalog instead of calling the API."),
) -> None:
    """List available models."""
    if catalog:
        render_catalog(load_model_catalog())
        return
    found = _run(ctx, "Listing models...", lambda client: client.list_models())
    shown = found[:limit] if limit > 0 else found
    render_model_list(shown, total=len(found))


@app.command("chat")
def chat(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="User message."),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name or wire id."),
    system: str | None = typer.Option(None, "--system", "-s", help="Optional system prompt."),
) -> None:
    """Send a single-turn chat message."""
    reply = _run(
        ctx,
        "Waiting for reply...",
        lambda client: client.chat(message, model=_resolve_model(model), system_prompt=system),
    )
    render_reply("Assistant", reply)


@app.command("complete")
def complete(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to complete."),
    model: str | None = typer.Option(None, "--model", "-m", help="Model name or wire id."),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum tokens to generate."),
) -> None:
    """Complete a single prompt."""
    text = _run(
        ctx,
        "Completing...",
        lambda client: client.complete(prompt, model=_resolve_model(model), max_tokens=max_tokens),
    )
    render_reply("Completion", text)


@app.command("transcribe")
def transcribe(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Audio file to transcribe."),
    language: str | None = typer.Option(None, "--language", "-l", help="ISO language hint, e.g. 'en'."),
    model: str | None = typer.Option(None, "--model", "-m", help="Transcription model."),
) -> None:
    """Transcribe an audio file."""
    text = _run(
        ctx,
        f"Transcribing {file.name}...",
        lambda client: client.transcribe_file(file, language=language, model=_resolve_model(model)),
    )
    render_reply("Transcription", text)


@app.command("examples")
def examples(
    ctx: typer.Context,
    model: str = typer.Option(DEFAULT_CHAT_MODEL, "--model", "-m", help="Model used for the examples."),
    audio: Path | None = typer.Option(None, "--audio", help="Also transcribe this audio file."),
) -> None:
    """Walk through the main client operations."""
    render_banner("compactifai", "Client usage examples")
    model = _resolve_model(model) or DEFAULT_CHAT_MODEL
    total = 6 if audio is not None else 5

    async def tour(client: CompactifAIClientProtocol) -> None:
        render_step_header(1, total, "List available models")
        found = await client.list_models()
        render_model_list(found[:5], total=len(found))

        render_step_header(2, total, "Simple chat (helper)")
        reply = await client.chat(
            "What is the capital of France?",
            model=model,
            system_prompt="You are a helpful assistant. Be concise.",
        )
        render_reply("Assistant", reply)

        render_step_header(3, total, "Chat completion (full control)")
        response = await client.create_chat_completion(
            ChatCompletionRequest(
                model=model,
                messages=[
                    ChatMessage.system("You are a helpful assistant."),
                    ChatMessage.user("Explain what Python is in one sentence."),
                ],
                max_tokens=100,
                temperature=0.7,
            )
        )
        if response.choices:
            render_reply("Assistant", response.choices[0].message.content)
            if response.usage is not None:
                render_info(f"Tokens used: {response.usage.total_tokens}")

        render_step_header(4, total, "Text completion (helper)")
        text = await client.complete(
            "The benefits of using Python for data pipelines are:",
            model=model,
            max_tokens=100,
        )
        render_reply("Completion", text)

        render_step_header(5, total, "Text completion (full control)")
        completion = await client.create_completion(
            CompletionRequest(
                model=model,
                prompt="Write a haiku about programming:",
                max_tokens=50,
                temperature=0.8,
            )
        )
        if completion.choices:
            render_reply("Result", completion.choices[0].text)

        if audio is not None:
            render_step_header(6, total, "Audio transcription")
            transcript = await client.transcribe_file(audio, language="en")
            render_reply("Transcription", transcript)

    _run(ctx, None, tour)
    render_success("All examples completed successfully.")


@app.command("bench")
def bench(
    ctx: typer.Context,
    iterations: int = typer.Option(5, "--iterations", "-i", min=1, help="Runs per scenario."),
    model: str = typer.Option(DEFAULT_CHAT_MODEL, "--model", "-m", help="Model to benchmark."),
) -> None:
    """Measure client latency for common call patterns."""
    render_banner("compactifai", "Client latency benchmark")
    resolved_model = _resolve_model(model) or DEFAULT_CHAT_MODEL

    def report(result: ScenarioResult) -> None:
        render_info(f"{result.name}: {result.mean_ms:.1f} ms mean over {result.iterations} runs")

    results = _run(
        ctx,
        None,
        lambda client: run_benchmarks(client, resolved_model, iterations=iterations, on_result=report),
    )
    render_benchmark_table(results)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the resolved configuration with the API key masked."""
    state: CliState = ctx.obj
    try:
        options = resolve_options(options=state.settings)
    except CompactifAIError as exc:
        _fail(exc)
    render_summary_table(
        {
            "API key": options.masked_api_key(),
            "Base URL": options.base_url,
            "Default model": options.default_model,
            "Timeout (s)": str(options.timeout_seconds),
        },
        title="Resolved configuration",
    )


def _resolve_model(name: str | None) -> str | None:
    if name is None:
        return None
    try:
        return model_id(name)
    except KeyError:
        return name


def _build_client(state: CliState) -> CompactifAIClientProtocol:
    if state.mock:
        default_model = (state.settings or {}).get("DefaultModel") or DEFAULT_CHAT_MODEL
        return create_client("mock", default_model=default_model)
    return create_client("remote", options=state.settings)


def _run(
    ctx: typer.Context,
    status: str | None,
    action: Callable[[CompactifAIClientProtocol], Awaitable[T]],
) -> T:
    state: CliState = ctx.obj

    async def runner() -> T:
        client = _build_client(state)
        try:
            if status is None:
                return await action(client)
            with status_spinner(status):
                return await action(client)
        finally:
            await client.aclose()

    try:
        return asyncio.run(runner())
    except CompactifAIError as exc:
        _fail(exc)


def _fail(exc: CompactifAIError) -> NoReturn:
    details: dict[str, str] = {}
    if isinstance(exc, ClientError):
        if exc.status_code is not None:
            details["Status code"] = str(exc.status_code)
        if exc.response_body:
            details["Response"] = exc.response_body
        if exc.cause is not None:
            details["Cause"] = f"{type(exc.cause).__name__}: {exc.cause}"
    elif isinstance(exc, FileAccessError) and exc.cause is not None:
        details["Cause"] = str(exc.cause)
    render_error(f"{type(exc).__name__}: {exc}", details=details)
    raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
