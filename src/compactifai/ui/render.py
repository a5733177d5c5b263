"""Render helpers for the compactifai CLI."""

from __future__ import annotations

from typing import Mapping, Sequence

from rich import box
from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from compactifai.bench import ScenarioResult
from compactifai.catalog import CatalogItem
from compactifai.types import ModelInfo
from compactifai.ui.console import get_console, get_err_console


def render_banner(title: str, subtitle: str) -> None:
    console = get_console()
    panel = Panel(
        Group(Text(subtitle, style="subtitle")),
        title=Text(title, style="step"),
        title_align="left",
        box=box.ROUNDED,
        border_style="border",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)
    console.print()


def render_step_header(step_idx: int, step_total: int, title: str) -> None:
    console = get_console()
    console.print(Text(f"{step_idx}/{step_total} · {title}", style="step"))


def render_info(text: str) -> None:
    console = get_console()
    console.print(text, style="info", markup=False)


def render_reply(label: str, text: str) -> None:
    console = get_console()
    line = Text()
    line.append(f"{label}: ", style="label")
    line.append(text, style="value")
    console.print(line)


def render_success(text: str) -> None:
    console = get_console()
    console.print(text, style="success", markup=False)


def render_error(text: str, *, details: Mapping[str, str] | None = None) -> None:
    console = get_err_console()
    lines = [Text(text, style="error")]
    for key, value in (details or {}).items():
        line = Text()
        line.append(f"{key}: ", style="label")
        line.append(value, style="value")
        lines.append(line)
    panel = Panel(
        Group(*lines),
        box=box.ROUNDED,
        border_style="error",
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_summary_table(rows: Mapping[str, str] | Sequence[tuple[str, str]], title: str = "Summary") -> None:
    console = get_console()
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="label", no_wrap=True, justify="right")
    table.add_column(style="value")

    items = rows.items() if hasattr(rows, "items") else rows
    for key, value in items:
        table.add_row(Text(str(key), style="label"), Text(str(value), style="value"))

    panel = Panel(
        table,
        title=Text(title, style="step"),
        title_align="left",
        border_style="border",
        box=box.ROUNDED,
        padding=(0, 2),
        expand=True,
    )
    console.print(panel)


def render_model_list(models: Sequence[ModelInfo], *, total: int) -> None:
    console = get_console()
    table = Table(box=box.SIMPLE_HEAD, title=f"{total} models available", title_justify="left")
    table.add_column("Model", style="model")
    table.add_column("Owner", style="label")
    for model in models:
        table.add_row(model.id, model.owned_by or "")
    console.print(table)


def render_catalog(items: Sequence[CatalogItem]) -> None:
    console = get_console()
    table = Table(box=box.SIMPLE_HEAD, title="Built-in model catalog", title_justify="left")
    table.add_column("Name", style="label")
    table.add_column("Wire id", style="model")
    table.add_column("Description", style="value")
    table.add_column("Default", style="accent")
    for item in items:
        table.add_row(item.name, item.id, item.description, item.default_for or "")
    console.print(table)


def render_benchmark_table(results: Sequence[ScenarioResult]) -> None:
    console = get_console()
    table = Table(box=box.SIMPLE_HEAD, title="Benchmark results (fastest first)", title_justify="left")
    table.add_column("Rank", justify="right", style="label")
    table.add_column("Scenario", style="value")
    table.add_column("Runs", justify="right", style="label")
    table.add_column("Mean ms", justify="right", style="accent")
    table.add_column("Min ms", justify="right")
    table.add_column("Max ms", justify="right")
    ranked = sorted(results, key=lambda result: result.mean_ms)
    for rank, result in enumerate(ranked, start=1):
        table.add_row(
            str(rank),
            result.name,
            str(result.iterations),
            f"{result.mean_ms:.1f}",
            f"{result.min_ms:.1f}",
            f"{result.max_ms:.1f}",
        )
    console.print(table)
