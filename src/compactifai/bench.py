"""Latency benchmarks for common client call patterns."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import statistics
import time
from typing import Awaitable, Callable

from compactifai.client import CompactifAIClientProtocol
from compactifai.types import ChatCompletionRequest, ChatMessage

SIMPLE_PROMPT = "What is 2 + 2? Reply with just the number."
SYSTEM_PROMPT = "You are a helpful assistant. Be extremely concise."
LONGER_PROMPT = """Analyze the following code snippet and provide a brief summary:

class Calculator:
    def add(self, a, b):
        return a + b

    def subtract(self, a, b):
        return a - b

    def multiply(self, a, b):
        return a * b

    def divide(self, a, b):
        if b == 0:
            raise ZeroDivisionError("b must be non-zero")
        return a / b

Reply in one sentence."""


@dataclass(frozen=True)
class Scenario:
    name: str
    run: Callable[[CompactifAIClientProtocol, str], Awaitable[object]]


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    iterations: int
    mean_ms: float
    min_ms: float
    max_ms: float


async def _first_content(client: CompactifAIClientProtocol, request: ChatCompletionRequest) -> str | None:
    response = await client.create_chat_completion(request)
    if not response.choices:
        return None
    return response.choices[0].message.content


async def simple_chat(client: CompactifAIClientProtocol, model: str) -> str | None:
    request = ChatCompletionRequest(
        model=model,
        messages=[ChatMessage.system(SYSTEM_PROMPT), ChatMessage.user(SIMPLE_PROMPT)],
        max_tokens=10,
        temperature=0.0,
    )
    return await _first_content(client, request)


async def larger_payload(client: CompactifAIClientProtocol, model: str) -> str | None:
    request = ChatCompletionRequest(
        model=model,
        messages=[
            ChatMessage.system("You are a code reviewer. Be concise."),
            ChatMessage.user(LONGER_PROMPT),
        ],
        max_tokens=50,
        temperature=0.0,
    )
    return await _first_content(client, request)


async def multi_turn(client: CompactifAIClientProtocol, model: str) -> str | None:
    request = ChatCompletionRequest(
        model=model,
        messages=[
            ChatMessage.system(SYSTEM_PROMPT),
            ChatMessage.user("What is 1+1?"),
            ChatMessage.assistant("2"),
            ChatMessage.user("What is 2+2?"),
            ChatMessage.assistant("4"),
            ChatMessage.user("What is 3+3?"),
        ],
        max_tokens=5,
        temperature=0.0,
    )
    return await _first_content(client, request)


async def concurrent(client: CompactifAIClientProtocol, model: str, count: int = 3) -> list[str]:
    async def one(i: int) -> str:
        request = ChatCompletionRequest(
            model=model,
            messages=[
                ChatMessage.system(SYSTEM_PROMPT),
                ChatMessage.user(f"What is {i} + {i}? Reply with just the number."),
            ],
            max_tokens=5,
            temperature=0.0,
        )
        return await _first_content(client, request) or ""

    return list(await asyncio.gather(*(one(i) for i in range(1, count + 1))))


async def helper_method(client: CompactifAIClientProtocol, model: str) -> str:
    return await client.chat(SIMPLE_PROMPT, model=model, system_prompt=SYSTEM_PROMPT)


SCENARIOS = [
    Scenario("Simple chat", simple_chat),
    Scenario("Larger payload", larger_payload),
    Scenario("Multi-turn (5 msgs)", multi_turn),
    Scenario("3 concurrent", concurrent),
    Scenario("Helper method", helper_method),
]


async def run_benchmarks(
    client: CompactifAIClientProtocol,
    model: str,
    *,
    iterations: int = 5,
    scenarios: list[Scenario] | None = None,
    on_result: Callable[[ScenarioResult], None] | None = None,
) -> list[ScenarioResult]:
    """Run each scenario sequentially ``iterations`` times.

    Failures propagate; a benchmark with errors has no meaningful timing.
    """
    if iterations <= 0:
        raise ValueError("iterations must be positive.")
    results: list[ScenarioResult] = []
    for scenario in scenarios or SCENARIOS:
        samples: list[float] = []
        for _ in range(iterations):
            start = time.perf_counter()
            await scenario.run(client, model)
            samples.append((time.perf_counter() - start) * 1000)
        result = ScenarioResult(
            name=scenario.name,
            iterations=iterations,
            mean_ms=statistics.fmean(samples),
            min_ms=min(samples),
            max_ms=max(samples),
        )
        results.append(result)
        if on_result is not None:
            on_result(result)
    return results
