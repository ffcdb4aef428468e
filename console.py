"""Rich console output for clean, user-friendly turn-by-turn display."""

from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel

from decision_service import SafetyCheck, UsageStats
from decision_service.pricing import estimate_cost

console = Console()


def _format_cost(cost: float | None, bright: bool = False) -> str:
    """Format cost as a parenthetical string, or empty if None."""
    if cost is None:
        return ""
    if bright:
        return f" [bold yellow](~${cost:.2f})[/bold yellow]"
    return f" (~${cost:.2f})"


def _format_usage(usage: UsageStats, model: str = "", bright_cost: bool = False) -> str:
    parts = [f"{usage.input_tokens} in", f"{usage.output_tokens} out"]
    if usage.cache_read_tokens:
        parts.append(f"cache: {usage.cache_read_tokens} read")
    if usage.reasoning_tokens:
        parts.append(f"{usage.reasoning_tokens} reasoning")
    cost = estimate_cost(model, usage) if model else None
    return f"{' / '.join(parts)}{_format_cost(cost, bright=bright_cost)}"


def turn_start(turn: int, max_turns: int) -> None:
    """Print turn header."""
    console.print(f"\n[bold white]Turn {turn}/{max_turns}[/bold white]")


def turn_action(action: BaseModel) -> None:
    """Print the action about to be executed."""
    fields: dict[str, Any] = action.model_dump(exclude={"type"})
    args = ", ".join(f"{k}={v!r}" for k, v in fields.items())
    console.print(f"  [bold green]{action.type}[/bold green] [white]{args}[/white]")


def turn_thought(summary: str) -> None:
    console.print(f"  [bright_cyan]{summary}[/bright_cyan]")


def safety_checks(checks: list[SafetyCheck]) -> None:
    for check in checks:
        console.print(f"  [bold yellow]⚠ safety check {check.code}: {check.message}[/bold yellow]")


def turn_usage(usage: UsageStats, model: str = "", total_usage: UsageStats | None = None) -> None:
    """Print compact per-turn token usage and cumulative total."""
    console.print(f"  [dim]{_format_usage(usage, model)}[/dim]")
    if total_usage:
        console.print(f"  [bright_black]total: {_format_usage(total_usage, model, bright_cost=True)}[/bright_black]")


def result_answer(answer: str, turns: int, usage: UsageStats | None = None, model: str = "") -> None:
    usage_line = f"\n[white]tokens: {_format_usage(usage, model, bright_cost=True)}[/white]" if usage else ""
    console.print(Panel(f"{answer}\n[dim]{turns} turns[/dim]{usage_line}", title="Final answer", border_style="green"))


def result_fail(title: str, summary: str, turns: int, usage: UsageStats | None = None, model: str = "") -> None:
    usage_line = f"\n[white]tokens: {_format_usage(usage, model, bright_cost=True)}[/white]" if usage else ""
    console.print(Panel(f"{summary}\n[dim]{turns} turns[/dim]{usage_line}", title=title, border_style="red"))


def error(message: str) -> None:
    console.print(Panel(message, title="Error", border_style="red"))
