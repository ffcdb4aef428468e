"""CLI entry point for the computer-use browser agent."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.logging import RichHandler

import console as console_output
from agent.loop import AgentResult, Outcome, TurnRecord, run_agent
from browser.controller import BrowserController, ViewportSize
from config import Settings, parse_duration
from decision_service import OpenAIResponsesClient
from errors import AgentError
from session import SessionState, create_session_dir, finalize_session, save_screenshot, save_session, usage_to_dict

DEFAULT_URL = "https://duckduckgo.com/"
DEFAULT_GOAL = "Find out the winner of the Academy Award for Best Picture in 2025 and tell me the title."

EXIT_FATAL = 1
EXIT_EXHAUSTED = 2
EXIT_CANCELLED = 3
EXIT_INTERRUPTED = 130


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Browser agent driven by a computer-use model")
    parser.add_argument("url", nargs="?", default=DEFAULT_URL, help=f"Starting URL (default: {DEFAULT_URL})")
    parser.add_argument("goal", nargs="?", default=DEFAULT_GOAL, help="Goal to accomplish")
    parser.add_argument(
        "--model",
        default=None,
        help="Model identifier (default: $COMPUTER_USE_MODEL or computer-use-preview)",
    )
    parser.add_argument(
        "--max-turns",
        type=int,
        default=16,
        help="Maximum number of turns (default: 16)",
    )
    parser.add_argument(
        "--timeout",
        type=parse_duration,
        default=parse_duration("3m"),
        help="Wall-clock limit, e.g. 90s, 3m, 1m30s (default: 3m)",
    )
    parser.add_argument(
        "--turn-delay",
        type=float,
        default=1.0,
        help="Pause between turns in seconds (default: 1)",
    )
    parser.add_argument("--width", type=int, default=1024, help="Viewport width (default: 1024)")
    parser.add_argument("--height", type=int, default=768, help="Viewport height (default: 768)")
    parser.add_argument(
        "--no-headless",
        action="store_true",
        help="Run browser in visible (non-headless) mode",
    )
    parser.add_argument(
        "--acknowledge-safety-checks",
        action="store_true",
        default=None,
        help="Acknowledge pending safety checks with the next observation instead of only logging them",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Also print log records to the terminal",
    )
    args = parser.parse_args(argv)
    if args.max_turns < 1:
        parser.error("--max-turns must be at least 1")
    return args


def _setup_logging(session_dir: Path, verbose: bool) -> None:
    """Log everything to <session>/log.txt; mirror to the terminal with -v."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(session_dir / "log.txt", mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S"))
    root_logger.addHandler(file_handler)

    if verbose:
        rich_handler = RichHandler(console=console_output.console, show_path=False)
        rich_handler.setLevel(logging.INFO)
        root_logger.addHandler(rich_handler)

    # Keep SDK wire chatter out of the run log
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _make_turn_callback(session_dir: Path, state: SessionState):
    """Create on_turn_done callback that saves the screenshot and session state."""
    def on_turn_done(record: TurnRecord) -> None:
        if record.observation is not None:
            save_screenshot(session_dir, record.turn, record.observation.screenshot)
            state.last_url = record.observation.current_url
        state.turn = record.turn
        state.last_response_id = record.response_id
        state.elapsed_seconds = record.elapsed_seconds
        state.usage = usage_to_dict(record.usage)
        save_session(session_dir, state)
    return on_turn_done


async def _run(args: argparse.Namespace, settings: Settings, session_dir: Path) -> AgentResult:
    viewport = ViewportSize(width=args.width, height=args.height)
    browser = BrowserController(viewport=viewport, headless=not args.no_headless)
    client = OpenAIResponsesClient(settings, viewport.width, viewport.height)

    state = SessionState(
        version=1,
        status="in_progress",
        url=args.url,
        goal=args.goal,
        model=settings.model,
        max_turns=args.max_turns,
    )
    save_session(session_dir, state)

    return await run_agent(
        client=client,
        browser=browser,
        goal=args.goal,
        start_url=args.url,
        max_turns=args.max_turns,
        model=settings.model,
        timeout_seconds=args.timeout,
        acknowledge_safety_checks=settings.acknowledge_safety_checks,
        turn_delay=args.turn_delay,
        on_turn_done=_make_turn_callback(session_dir, state),
    )


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    args = _parse_args(argv)

    try:
        settings = Settings.from_env(model=args.model, acknowledge_safety_checks=args.acknowledge_safety_checks)
    except AgentError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    session_dir = create_session_dir()
    _setup_logging(session_dir, args.verbose)

    console_output.console.print(f"[bold]Goal:[/bold] {args.goal}")
    console_output.console.print(f"[bold]URL:[/bold] {args.url}")
    console_output.console.print(f"[bold]Model:[/bold] {settings.model}")
    console_output.console.print(f"[bold]Session:[/bold] {session_dir}")

    try:
        result = asyncio.run(_run(args, settings, session_dir))
    except KeyboardInterrupt:
        console_output.console.print("\n[yellow]Interrupted by user (Ctrl+C)[/yellow]")
        finalize_session(session_dir, "interrupted")
        sys.exit(EXIT_INTERRUPTED)
    except AgentError as e:
        logging.getLogger(__name__).error("Run failed: %s", e, exc_info=True)
        finalize_session(session_dir, "error", error=str(e))
        console_output.error(str(e))
        sys.exit(EXIT_FATAL)

    finalize_session(session_dir, result.outcome.value, final_answer=result.final_answer)

    match result.outcome:
        case Outcome.ANSWERED:
            console_output.result_answer(result.final_answer or "", result.turns_taken, result.usage, settings.model)
        case Outcome.EXHAUSTED:
            console_output.result_fail(
                "Exhausted", f"No final answer after {args.max_turns} turns",
                result.turns_taken, result.usage, settings.model,
            )
            sys.exit(EXIT_EXHAUSTED)
        case Outcome.CANCELLED:
            console_output.result_fail(
                "Cancelled", f"Deadline of {args.timeout:g}s reached",
                result.turns_taken, result.usage, settings.model,
            )
            sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    main()
