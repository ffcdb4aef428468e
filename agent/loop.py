"""Core agent loop: request -> response -> dispatch action -> observation -> next request."""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from pydantic import ValidationError

import console as console_output
from browser.base import BrowserProvider
from config import DEFAULT_MODEL
from decision_service import DecisionServiceClient, InputItem, ResponseEnvelope, UsageStats, UserMessage
from errors import BrowserStartupError, DecisionServiceError

from .actions import Action, parse_action
from .dispatcher import ActionDispatcher
from .observation import Observation, PendingCall

logger = logging.getLogger(__name__)

_TURN_DELAY_SECONDS = 1.0
_CONTINUE_MESSAGE = "Continue."


class Outcome(str, Enum):
    """How a run ended when it did not fail."""

    ANSWERED = "answered"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class AgentResult:
    """Result of an agent run."""

    outcome: Outcome
    final_answer: str | None
    turns_taken: int
    usage: UsageStats
    last_response_id: str | None = None
    final_url: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.ANSWERED


@dataclass(frozen=True, slots=True)
class TurnRecord:
    """Snapshot handed to on_turn_done after each completed turn."""

    turn: int
    response_id: str
    action: Action | None
    observation: Observation | None
    final_answer: str | None
    usage: UsageStats
    elapsed_seconds: float


@dataclass(frozen=True, slots=True)
class _TurnEffect:
    action: Action | None = None
    pending: PendingCall | None = None
    final_answer: str | None = None


def _is_cancelled(deadline: float | None, cancel_event: asyncio.Event | None) -> bool:
    if cancel_event is not None and cancel_event.is_set():
        return True
    return deadline is not None and time.monotonic() >= deadline


def _build_inputs(
    goal: str,
    response_id: str | None,
    pending: PendingCall | None,
    acknowledge_safety_checks: bool,
) -> list[InputItem]:
    """Input items for the next request; consumes the pending call if there is one."""
    if response_id is None:
        return [UserMessage(content=goal)]
    if pending is None:
        return [UserMessage(content=_CONTINUE_MESSAGE)]

    acknowledged = list(pending.safety_checks) if acknowledge_safety_checks else None
    return [pending.observation.to_call_output(pending.call_id, acknowledged)]


async def _process_response(response: ResponseEnvelope, dispatcher: ActionDispatcher) -> _TurnEffect:
    """Scan output items in order: run the first action, stop at the first assistant text."""
    action: Action | None = None
    pending: PendingCall | None = None

    for item in response.output:
        if item.action is not None:
            if pending is not None:
                logger.warning("Ignoring extra action %s in response %s", item.action.get("type"), response.id)
            else:
                if not item.call_id:
                    raise DecisionServiceError(f"Computer call without call_id in response {response.id}")
                try:
                    action = parse_action(item.action)
                except ValidationError as e:
                    raise DecisionServiceError(f"Malformed action in response {response.id}: {e}") from e

                logger.info("Action: %s", action)
                console_output.turn_action(action)
                if item.pending_safety_checks:
                    for check in item.pending_safety_checks:
                        logger.warning("Pending safety check %s (%s): %s", check.id, check.code, check.message)
                    console_output.safety_checks(item.pending_safety_checks)

                observation = await dispatcher.execute(action)
                pending = PendingCall(
                    call_id=item.call_id,
                    observation=observation,
                    safety_checks=tuple(item.pending_safety_checks),
                )
        elif item.summary_text:
            logger.info("Reasoning: %s", item.summary_text)
            console_output.turn_thought(item.summary_text)

        if item.is_assistant_message and item.text:
            return _TurnEffect(action=action, pending=pending, final_answer=item.text)

    return _TurnEffect(action=action, pending=pending)


async def run_agent(
    client: DecisionServiceClient,
    browser: BrowserProvider,
    goal: str,
    start_url: str,
    max_turns: int,
    *,
    model: str = DEFAULT_MODEL,
    timeout_seconds: float | None = None,
    cancel_event: asyncio.Event | None = None,
    acknowledge_safety_checks: bool = False,
    turn_delay: float = _TURN_DELAY_SECONDS,
    dispatcher: ActionDispatcher | None = None,
    on_turn_done: Callable[[TurnRecord], None] | None = None,
) -> AgentResult:
    """Run the agent loop until a final answer, the turn budget, or cancellation.

    Opens start_url first and closes the browser on every exit path.

    Args:
        client: Decision service client
        browser: Browser to drive; owned by this call from open to close
        goal: Natural-language goal sent on the first turn
        start_url: Initial location
        max_turns: Turn budget (>= 1)
        model: Model identifier passed to the client
        timeout_seconds: Wall-clock budget measured from the start of the run
        cancel_event: Set from outside to stop the run at the next turn boundary
        acknowledge_safety_checks: Echo pending safety checks back with the next observation
        turn_delay: Pause between turns in seconds
        dispatcher: Action dispatcher (defaults to one over browser)
        on_turn_done: Callback invoked after each completed turn

    Returns:
        AgentResult with the outcome, final answer (if any), turns taken and usage

    Raises:
        BrowserStartupError: If the start location cannot be opened
        DecisionServiceError: If a call to the decision service fails
        CaptureError: If the screenshot or URL cannot be read after an action
        ActionError: If a browser primitive fails
    """
    if max_turns < 1:
        raise ValueError(f"max_turns must be at least 1, got {max_turns}")

    start_time = time.monotonic()
    deadline = start_time + timeout_seconds if timeout_seconds is not None else None
    dispatcher = dispatcher or ActionDispatcher(browser)

    total_usage = UsageStats()
    response_id: str | None = None
    pending: PendingCall | None = None
    last_url: str | None = None

    try:
        try:
            await browser.open(start_url)
        except Exception as e:
            raise BrowserStartupError(f"Error opening {start_url}: {e}") from e
        last_url = start_url

        for turn in range(1, max_turns + 1):
            if _is_cancelled(deadline, cancel_event):
                logger.warning("Cancelled before turn %d after %.1fs", turn, time.monotonic() - start_time)
                return AgentResult(
                    outcome=Outcome.CANCELLED,
                    final_answer=None,
                    turns_taken=turn - 1,
                    usage=total_usage,
                    last_response_id=response_id,
                    final_url=last_url,
                )

            inputs = _build_inputs(goal, response_id, pending, acknowledge_safety_checks)
            pending = None

            console_output.turn_start(turn, max_turns)
            logger.info("Turn %d/%d: calling decision service...", turn, max_turns)
            response = await client.send(model, response_id, inputs)
            response_id = response.id

            step_usage = response.usage_stats
            total_usage += step_usage
            console_output.turn_usage(step_usage, model, total_usage)

            effect = await _process_response(response, dispatcher)
            pending = effect.pending
            if pending is not None:
                last_url = pending.observation.current_url

            if on_turn_done:
                on_turn_done(TurnRecord(
                    turn=turn,
                    response_id=response_id,
                    action=effect.action,
                    observation=pending.observation if pending else None,
                    final_answer=effect.final_answer,
                    usage=replace(total_usage),
                    elapsed_seconds=time.monotonic() - start_time,
                ))

            if effect.final_answer is not None:
                logger.info("Final answer: %s", effect.final_answer)
                return AgentResult(
                    outcome=Outcome.ANSWERED,
                    final_answer=effect.final_answer,
                    turns_taken=turn,
                    usage=total_usage,
                    last_response_id=response_id,
                    final_url=last_url,
                )

            if effect.action is None:
                logger.info("Turn %d produced neither an action nor an answer", turn)

            if turn < max_turns and turn_delay > 0:
                await asyncio.sleep(turn_delay)

        logger.warning("Turn budget of %d exhausted without a final answer", max_turns)
        return AgentResult(
            outcome=Outcome.EXHAUSTED,
            final_answer=None,
            turns_taken=max_turns,
            usage=total_usage,
            last_response_id=response_id,
            final_url=last_url,
        )
    finally:
        try:
            await browser.close()
        except Exception:
            logger.exception("Error while closing the browser")
