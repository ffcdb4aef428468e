"""Pytest fixtures and fakes for the agent tests."""

import asyncio
import os
from typing import Any

import pytest

from browser.base import BrowserProvider
from browser.controller import BrowserController, ViewportSize
from config import Settings
from decision_service import DecisionServiceClient, OpenAIResponsesClient

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-screenshot"


class FakeBrowser(BrowserProvider):
    """Records every primitive call; can be told to fail open, screenshot, click or close."""

    def __init__(
        self,
        url: str = "https://example.com/",
        fail_open: bool = False,
        fail_screenshot: bool = False,
        fail_click: bool = False,
        fail_close: bool = False,
    ) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.url = url
        self.fail_open = fail_open
        self.fail_screenshot = fail_screenshot
        self.fail_click = fail_click
        self.fail_close = fail_close
        self.close_count = 0

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    async def open(self, url: str) -> None:
        self.calls.append(("open", url))
        if self.fail_open:
            raise ConnectionError("net::ERR_NAME_NOT_RESOLVED")
        self.url = url

    async def screenshot(self) -> bytes:
        self.calls.append(("screenshot",))
        if self.fail_screenshot:
            raise RuntimeError("Target page, context or browser has been closed")
        return PNG_BYTES

    async def current_url(self) -> str:
        self.calls.append(("current_url",))
        return self.url

    async def click(self, x: int, y: int, button: str = "left") -> None:
        self.calls.append(("click", x, y, button))
        if self.fail_click:
            raise RuntimeError("mouse is detached")

    async def type_text(self, text: str) -> None:
        self.calls.append(("type_text", text))

    async def scroll(self, x: int, y: int, delta_x: int, delta_y: int) -> None:
        self.calls.append(("scroll", x, y, delta_x, delta_y))

    async def press_keys(self, keys: list[str]) -> None:
        self.calls.append(("press_keys", list(keys)))

    async def close(self) -> None:
        self.calls.append(("close",))
        self.close_count += 1
        if self.fail_close:
            raise RuntimeError("Browser has been closed")


class ScriptedClient(DecisionServiceClient):
    """Returns canned response bodies in order, repeating the last one when the script runs out."""

    def __init__(self, bodies: list[dict[str, Any]], latency: float = 0.0) -> None:
        super().__init__(1024, 768)
        self.bodies = bodies
        self.latency = latency
        self.requests: list[dict[str, Any]] = []

    async def _do_api_call(self, request: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(request)
        if self.latency:
            await asyncio.sleep(self.latency)
        index = min(len(self.requests), len(self.bodies)) - 1
        return self.bodies[index]


def computer_call(action: dict[str, Any], call_id: str = "call_1", safety_checks: list[dict] | None = None) -> dict:
    return {
        "type": "computer_call",
        "id": f"cu_{call_id}",
        "call_id": call_id,
        "status": "completed",
        "action": action,
        "pending_safety_checks": safety_checks or [],
    }


def assistant_message(text: str) -> dict:
    return {
        "type": "message",
        "id": "msg_1",
        "role": "assistant",
        "status": "completed",
        "content": [{"type": "output_text", "text": text, "annotations": []}],
    }


def reasoning(summary: str) -> dict:
    return {"type": "reasoning", "id": "rs_1", "summary": [{"type": "summary_text", "text": summary}]}


def response(response_id: str, *items: dict, input_tokens: int = 100, output_tokens: int = 10) -> dict:
    return {
        "id": response_id,
        "object": "response",
        "status": "completed",
        "model": "computer-use-preview",
        "output": list(items),
        "usage": {
            "input_tokens": input_tokens,
            "input_tokens_details": {"cached_tokens": 0},
            "output_tokens": output_tokens,
            "output_tokens_details": {"reasoning_tokens": 0},
            "total_tokens": input_tokens + output_tokens,
        },
    }


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def browser():
    """Real Playwright browser; run_agent opens and closes it."""
    return BrowserController(viewport=ViewportSize(width=1024, height=768), headless=True)


@pytest.fixture
def decision_client():
    """Real OpenAI client, skipped when no API key is configured."""
    if not os.environ.get("OPENAI_API_KEY"):
        pytest.skip("OPENAI_API_KEY is not set")
    return OpenAIResponsesClient(Settings.from_env(), 1024, 768)
