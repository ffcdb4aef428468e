"""Unit tests for action dispatch."""

import time

import pytest

from agent.actions import parse_action
from agent.dispatcher import ActionDispatcher
from errors import ActionError, CaptureError
from conftest import PNG_BYTES, FakeBrowser


def _dispatcher(browser: FakeBrowser) -> ActionDispatcher:
    return ActionDispatcher(browser, wait_seconds=0)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("payload", "expected_primitive"),
    [
        ({"type": "screenshot"}, None),
        ({"type": "type", "text": "hello"}, ("type_text", "hello")),
        ({"type": "click", "x": 10, "y": 20}, ("click", 10, 20, "left")),
        ({"type": "click", "x": 10, "y": 20, "button": "right"}, ("click", 10, 20, "right")),
        ({"type": "scroll", "x": 1, "y": 2, "scroll_x": 0, "scroll_y": 300}, ("scroll", 1, 2, 0, 300)),
        ({"type": "keypress", "keys": ["CTRL", "Enter"]}, ("press_keys", ["CTRL", "Enter"])),
        ({"type": "wait"}, None),
        ({"type": "drag", "path": []}, None),
    ],
)
async def test_every_action_yields_one_observation(payload, expected_primitive):
    browser = FakeBrowser()

    observation = await _dispatcher(browser).execute(parse_action(payload))

    assert observation.screenshot == PNG_BYTES
    assert observation.current_url == browser.url
    primitives = [c for c in browser.calls if c[0] not in ("screenshot", "current_url")]
    assert primitives == ([expected_primitive] if expected_primitive else [])
    assert browser.names()[-2:] == ["screenshot", "current_url"]
    assert browser.names().count("screenshot") == 1


@pytest.mark.unit
async def test_wait_ignores_requested_duration():
    dispatcher = ActionDispatcher(FakeBrowser(), wait_seconds=0.01)

    start = time.monotonic()
    await dispatcher.execute(parse_action({"type": "wait", "ms": 60000}))

    assert time.monotonic() - start < 1


@pytest.mark.unit
async def test_screenshot_failure_after_click_is_capture_error():
    browser = FakeBrowser(fail_screenshot=True)

    with pytest.raises(CaptureError) as exc_info:
        await _dispatcher(browser).execute(parse_action({"type": "click", "x": 1, "y": 1}))

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert browser.names() == ["click", "screenshot"]


@pytest.mark.unit
async def test_primitive_failure_is_action_error():
    browser = FakeBrowser(fail_click=True)

    with pytest.raises(ActionError, match="click action failed"):
        await _dispatcher(browser).execute(parse_action({"type": "click", "x": 1, "y": 1}))

    assert "screenshot" not in browser.names()


@pytest.mark.unit
async def test_data_url_encodes_screenshot():
    observation = await _dispatcher(FakeBrowser()).capture()

    output = observation.to_call_output("call_9")

    assert output.call_id == "call_9"
    assert output.output.image_url.startswith("data:image/png;base64,iVBORw0KGg")
    assert output.acknowledged_safety_checks is None
