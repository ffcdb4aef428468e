"""Unit tests for Pydantic action models."""

import pytest
from pydantic import ValidationError

from agent.actions import (
    ClickAction,
    KeyPressAction,
    ScreenshotAction,
    ScrollAction,
    TypeAction,
    UnknownAction,
    WaitAction,
    parse_action,
)


@pytest.mark.unit
def test_click_action_defaults_to_left_button():
    """Test that a click without a button uses the primary button."""
    action = parse_action({"type": "click", "x": 100, "y": 200})

    assert isinstance(action, ClickAction)
    assert action.x == 100
    assert action.y == 200
    assert action.button == "left"


@pytest.mark.unit
def test_click_action_keeps_button():
    action = parse_action({"type": "click", "x": 1, "y": 2, "button": "right"})

    assert action.button == "right"


@pytest.mark.unit
def test_type_action_valid():
    action = parse_action({"type": "type", "text": "Hello, World!"})

    assert isinstance(action, TypeAction)
    assert action.text == "Hello, World!"


@pytest.mark.unit
def test_keypress_action_valid():
    action = parse_action({"type": "keypress", "keys": ["CTRL", "L"]})

    assert isinstance(action, KeyPressAction)
    assert action.keys == ["CTRL", "L"]


@pytest.mark.unit
def test_scroll_action_valid():
    """Test scroll deltas as sent by the service."""
    action = parse_action({"type": "scroll", "x": 640, "y": 360, "scroll_x": 0, "scroll_y": 300})

    assert isinstance(action, ScrollAction)
    assert (action.x, action.y, action.scroll_x, action.scroll_y) == (640, 360, 0, 300)


@pytest.mark.unit
def test_scroll_action_default_deltas():
    action = ScrollAction(x=100, y=100)

    assert action.scroll_x == 0
    assert action.scroll_y == 0


@pytest.mark.unit
def test_wait_action_drops_duration():
    """Test that a duration sent with wait is not kept on the model."""
    action = parse_action({"type": "wait", "ms": 5000})

    assert isinstance(action, WaitAction)
    assert "ms" not in action.model_dump()


@pytest.mark.unit
def test_screenshot_action_valid():
    assert isinstance(parse_action({"type": "screenshot"}), ScreenshotAction)


@pytest.mark.unit
@pytest.mark.parametrize("kind", ["drag", "double_click", "move", "teleport"])
def test_unrecognized_kind_becomes_unknown_action(kind):
    """Test that unimplemented kinds are kept, not rejected."""
    action = parse_action({"type": kind, "path": [{"x": 1, "y": 2}]})

    assert isinstance(action, UnknownAction)
    assert action.type == kind


@pytest.mark.unit
def test_missing_type_becomes_unknown_action():
    action = parse_action({"x": 1})

    assert isinstance(action, UnknownAction)


@pytest.mark.unit
def test_missing_required_fields():
    """Test that a recognized kind with a broken payload is rejected."""
    with pytest.raises(ValidationError):
        parse_action({"type": "click", "x": 100})

    with pytest.raises(ValidationError):
        parse_action({"type": "type"})
