"""Pydantic action models for computer calls proposed by the decision service."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter


class ScreenshotAction(BaseModel):
    """Capture the screen without changing the page."""

    type: Literal["screenshot"] = "screenshot"


class TypeAction(BaseModel):
    """Insert text at the current focus."""

    type: Literal["type"] = "type"
    text: str = Field(description="Text to insert")


class ClickAction(BaseModel):
    """Click at coordinates."""

    type: Literal["click"] = "click"
    x: int = Field(description="X coordinate to click")
    y: int = Field(description="Y coordinate to click")
    button: str = Field(default="left", description="Mouse button (left, right, middle)")


class ScrollAction(BaseModel):
    """Scroll at a position."""

    type: Literal["scroll"] = "scroll"
    x: int = Field(description="X coordinate to scroll at")
    y: int = Field(description="Y coordinate to scroll at")
    scroll_x: int = Field(default=0, description="Horizontal scroll amount (pixels)")
    scroll_y: int = Field(default=0, description="Vertical scroll amount (pixels, positive=down)")


class KeyPressAction(BaseModel):
    """Press one or more named keys in order."""

    type: Literal["keypress"] = "keypress"
    keys: list[str] = Field(default_factory=list, description="Key names, e.g. ENTER, ArrowDown")


class WaitAction(BaseModel):
    """Wait for the page. Any duration sent by the service is ignored."""

    type: Literal["wait"] = "wait"


class UnknownAction(BaseModel):
    """Any action kind this agent does not implement (drag, double_click, move, ...)."""

    model_config = ConfigDict(extra="allow")

    type: str = "unknown"


KNOWN_ACTION_TYPES = frozenset({"screenshot", "type", "click", "scroll", "keypress", "wait"})


def _action_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in KNOWN_ACTION_TYPES else "unknown"


Action = Annotated[
    Union[
        Annotated[ScreenshotAction, Tag("screenshot")],
        Annotated[TypeAction, Tag("type")],
        Annotated[ClickAction, Tag("click")],
        Annotated[ScrollAction, Tag("scroll")],
        Annotated[KeyPressAction, Tag("keypress")],
        Annotated[WaitAction, Tag("wait")],
        Annotated[UnknownAction, Tag("unknown")],
    ],
    Discriminator(_action_tag),
]

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(data: dict[str, Any]) -> Action:
    """Turn a raw action payload into a typed action.

    Unrecognized kinds become UnknownAction. A recognized kind with an invalid payload
    raises pydantic.ValidationError.
    """
    return _ACTION_ADAPTER.validate_python(data)
