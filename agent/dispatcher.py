"""Action dispatch: one typed action -> browser primitives -> Observation."""

import asyncio
import logging

from browser.base import BrowserProvider
from errors import ActionError, AgentError, CaptureError

from .actions import (
    Action,
    ClickAction,
    KeyPressAction,
    ScreenshotAction,
    ScrollAction,
    TypeAction,
    UnknownAction,
    WaitAction,
)
from .observation import Observation

logger = logging.getLogger(__name__)

_WAIT_SECONDS = 3.0


class ActionDispatcher:
    """Executes actions against a browser and captures the resulting observation."""

    __slots__ = ("_browser", "_wait_seconds")

    def __init__(self, browser: BrowserProvider, wait_seconds: float = _WAIT_SECONDS) -> None:
        self._browser = browser
        self._wait_seconds = wait_seconds

    async def execute(self, action: Action) -> Observation:
        """Perform the action, then always capture a fresh screenshot and URL.

        Raises:
            ActionError: If a browser primitive fails
            CaptureError: If the screenshot or URL cannot be read afterwards
        """
        try:
            await self._perform(action)
        except AgentError:
            raise
        except Exception as e:
            raise ActionError(f"{action.type} action failed: {e}") from e

        return await self.capture()

    async def _perform(self, action: Action) -> None:
        browser = self._browser
        match action:
            case ScreenshotAction():
                pass
            case TypeAction():
                await browser.type_text(action.text)
            case ClickAction():
                await browser.click(action.x, action.y, action.button)
            case ScrollAction():
                await browser.scroll(action.x, action.y, action.scroll_x, action.scroll_y)
            case KeyPressAction():
                await browser.press_keys(action.keys)
            case WaitAction():
                await asyncio.sleep(self._wait_seconds)
            case UnknownAction():
                logger.warning("Action %r is not implemented, capturing screen only", action.type)

    async def capture(self) -> Observation:
        """Screenshot plus current URL.

        Raises:
            CaptureError: If either read fails or the screenshot is empty
        """
        try:
            screenshot = await self._browser.screenshot()
            current_url = await self._browser.current_url()
        except AgentError:
            raise
        except Exception as e:
            raise CaptureError(f"Error taking screenshot: {e}") from e

        if not screenshot:
            raise CaptureError("Browser returned an empty screenshot")
        return Observation(screenshot=screenshot, current_url=current_url)
