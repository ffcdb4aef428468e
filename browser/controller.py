"""Playwright browser controller owning a single page."""

import io
import logging
from dataclasses import dataclass

from PIL import Image
from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from errors import MultiplePagesError

from .base import BrowserProvider
from .keys import resolve_keys

logger = logging.getLogger(__name__)

_BUTTONS: frozenset[str] = frozenset({"left", "right", "middle"})
_SETTLE_TIMEOUT_MS = 3000


def _fit_to_display(screenshot_bytes: bytes, width: int, height: int) -> bytes:
    """Resize a screenshot to the declared display size if it differs."""
    img = Image.open(io.BytesIO(screenshot_bytes))
    if img.size == (width, height):
        return screenshot_bytes

    logger.debug("Resizing screenshot from %dx%d to %dx%d", img.width, img.height, width, height)
    img = img.convert("RGB").resize((width, height), Image.Resampling.LANCZOS)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@dataclass(frozen=True, slots=True)
class ViewportSize:
    """Browser viewport dimensions."""

    width: int = 1024
    height: int = 768


class BrowserController(BrowserProvider):
    """Playwright wrapper driving one page of a Chromium browser."""

    __slots__ = ("_browser", "_context", "_extra_pages", "_headless", "_page", "_playwright", "_viewport")

    def __init__(self, viewport: ViewportSize | None = None, headless: bool = True) -> None:
        self._viewport = viewport or ViewportSize()
        self._headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._extra_pages: list[Page] = []

    @property
    def page(self) -> Page:
        """The owned page.

        Raises:
            RuntimeError: If the browser has not been opened
            MultiplePagesError: If a popup or new tab appeared next to the owned page
        """
        if self._page is None:
            raise RuntimeError("Browser not started. Call open() first.")
        open_extra = [p for p in self._extra_pages if not p.is_closed()]
        if open_extra:
            raise MultiplePagesError(
                f"{len(open_extra)} extra page(s) opened ({open_extra[0].url}); only a single page is supported"
            )
        return self._page

    def _on_page(self, page: Page) -> None:
        if page is not self._page:
            logger.error("Unexpected new page opened: %s", page.url)
            self._extra_pages.append(page)

    async def _start(self) -> None:
        pw = await async_playwright().start()
        self._playwright = pw
        self._browser = await pw.chromium.launch(headless=self._headless)
        self._context = await self._browser.new_context(
            viewport={"width": self._viewport.width, "height": self._viewport.height},
            device_scale_factor=1,
        )
        self._page = await self._context.new_page()
        self._context.on("page", self._on_page)
        logger.info("Browser started (headless=%s, viewport=%dx%d)",
                    self._headless, self._viewport.width, self._viewport.height)

    async def _settle(self) -> None:
        """Wait for the page to finish loading and go network-idle, best effort."""
        try:
            await self.page.wait_for_load_state("load", timeout=_SETTLE_TIMEOUT_MS)
            await self.page.wait_for_load_state("networkidle", timeout=_SETTLE_TIMEOUT_MS)
        except PlaywrightTimeoutError:
            logger.debug("Page did not settle within %d ms, continuing", _SETTLE_TIMEOUT_MS)

    async def open(self, url: str) -> None:
        """Launch the browser on first use and navigate the owned page to url."""
        if self._page is None:
            await self._start()
        logger.info("Navigating to %s", url)
        await self.page.goto(url, wait_until="load")
        await self._settle()

    async def close(self) -> None:
        """Close browser and cleanup.

        Every release step runs even if an earlier one fails; the first error is re-raised.
        """
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        self._extra_pages.clear()

        try:
            if context:
                await context.close()
        finally:
            try:
                if browser:
                    await browser.close()
            finally:
                if playwright:
                    await playwright.stop()
        logger.info("Browser stopped")

    async def screenshot(self) -> bytes:
        """Take a viewport screenshot as PNG, sized to the viewport."""
        screenshot_bytes = await self.page.screenshot(scale="css")
        return _fit_to_display(screenshot_bytes, self._viewport.width, self._viewport.height)

    async def current_url(self) -> str:
        return self.page.url

    async def click(self, x: int, y: int, button: str = "left") -> None:
        """Move to (x, y) and press+release the button; unknown buttons fall back to left."""
        if button not in _BUTTONS:
            logger.debug("Mouse button %r not supported, using left", button)
            button = "left"
        logger.info("Click %s at (%d, %d)", button, x, y)
        mouse = self.page.mouse
        await mouse.move(x, y)
        await mouse.down(button=button)
        await mouse.up(button=button)
        await self._settle()

    async def type_text(self, text: str) -> None:
        """Insert text into the currently focused element."""
        logger.info("Typing text: %s", text[:50])
        await self.page.keyboard.insert_text(text)
        await self._settle()

    async def scroll(self, x: int, y: int, delta_x: int, delta_y: int) -> None:
        """Scroll at a given position."""
        logger.info("Scroll at (%d, %d) delta=(%d, %d)", x, y, delta_x, delta_y)
        await self.page.mouse.move(x, y)
        await self.page.mouse.wheel(delta_x, delta_y)
        await self._settle()

    async def press_keys(self, keys: list[str]) -> None:
        """Press supported keys in order; unsupported names are logged and skipped."""
        resolved = resolve_keys(keys)
        logger.info("Pressing keys: %s", resolved)
        for key in resolved:
            await self.page.keyboard.press(key)
        await self._settle()
