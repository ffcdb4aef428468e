"""Browser capability interface used by the agent."""

from abc import ABC, abstractmethod


class BrowserProvider(ABC):
    """Primitive operations against a single owned page.

    Every primitive returns only after the page has settled, so the next screenshot
    reflects its effect.
    """

    __slots__ = ()

    @abstractmethod
    async def open(self, url: str) -> None:
        """Start the browser if needed and open url in the owned page."""
        ...

    @abstractmethod
    async def screenshot(self) -> bytes:
        """Return a PNG screenshot of the viewport."""
        ...

    @abstractmethod
    async def current_url(self) -> str:
        ...

    @abstractmethod
    async def click(self, x: int, y: int, button: str = "left") -> None:
        ...

    @abstractmethod
    async def type_text(self, text: str) -> None:
        """Insert text at the current focus."""
        ...

    @abstractmethod
    async def scroll(self, x: int, y: int, delta_x: int, delta_y: int) -> None:
        ...

    @abstractmethod
    async def press_keys(self, keys: list[str]) -> None:
        """Press each named key in order, skipping names that are not supported."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the page and the browser. Safe to call when nothing was opened."""
        ...
