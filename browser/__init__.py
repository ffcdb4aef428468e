"""Browser automation package."""

from .base import BrowserProvider
from .controller import BrowserController, ViewportSize
from .keys import resolve_key

__all__ = [
    "BrowserController",
    "BrowserProvider",
    "ViewportSize",
    "resolve_key",
]
