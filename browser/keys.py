"""Key name translation for keypress actions."""

import logging

logger = logging.getLogger(__name__)

# Normalized name -> Playwright key
KEY_MAP: dict[str, str] = {
    "enter": "Enter",
    "return": "Enter",
    "delete": "Delete",
    "tab": "Tab",
    "escape": "Escape",
    "esc": "Escape",
    "left": "ArrowLeft",
    "arrowleft": "ArrowLeft",
    "right": "ArrowRight",
    "arrowright": "ArrowRight",
    "up": "ArrowUp",
    "arrowup": "ArrowUp",
    "down": "ArrowDown",
    "arrowdown": "ArrowDown",
    "pageup": "PageUp",
    "pagedown": "PageDown",
}


def _normalize(name: str) -> str:
    return "".join(ch for ch in name.strip().lower() if ch not in "-_ ")


def resolve_key(name: str) -> str | None:
    """Map a key name from the decision service to a physical key, or None if unsupported.

    Matching ignores case and '-', '_' and spaces: 'ENTER', 'Return', 'arrow-left' and
    'page_up' are all recognized.
    """
    return KEY_MAP.get(_normalize(name))


def resolve_keys(names: list[str]) -> list[str]:
    """Resolve a batch of key names, logging and dropping the unsupported ones."""
    resolved: list[str] = []
    for name in names:
        key = resolve_key(name)
        if key is None:
            logger.warning("Key %r is not supported, skipping", name)
            continue
        resolved.append(key)
    return resolved
