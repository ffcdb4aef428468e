"""Runtime configuration for the computer-use agent."""

import os
import re
from dataclasses import dataclass

from errors import ConfigError

DEFAULT_MODEL = "computer-use-preview"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_BARE_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


@dataclass(frozen=True, slots=True)
class Settings:
    """Decision service credentials and agent options."""

    api_key: str
    base_url: str | None = None
    organization: str | None = None
    model: str = DEFAULT_MODEL
    acknowledge_safety_checks: bool = False

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("OpenAI API key is not configured")

    @classmethod
    def from_env(cls, model: str | None = None, acknowledge_safety_checks: bool | None = None) -> "Settings":
        """Build settings from the process environment.

        Args:
            model: Overrides COMPUTER_USE_MODEL when given
            acknowledge_safety_checks: Overrides COMPUTER_USE_ACK_SAFETY_CHECKS when given

        Raises:
            ConfigError: If OPENAI_API_KEY is not set
        """
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ConfigError("OPENAI_API_KEY environment variable is not set")

        if acknowledge_safety_checks is None:
            acknowledge_safety_checks = os.environ.get("COMPUTER_USE_ACK_SAFETY_CHECKS", "").strip().lower() in _TRUE_VALUES

        return cls(
            api_key=api_key,
            base_url=os.environ.get("OPENAI_BASE_URL") or None,
            organization=os.environ.get("OPENAI_ORGANIZATION") or None,
            model=model or os.environ.get("COMPUTER_USE_MODEL") or DEFAULT_MODEL,
            acknowledge_safety_checks=acknowledge_safety_checks,
        )


def parse_duration(value: str) -> float:
    """Parse a duration like '3m', '90s', '1m30s' or '500ms' into seconds.

    A bare number is taken as seconds.

    Raises:
        ValueError: If the string is not a valid non-negative duration
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")

    if _BARE_NUMBER.fullmatch(text):
        return float(text)

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total
