"""Per-run session directory: screenshots, log and session.json."""

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

from decision_service import UsageStats

logger = logging.getLogger(__name__)

_SESSIONS_DIR = Path("sessions")

SessionStatus = Literal["in_progress", "answered", "exhausted", "cancelled", "error", "interrupted"]


@dataclass
class SessionState:
    """Run state persisted to session.json."""

    version: int
    status: SessionStatus
    url: str
    goal: str
    model: str
    max_turns: int
    turn: int = 0
    last_url: str | None = None
    last_response_id: str | None = None
    elapsed_seconds: float = 0.0
    final_answer: str | None = None
    error: str | None = None
    usage: dict[str, int] = field(default_factory=dict)


def usage_to_dict(usage: UsageStats) -> dict[str, int]:
    return {
        "input_tokens": usage.input_tokens,
        "output_tokens": usage.output_tokens,
        "cache_read_tokens": usage.cache_read_tokens,
        "reasoning_tokens": usage.reasoning_tokens,
    }


def create_session_dir(base_dir: Path = _SESSIONS_DIR) -> Path:
    """Create a timestamped session directory with a screenshots/ subdirectory."""
    session_dir = base_dir / datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    (session_dir / "screenshots").mkdir(parents=True, exist_ok=True)
    return session_dir


def save_screenshot(session_dir: Path, turn: int, png: bytes) -> Path:
    """Write the observation screenshot of a turn as screenshots/turn_NNN.png."""
    path = session_dir / "screenshots" / f"turn_{turn:03d}.png"
    path.write_bytes(png)
    logger.debug("Screenshot saved: %s", path)
    return path


def save_session(session_dir: Path, state: SessionState) -> None:
    """Atomically write session state to session.json."""
    session_file = session_dir / "session.json"
    # Atomic write: write to temp file then rename
    fd, tmp_path = tempfile.mkstemp(dir=session_dir, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(asdict(state), f, indent=2, ensure_ascii=False)
        Path(tmp_path).replace(session_file)
    except BaseException:
        Path(tmp_path).unlink(missing_ok=True)
        raise

    logger.debug("Session saved to %s (turn %d, %s)", session_file, state.turn, state.status)


def load_session(session_dir: Path) -> SessionState:
    """Load and validate session state from session.json."""
    session_file = session_dir / "session.json"
    if not session_file.exists():
        raise FileNotFoundError(f"No session.json found in {session_dir}")

    data: dict[str, Any] = json.loads(session_file.read_text(encoding="utf-8"))

    if data.get("version") != 1:
        raise ValueError(f"Unsupported session version: {data.get('version')}")

    return SessionState(
        version=data["version"],
        status=data["status"],
        url=data["url"],
        goal=data["goal"],
        model=data["model"],
        max_turns=data["max_turns"],
        turn=data.get("turn", 0),
        last_url=data.get("last_url"),
        last_response_id=data.get("last_response_id"),
        elapsed_seconds=data.get("elapsed_seconds", 0.0),
        final_answer=data.get("final_answer"),
        error=data.get("error"),
        usage=data.get("usage", {}),
    )


def finalize_session(
    session_dir: Path,
    status: SessionStatus,
    final_answer: str | None = None,
    error: str | None = None,
) -> SessionState | None:
    """Record the terminal status of a run; returns None if no session was saved yet."""
    if not (session_dir / "session.json").exists():
        return None
    state = load_session(session_dir)
    state.status = status
    state.final_answer = final_answer
    state.error = error
    save_session(session_dir, state)
    return state
