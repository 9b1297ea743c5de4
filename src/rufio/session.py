"""Per-session pane state for rufio.

Hook invocations are separate processes, so the "asking a question"
marker and the tab spinner position live in small files in the state
directory (``$RUFIO_STATE_DIR``, default the system temp dir).
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")


def _state_dir() -> Path:
    """Return the state directory, reading env var lazily."""
    return Path(os.environ.get("RUFIO_STATE_DIR", tempfile.gettempdir())).expanduser()


def _safe(session_id: str) -> str:
    return session_id.replace("/", "_").replace("\\", "_")


def asking_marker_path(session_id: str) -> Path:
    return _state_dir() / f"rufio-asking-{_safe(session_id)}"


def spinner_state_path(session_id: str) -> Path:
    return _state_dir() / f"rufio-spinner-{_safe(session_id)}"


def log_path(session_id: str) -> Path:
    return _state_dir() / f"rufio-{_safe(session_id)}.txt"


def set_asking(session_id: str) -> None:
    """Record that the agent is waiting on the user."""
    path = asking_marker_path(session_id)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")
    except OSError:
        pass


def clear_asking(session_id: str) -> bool:
    """Remove the asking marker. Returns True if it was present."""
    path = asking_marker_path(session_id)
    if not path.exists():
        return False
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass
    return True


def get_spinner_index(session_id: str) -> int:
    """Current spinner frame index, 0 when unset or unreadable."""
    try:
        index = int(spinner_state_path(session_id).read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return 0
    return index if 0 <= index < len(SPINNER_FRAMES) else 0


def advance_spinner(session_id: str) -> str:
    """Return the current spinner frame and persist the next index."""
    index = get_spinner_index(session_id)
    path = spinner_state_path(session_id)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(str((index + 1) % len(SPINNER_FRAMES)), encoding="utf-8")
    except OSError:
        pass
    return SPINNER_FRAMES[index]


def reset_spinner(session_id: str) -> None:
    try:
        spinner_state_path(session_id).unlink(missing_ok=True)
    except OSError:
        pass
