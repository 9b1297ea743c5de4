"""Zellij tab indicator.

Renames the agent's tab through the rename-tab pipe plugin so its state
is visible even when the tab is not focused. Best-effort only: every
failure is logged and swallowed.
"""
from __future__ import annotations

import getpass
import json
import logging
import os
import shutil
import subprocess
from enum import Enum
from pathlib import Path

from rufio.session import advance_spinner, reset_spinner

logger = logging.getLogger("rufio")

ASKING_CHAR = "⣿"
DONE_CHAR = "⠶"

_FALLBACK_LOCATIONS = (
    "/run/current-system/sw/bin/zellij",
    "/usr/local/bin/zellij",
    "/opt/homebrew/bin/zellij",
)


class PaneState(Enum):
    """State of the agent's pane."""
    STOPPED = "Stopped"
    ASKING_QUESTION = "AskingQuestion"
    ACTIVE = "Active"


def derive_name_from_cwd(cwd: str) -> str:
    """Derive a tab name from the working directory.

    ~/.meow/trees/<branch>/... gives the branch, ~/src/<group>/<project>/...
    gives the project, anything else gives the last path component.
    """
    path = Path(cwd)
    home = os.environ.get("HOME")
    if home:
        trees = Path(home) / ".meow" / "trees"
        if path.is_relative_to(trees) and path != trees:
            return path.relative_to(trees).parts[0]

        src = Path(home) / "src"
        if path.is_relative_to(src) and path != src:
            parts = path.relative_to(src).parts
            return parts[1] if len(parts) >= 2 else parts[0]

    return path.name or "claude"


def find_zellij() -> Path | None:
    """Find the zellij binary on PATH or in common nix/homebrew locations."""
    found = shutil.which("zellij")
    if found:
        return Path(found)

    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = None
    candidates = list(_FALLBACK_LOCATIONS)
    if user:
        candidates.insert(0, f"/etc/profiles/per-user/{user}/bin/zellij")

    for candidate in candidates:
        if Path(candidate).exists():
            return Path(candidate)
    return None


def tab_prefix(state: PaneState, session_id: str) -> str:
    if state == PaneState.STOPPED:
        reset_spinner(session_id)
        return DONE_CHAR
    if state == PaneState.ASKING_QUESTION:
        return ASKING_CHAR
    return advance_spinner(session_id)


def update_tab_name(state: PaneState, cwd: str, session_id: str) -> None:
    """Update the zellij tab title to reflect the pane state."""
    pane_id = os.environ.get("ZELLIJ_PANE_ID")
    if not pane_id:
        logger.debug("ZELLIJ_PANE_ID not set, skipping tab update")
        return

    zellij = find_zellij()
    if zellij is None:
        logger.debug("zellij binary not found, skipping tab update")
        return

    name = derive_name_from_cwd(cwd)
    if name == "tmp":
        logger.debug("cwd is tmp, skipping tab update")
        return

    title = f"{tab_prefix(state, session_id)} {name}"
    payload = json.dumps({"pane_id": pane_id, "name": title})
    logger.debug("updating tab: state=%s pane_id=%s title=%r", state.value, pane_id, title)

    try:
        result = subprocess.run(
            [str(zellij), "pipe", "--name", "rename-tab", "--", payload],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError) as e:
        logger.debug("zellij pipe error: %s", e)
        return
    if result.returncode != 0:
        logger.debug("zellij pipe failed: %s", result.stderr.strip())
