"""Git utilities for rufio."""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger("rufio")

# Files that mark a project root inside a larger git repository.
PROJECT_MARKERS = ("shell.nix", "CLAUDE.md")


def get_git_root(cwd: str) -> Path | None:
    """Return the top-level directory of the git repository containing cwd."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return None
    if result.returncode != 0:
        return None
    return Path(result.stdout.strip())


def find_project_root(cwd: str, git_root: Path) -> Path | None:
    """Walk up from cwd to the first directory holding a project marker, stopping at git_root."""
    current = Path(cwd)
    while True:
        if any((current / marker).exists() for marker in PROJECT_MARKERS):
            return current
        if current == git_root:
            return None
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _parse_porcelain(output: str) -> list[str]:
    """Return paths from `git status --porcelain` output ("XY path" per line)."""
    files: list[str] = []
    for line in output.splitlines():
        path = line[3:]
        if not path:
            continue
        # Renames and copies are reported as "old -> new".
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        files.append(path)
    return files


def filter_to_project(cwd: str, files: list[str]) -> list[str]:
    """Keep only files inside the project that contains cwd.

    Paths stay relative to the git root. When no project marker is found,
    or the project is the whole repository, files pass through unchanged.
    """
    git_root = get_git_root(cwd)
    if git_root is None:
        return files

    project_root = find_project_root(str(Path(cwd).resolve()), git_root)
    if project_root is None or project_root == git_root:
        return files

    try:
        prefix = project_root.relative_to(git_root).as_posix()
    except ValueError:
        return files

    return [f for f in files if f == prefix or f.startswith(prefix + "/")]


def get_changed_files(cwd: str) -> list[str]:
    """Get files changed in the working tree (staged, unstaged and untracked)."""
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain", "-uall"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        logger.debug("git status failed in %s", cwd, exc_info=True)
        return []
    if result.returncode != 0:
        return []

    return filter_to_project(cwd, _parse_porcelain(result.stdout))
