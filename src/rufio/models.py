"""Core models for rufio."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

# Tool names as they appear in Claude Code transcripts.
SHELL_TOOL = "Bash"
WRITE_TOOLS = frozenset({"Edit", "Write"})


class HookEvent(Enum):
    """Claude Code hook lifecycle events rufio reacts to."""
    PRE_TOOL_USE = "PreToolUse"
    POST_TOOL_USE = "PostToolUse"
    STOP = "Stop"
    USER_PROMPT_SUBMIT = "UserPromptSubmit"
    PERMISSION_REQUEST = "PermissionRequest"

    @classmethod
    def from_string(cls, value: str) -> HookEvent | None:
        """Return the matching event, or None for events rufio ignores."""
        for member in cls:
            if member.value == value:
                return member
        return None


@dataclass
class HookInput:
    """The JSON object Claude Code passes to a hook on stdin."""
    hook_event_name: str
    cwd: str
    session_id: str
    transcript_path: str
    tool_name: str | None = None

    @classmethod
    def from_dict(cls, raw: object) -> HookInput:
        if not isinstance(raw, dict):
            raise ValueError("Hook input must be a JSON object")
        missing = [
            key for key in ("hook_event_name", "cwd", "session_id", "transcript_path")
            if not isinstance(raw.get(key), str)
        ]
        if missing:
            raise ValueError(f"Hook input missing required field(s): {', '.join(missing)}")
        tool_name = raw.get("tool_name")
        return cls(
            hook_event_name=raw["hook_event_name"],
            cwd=raw["cwd"],
            session_id=raw["session_id"],
            transcript_path=raw["transcript_path"],
            tool_name=tool_name if isinstance(tool_name, str) else None,
        )

    @property
    def event(self) -> HookEvent | None:
        return HookEvent.from_string(self.hook_event_name)


@dataclass(frozen=True)
class When:
    """Trigger condition for a check."""
    paths_changed: str
    path_exists: str | None = None


@dataclass(frozen=True)
class EnsureCommands:
    """Every command substring must appear in a shell call after the last matching edit."""
    commands: tuple[str, ...]


@dataclass(frozen=True)
class EnsureChanged:
    """At least one of these paths must be in the changed-file set."""
    paths: tuple[str, ...]


Action = Union[EnsureCommands, EnsureChanged]


@dataclass(frozen=True)
class Check:
    """A named policy: a trigger and exactly one required action."""
    name: str
    when: When
    then: Action


@dataclass(frozen=True)
class LoadedConfig:
    """Resolved checks together with the directory their config was found in."""
    checks: tuple[Check, ...]
    config_dir: Path


@dataclass(frozen=True)
class ToolUseEvent:
    """A single tool invocation from the agent transcript."""
    tool_name: str
    index: int
    command: str | None = None
    file_path: str | None = None

    @property
    def is_write(self) -> bool:
        return self.tool_name in WRITE_TOOLS

    @property
    def is_shell(self) -> bool:
        return self.tool_name == SHELL_TOOL


@dataclass
class CheckResult:
    """Outcome of one check. A reason of None means the check passed."""
    check_name: str
    reason: str | None = None

    @property
    def passed(self) -> bool:
        return self.reason is None
