"""rufio - post-edit policy checks for AI coding agent sessions."""

__version__ = "0.1.0"

from rufio.models import (
    Check,
    CheckResult,
    EnsureChanged,
    EnsureCommands,
    LoadedConfig,
    ToolUseEvent,
    When,
)

__all__ = [
    "Check",
    "CheckResult",
    "EnsureChanged",
    "EnsureCommands",
    "LoadedConfig",
    "ToolUseEvent",
    "When",
]
