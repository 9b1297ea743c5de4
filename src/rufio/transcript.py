"""Claude Code transcript decoding.

A transcript is a JSONL file; assistant lines carry ``message.content``
items, and ``tool_use`` items describe each tool call in order.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

from rufio.models import SHELL_TOOL, WRITE_TOOLS, ToolUseEvent

logger = logging.getLogger("rufio")


def _tool_uses(entry: object) -> list[dict]:
    if not isinstance(entry, dict):
        return []
    message = entry.get("message")
    if not isinstance(message, dict):
        return []
    content = message.get("content")
    if not isinstance(content, list):
        return []
    return [item for item in content if isinstance(item, dict) and item.get("type") == "tool_use"]


def _input_str(tool_input: object, key: str) -> str | None:
    if not isinstance(tool_input, dict):
        return None
    value = tool_input.get(key)
    return value if isinstance(value, str) else None


def extract_tool_events(transcript_path: str | Path) -> list[ToolUseEvent]:
    """Extract all tool use events from a transcript file, in order."""
    path = Path(transcript_path)
    if not path.exists():
        return []

    events: list[ToolUseEvent] = []
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue

            for item in _tool_uses(entry):
                name = item.get("name")
                if not isinstance(name, str):
                    continue

                tool_input = item.get("input")
                command = _input_str(tool_input, "command") if name == SHELL_TOOL else None
                file_path = _input_str(tool_input, "file_path") if name in WRITE_TOOLS else None
                events.append(ToolUseEvent(
                    tool_name=name,
                    index=len(events),
                    command=command,
                    file_path=file_path,
                ))

    logger.debug("Read %d tool events from %s", len(events), path)
    return events
