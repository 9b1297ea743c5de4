"""Tests for the python -m rufio entry point."""
from __future__ import annotations

import json
import os
import subprocess
import sys


def _python_m(*args: str, stdin: str | None = None, env: dict | None = None):
    return subprocess.run(
        [sys.executable, "-m", "rufio", *args],
        input=stdin,
        capture_output=True,
        text=True,
        timeout=10,
        env=env,
    )


class TestMainModule:
    def test_main_is_the_click_group(self) -> None:
        import rufio.__main__ as m
        from rufio.cli import main

        assert m.main is main

    def test_help_lists_commands(self) -> None:
        result = _python_m("--help")
        assert result.returncode == 0
        for command in ("hook", "check", "validate", "init", "list-presets"):
            assert command in result.stdout

    def test_hook_reads_stdin(self, tmp_path) -> None:
        env = {**os.environ, "RUFIO_STATE_DIR": str(tmp_path)}
        env.pop("ZELLIJ_PANE_ID", None)
        payload = json.dumps({
            "hook_event_name": "Notification",
            "cwd": str(tmp_path),
            "session_id": "m",
            "transcript_path": str(tmp_path / "t.jsonl"),
        })

        result = _python_m("hook", stdin=payload, env=env)

        assert result.returncode == 0
        assert result.stdout == ""

    def test_debug_logging_goes_to_stderr(self, tmp_path) -> None:
        env = {**os.environ, "RUFIO_STATE_DIR": str(tmp_path), "RUFIO_LOG_LEVEL": "debug"}
        env.pop("ZELLIJ_PANE_ID", None)
        payload = json.dumps({
            "hook_event_name": "Notification",
            "cwd": str(tmp_path),
            "session_id": "m",
            "transcript_path": str(tmp_path / "t.jsonl"),
        })

        result = _python_m("hook", stdin=payload, env=env)

        assert result.stdout == ""
        assert "unhandled event: Notification" in result.stderr
