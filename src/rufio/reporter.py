"""Output formatting for the Claude Code hook protocol."""
from __future__ import annotations

import json

from rufio.models import CheckResult

REASON_SEPARATOR = " | "


class Reporter:
    """Formats check results for hook output and terminal reports."""

    def __init__(self, results: list[CheckResult]):
        self.results = results

    @property
    def failures(self) -> list[CheckResult]:
        return [r for r in self.results if not r.passed]

    def combined_reason(self) -> str | None:
        reasons = [r.reason for r in self.failures if r.reason]
        if not reasons:
            return None
        return REASON_SEPARATOR.join(reasons)

    def format_hook_output(self) -> str | None:
        """Format a Stop hook block decision. Returns None when every check passed."""
        reason = self.combined_reason()
        if reason is None:
            return None
        return json.dumps({"decision": "block", "reason": reason})

    def format_report(self, config_dir: str | None = None, files_changed: int = 0) -> str:
        """Format a human-readable summary for the `rufio check` command."""
        failures = self.failures
        lines = ["rufio check report"]
        if config_dir:
            lines.append(f"Config: {config_dir}")
        lines.append(
            f"Files changed: {files_changed}  |  Checks: {len(self.results)}  |  "
            f"Passed: {len(self.results) - len(failures)}  |  Failed: {len(failures)}"
        )

        if self.results:
            lines.append("")
        for r in self.results:
            status = "ok" if r.passed else "FAIL"
            lines.append(f"  {status:<5}{r.check_name}")
            if r.reason:
                lines.append(f"       -> {r.reason}")

        return "\n".join(lines)
