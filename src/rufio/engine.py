"""rufio check evaluation engine."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rufio.models import Check, CheckResult, EnsureChanged, EnsureCommands, LoadedConfig, ToolUseEvent
from rufio.patterns import GlobPattern, InvalidPatternError, compile_pattern

logger = logging.getLogger("rufio")


@dataclass
class EvaluationResult:
    """Result of evaluating every check of a loaded config."""
    results: list[CheckResult] = field(default_factory=list)

    @property
    def is_blocking(self) -> bool:
        return any(not r.passed for r in self.results)


def _last_write_index(pattern: GlobPattern, events: Sequence[ToolUseEvent]) -> int | None:
    indices = [
        e.index for e in events
        if e.is_write and e.file_path is not None and pattern.matches(e.file_path)
    ]
    return max(indices) if indices else None


def check_ensure_commands(
    check: Check,
    pattern: GlobPattern,
    required: EnsureCommands,
    events: Sequence[ToolUseEvent],
) -> CheckResult:
    """Every required command must have run after the last matching write."""
    last_write = _last_write_index(pattern, events)

    missing: list[str] = []
    for cmd in required.commands:
        ran_after_write = any(
            e.is_shell
            and e.command is not None
            and cmd in e.command
            # No matching write in the log means there is no lower bound.
            and (last_write is None or e.index > last_write)
            for e in events
        )
        if not ran_after_write:
            missing.append(cmd)

    if missing:
        return CheckResult(
            check_name=check.name,
            reason=f"[{check.name}] Required commands not run after last edit: {', '.join(missing)}",
        )
    return CheckResult(check_name=check.name)


def check_ensure_changed(check: Check, required: EnsureChanged, changed_files: Sequence[str]) -> CheckResult:
    """At least one required path must be among the changed files."""
    any_changed = any(
        f == path or f.endswith(f"/{path}")
        for path in required.paths
        for f in changed_files
    )
    if any_changed:
        return CheckResult(check_name=check.name)
    return CheckResult(
        check_name=check.name,
        reason=f"[{check.name}] Required files not modified: {', '.join(required.paths)}",
    )


def evaluate_check(
    check: Check,
    config_dir: Path,
    changed_files: Sequence[str],
    events: Sequence[ToolUseEvent],
) -> CheckResult:
    """Evaluate one check against the changed files and transcript events."""
    if check.when.path_exists is not None and not (config_dir / check.when.path_exists).exists():
        return CheckResult(check_name=check.name)

    try:
        pattern = compile_pattern(check.when.paths_changed)
    except InvalidPatternError:
        return CheckResult(
            check_name=check.name,
            reason=f"Invalid glob pattern '{check.when.paths_changed}' in check '{check.name}'",
        )

    if not any(pattern.matches(f) for f in changed_files):
        return CheckResult(check_name=check.name)

    if isinstance(check.then, EnsureCommands):
        return check_ensure_commands(check, pattern, check.then, events)
    return check_ensure_changed(check, check.then, changed_files)


class Engine:
    """Runs every check of a loaded config."""

    def __init__(self, loaded: LoadedConfig):
        self.loaded = loaded

    def evaluate(self, changed_files: Sequence[str], events: Sequence[ToolUseEvent]) -> EvaluationResult:
        result = EvaluationResult()

        for check in self.loaded.checks:
            try:
                outcome = evaluate_check(check, self.loaded.config_dir, changed_files, events)
            except Exception:
                logger.exception("Check %s raised an exception", check.name)
                outcome = CheckResult(
                    check_name=check.name,
                    reason=f"[{check.name}] Check could not be evaluated",
                )

            if outcome.passed:
                logger.debug("check %s: pass", check.name)
            else:
                logger.debug("check %s: BLOCK - %s", check.name, outcome.reason)
            result.results.append(outcome)

        return result


def run_checks(
    loaded: LoadedConfig,
    changed_files: Sequence[str],
    events: Sequence[ToolUseEvent],
) -> list[CheckResult]:
    """Evaluate every check, returning one result per check in config order."""
    return Engine(loaded).evaluate(changed_files, events).results
