"""rufio CLI entry point."""
from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from rufio.config import CONFIG_FILENAME, ConfigError, find_nearest_config, load_config_dir
from rufio.engine import Engine
from rufio.models import EnsureCommands, HookEvent, HookInput, LoadedConfig
from rufio.presets import PRESETS, external_preset_names, preset_path
from rufio.reporter import Reporter
from rufio.session import clear_asking, log_path, set_asking
from rufio.transcript import extract_tool_events
from rufio.utils.git import get_changed_files, get_git_root
from rufio.zellij import PaneState, update_tab_name

logger = logging.getLogger("rufio")

# Events that mean the agent is working again.
_ACTIVE_EVENTS = {HookEvent.PRE_TOOL_USE, HookEvent.POST_TOOL_USE, HookEvent.USER_PROMPT_SUBMIT}


def _configure_logging() -> None:
    level = os.environ.get("RUFIO_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )


def _attach_session_log(session_id: str) -> None:
    """Mirror debug logging into a per-session file while running inside zellij."""
    if not os.environ.get("ZELLIJ_PANE_ID"):
        return

    path = log_path(session_id)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return
    handler.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", datefmt="%H:%M:%S"))
    handler.setLevel(logging.DEBUG)

    # Keep stderr at the configured level once the rufio logger opens up to DEBUG.
    root = logging.getLogger()
    for h in root.handlers:
        if h.level == logging.NOTSET:
            h.setLevel(root.level)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)


def _find_config(cwd: str) -> LoadedConfig | None:
    start = Path(cwd).resolve()
    repo_root = get_git_root(cwd)
    root = repo_root.resolve() if repo_root is not None else start
    return find_nearest_config(start, root)


def _read_events(transcript_path: str | None):
    if not transcript_path:
        return []
    try:
        return extract_tool_events(transcript_path)
    except OSError:
        logger.warning("Could not read transcript %s", transcript_path, exc_info=True)
        return []


def _run_stop_checks(hook_input: HookInput) -> Reporter:
    changed_files = get_changed_files(hook_input.cwd)
    logger.debug("Stop: %d changed files", len(changed_files))

    events = _read_events(hook_input.transcript_path)
    logger.debug("Stop: %d transcript events", len(events))

    loaded = _find_config(hook_input.cwd)
    if loaded is None:
        logger.debug("Stop: no %s found from %s", CONFIG_FILENAME, hook_input.cwd)
        return Reporter(results=[])

    result = Engine(loaded).evaluate(changed_files, events)
    return Reporter(results=result.results)


def _handle_stop(hook_input: HookInput) -> str | None:
    # Run checks before touching the tab so a blocked stop never shows as done.
    reporter = _run_stop_checks(hook_input)
    output = reporter.format_hook_output()

    if clear_asking(hook_input.session_id):
        logger.debug("Stop: asking marker existed, removed it")
    elif output is None:
        logger.debug("Stop: all checks pass -> stopped state")
        update_tab_name(PaneState.STOPPED, hook_input.cwd, hook_input.session_id)
    else:
        logger.debug("Stop: checks failed -> active state (blocking)")
        update_tab_name(PaneState.ACTIVE, hook_input.cwd, hook_input.session_id)

    if output is not None:
        logger.debug("Stop: outputting block JSON: %s", output)
    return output


@click.group()
def main():
    """rufio - post-edit policy checks for AI coding agent sessions."""
    _configure_logging()


@main.command()
def hook():
    """Handle one Claude Code hook event read from stdin."""
    try:
        raw = json.load(sys.stdin)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Invalid hook input: {e}") from e
    try:
        hook_input = HookInput.from_dict(raw)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    _attach_session_log(hook_input.session_id)
    logger.debug("event=%s tool=%s", hook_input.hook_event_name, hook_input.tool_name)

    event = hook_input.event
    if event == HookEvent.STOP:
        output = _handle_stop(hook_input)
        if output:
            click.echo(output)
    elif event == HookEvent.PERMISSION_REQUEST:
        logger.debug("PermissionRequest -> setting question state")
        update_tab_name(PaneState.ASKING_QUESTION, hook_input.cwd, hook_input.session_id)
        set_asking(hook_input.session_id)
    elif event in _ACTIVE_EVENTS:
        if clear_asking(hook_input.session_id):
            logger.debug("%s: cleared asking marker", hook_input.hook_event_name)
        logger.debug("%s: %s -> ticking spinner", hook_input.hook_event_name, hook_input.tool_name)
        update_tab_name(PaneState.ACTIVE, hook_input.cwd, hook_input.session_id)
    else:
        logger.debug("unhandled event: %s", hook_input.hook_event_name)


@main.command()
@click.option("--project-dir", default=None, help="Directory to check (defaults to CLAUDE_PROJECT_DIR or cwd)")
@click.option("--transcript", default=None, type=click.Path(dir_okay=False), help="Session transcript (JSONL)")
def check(project_dir: str | None, transcript: str | None):
    """Run the configured checks against the working tree."""
    project_dir = project_dir or os.environ.get("CLAUDE_PROJECT_DIR", os.getcwd())

    loaded = _find_config(project_dir)
    if loaded is None:
        click.echo(f"No {CONFIG_FILENAME} found from {project_dir}.")
        return

    changed_files = get_changed_files(project_dir)
    events = _read_events(transcript)
    result = Engine(loaded).evaluate(changed_files, events)

    reporter = Reporter(results=result.results)
    click.echo(reporter.format_report(config_dir=str(loaded.config_dir), files_changed=len(changed_files)))
    if result.is_blocking:
        sys.exit(1)


@main.command()
@click.option("--project-dir", default=None, help="Directory containing rufio-hooks.yaml")
def validate(project_dir: str | None):
    """Load rufio-hooks.yaml from a directory and report any errors."""
    project_dir = project_dir or os.getcwd()

    try:
        loaded = load_config_dir(project_dir)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"{loaded.config_dir / CONFIG_FILENAME}: {len(loaded.checks)} checks")
    for c in loaded.checks:
        kind = "commands" if isinstance(c.then, EnsureCommands) else "changed"
        click.echo(f"  {c.name:<28} {c.when.paths_changed:<14} {kind}")


@main.command()
@click.option("--project-dir", default=None, help="Project directory")
@click.option("--preset", "presets", multiple=True, help="Preset to include (repeatable)")
def init(project_dir: str | None, presets: tuple[str, ...]):
    """Create a rufio-hooks.yaml in the project."""
    project_dir = project_dir or os.getcwd()
    config_path = Path(project_dir) / CONFIG_FILENAME
    if config_path.exists():
        raise click.ClickException(f"{config_path} already exists")

    for name in presets:
        if name not in PRESETS and not preset_path(name).exists():
            raise click.ClickException(f"Unknown preset '{name}' (not built in, not found at {preset_path(name)})")

    preset_lines = "\n".join(f"  - {p}" for p in presets) or "  # - cargo"
    config_content = f"""# rufio configuration

presets:
{preset_lines}

checks: []
  # - name: docs-fmt
  #   when:
  #     paths_changed: "**/*.md"
  #   then:
  #     ensure_commands:
  #       - prettier --write
"""
    config_path.write_text(config_content, encoding="utf-8")
    click.echo(f"Created {config_path}")


@main.command("list-presets")
def list_presets():
    """List built-in and user-supplied presets."""
    click.echo(f"{'Preset':<12} {'Source':<10} Checks")
    click.echo("-" * 72)

    for name in sorted(PRESETS):
        checks = ", ".join(c.name for c in PRESETS[name])
        click.echo(f"{name:<12} {'built-in':<10} {checks}")

    external = [n for n in external_preset_names() if n not in PRESETS]
    for name in external:
        click.echo(f"{name:<12} {'user':<10} {preset_path(name)}")

    click.echo(f"\n{len(PRESETS) + len(external)} presets total.")


if __name__ == "__main__":
    main()
