"""Configuration loading and parsing for rufio."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from rufio.models import Check, EnsureChanged, EnsureCommands, LoadedConfig, When
from rufio.presets import builtin_preset, preset_path

logger = logging.getLogger("rufio")

CONFIG_FILENAME = "rufio-hooks.yaml"


class ConfigError(Exception):
    """Raised when a config or preset document cannot be loaded."""

    def __init__(self, message: str, path: Path | None = None, check_name: str | None = None):
        super().__init__(message)
        self.path = path
        self.check_name = check_name


@dataclass
class _RawCheck:
    """A check as written in YAML, before the action is narrowed to one variant."""
    name: str
    paths_changed: str
    path_exists: str | None
    ensure_commands: tuple[str, ...] | None
    ensure_changed: tuple[str, ...] | None

    def to_check(self) -> Check:
        when = When(paths_changed=self.paths_changed, path_exists=self.path_exists)
        if self.ensure_commands is not None:
            return Check(name=self.name, when=when, then=EnsureCommands(self.ensure_commands))
        return Check(name=self.name, when=when, then=EnsureChanged(self.ensure_changed or ()))


def _read_yaml(path: Path, kind: str) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read {kind}: {path}", path=path) from e

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {kind}: {path}: {e}", path=path) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Failed to parse {kind}: {path}: expected a mapping", path=path)
    return raw


def _string_list(value: object, field: str, path: Path, kind: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Failed to parse {kind}: {path}: '{field}' must be a list of strings", path=path)
    return tuple(value)


def _parse_check(raw: object, path: Path, kind: str) -> _RawCheck:
    """Decode one check mapping. Only structural problems are reported here."""
    if not isinstance(raw, dict):
        raise ConfigError(f"Failed to parse {kind}: {path}: each check must be a mapping", path=path)

    name = raw.get("name")
    when = raw.get("when")
    then = raw.get("then")
    if when is None:
        when = {}
    if then is None:
        then = {}
    if not isinstance(when, dict) or not isinstance(then, dict):
        raise ConfigError(
            f"Failed to parse {kind}: {path}: 'when' and 'then' must be mappings",
            path=path,
            check_name=name if isinstance(name, str) else None,
        )

    path_exists = when.get("path_exists")
    for field, value in (("name", name), ("when.paths_changed", when.get("paths_changed"))):
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"Failed to parse {kind}: {path}: '{field}' must be a string", path=path)
    if path_exists is not None and not isinstance(path_exists, str):
        raise ConfigError(f"Failed to parse {kind}: {path}: 'when.path_exists' must be a string", path=path)

    return _RawCheck(
        name=name or "",
        paths_changed=when.get("paths_changed") or "",
        path_exists=path_exists,
        ensure_commands=_string_list(then.get("ensure_commands"), "then.ensure_commands", path, kind),
        ensure_changed=_string_list(then.get("ensure_changed"), "then.ensure_changed", path, kind),
    )


def validate_check(check: _RawCheck, config_path: Path) -> None:
    """Validate a user-declared check. Preset checks are never passed through here."""
    if not check.name:
        raise ConfigError(f"Invalid config at {config_path}: check missing 'name'", path=config_path)
    if not check.paths_changed:
        raise ConfigError(
            f"Invalid config at {config_path}: check '{check.name}' missing 'when.paths_changed'",
            path=config_path,
            check_name=check.name,
        )
    if check.ensure_commands is None and check.ensure_changed is None:
        raise ConfigError(
            f"Invalid config at {config_path}: check '{check.name}' must have "
            "'then.ensure_commands' or 'then.ensure_changed'",
            path=config_path,
            check_name=check.name,
        )
    if check.ensure_commands is not None and check.ensure_changed is not None:
        raise ConfigError(
            f"Invalid config at {config_path}: check '{check.name}' cannot have both "
            "'then.ensure_commands' and 'then.ensure_changed'",
            path=config_path,
            check_name=check.name,
        )


def load_external_preset(name: str) -> tuple[Check, ...] | None:
    """Load a preset from the user's config home; None if the file is absent."""
    path = preset_path(name)
    if not path.exists():
        return None

    raw = _read_yaml(path, "preset file")
    if "presets" in raw:
        logger.warning("Ignoring 'presets' in preset file %s (presets do not nest)", path)
    if "checks" not in raw:
        raise ConfigError(f"Failed to parse preset file: {path}: missing 'checks'", path=path)

    checks = raw["checks"]
    if not isinstance(checks, list):
        raise ConfigError(f"Failed to parse preset file: {path}: 'checks' must be a list", path=path)

    resolved: list[Check] = []
    for item in checks:
        parsed = _parse_check(item, path, "preset file")
        if not parsed.name:
            raise ConfigError(f"Failed to parse preset file: {path}: check missing 'name'", path=path)
        if not parsed.paths_changed:
            raise ConfigError(
                f"Failed to parse preset file: {path}: check '{parsed.name}' missing 'when.paths_changed'",
                path=path,
                check_name=parsed.name,
            )
        if parsed.ensure_commands is None and parsed.ensure_changed is None:
            raise ConfigError(
                f"Failed to parse preset file: {path}: check '{parsed.name}' has no 'then' action",
                path=path,
                check_name=parsed.name,
            )
        resolved.append(parsed.to_check())
    return tuple(resolved)


def resolve_presets(preset_names: list[str], config_path: Path) -> list[Check]:
    """Expand preset names into their checks, built-ins first, then the user's preset files."""
    checks: list[Check] = []
    for name in preset_names:
        builtin = builtin_preset(name)
        if builtin is not None:
            checks.extend(builtin)
            continue

        external = load_external_preset(name)
        if external is None:
            raise ConfigError(
                f"Invalid config at {config_path}: preset '{name}' not found at {preset_path(name)}",
                path=config_path,
            )
        checks.extend(external)
    return checks


def load_config(config_path: Path) -> tuple[Check, ...]:
    """Load a rufio-hooks.yaml file, resolving presets and merging them with local checks."""
    config_path = Path(config_path)
    raw = _read_yaml(config_path, "config")

    preset_names = _string_list(raw.get("presets"), "presets", config_path, "config") or ()
    raw_checks = raw.get("checks")
    if raw_checks is None:
        raw_checks = []
    if not isinstance(raw_checks, list):
        raise ConfigError(f"Failed to parse config: {config_path}: 'checks' must be a list", path=config_path)
    local = [_parse_check(item, config_path, "config") for item in raw_checks]

    merged = resolve_presets(list(preset_names), config_path)
    if not merged and not local:
        raise ConfigError(
            f"Invalid config at {config_path}: no checks defined (add 'presets' or 'checks')",
            path=config_path,
        )

    for check in local:
        validate_check(check, config_path)
    merged.extend(check.to_check() for check in local)

    return tuple(merged)


def load_config_dir(config_dir: str | Path) -> LoadedConfig:
    """Load the config in exactly this directory. Errors propagate to the caller."""
    config_dir = Path(config_dir).absolute()
    checks = load_config(config_dir / CONFIG_FILENAME)
    return LoadedConfig(checks=checks, config_dir=config_dir)


def find_nearest_config(start_dir: str | Path, repo_root: str | Path) -> LoadedConfig | None:
    """Find the nearest loadable config walking up from start_dir, never leaving repo_root.

    A config that fails to load is skipped so a valid ancestor can still apply.
    """
    current = Path(start_dir).absolute()
    root = Path(repo_root).absolute()

    if not current.is_relative_to(root):
        return None

    while True:
        config_path = current / CONFIG_FILENAME
        if config_path.exists():
            try:
                checks = load_config(config_path)
            except ConfigError as e:
                logger.debug("Skipping config that failed to load: %s", e)
            else:
                return LoadedConfig(checks=checks, config_dir=current)

        if current == root:
            return None

        parent = current.parent
        if parent == current:
            return None
        current = parent

        if not current.is_relative_to(root):
            return None
