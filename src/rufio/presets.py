"""Built-in preset registry.

Presets are named bundles of checks that a ``rufio-hooks.yaml`` can pull
in with ``presets: [name, ...]``. Names that are not built in are looked
up as ``$XDG_CONFIG_HOME/rufio/presets/<name>.yaml`` by the config loader.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from rufio.models import Check, EnsureChanged, EnsureCommands, When

PRESET_SUFFIX = ".yaml"


def _commands(name: str, pattern: str, *commands: str) -> Check:
    return Check(name=name, when=When(paths_changed=pattern), then=EnsureCommands(commands))


def _version_bump(name: str, pattern: str) -> Check:
    return Check(
        name=name,
        when=When(paths_changed=pattern, path_exists="package.nix"),
        then=EnsureChanged(("version.toml",)),
    )


PRESETS: MappingProxyType[str, tuple[Check, ...]] = MappingProxyType({
    "cargo": (
        _commands("cargo-checks", "**/*.rs", "cargo test", "cargo fmt", "cargo clippy"),
        _version_bump("cargo-version-bump", "**/*.rs"),
    ),
    "meow": (
        _commands("meow-fmt", "**/*.md", "meow fmt"),
    ),
    "pnpm": (
        _commands("pnpm-checks", "**/*.ts", "pnpm lint", "pnpm typecheck", "pnpm test"),
        _version_bump("pnpm-version-bump", "**/*.ts"),
    ),
    "ledger": (
        _commands("ledger-checks", "**/*.ledger", "hledger check", "folio validate"),
    ),
    "terraform": (
        _commands("terraform-checks", "**/*.tf", "tofu fmt", "tflint", "trivy config ."),
    ),
})


def validate_presets(presets: Mapping[str, tuple[Check, ...]]) -> None:
    """Raise ValueError if a preset breaks the invariants local checks are held to."""
    for preset, checks in presets.items():
        if not checks:
            raise ValueError(f"preset {preset} has no checks")
        for check in checks:
            if not check.name:
                raise ValueError(f"preset {preset} has a check with an empty name")
            if not check.when.paths_changed:
                raise ValueError(f"preset {preset} check {check.name} has empty paths_changed")
            if isinstance(check.then, EnsureCommands):
                if not check.then.commands:
                    raise ValueError(f"preset {preset} check {check.name} has no commands")
            elif not check.then.paths:
                raise ValueError(f"preset {preset} check {check.name} has no paths")


validate_presets(PRESETS)


def presets_dir() -> Path:
    """Return the directory holding user-supplied preset files."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        base = Path(xdg)
    else:
        base = Path(os.environ.get("HOME", ".")) / ".config"
    return base / "rufio" / "presets"


def preset_path(name: str) -> Path:
    """Return the expected path of an external preset file."""
    return presets_dir() / f"{name}{PRESET_SUFFIX}"


def builtin_preset(name: str) -> tuple[Check, ...] | None:
    return PRESETS.get(name)


def external_preset_names() -> list[str]:
    """List preset files present in the user's preset directory."""
    root = presets_dir()
    if not root.is_dir():
        return []
    return sorted(p.stem for p in root.glob(f"*{PRESET_SUFFIX}") if p.is_file())
