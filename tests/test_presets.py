"""Tests for the built-in preset registry."""
from __future__ import annotations

import pytest

from rufio.models import Check, EnsureChanged, EnsureCommands, When
from rufio.presets import (
    PRESETS,
    builtin_preset,
    external_preset_names,
    preset_path,
    presets_dir,
    validate_presets,
)


class TestBuiltinPresets:
    def test_presets_exist(self):
        assert set(PRESETS) == {"cargo", "meow", "pnpm", "ledger", "terraform"}

    def test_cargo_preset_has_checks(self):
        cargo = PRESETS["cargo"]
        assert [c.name for c in cargo] == ["cargo-checks", "cargo-version-bump"]
        assert cargo[0].then == EnsureCommands(("cargo test", "cargo fmt", "cargo clippy"))

    def test_version_bump_gated_on_package_nix(self):
        bump = PRESETS["pnpm"][1]
        assert bump.when.path_exists == "package.nix"
        assert bump.then == EnsureChanged(("version.toml",))

    def test_terraform_commands(self):
        (check,) = PRESETS["terraform"]
        assert check.when.paths_changed == "**/*.tf"
        assert check.then.commands == ("tofu fmt", "tflint", "trivy config .")

    def test_builtins_pass_validation(self):
        validate_presets(PRESETS)

    @pytest.mark.parametrize("broken, message", [
        ({"empty": ()}, "has no checks"),
        ({"x": (Check("", When("*.rs"), EnsureCommands(("make",))),)}, "empty name"),
        ({"x": (Check("c", When(""), EnsureCommands(("make",))),)}, "empty paths_changed"),
        ({"x": (Check("c", When("*.rs"), EnsureCommands(())),)}, "no commands"),
        ({"x": (Check("c", When("*.rs"), EnsureChanged(())),)}, "no paths"),
    ])
    def test_broken_registry_raises(self, broken, message):
        with pytest.raises(ValueError, match=message):
            validate_presets(broken)

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            PRESETS["custom"] = ()

    def test_builtin_preset_lookup(self):
        assert builtin_preset("meow") == PRESETS["meow"]
        assert builtin_preset("nope") is None


class TestPresetPath:
    def test_uses_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert preset_path("work") == tmp_path / "rufio" / "presets" / "work.yaml"

    def test_falls_back_to_home_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert preset_path("work") == tmp_path / ".config" / "rufio" / "presets" / "work.yaml"

    def test_external_preset_names(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        presets_dir().mkdir(parents=True)
        (presets_dir() / "work.yaml").write_text("checks: []\n")
        (presets_dir() / "home.yaml").write_text("checks: []\n")
        (presets_dir() / "notes.txt").write_text("ignored")
        assert external_preset_names() == ["home", "work"]

    def test_external_preset_names_without_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "missing"))
        assert external_preset_names() == []
