"""Tests for trigger glob matching."""
from __future__ import annotations

import pytest

from rufio.patterns import GlobPattern, InvalidPatternError, compile_pattern


class TestGlobPattern:
    def test_globstar_matches_nested_path(self):
        assert compile_pattern("**/*.rs").matches("src/checks/runner.rs")

    def test_globstar_matches_root_file(self):
        assert compile_pattern("**/*.rs").matches("lib.rs")

    def test_filename_pattern_matches_any_depth(self):
        assert compile_pattern("*.rs").matches("crates/foo/src/lib.rs")

    def test_absolute_path_matches_via_filename(self):
        assert compile_pattern("*.md").matches("/home/user/proj/README.md")

    def test_non_matching_extension(self):
        pattern = compile_pattern("**/*.rs")
        assert not pattern.matches("src/main.py")
        assert not pattern.matches("Cargo.toml")

    def test_directory_anchored_pattern(self):
        pattern = compile_pattern("src/*.ts")
        assert pattern.matches("src/index.ts")
        assert not pattern.matches("lib/index.ts")

    def test_exact_filename(self):
        pattern = compile_pattern("package.nix")
        assert pattern.matches("package.nix")
        assert pattern.matches("nested/package.nix")

    def test_repr_includes_pattern(self):
        assert "*.tf" in repr(GlobPattern("*.tf"))


class TestInvalidPattern:
    def test_trailing_escape_is_invalid(self):
        with pytest.raises(InvalidPatternError) as exc:
            compile_pattern("src/*.rs\\")
        assert exc.value.pattern == "src/*.rs\\"

    def test_invalid_pattern_is_value_error(self):
        with pytest.raises(ValueError, match="Invalid glob pattern"):
            compile_pattern("foo\\")

    @pytest.mark.parametrize("pattern", ["[", "[abc", "src/[!a.rs", "[a/b].rs", "a***b", "**a", "src/**.rs", "a**/b"])
    def test_malformed_glob_is_invalid(self, pattern):
        with pytest.raises(InvalidPatternError) as exc:
            compile_pattern(pattern)
        assert exc.value.pattern == pattern

    @pytest.mark.parametrize("pattern", ["!*.rs", "#*.rs", "", "   "])
    def test_pattern_that_could_never_match_is_invalid(self, pattern):
        with pytest.raises(InvalidPatternError):
            compile_pattern(pattern)

    def test_closed_classes_compile(self):
        assert compile_pattern("src/[abc].rs").matches("src/a.rs")
        assert compile_pattern("[]x].md").matches("x.md")
        assert compile_pattern("[!a].rs").matches("lib/b.rs")

    def test_bounded_globstars_compile(self):
        assert compile_pattern("src/**/*.rs").matches("src/a/b/c.rs")
        assert compile_pattern("docs/**").matches("docs/guide/intro.md")


class TestSegmentWildcard:
    def test_single_star_stays_in_segment(self):
        pattern = compile_pattern("src/*.rs")
        assert pattern.matches("src/lib.rs")
        assert not pattern.matches("src/a/b.rs")

    def test_globstar_crosses_directories(self):
        assert compile_pattern("src/**/*.rs").matches("src/a/b.rs")
