"""Tests for per-session pane state files."""
from __future__ import annotations

import pytest

from rufio.session import (
    SPINNER_FRAMES,
    advance_spinner,
    asking_marker_path,
    clear_asking,
    get_spinner_index,
    reset_spinner,
    set_asking,
    spinner_state_path,
)


@pytest.fixture(autouse=True)
def _state_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("RUFIO_STATE_DIR", str(tmp_path))


class TestAskingMarker:
    def test_set_and_clear(self):
        set_asking("s1")
        assert asking_marker_path("s1").exists()
        assert clear_asking("s1") is True
        assert not asking_marker_path("s1").exists()

    def test_clear_without_marker(self):
        assert clear_asking("nobody") is False

    def test_marker_path_in_state_dir(self, tmp_path):
        assert asking_marker_path("abc") == tmp_path / "rufio-asking-abc"

    def test_session_id_is_sanitised(self, tmp_path):
        assert asking_marker_path("../etc/x").parent == tmp_path


class TestSpinner:
    def test_spinner_constants(self):
        assert len(SPINNER_FRAMES) == 10

    def test_spinner_advances(self):
        assert advance_spinner("spin") == "⠋"
        assert get_spinner_index("spin") == 1
        assert advance_spinner("spin") == "⠙"
        assert get_spinner_index("spin") == 2

        reset_spinner("spin")
        assert get_spinner_index("spin") == 0

    def test_spinner_wraps(self):
        spinner_state_path("wrap").write_text("9")
        assert advance_spinner("wrap") == "⠏"
        assert get_spinner_index("wrap") == 0

    def test_corrupt_state_resets(self):
        spinner_state_path("bad").write_text("not a number")
        assert get_spinner_index("bad") == 0

    def test_out_of_range_state_resets(self):
        spinner_state_path("big").write_text("42")
        assert advance_spinner("big") == SPINNER_FRAMES[0]

    def test_reset_noop_when_missing(self):
        reset_spinner("never-started")
