"""Tests for the post-install smoke test."""

import pytest

from conftest import HELP_SCRIPT
from formula_tap.core.smoke import run_smoke_test
from formula_tap.errors import SmokeTestError


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


def write_script(bin_dir, body: bytes, name: str = "safe-squash"):
    script = bin_dir / name
    script.write_bytes(body)
    script.chmod(0o755)
    return script


class TestRunSmokeTest:
    def test_passes_on_help_output(self, bin_dir, formula):
        write_script(bin_dir, HELP_SCRIPT)
        result = run_smoke_test(formula, bin_dir)

        assert result.exit_code == 0
        assert "safe-squash" in result.output
        assert result.command == [str(bin_dir / "safe-squash"), "--help"]

    def test_accepts_help_on_stderr(self, bin_dir, formula):
        write_script(bin_dir, b'#!/bin/sh\necho "usage: safe-squash" >&2\n')
        assert "safe-squash" in run_smoke_test(formula, bin_dir).output

    def test_fails_on_nonzero_exit(self, bin_dir, formula):
        write_script(bin_dir, b'#!/bin/sh\necho "safe-squash: bad flag"\nexit 3\n')

        with pytest.raises(SmokeTestError, match="exited with status 3") as excinfo:
            run_smoke_test(formula, bin_dir)
        assert excinfo.value.exit_code == 3
        assert "bad flag" in excinfo.value.output

    def test_fails_when_output_lacks_name(self, bin_dir, formula):
        write_script(bin_dir, b'#!/bin/sh\necho "usage: something-else"\n')

        with pytest.raises(SmokeTestError, match="does not contain 'safe-squash'"):
            run_smoke_test(formula, bin_dir)

    def test_fails_when_not_installed(self, bin_dir, formula):
        with pytest.raises(SmokeTestError, match="does not exist"):
            run_smoke_test(formula, bin_dir)

    def test_fails_when_not_executable(self, bin_dir, formula):
        script = write_script(bin_dir, HELP_SCRIPT)
        script.chmod(0o644)

        with pytest.raises(SmokeTestError, match="Could not execute"):
            run_smoke_test(formula, bin_dir)

    def test_times_out(self, bin_dir, formula):
        write_script(bin_dir, b"#!/bin/sh\nexec sleep 5\n")

        with pytest.raises(SmokeTestError, match="timed out"):
            run_smoke_test(formula, bin_dir, timeout=0.2)
