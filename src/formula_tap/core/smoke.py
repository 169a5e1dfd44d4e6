"""
Smoke test for installed formulae.

Runs the installed executable with the formula's test arguments and checks
that it exits successfully and prints the expected text on stdout or stderr.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from formula_tap.errors import SmokeTestError
from formula_tap.models.formula import Formula

logger = logging.getLogger(__name__)


@dataclass
class SmokeTestResult:
    command: list[str]
    exit_code: int
    output: str


def run_smoke_test(formula: Formula, bin_dir: Path, timeout: float = 30.0) -> SmokeTestResult:
    """
    Run `<bin_dir>/<executable> <test_args...>` once.

    Raises:
        SmokeTestError: the binary is missing, could not be executed, timed
            out, exited non-zero, or its output lacks `formula.test_expect`.
    """
    executable = bin_dir / Path(formula.bin[0]).name
    command = [str(executable), *formula.test_args]

    if not executable.is_file():
        raise SmokeTestError(f"{executable} does not exist; is {formula.name} installed?")

    logger.debug(f"[Test] Running {' '.join(command)}")
    try:
        proc = subprocess.run(command, capture_output=True, text=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired as e:
        raise SmokeTestError(f"{' '.join(command)} timed out after {timeout:.0f}s") from e
    except OSError as e:
        raise SmokeTestError(f"Could not execute {executable}: {e}") from e

    output = (proc.stdout or "") + (proc.stderr or "")

    if proc.returncode != 0:
        raise SmokeTestError(
            f"{' '.join(command)} exited with status {proc.returncode}",
            exit_code=proc.returncode,
            output=output,
        )

    if formula.test_expect not in output:
        raise SmokeTestError(
            f"Output of {' '.join(command)} does not contain {formula.test_expect!r}",
            exit_code=proc.returncode,
            output=output,
        )

    logger.info(f"[Test] {formula.name}: passed")
    return SmokeTestResult(command=command, exit_code=proc.returncode, output=output)
