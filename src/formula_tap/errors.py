"""
Error types raised by formula-tap.

Library code raises these; the CLI catches FormulaTapError and turns it
into a one-line message with a non-zero exit code.
"""


class FormulaTapError(Exception):
    """Base class for all formula-tap errors."""


class ManifestError(FormulaTapError):
    """The formula is malformed or incomplete."""

    def __init__(self, name: str, problems: list[str]):
        self.name = name
        self.problems = problems
        super().__init__(f"Invalid formula {name!r}: " + "; ".join(problems))


class FormulaNotFoundError(FormulaTapError):
    """No formula is registered under the requested name."""


class FetchError(FormulaTapError):
    """The archive could not be downloaded from any of its URLs."""


class ChecksumMismatchError(FormulaTapError):
    """The downloaded archive does not match the declared SHA-256."""

    def __init__(self, url: str, expected: str, actual: str):
        self.url = url
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"SHA-256 mismatch for {url}\n  Expected: {expected}\n  Actual:   {actual}"
        )


class InstallError(FormulaTapError):
    """The archive was fetched but its contents could not be installed."""


class FormulaNotInstalledError(FormulaTapError):
    """There is no install receipt for the formula."""


class SmokeTestError(FormulaTapError):
    """The installed binary failed its smoke test."""

    def __init__(self, message: str, exit_code: int | None = None, output: str = ""):
        self.exit_code = exit_code
        self.output = output
        super().__init__(message)
