"""
Formula Tap - formula-driven installer for prebuilt command line tools.

Reads declarative formulae (name, archive URL, SHA-256, license, files to
install), downloads and verifies the archive, installs executables into a
prefix and smoke-tests them. Ships the `safe-squash` formula.
"""

__version__ = "1.0.0"


def __getattr__(name: str):
    """Lazy import for heavy dependencies."""
    if name == "FormulaInstaller":
        from formula_tap.core.installer import FormulaInstaller

        return FormulaInstaller
    if name == "Formula":
        from formula_tap.models.formula import Formula

        return Formula
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["FormulaInstaller", "Formula", "__version__"]
