"""
Example: Bump, install and smoke-test safe-squash into a scratch prefix.

Usage:
    export GITHUB_TOKEN=your_token_here   # optional
    python examples/install_safe_squash.py
"""

import asyncio
from pathlib import Path

from formula_tap import FormulaInstaller
from formula_tap.core.bump import FormulaBumper
from formula_tap.core.smoke import run_smoke_test
from formula_tap.formulae import SAFE_SQUASH


async def main():
    prefix = Path("./scratch_prefix")
    installer = FormulaInstaller(prefix=prefix)

    # The shipped formula carries a checksum placeholder; fill it in first
    formula = await FormulaBumper(fetcher=installer.fetcher).compute(SAFE_SQUASH, version=SAFE_SQUASH.tag)

    receipt = await installer.install(formula)
    result = run_smoke_test(formula, installer.bin_dir)

    print(f"\n✅ Installed {receipt.name} {receipt.version} to {installer.bin_dir.absolute()}")
    print(result.output.splitlines()[0])


if __name__ == "__main__":
    asyncio.run(main())
