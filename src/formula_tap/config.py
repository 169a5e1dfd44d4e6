"""
Runtime configuration.

Paths and credentials are taken from the environment so that the CLI and
library callers agree on where things live:

    FORMULA_TAP_PREFIX   installation prefix (binaries go to <prefix>/bin)
    FORMULA_TAP_CACHE    download cache for archives
    GITHUB_TOKEN         optional, used when looking up release tags
"""

import os
from pathlib import Path

PREFIX_ENV = "FORMULA_TAP_PREFIX"
CACHE_ENV = "FORMULA_TAP_CACHE"
TOKEN_ENV = "GITHUB_TOKEN"

RECEIPTS_SUBDIR = Path("var") / "formula-tap" / "receipts"


def default_prefix() -> Path:
    return Path(os.environ.get(PREFIX_ENV) or Path.home() / ".local").expanduser()


def default_cache_dir() -> Path:
    return Path(os.environ.get(CACHE_ENV) or Path.home() / ".cache" / "formula-tap").expanduser()


def github_token() -> str | None:
    return os.environ.get(TOKEN_ENV) or None
