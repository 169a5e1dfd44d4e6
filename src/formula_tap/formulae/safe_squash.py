"""safe-squash: squash all commits on a branch into one."""

from formula_tap.models.formula import SHA256_PLACEHOLDER, Formula

SAFE_SQUASH = Formula(
    name="safe-squash",
    desc="Simple, robust tool to squash all commits on your branch into one",
    homepage="https://github.com/jadnohra/safe-squash",
    url="https://github.com/jadnohra/safe-squash/archive/refs/tags/v1.0.0.tar.gz",
    sha256=SHA256_PLACEHOLDER,
    license="MIT",
    bin=["safe-squash"],
    test_args=["--help"],
    test_expect="safe-squash",
)
