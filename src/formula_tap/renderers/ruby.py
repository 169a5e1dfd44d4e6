"""
Ruby Renderer — writes Homebrew formula files.

The output is a plain `class Foo < Formula` definition that a Homebrew tap
can consume directly, and that parsers.ruby reads back.
"""

import logging
import re
from pathlib import Path

import aiofiles

from formula_tap.models.formula import Formula

logger = logging.getLogger(__name__)


def formula_class_name(name: str) -> str:
    """'safe-squash' -> 'SafeSquash'."""
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[-_.]", name) if part)


def ruby_string(value: str) -> str:
    """Double-quoted Ruby literal; escapes backslashes, quotes and interpolation."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{")
    return f'"{escaped}"'


def render_formula_rb(formula: Formula) -> str:
    """Render a formula as Homebrew Ruby source."""
    q = ruby_string
    test_args = ruby_string(" ".join(formula.test_args))[1:-1]
    test_command = " ".join(filter(None, [f"#{{bin}}/{Path(formula.bin[0]).name}", test_args]))
    lines = [
        f"class {formula_class_name(formula.name)} < Formula",
        f"  desc {q(formula.desc)}",
        f"  homepage {q(formula.homepage)}",
        f"  url {q(formula.url)}",
    ]
    lines += [f"  mirror {q(mirror)}" for mirror in formula.mirrors]
    if formula.version:
        lines.append(f"  version {q(formula.version)}")
    lines += [
        f"  sha256 {q(formula.sha256)}",
        f"  license {q(formula.license)}",
        "",
        "  def install",
        "    bin.install " + ", ".join(q(entry) for entry in formula.bin),
        "  end",
        "",
        "  test do",
        f'    assert_match {q(formula.test_expect)}, shell_output("{test_command}")',
        "  end",
        "end",
    ]
    return "\n".join(lines) + "\n"


class RubyFormulaRenderer:
    """Writes <output_dir>/<name>.rb for each formula."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.count = 0

    async def render(self, formula: Formula) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / f"{formula.name}.rb"

        async with aiofiles.open(filepath, "w") as f:
            await f.write(render_formula_rb(formula))

        self.count += 1
        logger.debug(f"[Ruby] Rendered {formula.name} -> {filepath}")
        return filepath

    async def finalize(self) -> None:
        logger.info(f"[Ruby] {self.count} formulae written to {self.output_dir}")
