"""
Homebrew Formula Parser.

Extracts packaging metadata from Ruby formula files (`class Foo < Formula`)
using regex-based parsing of the DSL. Only the simple, declarative subset is
understood: string stanzas, `bin.install` and an `assert_match` on
`shell_output`.
"""

import re

STRING_STANZAS = ("desc", "homepage", "url", "sha256", "license", "version")

# Body of a double-quoted Ruby literal, backslash escapes included
QUOTED = r'"((?:[^"\\]|\\.)*)"'


def parse_formula_rb(content: str) -> dict:
    """
    Parse Ruby formula content into a dict accepted by Formula.from_dict.

    Args:
        content: Raw formula source.

    Returns:
        Dictionary with keys: name, desc, homepage, url, sha256, license,
        version, mirrors, bin, test_args, test_expect. Missing stanzas are None
        (or empty lists).
    """
    result: dict = {name: _extract_string(content, name) for name in STRING_STANZAS}
    result["name"] = _class_to_formula_name(content)
    result["mirrors"] = _extract_all_strings(content, "mirror")
    result["bin"] = _extract_bin_install(content)

    expect, args = _extract_assert_match(content)
    result["test_expect"] = expect
    if args is not None:
        result["test_args"] = args

    # Formula.from_dict falls back to its own defaults for missing keys
    return {key: value for key, value in result.items() if value is not None or key in ("name", "url")}


def _extract_string(content: str, stanza: str) -> str | None:
    """Extract a stanza like: desc "Some text"."""
    match = re.search(rf"^\s*{stanza}\s+{QUOTED}", content, re.MULTILINE)
    return unescape(match.group(1)) if match else None


def _extract_all_strings(content: str, stanza: str) -> list[str]:
    return [unescape(s) for s in re.findall(rf"^\s*{stanza}\s+{QUOTED}", content, re.MULTILINE)]


def _class_to_formula_name(content: str) -> str | None:
    """'class SafeSquash < Formula' -> 'safe-squash'."""
    match = re.search(r"^\s*class\s+(\w+)\s*<\s*Formula\b", content, re.MULTILINE)
    if not match:
        return None
    return re.sub(r"(?<!^)(?=[A-Z])", "-", match.group(1)).lower()


def _extract_bin_install(content: str) -> list[str]:
    """
    Extract the sources of `bin.install` lines:

        bin.install "safe-squash"
        bin.install "a", "b"
        bin.install "tool.sh" => "tool"

    Renames are not supported; only the source path is kept.
    """
    items = []
    for line in re.findall(r"^\s*bin\.install\s+(.+)$", content, re.MULTILINE):
        line = line.split("=>")[0]
        items.extend(unescape(s) for s in re.findall(QUOTED, line) if s)
    return items


def _extract_assert_match(content: str) -> tuple[str | None, list[str] | None]:
    """
    Extract the expectation and arguments from:

        assert_match "safe-squash", shell_output("#{bin}/safe-squash --help")
    """
    match = re.search(
        rf'assert_match\s+{QUOTED}\s*,\s*shell_output\(\s*"#\{{bin\}}/[^\s"]+\s*((?:[^"\\]|\\.)*)"',
        content,
    )
    if not match:
        return None, None
    return unescape(match.group(1)), unescape(match.group(2)).split()


def unescape(value: str) -> str:
    r"""Undo Ruby string escaping: '\"' -> '"', '\\' -> '\', '\#{' -> '#{'."""
    return re.sub(r"\\(.)", r"\1", value)
