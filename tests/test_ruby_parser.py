"""Tests for the Homebrew formula parser."""

from formula_tap.models.formula import Formula
from formula_tap.parsers.ruby import (
    _class_to_formula_name,
    _extract_assert_match,
    _extract_bin_install,
    _extract_string,
    parse_formula_rb,
)

SAFE_SQUASH_RB = """class SafeSquash < Formula
  desc "Simple, robust tool to squash all commits on your branch into one"
  homepage "https://github.com/jadnohra/safe-squash"
  url "https://github.com/jadnohra/safe-squash/archive/refs/tags/v1.0.0.tar.gz"
  sha256 "REPLACE_WITH_SHA256"
  license "MIT"

  def install
    bin.install "safe-squash"
  end

  test do
    assert_match "safe-squash", shell_output("#{bin}/safe-squash --help")
  end
end
"""


# ═══════════════════════════════════════════
# Stanza Extraction
# ═══════════════════════════════════════════


class TestExtractString:
    def test_desc(self):
        assert _extract_string(SAFE_SQUASH_RB, "desc").startswith("Simple, robust tool")

    def test_not_found(self):
        assert _extract_string(SAFE_SQUASH_RB, "version") is None

    def test_ignores_substring_names(self):
        content = '  revision_url "x"\n  url "https://example.org/a-1.0.tar.gz"\n'
        assert _extract_string(content, "url") == "https://example.org/a-1.0.tar.gz"

    def test_escaped_characters(self):
        content = r'  desc "Says \"hi\" to C:\\ and \#{user}"' + "\n"
        assert _extract_string(content, "desc") == 'Says "hi" to C:\\ and #{user}'


class TestClassName:
    def test_camel_case(self):
        assert _class_to_formula_name(SAFE_SQUASH_RB) == "safe-squash"

    def test_single_word(self):
        assert _class_to_formula_name("class Jq < Formula\nend\n") == "jq"

    def test_not_a_formula(self):
        assert _class_to_formula_name("class Foo < Cask\nend\n") is None


class TestBinInstall:
    def test_single(self):
        assert _extract_bin_install(SAFE_SQUASH_RB) == ["safe-squash"]

    def test_multiple_lines_and_args(self):
        content = '    bin.install "a", "b"\n    bin.install "scripts/c"\n'
        assert _extract_bin_install(content) == ["a", "b", "scripts/c"]

    def test_rename_keeps_source(self):
        assert _extract_bin_install('    bin.install "tool.sh" => "tool"\n') == ["tool.sh"]


class TestAssertMatch:
    def test_expectation_and_args(self):
        assert _extract_assert_match(SAFE_SQUASH_RB) == ("safe-squash", ["--help"])

    def test_no_args(self):
        content = 'assert_match "v1", shell_output("#{bin}/tool")'
        assert _extract_assert_match(content) == ("v1", [])

    def test_missing(self):
        assert _extract_assert_match("test do\n  system bin/'x'\nend") == (None, None)


# ═══════════════════════════════════════════
# Full Parse
# ═══════════════════════════════════════════


class TestParseFormula:
    def test_safe_squash(self):
        result = parse_formula_rb(SAFE_SQUASH_RB)
        assert result["name"] == "safe-squash"
        assert result["homepage"] == "https://github.com/jadnohra/safe-squash"
        assert result["url"].endswith("/v1.0.0.tar.gz")
        assert result["sha256"] == "REPLACE_WITH_SHA256"
        assert result["license"] == "MIT"
        assert result["bin"] == ["safe-squash"]
        assert result["test_args"] == ["--help"]
        assert result["test_expect"] == "safe-squash"
        assert "version" not in result

    def test_builds_formula(self):
        formula = Formula.from_dict(parse_formula_rb(SAFE_SQUASH_RB))
        assert formula.resolved_version == "1.0.0"
        assert not formula.checksum_is_set

    def test_mirrors(self):
        content = SAFE_SQUASH_RB.replace(
            '  sha256 "', '  mirror "https://m1.example/a-1.0.0.tar.gz"\n  sha256 "'
        )
        assert parse_formula_rb(content)["mirrors"] == ["https://m1.example/a-1.0.0.tar.gz"]

    def test_empty_content(self):
        result = parse_formula_rb("")
        assert result["name"] is None
        assert result["url"] is None
