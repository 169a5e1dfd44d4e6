"""
Formula Model — declarative packaging manifest.

A formula names one upstream tool, points at a source archive, pins the
archive's SHA-256 and lists which files from the archive land in the
prefix's bin directory. It also carries the smoke test run after install.
"""

import re
from dataclasses import asdict, dataclass, field, replace

SHA256_PLACEHOLDER = "REPLACE_WITH_SHA256"

ARCHIVE_EXTENSIONS = (".tar.gz", ".tgz", ".tar.bz2", ".tar.xz", ".tar")

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")
_VERSION_RE = re.compile(r"(\d+(?:\.\d+)+[^/]*?)(?:\.tar\.gz|\.tgz|\.tar\.bz2|\.tar\.xz|\.tar)$")
_GITHUB_RE = re.compile(r"^https://github\.com/([^/]+)/([^/]+?)(?:\.git)?(?:/|$)")
_TAG_ARCHIVE_RE = re.compile(r"/archive/refs/tags/([^/]+?)\.tar\.gz$")


def version_from_url(url: str) -> str | None:
    """
    Guess a version from an archive URL.

    'https://github.com/o/r/archive/refs/tags/v1.0.0.tar.gz' -> '1.0.0'
    'https://example.org/tool-2.3.tar.gz' -> '2.3'
    """
    basename = url.rstrip("/").split("/")[-1]
    match = _VERSION_RE.search(basename)
    return match.group(1) if match else None


@dataclass
class Formula:
    """
    Packaging manifest for a single tool.

    `bin` lists paths relative to the (stripped) archive root; each one is
    installed under its base name into <prefix>/bin. The smoke test runs the
    first entry with `test_args` and expects `test_expect` in its output.
    """

    name: str
    desc: str
    homepage: str
    url: str
    sha256: str
    license: str
    bin: list[str] = field(default_factory=list)
    test_args: list[str] = field(default_factory=lambda: ["--help"])
    test_expect: str | None = None
    version: str | None = None
    mirrors: list[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.bin:
            self.bin = [self.name]
        if self.test_expect is None:
            self.test_expect = self.name
        if self.sha256 != SHA256_PLACEHOLDER:
            self.sha256 = self.sha256.strip().lower()

    @property
    def resolved_version(self) -> str | None:
        """Explicit version, or the one encoded in the archive URL."""
        return self.version or version_from_url(self.url)

    @property
    def checksum_is_set(self) -> bool:
        return bool(_SHA256_RE.match(self.sha256))

    @property
    def urls(self) -> list[str]:
        """Primary URL followed by mirrors, in download order."""
        return [self.url, *self.mirrors]

    @property
    def github_repo(self) -> str | None:
        """'owner/repo' if the archive or homepage lives on GitHub."""
        for candidate in (self.url, self.homepage):
            match = _GITHUB_RE.match(candidate or "")
            if match:
                return f"{match.group(1)}/{match.group(2)}"
        return None

    @property
    def tag(self) -> str | None:
        """Git tag of a GitHub tag archive URL ('v1.0.0')."""
        match = _TAG_ARCHIVE_RE.search(self.url)
        return match.group(1) if match else None

    def validate(self) -> list[str]:
        """Return a list of human-readable problems; empty when valid."""
        problems = []
        for name in ("name", "desc", "homepage", "url", "license"):
            if not getattr(self, name):
                problems.append(f"missing {name}")

        for url in [self.homepage, *self.urls]:
            if url and not url.startswith(("https://", "http://")):
                problems.append(f"unsupported URL scheme: {url}")

        if self.url and not self.url.endswith(ARCHIVE_EXTENSIONS):
            problems.append(f"url is not a tar archive: {self.url}")

        if self.sha256 == SHA256_PLACEHOLDER or not self.sha256:
            problems.append("sha256 is not set (run 'formula-tap bump')")
        elif not self.checksum_is_set:
            problems.append(f"sha256 is not a 64-character hex digest: {self.sha256!r}")

        for entry in self.bin:
            if not entry or entry.startswith("/") or ".." in entry.split("/"):
                problems.append(f"invalid bin entry: {entry!r}")

        return problems

    def with_release(self, tag: str, sha256: str) -> "Formula":
        """Copy of this formula pointing at another GitHub tag archive."""
        if not self.tag:
            raise ValueError(f"{self.url} is not a GitHub tag archive")
        new_url = _TAG_ARCHIVE_RE.sub(f"/archive/refs/tags/{tag}.tar.gz", self.url)
        return replace(self, url=new_url, sha256=sha256, version=None, mirrors=[])

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Formula":
        """Deserialize from dictionary."""
        return cls(
            name=data["name"],
            desc=data.get("desc", ""),
            homepage=data.get("homepage", ""),
            url=data["url"],
            sha256=data.get("sha256", SHA256_PLACEHOLDER),
            license=data.get("license", ""),
            bin=list(data.get("bin", [])),
            test_args=list(data.get("test_args", ["--help"])),
            test_expect=data.get("test_expect"),
            version=data.get("version"),
            mirrors=list(data.get("mirrors", [])),
        )
