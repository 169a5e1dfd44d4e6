"""Shared fixtures: in-memory tag archives and a mock HTTP archive server."""

import hashlib
import io
import tarfile

import httpx
import pytest

from formula_tap.core.fetcher import ArchiveFetcher
from formula_tap.core.resilience import ExponentialBackoff
from formula_tap.models.formula import Formula

ARCHIVE_URL = "https://github.com/jadnohra/safe-squash/archive/refs/tags/v1.0.0.tar.gz"
MIRROR_URL = "https://mirror.example.org/safe-squash-1.0.0.tar.gz"

HELP_SCRIPT = b"""#!/bin/sh
if [ "$1" = "--help" ]; then
  echo "usage: safe-squash [--help] [base-branch]"
  echo "Squash all commits on the current branch into one."
  exit 0
fi
exit 2
"""


def build_archive(files: dict[str, bytes], top: str | None = "safe-squash-1.0.0", mode: int = 0o755) -> bytes:
    """Build a .tar.gz in memory; entries go under `top/` like GitHub tag archives."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, data in files.items():
            info = tarfile.TarInfo(f"{top}/{name}" if top else name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ArchiveServer:
    """
    httpx MockTransport handler.

    Route values: bytes (200 with that body), an int (bare status), an
    exception instance (raised), a callable taking the request and returning
    a response, or a list of those consumed one per request.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)

        answer = self.routes.get(url, 404)
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if callable(answer):
            return answer(request)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer)
        return httpx.Response(200, content=answer)


@pytest.fixture
def archive_bytes():
    return build_archive({"safe-squash": HELP_SCRIPT, "README.md": b"# safe-squash\n"})


@pytest.fixture
def formula(archive_bytes):
    return Formula(
        name="safe-squash",
        desc="Simple, robust tool to squash all commits on your branch into one",
        homepage="https://github.com/jadnohra/safe-squash",
        url=ARCHIVE_URL,
        sha256=sha256_hex(archive_bytes),
        license="MIT",
    )


@pytest.fixture
def make_fetcher(tmp_path):
    """Factory returning (fetcher, server) wired to a MockTransport."""

    def _make(routes: dict):
        server = ArchiveServer(routes)
        fetcher = ArchiveFetcher(
            cache_dir=tmp_path / "cache",
            backoff=ExponentialBackoff(base_delay=0.0, max_delay=0.0, max_retries=2),
            transport=httpx.MockTransport(server),
            show_progress=False,
        )
        return fetcher, server

    return _make
