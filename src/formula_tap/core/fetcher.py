"""
Archive Fetcher — download and verify formula archives.

Downloads are streamed to the cache directory while the SHA-256 digest is
computed. A file only gets its final cache name after the digest has been
checked, so a corrupted or tampered archive never reaches the installer.
"""

import asyncio
import hashlib
import logging
import os
from pathlib import Path

import aiofiles
import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TransferSpeedColumn,
)

from formula_tap import __version__
from formula_tap.config import default_cache_dir
from formula_tap.core.resilience import ExponentialBackoff
from formula_tap.errors import ChecksumMismatchError, FetchError, ManifestError
from formula_tap.models.formula import ARCHIVE_EXTENSIONS, Formula

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def sha256_file(path: Path) -> str:
    """Hex SHA-256 digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class ArchiveFetcher:
    """
    Fetches a formula's archive into the download cache.

    The primary URL is tried first, then each mirror. Transient transport
    errors and HTTP 429 are retried with exponential backoff; any other
    non-200 status moves on to the next URL.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        backoff: ExponentialBackoff | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 60.0,
        console: Console | None = None,
        show_progress: bool = True,
    ):
        self.cache_dir = cache_dir or default_cache_dir()
        self.backoff = backoff or ExponentialBackoff()
        self.transport = transport
        self.timeout = httpx.Timeout(timeout, connect=30.0)
        self.console = console or Console(stderr=True)
        self.show_progress = show_progress

        self.stats: dict = {
            "total_requests": 0,
            "failed_requests": 0,
            "bytes_downloaded": 0,
            "cache_hits": 0,
        }
        self.last_error: Exception | None = None

    def archive_path(self, formula: Formula) -> Path:
        """Cache location for a formula's archive: <cache>/<name>--<version><ext>."""
        ext = next((e for e in ARCHIVE_EXTENSIONS if formula.url.endswith(e)), ".tar.gz")
        version = formula.resolved_version or "unversioned"
        return self.cache_dir / f"{formula.name}--{version}{ext}"

    async def fetch(self, formula: Formula, verify: bool = True) -> Path:
        """
        Download (or reuse) the archive and return its cached path.

        Raises:
            ManifestError: verify is True but the formula has no checksum.
            FetchError: no URL produced the archive.
            ChecksumMismatchError: the archive does not match formula.sha256.
        """
        if verify and not formula.checksum_is_set:
            raise ManifestError(formula.name, ["sha256 is not set (run 'formula-tap bump')"])

        dest = self.archive_path(formula)
        if verify and dest.exists():
            if sha256_file(dest) == formula.sha256:
                self.stats["cache_hits"] += 1
                logger.info(f"[Fetch] Using cached {dest}")
                return dest
            logger.info(f"[Fetch] Discarding stale cache entry {dest}")
            dest.unlink()

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".incomplete")

        digest, source_url = await self._fetch_any(formula, partial)

        if verify and digest != formula.sha256:
            partial.unlink(missing_ok=True)
            raise ChecksumMismatchError(source_url, formula.sha256, digest)

        os.replace(partial, dest)
        logger.info(f"[Fetch] Saved {source_url} -> {dest}")
        return dest

    async def _fetch_any(self, formula: Formula, partial: Path) -> tuple[str, str]:
        """Try every URL of the formula in order; return (digest, url)."""
        self.last_error = None
        headers = {"User-Agent": f"formula-tap/{__version__}"}
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=headers,
            transport=self.transport,
        ) as client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=self.console,
                transient=True,
                disable=not self.show_progress,
            ) as progress:
                for url in formula.urls:
                    logger.info(f"[Fetch] Downloading {url}")
                    digest = await self._download(client, url, partial, progress)
                    if digest is not None:
                        return digest, url

        partial.unlink(missing_ok=True)
        raise FetchError(f"Could not download {formula.name} from: {', '.join(formula.urls)}") from self.last_error

    async def _download(
        self, client: httpx.AsyncClient, url: str, partial: Path, progress: Progress, attempt: int = 0
    ) -> str | None:
        """Stream one URL to `partial`; return its digest, or None if the URL is unusable."""
        self.stats["total_requests"] += 1

        try:
            async with client.stream("GET", url) as resp:
                if resp.status_code == 429 and self.backoff.should_retry(attempt):
                    delay = self.backoff.retry_after(resp.headers.get("Retry-After"))
                    logger.warning(f"[Fetch] Rate limited by {resp.url.host}. Waiting {delay:.0f}s...")
                elif resp.status_code != 200:
                    self.stats["failed_requests"] += 1
                    logger.warning(f"[Fetch] {url} returned HTTP {resp.status_code}")
                    return None
                else:
                    return await self._write_stream(resp, partial, progress)

        except httpx.TransportError as e:
            self.stats["failed_requests"] += 1
            self.last_error = e
            if not self.backoff.should_retry(attempt):
                logger.warning(f"[Fetch] {url} failed after {attempt + 1} attempts: {e!r}")
                return None
            delay = self.backoff.calculate_delay(attempt)
            logger.debug(f"Request failed ({type(e).__name__}), retry {attempt + 1} after {delay:.1f}s")

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Redirect loops, undecodable bodies, malformed URLs
            self.stats["failed_requests"] += 1
            self.last_error = e
            logger.warning(f"[Fetch] {url} is unusable: {e!r}")
            return None

        await asyncio.sleep(delay)
        return await self._download(client, url, partial, progress, attempt + 1)

    async def _write_stream(self, resp: httpx.Response, partial: Path, progress: Progress) -> str:
        digest = hashlib.sha256()
        total = int(resp.headers.get("Content-Length", 0)) or None
        task_id = progress.add_task(f"[cyan]{partial.name.removesuffix('.incomplete')}[/cyan]", total=total)

        async with aiofiles.open(partial, "wb") as f:
            async for chunk in resp.aiter_bytes(CHUNK_SIZE):
                digest.update(chunk)
                await f.write(chunk)
                self.stats["bytes_downloaded"] += len(chunk)
                progress.advance(task_id, len(chunk))

        return digest.hexdigest()
