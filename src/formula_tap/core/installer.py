"""
Formula Installer — place a formula's executables into a prefix.

Install pipeline:
1. Validate the formula
2. Fetch the archive and verify its SHA-256 (nothing is copied on mismatch)
3. Extract into a private staging directory
4. Copy each `bin` entry into <prefix>/bin, atomically and executable
5. Write an install receipt
"""

import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path

from formula_tap.config import default_prefix
from formula_tap.core.fetcher import ArchiveFetcher
from formula_tap.core.receipt import InstallReceipt, ReceiptStore
from formula_tap.errors import FormulaNotInstalledError, InstallError, ManifestError
from formula_tap.models.formula import Formula

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755


class FormulaInstaller:
    """Installs, lists and uninstalls formulae for one prefix."""

    def __init__(
        self,
        prefix: Path | None = None,
        fetcher: ArchiveFetcher | None = None,
        cache_dir: Path | None = None,
    ):
        # Receipts record absolute paths; uninstall may run from another cwd
        self.prefix = (prefix or default_prefix()).expanduser().resolve()
        self.bin_dir = self.prefix / "bin"
        self.fetcher = fetcher or ArchiveFetcher(cache_dir=cache_dir)
        self.receipts = ReceiptStore(self.prefix)

    def bin_path(self, formula: Formula) -> Path:
        """Installed location of the formula's primary executable."""
        return self.bin_dir / Path(formula.bin[0]).name

    async def install(self, formula: Formula) -> InstallReceipt:
        """
        Install a formula. Safe to re-run: installing the same version again
        rewrites identical files and receipt.

        Raises:
            ManifestError: the formula does not validate.
            FetchError, ChecksumMismatchError: from the fetch step.
            InstallError: extraction failed or a bin entry is missing.
        """
        problems = formula.validate()
        if problems:
            raise ManifestError(formula.name, problems)

        archive = await self.fetcher.fetch(formula)
        previous = self.receipts.load(formula.name)

        with tempfile.TemporaryDirectory(prefix=f"formula-tap-{formula.name}-") as staging:
            root = self._extract(archive, Path(staging))
            # Resolve every entry before touching the prefix
            sources = [(self._locate(root, entry, archive), Path(entry).name) for entry in formula.bin]

            try:
                self.bin_dir.mkdir(parents=True, exist_ok=True)
                installed = [str(self._install_file(src, self.bin_dir / target)) for src, target in sources]
            except OSError as e:
                raise InstallError(f"Could not install {formula.name} into {self.bin_dir}: {e}") from e

        if previous:
            for stale in set(previous.files) - set(installed):
                Path(stale).unlink(missing_ok=True)
                logger.info(f"[Install] Removed {stale} from previous version {previous.version}")

        receipt = InstallReceipt(
            name=formula.name,
            version=formula.resolved_version,
            sha256=formula.sha256,
            source_url=formula.url,
            files=installed,
        )
        self.receipts.save(receipt)
        logger.info(f"[Install] {formula.name} {receipt.version or ''} -> {', '.join(installed)}")
        return receipt

    def uninstall(self, name: str) -> InstallReceipt:
        """Remove every file recorded in the formula's receipt, then the receipt."""
        receipt = self.receipts.load(name)
        if receipt is None:
            raise FormulaNotInstalledError(f"{name} is not installed in {self.prefix}")

        for path in receipt.files:
            Path(path).unlink(missing_ok=True)
            logger.debug(f"[Uninstall] Removed {path}")

        self.receipts.delete(name)
        logger.info(f"[Uninstall] {name} {receipt.version or ''} removed")
        return receipt

    def installed(self) -> list[InstallReceipt]:
        return self.receipts.all()

    # ──────────────────────────────────────────────
    # Staging
    # ──────────────────────────────────────────────

    def _extract(self, archive: Path, staging: Path) -> Path:
        """
        Extract into `staging` and return the archive root.

        GitHub tag archives wrap everything in a single '<repo>-<version>/'
        directory; when that is the only top-level entry it is stripped.
        """
        try:
            with tarfile.open(archive, "r:*") as tf:
                tf.extractall(staging, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise InstallError(f"Could not extract {archive.name}: {e}") from e

        entries = list(staging.iterdir())
        if len(entries) == 1 and entries[0].is_dir():
            return entries[0]
        return staging

    def _locate(self, root: Path, entry: str, archive: Path) -> Path:
        path = root / entry
        if not path.is_file():
            raise InstallError(f"{entry!r} not found in {archive.name}")
        return path

    def _install_file(self, source: Path, target: Path) -> Path:
        """Copy next to the target, mark executable, then rename over it."""
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            shutil.copyfile(source, tmp)
            os.chmod(tmp, EXECUTABLE_MODE)
            os.replace(tmp, target)
        finally:
            tmp.unlink(missing_ok=True)
        return target
