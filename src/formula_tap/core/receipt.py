"""
Install receipts.

A receipt records what an install placed in the prefix so that the
formula can be listed and uninstalled later. Receipts are JSON files under
<prefix>/var/formula-tap/receipts/.
"""

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from formula_tap.config import RECEIPTS_SUBDIR

logger = logging.getLogger(__name__)


@dataclass
class InstallReceipt:
    """Record of one installed formula."""

    name: str
    version: str | None
    sha256: str
    source_url: str
    files: list[str] = field(default_factory=list)  # absolute paths
    installed_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "InstallReceipt":
        return cls(
            name=data["name"],
            version=data.get("version"),
            sha256=data.get("sha256", ""),
            source_url=data.get("source_url", ""),
            files=list(data.get("files", [])),
            installed_at=data.get("installed_at", 0.0),
        )


class ReceiptStore:
    """Reads and writes receipts for one prefix."""

    def __init__(self, prefix: Path):
        self.directory = prefix / RECEIPTS_SUBDIR

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def load(self, name: str) -> InstallReceipt | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        with open(path) as f:
            return InstallReceipt.from_dict(json.load(f))

    def save(self, receipt: InstallReceipt) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(receipt.name)
        with open(path, "w") as f:
            json.dump(receipt.to_dict(), f, indent=2)
        return path

    def delete(self, name: str) -> None:
        self.path_for(name).unlink(missing_ok=True)

    def all(self) -> list[InstallReceipt]:
        """All readable receipts, sorted by name. Corrupted files are skipped with a warning."""
        receipts = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                with open(path) as f:
                    receipts.append(InstallReceipt.from_dict(json.load(f)))
            except (json.JSONDecodeError, KeyError, OSError) as e:
                logger.warning(f"Skipping unreadable receipt {path}: {e}")
        return receipts
