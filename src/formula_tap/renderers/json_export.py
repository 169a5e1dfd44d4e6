"""
JSON Renderer — writes formulae as JSON manifests.

The files are the Formula.to_dict() form and can be passed back to any
formula-tap command in place of a formula name.
"""

import json
import logging
from pathlib import Path

import aiofiles

from formula_tap.models.formula import Formula

logger = logging.getLogger(__name__)


class JSONRenderer:
    """Writes <output_dir>/<name>.json for each formula."""

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir
        self.count = 0

    async def render(self, formula: Formula) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.output_dir / f"{formula.name}.json"

        async with aiofiles.open(filepath, "w") as f:
            await f.write(json.dumps(formula.to_dict(), indent=2) + "\n")

        self.count += 1
        logger.debug(f"[JSON] Rendered {formula.name} -> {filepath}")
        return filepath

    async def finalize(self) -> None:
        logger.info(f"[JSON] {self.count} manifests written to {self.output_dir}")
