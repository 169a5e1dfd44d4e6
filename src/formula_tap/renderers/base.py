"""
Renderer Protocol — Base interface for all manifest output backends.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from formula_tap.models.formula import Formula


@runtime_checkable
class Renderer(Protocol):
    """
    Protocol that all renderers must implement.

    Renderers receive Formula objects and write them out as a manifest
    another packaging host (or formula-tap itself) can read.
    """

    async def render(self, formula: Formula) -> Path:
        """Write one formula; return the file written."""
        ...

    async def finalize(self) -> None:
        """Called after all formulae have been rendered."""
        ...
