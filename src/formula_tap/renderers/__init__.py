"""Manifest output backends."""

from formula_tap.renderers.base import Renderer
from formula_tap.renderers.json_export import JSONRenderer
from formula_tap.renderers.ruby import RubyFormulaRenderer, render_formula_rb


def get_renderer(format_name: str, output_dir: str) -> Renderer:
    """Factory function to create a renderer by format name."""
    from pathlib import Path

    out = Path(output_dir)
    match format_name:
        case "rb":
            return RubyFormulaRenderer(output_dir=out)
        case "json":
            return JSONRenderer(output_dir=out)
        case _:
            raise ValueError(f"Unknown manifest format: {format_name!r}. Use 'rb' or 'json'.")


__all__ = ["Renderer", "RubyFormulaRenderer", "JSONRenderer", "get_renderer", "render_formula_rb"]
