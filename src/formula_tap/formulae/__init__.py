"""Built-in formulae and manifest loading."""

import json
import logging
from pathlib import Path

from formula_tap.errors import FormulaNotFoundError, ManifestError
from formula_tap.formulae.safe_squash import SAFE_SQUASH
from formula_tap.models.formula import Formula
from formula_tap.parsers.ruby import parse_formula_rb

logger = logging.getLogger(__name__)

REGISTRY: dict[str, Formula] = {
    SAFE_SQUASH.name: SAFE_SQUASH,
}


def list_formulae() -> list[str]:
    return sorted(REGISTRY)


def get_formula(name: str) -> Formula:
    """Look up a built-in formula by name."""
    try:
        return REGISTRY[name]
    except KeyError:
        raise FormulaNotFoundError(
            f"No formula named {name!r}. Available: {', '.join(list_formulae())}"
        ) from None


def load_formula(ref: str) -> Formula:
    """
    Resolve a formula reference.

    `ref` is either a registered name or a path to a manifest file; `.json`
    manifests hold Formula.to_dict() output, `.rb` files are Homebrew-style
    formulae.
    """
    if ref in REGISTRY:
        return REGISTRY[ref]

    path = Path(ref)
    if not path.is_file():
        return get_formula(ref)

    content = path.read_text()
    match path.suffix:
        case ".json":
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise ManifestError(path.stem, [f"invalid JSON: {e}"]) from e
        case ".rb":
            data = parse_formula_rb(content)
        case _:
            raise ManifestError(path.stem, [f"unsupported manifest type: {path.suffix!r}"])

    if not isinstance(data, dict) or not data.get("name") or not data.get("url"):
        raise ManifestError(path.stem, ["manifest must define a name and a url"])
    formula = Formula.from_dict(data)

    logger.debug(f"Loaded formula {formula.name} from {path}")
    return formula


__all__ = ["REGISTRY", "SAFE_SQUASH", "get_formula", "list_formulae", "load_formula"]
