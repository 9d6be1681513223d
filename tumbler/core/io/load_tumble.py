from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from tumbler.core.errors import TumbleLoadError


# suffix -> (parser, parse error type, error code)
_PARSERS: dict[str, tuple[Callable[[str], Any], type[Exception], str]] = {
    ".yaml": (yaml.safe_load, yaml.YAMLError, "E_YAML_PARSE"),
    ".yml": (yaml.safe_load, yaml.YAMLError, "E_YAML_PARSE"),
    ".json": (json.loads, json.JSONDecodeError, "E_JSON_PARSE"),
}


def load_tumble(path: str) -> dict[str, Any]:
    """Load a YAML/JSON tumble file into its normalized document.

    The result always has schema_version, levels, payload and __file__.
    payload defaults to None. levels may be written either as a list of
    {name, variants, only_when} objects or, when no level needs only_when,
    as a mapping of level name -> variants; the mapping form is turned into
    the list form in file order. Other shape checks belong to the validator.
    """

    p = Path(path)
    if not p.exists():
        raise TumbleLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    parser = _PARSERS.get(p.suffix.lower())
    if parser is None:
        raise TumbleLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {', '.join(sorted(_PARSERS))}",
            file=str(p),
        )
    parse, parse_error, code = parser

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise TumbleLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        data = parse(raw_text)
    except parse_error as e:
        raise TumbleLoadError(code=code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise TumbleLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    return {
        "schema_version": data.get("schema_version"),
        "levels": _levels_as_list(data.get("levels")),
        "payload": data.get("payload"),
        "__file__": str(p),
    }


def _levels_as_list(levels: Any) -> Any:
    if not isinstance(levels, dict):
        return levels
    return [{"name": name, "variants": variants} for name, variants in levels.items()]
