from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer

from tumbler.core.errors import TumbleLoadError, TumbleValidationError, TumblerError
from tumbler.core.expand.collect import Leaf, collect_leaves, count_leaves
from tumbler.core.io.load_tumble import load_tumble
from tumbler.core.model import TumbleSpec
from tumbler.core.validate.validate_tumble import validate_tumble

app = typer.Typer(add_completion=False, no_args_is_help=True)

logger = logging.getLogger(__name__)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log expansion steps at DEBUG level"),
) -> None:
    """Tumbler CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a tumble file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a tumble file and report how many combinations it produces."""
    _check_format(format, ("text", "json"))
    spec = _load_spec(path, format=format, command="validate")

    total = count_leaves(spec.providers, payload=spec.payload)

    if format == "json":
        payload = {
            "tool": "tumbler",
            "command": "validate",
            "schema_version": spec.schema_version,
            "ok": True,
            "error_count": 0,
            "errors": [],
            "summary": {"levels": spec.level_names, "combinations": total},
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    typer.echo(f"OK: {len(spec.levels)} levels, {total} combinations")


@app.command("expand")
def expand(
    path: str = typer.Argument(..., help="Path to a tumble file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    out: str | None = typer.Option(None, "--out", help="Write combinations to this file instead of stdout"),
) -> None:
    """Print every combination, one per leaf, in deterministic order."""
    _check_format(format, ("text", "json"))
    spec = _load_spec(path, format=format, command="expand")

    leaves = collect_leaves(spec.providers, payload=spec.payload)
    logger.info("expanded %s into %d combinations", path, len(leaves))

    if format == "json":
        text = json.dumps([_leaf_item(leaf) for leaf in leaves], indent=2, default=str) + "\n"
    else:
        text = "".join(_leaf_line(leaf) + "\n" for leaf in leaves)

    if out is None:
        typer.echo(text, nl=False)
        return

    p = Path(out)
    if str(p.parent) not in (".", ""):
        p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    typer.echo(f"OK: wrote {len(leaves)} combinations to {out}")


@app.command("count")
def count(
    path: str = typer.Argument(..., help="Path to a tumble file (.yaml/.yml/.json)"),
) -> None:
    """Print the number of combinations a tumble file produces."""
    spec = _load_spec(path, format="text", command="count")
    typer.echo(str(count_leaves(spec.providers, payload=spec.payload)))


def _check_format(format: str, allowed: tuple[str, ...]) -> None:
    if format in allowed:
        return
    _print_errors(
        [
            TumbleValidationError(
                code="E_UNKNOWN_FORMAT",
                message=f"unknown format: {format} (choose one of: {', '.join(allowed)})",
                file=None,
                path="format",
            )
        ]
    )
    raise typer.Exit(code=2)


def _load_spec(path: str, *, format: str, command: str) -> TumbleSpec:
    try:
        doc = load_tumble(path)
    except TumbleLoadError as e:
        if format == "json":
            _emit_json_errors(command, [e], schema_version=None)
        _print_errors([e])
        raise typer.Exit(code=1)

    spec, errors = validate_tumble(doc)
    if errors or spec is None:
        if format == "json":
            schema_v = doc.get("schema_version") if isinstance(doc.get("schema_version"), str) else None
            _emit_json_errors(command, list(errors), schema_version=schema_v, exit_code=2)
        _print_errors(list(errors))
        raise typer.Exit(code=2)

    return spec


def _emit_json_errors(
    command: str,
    errors: list[TumblerError],
    *,
    schema_version: str | None,
    exit_code: int = 1,
) -> None:
    payload = {
        "tool": "tumbler",
        "command": command,
        "schema_version": schema_version,
        "ok": False,
        "error_count": len(errors),
        "errors": [e.to_dict() for e in errors],
        "summary": None,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _leaf_line(leaf: Leaf) -> str:
    names = " ".join(str(n) for n in leaf.path)
    values = " ".join(str(v) for v in leaf.context)
    return f"{names}: {values}"


def _leaf_item(leaf: Leaf) -> dict[str, Any]:
    return {"path": list(leaf.path), "context": list(leaf.context), "payload": leaf.payload}


def _print_errors(errors: list[TumblerError]) -> None:
    errors_sorted = sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
    for e in errors_sorted:
        typer.echo(str(e), err=True)


def main() -> None:
    app(prog_name="tumbler")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
