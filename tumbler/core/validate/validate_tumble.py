from __future__ import annotations

from typing import Any, Iterable, Optional, cast

from tumbler.core.errors import TumbleValidationError
from tumbler.core.model import TumbleLevel, TumbleSpec


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def validate_tumble(doc: dict[str, Any]) -> tuple[Optional[TumbleSpec], list[TumbleValidationError]]:
    """Validate a loaded tumble file.

    Returns (spec, errors). Spec is None when errors exist.
    """

    file = cast(Optional[str], doc.get("__file__"))
    errors: list[TumbleValidationError] = []

    schema_version = doc.get("schema_version")
    if not isinstance(schema_version, str) or not schema_version.strip():
        errors.append(
            TumbleValidationError(
                code="E_REQUIRED_FIELD",
                message="schema_version is required and must be a non-empty string",
                file=file,
                path="schema_version",
            )
        )

    levels = doc.get("levels")
    if not isinstance(levels, list):
        errors.append(
            TumbleValidationError(
                code="E_REQUIRED_FIELD",
                message="levels is required and must be an array",
                file=file,
                path="levels",
            )
        )
        return None, _sorted(errors)

    parsed: list[TumbleLevel] = []
    # Variant names offered by each level declared so far.
    declared: dict[str, set[str]] = {}

    for i, raw in enumerate(levels):
        level_path = f"levels[{i}]"
        if not isinstance(raw, dict):
            errors.append(
                TumbleValidationError(
                    code="E_INVALID_TYPE",
                    message="level must be an object",
                    file=file,
                    path=level_path,
                )
            )
            continue

        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append(
                TumbleValidationError(
                    code="E_REQUIRED_FIELD",
                    message="name is required and must be a non-empty string",
                    file=file,
                    path=f"{level_path}.name",
                )
            )
            continue

        if name in declared:
            errors.append(
                TumbleValidationError(
                    code="E_DUPLICATE_LEVEL",
                    message=f"duplicate level name: {name}",
                    file=file,
                    path=f"{level_path}.name",
                )
            )
            continue

        variants = raw.get("variants")
        if not isinstance(variants, dict):
            errors.append(
                TumbleValidationError(
                    code="E_INVALID_TYPE",
                    message="variants must be an object of name -> value",
                    file=file,
                    path=f"{level_path}.variants",
                )
            )
            continue

        bad_names = [k for k in variants if not isinstance(k, str)]
        if bad_names:
            errors.append(
                TumbleValidationError(
                    code="E_INVALID_TYPE",
                    message=f"variant names must be strings, got {bad_names!r}",
                    file=file,
                    path=f"{level_path}.variants",
                )
            )
            continue

        only_when = raw.get("only_when", {})
        if only_when is None:
            only_when = {}
        level_errors = list(_check_only_when(only_when, declared, file=file, path=f"{level_path}.only_when"))
        if level_errors:
            errors.extend(level_errors)
            continue

        declared[name] = set(variants)
        parsed.append(
            TumbleLevel(
                name=name,
                variants=dict(variants),
                only_when={k: list(v) for k, v in only_when.items()},
            )
        )

    if errors:
        return None, _sorted(errors)

    return TumbleSpec(
        schema_version=cast(str, schema_version),
        levels=parsed,
        payload=doc.get("payload"),
    ), []


def _check_only_when(
    only_when: Any,
    declared: dict[str, set[str]],
    *,
    file: Optional[str],
    path: str,
) -> Iterable[TumbleValidationError]:
    if not isinstance(only_when, dict):
        yield TumbleValidationError(
            code="E_INVALID_TYPE",
            message="only_when must be an object of level name -> array of variant names",
            file=file,
            path=path,
        )
        return

    for level, choices in only_when.items():
        if not isinstance(level, str) or level not in declared:
            yield TumbleValidationError(
                code="E_UNKNOWN_LEVEL",
                message=f"only_when references a level not declared earlier: {level}",
                file=file,
                path=f"{path}.{level}",
            )
            continue
        if not _is_list_of_str(choices):
            yield TumbleValidationError(
                code="E_INVALID_TYPE",
                message="only_when entries must be arrays of variant names",
                file=file,
                path=f"{path}.{level}",
            )
            continue
        for choice in choices:
            if choice not in declared[level]:
                yield TumbleValidationError(
                    code="E_UNKNOWN_VARIANT",
                    message=f"level {level} has no variant named {choice}",
                    file=file,
                    path=f"{path}.{level}",
                )


def _sorted(errors: list[TumbleValidationError]) -> list[TumbleValidationError]:
    return sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code))
