from __future__ import annotations

from typing import Any, Mapping, Sequence

from tumbler.core.expand.expander import Provider


def static_provider(variants: Mapping[Any, Any]) -> Provider:
    """Provider that offers the same variants at every node."""

    frozen = dict(variants)

    def provide(path: Any, context: Any, payload: Any) -> dict[Any, Any]:
        return dict(frozen)

    return provide


def conditional_provider(
    variants: Mapping[Any, Any],
    *,
    only_when: Mapping[str, Sequence[Any]],
    names: Sequence[str],
) -> Provider:
    """Provider that offers variants only under matching earlier choices.

    names lists the level names in provider order, so the i-th entry of a
    list path is the name chosen at level names[i]. For every level in
    only_when the chosen name must be one of the allowed names; otherwise
    the provider returns no variants and the branch is pruned.
    """

    frozen = dict(variants)
    position = {level: i for i, level in enumerate(names)}
    allowed = {level: list(choices) for level, choices in only_when.items()}

    def provide(path: Any, context: Any, payload: Any) -> dict[Any, Any]:
        for level, choices in allowed.items():
            i = position[level]
            if i >= len(path) or path[i] not in choices:
                return {}
        return dict(frozen)

    return provide
