from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from tumbler.core.expand.expander import CombineContextFn, CombinePathFn, ConsumerFn, Expander, Provider


@dataclass(frozen=True)
class Leaf:
    path: Any
    context: Any
    payload: Any


def collect_leaves(
    providers: Sequence[Provider],
    path: Any = None,
    context: Any = None,
    payload: Any = None,
    *,
    combine_path: Optional[CombinePathFn] = None,
    combine_context: Optional[CombineContextFn] = None,
) -> list[Leaf]:
    """Expand providers and return every leaf in visiting order.

    path and context default to empty lists so the default hooks can append to them.
    Leaves below the same node share one payload object.
    """

    leaves: list[Leaf] = []

    def consume(p: Any, c: Any, d: Any) -> None:
        leaves.append(Leaf(path=p, context=c, payload=d))

    _run(providers, consume, path, context, payload, combine_path, combine_context)
    return leaves


def count_leaves(
    providers: Sequence[Provider],
    path: Any = None,
    context: Any = None,
    payload: Any = None,
    *,
    combine_path: Optional[CombinePathFn] = None,
    combine_context: Optional[CombineContextFn] = None,
) -> int:
    count = 0

    def consume(p: Any, c: Any, d: Any) -> None:
        nonlocal count
        count += 1

    _run(providers, consume, path, context, payload, combine_path, combine_context)
    return count


def _run(
    providers: Sequence[Provider],
    consumer: ConsumerFn,
    path: Any,
    context: Any,
    payload: Any,
    combine_path: Optional[CombinePathFn],
    combine_context: Optional[CombineContextFn],
) -> None:
    expander: Expander[Any, Any, Any] = Expander(
        consumer=consumer,
        combine_path=combine_path,
        combine_context=combine_context,
    )
    expander.expand(
        providers,
        [] if path is None else path,
        [] if context is None else context,
        payload,
    )
