from __future__ import annotations

import logging
from copy import deepcopy
from operator import itemgetter
from typing import Any, Callable, Generic, Iterable, Iterator, Mapping, Optional, Sequence, TypeVar, Union

from tumbler.core.errors import ConfigurationError, VariantSetError


logger = logging.getLogger(__name__)

P = TypeVar("P")  # path
C = TypeVar("C")  # context
D = TypeVar("D")  # payload

VariantSet = Union[Mapping[Any, Any], Iterable[tuple[Any, Any]]]
Provider = Callable[[Any, Any, Any], VariantSet]
ConsumerFn = Callable[[Any, Any, Any], None]
CombinePathFn = Callable[[Any, Any], Any]
CombineContextFn = Callable[[Any, Any], Any]

HOOK_NAMES: tuple[str, ...] = ("consumer", "combine_path", "combine_context")

# Immutable scalars are handed down as-is; everything else is deep-copied.
_SCALAR_TYPES: tuple[type, ...] = (type(None), bool, int, float, complex, str, bytes)

_UNSET: Any = object()


def missing_consumer(path: Any, context: Any, payload: Any) -> None:
    raise ConfigurationError(code="E_NO_CONSUMER", message="no consumer defined")


def append_path(path: Any, name: Any) -> list[Any]:
    return [*path, name]


def append_context(context: Any, value: Any) -> list[Any]:
    return [*context, value]


def clone_payload(payload: Any) -> Any:
    """Return an independent copy of payload; scalars are returned unchanged.

    Types that need a custom clone can define __deepcopy__.
    """

    if isinstance(payload, _SCALAR_TYPES):
        return payload
    return deepcopy(payload)


class Expander(Generic[P, C, D]):
    """Depth-first combinatorial expansion over a sequence of providers.

    Each provider is called with (path, context, payload) and returns the
    variants for the next level, either as a mapping of name -> value or as
    an iterable of (name, value) pairs. The expander recurses into every
    variant in ascending name order, building the path with combine_path and
    the context with combine_context, and calls consumer once per leaf.

    - A provider that returns no variants prunes its subtree: no later
      provider and no consumer is called for that branch.
    - The payload is deep-copied at each level before the provider runs, so
      a provider's mutations are seen by its own subtree only.
    - Exceptions from providers, hooks and the consumer propagate unchanged.
    """

    def __init__(self, **hooks: Any) -> None:
        self._consumer: ConsumerFn = missing_consumer
        self._combine_path: CombinePathFn = append_path
        self._combine_context: CombineContextFn = append_context

        for name in HOOK_NAMES:
            if name in hooks:
                getattr(self, name)(hooks.pop(name))

        if hooks:
            unknown = " ".join(sorted(hooks))
            raise ConfigurationError(
                code="E_UNKNOWN_ARGUMENTS",
                message=f"unknown {type(self).__name__} arguments: {unknown}",
            )

    # Accessors: no argument reads the hook, None restores the default,
    # anything else must be callable and replaces it.

    def consumer(self, hook: Optional[ConsumerFn] = _UNSET) -> ConsumerFn:
        if hook is not _UNSET:
            self._consumer = _checked_hook("consumer", hook, missing_consumer)
        return self._consumer

    def combine_path(self, hook: Optional[CombinePathFn] = _UNSET) -> CombinePathFn:
        if hook is not _UNSET:
            self._combine_path = _checked_hook("combine_path", hook, append_path)
        return self._combine_path

    def combine_context(self, hook: Optional[CombineContextFn] = _UNSET) -> CombineContextFn:
        if hook is not _UNSET:
            self._combine_context = _checked_hook("combine_context", hook, append_context)
        return self._combine_context

    def expand(self, providers: Sequence[Provider], path: P, context: C, payload: D) -> None:
        """Walk the combination tree and call the consumer at every leaf.

        The walk keeps its own stack of open levels, so the number of
        providers is not bounded by the interpreter's recursion limit.
        """

        levels = tuple(providers)
        # Open levels: (depth, path, context, level payload copy, remaining variants).
        stack: list[tuple[int, Any, Any, Any, Iterator[tuple[Any, Any]]]] = []
        node: Optional[tuple[int, Any, Any, Any]] = (0, path, context, payload)

        while True:
            if node is not None:
                depth, node_path, node_context, node_payload = node
                node = None
                if depth == len(levels):
                    logger.debug("leaf: path=%r context=%r", node_path, node_context)
                    self._consumer(node_path, node_context, node_payload)
                else:
                    # Copy before the provider runs so its edits stay inside this subtree.
                    node_payload = clone_payload(node_payload)
                    items = ordered_variants(levels[depth](node_path, node_context, node_payload))
                    if items:
                        stack.append((depth, node_path, node_context, node_payload, iter(items)))
                    else:
                        logger.debug("pruned at depth %d: path=%r", depth, node_path)

            if not stack:
                return

            depth, level_path, level_context, level_payload, remaining = stack[-1]
            step = next(remaining, None)
            if step is None:
                stack.pop()
                continue

            name, value = step
            node = (
                depth + 1,
                self._combine_path(level_path, name),
                self._combine_context(level_context, value),
                level_payload,
            )


def _checked_hook(name: str, hook: Any, default: Any) -> Any:
    if hook is None:
        return default
    if not callable(hook):
        raise ConfigurationError(
            code="E_INVALID_HOOK",
            message=f"{name} must be callable, got {type(hook).__name__}",
        )
    return hook


def ordered_variants(variants: VariantSet) -> list[tuple[Any, Any]]:
    """Return the (name, value) items of a variant set sorted by name.

    Pairs with a repeated name are rejected rather than silently overwritten.
    """

    if isinstance(variants, Mapping):
        items = list(variants.items())
    else:
        items = _pairs(variants)

    try:
        return sorted(items, key=itemgetter(0))
    except TypeError as e:
        raise VariantSetError(
            code="E_UNSORTABLE_VARIANT_NAMES",
            message=f"variant names cannot be ordered: {[name for name, _ in items]!r}",
        ) from e


def _pairs(variants: Any) -> list[tuple[Any, Any]]:
    if variants is None or isinstance(variants, (str, bytes)):
        raise VariantSetError(
            code="E_INVALID_VARIANT_SET",
            message=f"provider must return a mapping or (name, value) pairs, got {type(variants).__name__}",
        )
    try:
        iterator = iter(variants)
    except TypeError as e:
        raise VariantSetError(
            code="E_INVALID_VARIANT_SET",
            message=f"provider must return a mapping or (name, value) pairs, got {type(variants).__name__}",
        ) from e

    out: list[tuple[Any, Any]] = []
    seen: set[Any] = set()
    for pair in iterator:
        if not isinstance(pair, (tuple, list)) or len(pair) != 2:
            raise VariantSetError(
                code="E_INVALID_VARIANT_SET",
                message=f"variant must be a (name, value) pair, got {pair!r}",
            )
        name, value = pair
        try:
            duplicate = name in seen
        except TypeError as e:
            raise VariantSetError(
                code="E_INVALID_VARIANT_SET",
                message=f"variant name must be hashable, got {type(name).__name__}",
            ) from e
        if duplicate:
            raise VariantSetError(
                code="E_DUPLICATE_VARIANT_NAME",
                message=f"duplicate variant name: {name!r}",
            )
        seen.add(name)
        out.append((name, value))
    return out
