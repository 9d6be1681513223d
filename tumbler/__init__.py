"""Dynamic generation of nested combinations."""

from tumbler.core.errors import ConfigurationError, TumblerError, VariantSetError
from tumbler.core.expand.collect import Leaf, collect_leaves, count_leaves
from tumbler.core.expand.expander import Expander
from tumbler.core.expand.providers import conditional_provider, static_provider

__all__ = [
    "ConfigurationError",
    "Expander",
    "Leaf",
    "TumblerError",
    "VariantSetError",
    "collect_leaves",
    "conditional_provider",
    "count_leaves",
    "static_provider",
]
