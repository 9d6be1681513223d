from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tumbler.core.expand.expander import Provider
from tumbler.core.expand.providers import conditional_provider, static_provider


@dataclass(frozen=True)
class TumbleLevel:
    name: str
    variants: dict[str, Any]
    only_when: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class TumbleSpec:
    schema_version: str
    levels: list[TumbleLevel]
    payload: Any = None

    @property
    def level_names(self) -> list[str]:
        return [lvl.name for lvl in self.levels]

    @property
    def providers(self) -> list[Provider]:
        names = self.level_names
        out: list[Provider] = []
        for lvl in self.levels:
            if lvl.only_when:
                out.append(conditional_provider(lvl.variants, only_when=lvl.only_when, names=names))
            else:
                out.append(static_provider(lvl.variants))
        return out
