from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class TumblerError(Exception):
    """Base error envelope. Every error the engine or the tumble-file layer owns carries a code."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    # Reported as "source" in the CLI's JSON output.
    source = "engine"

    def __str__(self) -> str:
        loc = ":".join(part for part in (self.file, self.path) if part) or "<tumbler>"
        return f"{loc}: {self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "severity": "error", "source": self.source}


class ConfigurationError(TumblerError):
    pass


class VariantSetError(TumblerError):
    pass


class TumbleLoadError(TumblerError):
    source = "load"


class TumbleValidationError(TumblerError):
    source = "validate"
