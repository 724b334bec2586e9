"""Request parameters: response format and keep-alive duration."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class FormatType(enum.Enum):
    """The format to return a response in; only JSON is accepted."""

    JSON = "json"


class TimeUnit(enum.Enum):
    """Unit of a keep-alive duration."""

    SECONDS = "s"
    MINUTES = "m"
    HOURS = "hr"

    def symbol(self) -> str:
        """Return the suffix used on the wire for this unit."""
        return self.value


class _KeepAliveKind(enum.Enum):
    INDEFINITELY = "indefinitely"
    UNLOAD_ON_COMPLETION = "unload_on_completion"
    UNTIL = "until"


@dataclass(frozen=True)
class KeepAlive:
    """How long a model stays loaded in memory after a request."""

    kind: _KeepAliveKind
    time: int | None = None
    unit: TimeUnit | None = None

    @classmethod
    def indefinitely(cls) -> "KeepAlive":
        """Keep the model loaded indefinitely."""
        return cls(_KeepAliveKind.INDEFINITELY)

    @classmethod
    def unload_on_completion(cls) -> "KeepAlive":
        """Unload the model as soon as the request completes."""
        return cls(_KeepAliveKind.UNLOAD_ON_COMPLETION)

    @classmethod
    def until(cls, time: int, unit: TimeUnit) -> "KeepAlive":
        """Keep the model loaded for ``time`` units."""
        if isinstance(time, bool) or not isinstance(time, int) or time < 0:
            raise ValueError("time must be a non-negative integer")
        if not isinstance(unit, TimeUnit):
            raise ValueError("unit must be a TimeUnit")
        return cls(_KeepAliveKind.UNTIL, time, unit)

    def to_json(self) -> int | str:
        """Return the wire value: -1, 0, or a duration string such as ``5m``."""
        if self.kind is _KeepAliveKind.INDEFINITELY:
            return -1
        if self.kind is _KeepAliveKind.UNLOAD_ON_COMPLETION:
            return 0
        assert self.unit is not None
        return f"{self.time}{self.unit.symbol()}"