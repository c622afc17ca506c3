from __future__ import annotations

from typing import Optional


class RtxConfigError(Exception):
    pass


class DocumentError(RtxConfigError):
    """Unreadable or malformed document. Fatal for the whole load."""

    def __init__(
        self,
        path: str,
        reason: str,
        *,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        self.path = path
        self.reason = reason
        self.line = line
        self.column = column
        super().__init__(self.location + ": " + reason)

    @property
    def location(self) -> str:
        loc = str(self.path)
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        return loc


class ConstructionError(RtxConfigError):
    """Raised by a registered constructor when its settings cannot be used."""


class BuilderStateError(RtxConfigError):
    """A builder phase was invoked out of order or more than once."""
