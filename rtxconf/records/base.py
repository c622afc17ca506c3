from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class PointRecord(ABC):
    """Handle to a named persistence backend for time series values.

    Handles only carry their connection settings; opening a connection is
    left to the consumer.
    """

    kind: str

    def __init__(self) -> None:
        self.name: str = ""
        self.read_only: bool = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    @abstractmethod
    def describe(self) -> Dict[str, Any]:
        """Kind-specific settings, safe to show (no credentials)."""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "kind": self.kind, "read_only": self.read_only, **self.describe()}
