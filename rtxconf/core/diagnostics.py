from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

INFO = "info"
WARN = "warn"
ERROR = "error"

_LEVELS = {
    INFO: logging.INFO,
    WARN: logging.WARNING,
    ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Diagnostic:
    code: str
    severity: str  # "info" | "warn" | "error"
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "data": dict(self.data),
        }


class DiagnosticLog:
    """Ordered trail of non-fatal problems found while assembling a graph.

    Each entry is logged when recorded. The logger is picked from the code
    prefix, so ``link.unresolved`` goes to ``rtxconf.link``.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def record(self, code: str, severity: str, message: str, **data: Any) -> Diagnostic:
        d = Diagnostic(code=code, severity=severity, message=message, data=data)
        self._items.append(d)
        prefix = code.split(".", 1)[0]
        logging.getLogger(f"rtxconf.{prefix}").log(_LEVELS.get(severity, logging.WARNING), "%s [%s]", message, code)
        return d

    def info(self, code: str, message: str, **data: Any) -> Diagnostic:
        return self.record(code, INFO, message, **data)

    def warn(self, code: str, message: str, **data: Any) -> Diagnostic:
        return self.record(code, WARN, message, **data)

    def error(self, code: str, message: str, **data: Any) -> Diagnostic:
        return self.record(code, ERROR, message, **data)

    def codes(self) -> List[str]:
        return [d.code for d in self._items]

    def by_code(self, code: str) -> List[Diagnostic]:
        return [d for d in self._items if d.code == code]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
