from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class LinkKind(str, Enum):
    SOURCE = "source"
    BASIS = "basis"
    SOURCES = "sources"


@dataclass(frozen=True)
class LinkRequest:
    """Reference(s) a node names but cannot resolve at declare time.

    ``refs`` holds (name, weight) pairs; weight is only meaningful for
    ``LinkKind.SOURCES`` and is 1.0 otherwise.
    """

    kind: LinkKind
    refs: Tuple[Tuple[str, float], ...]

    @classmethod
    def single(cls, kind: LinkKind, name: str) -> "LinkRequest":
        return cls(kind=kind, refs=((name, 1.0),))


@dataclass(frozen=True)
class PendingLink:
    node: str
    kind: LinkKind
    refs: Tuple[Tuple[str, float], ...]


class PendingLinkTable:
    """Unresolved cross-references between the declare and link phases.

    Keyed by (node name, link kind). Re-declaring a node drops its earlier
    entries so a duplicate name never inherits the previous declaration's
    links. Entries keep insertion order and are consumed once by ``drain``.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, LinkKind], PendingLink] = {}

    def add(self, node: str, request: LinkRequest) -> None:
        key = (node, request.kind)
        # re-insert so iteration follows the latest declaration
        self._entries.pop(key, None)
        self._entries[key] = PendingLink(node=node, kind=request.kind, refs=request.refs)

    def forget(self, node: str) -> None:
        for key in [k for k in self._entries if k[0] == node]:
            del self._entries[key]

    def get(self, node: str, kind: LinkKind) -> PendingLink | None:
        return self._entries.get((node, kind))

    def drain(self) -> List[PendingLink]:
        out = list(self._entries.values())
        self._entries.clear()
        return out

    def __len__(self) -> int:
        return len(self._entries)
