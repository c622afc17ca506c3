from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from rtxconf.core.pending import LinkKind, LinkRequest
from rtxconf.core.units import DIMENSIONLESS, Units


@dataclass(frozen=True)
class Clock:
    name: str
    period: int

    def __post_init__(self) -> None:
        if isinstance(self.period, bool) or not isinstance(self.period, int) or self.period <= 0:
            raise ValueError(f"clock {self.name!r}: period must be a positive integer, got {self.period!r}")


class TimeSeries:
    """A named node exposing time-varying values.

    ``link_kinds`` lists the link shapes a node class can take; the link
    phase refuses anything else. Links are shared references: the same node
    may be the source of many others.
    """

    link_kinds: FrozenSet[LinkKind] = frozenset()

    def __init__(self) -> None:
        self.name: str = ""
        self.kind: str = type(self).__name__
        self.units: Units = DIMENSIONLESS
        self.clock = None
        self.record = None
        self._link_requests: List[LinkRequest] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # --- declare phase ---

    def request_link(self, request: LinkRequest) -> None:
        self._link_requests.append(request)

    def take_link_requests(self) -> List[LinkRequest]:
        out, self._link_requests = self._link_requests, []
        return out

    # --- link phase ---

    def supports_link(self, kind: LinkKind) -> bool:
        return kind in self.link_kinds

    def attach(self, kind: LinkKind, target: "TimeSeries", weight: float = 1.0) -> None:
        raise TypeError(f"{type(self).__name__} takes no {kind.value} link")

    def linked_names(self) -> Dict[str, Any]:
        return {}

    def parameters(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "units": self.units.name,
            "clock": self.clock.name if self.clock is not None else None,
            "record": self.record.name if self.record is not None else None,
            "links": self.linked_names(),
            "parameters": self.parameters(),
        }


class ModularTimeSeries(TimeSeries):
    link_kinds = frozenset({LinkKind.SOURCE})

    def __init__(self) -> None:
        super().__init__()
        self.source: Optional[TimeSeries] = None

    def attach(self, kind: LinkKind, target: TimeSeries, weight: float = 1.0) -> None:
        if kind is LinkKind.SOURCE:
            self.source = target
            return
        super().attach(kind, target, weight)

    def linked_names(self) -> Dict[str, Any]:
        out = super().linked_names()
        out["source"] = self.source.name if self.source is not None else None
        return out


class AggregatorTimeSeries(ModularTimeSeries):
    link_kinds = frozenset({LinkKind.SOURCE, LinkKind.SOURCES})

    def __init__(self) -> None:
        super().__init__()
        self.sources: List[Tuple[TimeSeries, float]] = []

    def attach(self, kind: LinkKind, target: TimeSeries, weight: float = 1.0) -> None:
        if kind is LinkKind.SOURCES:
            self.sources.append((target, float(weight)))
            return
        super().attach(kind, target, weight)

    def linked_names(self) -> Dict[str, Any]:
        out = super().linked_names()
        out["sources"] = [[ts.name, w] for ts, w in self.sources]
        return out


class MultiplierTimeSeries(ModularTimeSeries):
    link_kinds = frozenset({LinkKind.SOURCE, LinkKind.BASIS})

    def __init__(self) -> None:
        super().__init__()
        self.basis: Optional[TimeSeries] = None

    def attach(self, kind: LinkKind, target: TimeSeries, weight: float = 1.0) -> None:
        if kind is LinkKind.BASIS:
            self.basis = target
            return
        super().attach(kind, target, weight)

    def linked_names(self) -> Dict[str, Any]:
        out = super().linked_names()
        out["basis"] = self.basis.name if self.basis is not None else None
        return out
