from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from rtxconf.timeseries.base import TimeSeries


class ElementKind(str, Enum):
    JUNCTION = "junction"
    TANK = "tank"
    RESERVOIR = "reservoir"
    PIPE = "pipe"
    PUMP = "pump"
    VALVE = "valve"

    @property
    def is_node(self) -> bool:
        return self in (ElementKind.JUNCTION, ElementKind.TANK, ElementKind.RESERVOIR)

    @property
    def is_link(self) -> bool:
        return not self.is_node


class Capability(str, Enum):
    QUALITY_SOURCE = "quality_source"
    QUALITY_MEASURE = "quality_measure"
    BOUNDARY_FLOW = "boundary_flow"
    HEAD_MEASURE = "head_measure"
    PRESSURE_MEASURE = "pressure_measure"
    LEVEL_MEASURE = "level_measure"
    BOUNDARY_HEAD = "boundary_head"
    STATUS = "status"
    FLOW_MEASURE = "flow_measure"
    CURVE = "curve"
    ENERGY_MEASURE = "energy_measure"
    SETTING = "setting"


class LinkStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CV = "cv"


_JUNCTION = frozenset({
    Capability.QUALITY_SOURCE,
    Capability.QUALITY_MEASURE,
    Capability.BOUNDARY_FLOW,
    Capability.HEAD_MEASURE,
    Capability.PRESSURE_MEASURE,
})
_PIPE = frozenset({Capability.STATUS, Capability.FLOW_MEASURE})

CAPABILITIES: Dict[ElementKind, FrozenSet[Capability]] = {
    ElementKind.JUNCTION: _JUNCTION,
    ElementKind.TANK: _JUNCTION | {Capability.LEVEL_MEASURE, Capability.BOUNDARY_HEAD},
    ElementKind.RESERVOIR: _JUNCTION | {Capability.BOUNDARY_HEAD},
    ElementKind.PIPE: _PIPE,
    ElementKind.PUMP: _PIPE | {Capability.CURVE, Capability.ENERGY_MEASURE},
    ElementKind.VALVE: _PIPE | {Capability.SETTING},
}

# model-computed states each kind exposes
_JUNCTION_STATES = ("head", "pressure", "quality", "demand")
STATES: Dict[ElementKind, tuple] = {
    ElementKind.JUNCTION: _JUNCTION_STATES,
    ElementKind.TANK: _JUNCTION_STATES + ("level",),
    ElementKind.RESERVOIR: _JUNCTION_STATES,
    ElementKind.PIPE: ("flow",),
    ElementKind.PUMP: ("flow", "energy"),
    ElementKind.VALVE: ("flow", "setting"),
}


class Element:
    """A network model element, tagged by kind.

    What can be attached is decided by the kind's capability set, so
    binders never inspect the Python type.
    """

    def __init__(
        self,
        name: str,
        kind: ElementKind,
        *,
        node1: Optional[str] = None,
        node2: Optional[str] = None,
        status: LinkStatus = LinkStatus.OPEN,
    ) -> None:
        self.name = name
        self.kind = kind
        self.node1 = node1
        self.node2 = node2
        self.status = status
        self.slots: Dict[Capability, TimeSeries] = {}
        self.states: Dict[str, TimeSeries] = {}
        for state in STATES[kind]:
            ts = TimeSeries()
            ts.name = f"{name} {state}"
            self.states[state] = ts

    def __repr__(self) -> str:
        return f"<Element {self.kind.value} {self.name!r}>"

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return CAPABILITIES[self.kind]

    def has_capability(self, capability: Capability) -> bool:
        return capability in CAPABILITIES[self.kind]

    def attach(self, capability: Capability, series: TimeSeries) -> None:
        if not self.has_capability(capability):
            raise ValueError(f"{self.kind.value} {self.name!r} has no {capability.value} slot")
        self.slots[capability] = series

    def slot(self, capability: Capability) -> Optional[TimeSeries]:
        return self.slots.get(capability)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "slots": {c.value: ts.name for c, ts in sorted(self.slots.items(), key=lambda kv: kv[0].value)},
        }
        if self.kind.is_link:
            out.update({"node1": self.node1, "node2": self.node2, "status": self.status.value})
        return out
