from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .elements import Capability, Element, LinkStatus


@dataclass
class Zone:
    name: str
    junctions: List[str] = field(default_factory=list)
    record: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "junctions": list(self.junctions),
            "record": getattr(self.record, "name", None),
        }


def is_zone_boundary(link: Element, *, detect_closed_links: bool) -> bool:
    if link.slot(Capability.FLOW_MEASURE) is not None:
        return True
    return detect_closed_links and link.status is LinkStatus.CLOSED


def detect_zones(elements: Sequence[Element], *, detect_closed_links: bool = False) -> List[Zone]:
    """Group node elements into demand zones.

    Two nodes share a zone when a path of links joins them that crosses no
    boundary link: one with a bound flow measure, or (optionally) one that
    starts closed. Zones are numbered in element order.
    """
    nodes = [e.name for e in elements if e.kind.is_node]
    known = set(nodes)
    adjacency: Dict[str, List[str]] = defaultdict(list)

    for link in elements:
        if not link.kind.is_link:
            continue
        if is_zone_boundary(link, detect_closed_links=detect_closed_links):
            continue
        if link.node1 in known and link.node2 in known:
            adjacency[link.node1].append(link.node2)
            adjacency[link.node2].append(link.node1)

    order = {n: i for i, n in enumerate(nodes)}
    zones: List[Zone] = []
    seen: set = set()
    for start in nodes:
        if start in seen:
            continue
        members: List[str] = []
        queue = deque([start])
        seen.add(start)
        while queue:
            current = queue.popleft()
            members.append(current)
            for neighbor in adjacency[current]:
                if neighbor not in seen:
                    seen.add(neighbor)
                    queue.append(neighbor)
        members.sort(key=order.__getitem__)
        zones.append(Zone(name=f"Zone {len(zones) + 1}", junctions=members))
    return zones
