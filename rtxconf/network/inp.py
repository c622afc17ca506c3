"""
Reader for the topology part of EPANET ``.inp`` input files.

Only what assembly needs is read: element identities and kinds, link
endpoints and initial status, controls and rules (so they can be dropped),
and the hydraulic/quality time steps. Hydraulic properties are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .elements import Element, ElementKind, LinkStatus

_NODE_SECTIONS = {
    "JUNCTIONS": ElementKind.JUNCTION,
    "RESERVOIRS": ElementKind.RESERVOIR,
    "TANKS": ElementKind.TANK,
}
_LINK_SECTIONS = {
    "PIPES": ElementKind.PIPE,
    "PUMPS": ElementKind.PUMP,
    "VALVES": ElementKind.VALVE,
}

_UNIT_SECONDS = {
    "SEC": 1, "SECOND": 1, "SECONDS": 1,
    "MIN": 60, "MINUTE": 60, "MINUTES": 60,
    "HR": 3600, "HOUR": 3600, "HOURS": 3600,
    "DAY": 86400, "DAYS": 86400,
}


class InpFormatError(ValueError):
    def __init__(self, path: Path, line: int, reason: str):
        self.path = path
        self.line = line
        super().__init__(f"{path}:{line}: {reason}")


@dataclass
class InpNetwork:
    elements: List[Element] = field(default_factory=list)
    controls: List[str] = field(default_factory=list)
    rules: List[str] = field(default_factory=list)
    times: Dict[str, str] = field(default_factory=dict)

    def time_step(self, key: str) -> Optional[int]:
        raw = self.times.get(key)
        if raw is None:
            return None
        return parse_duration(raw)


def parse_duration(raw: str) -> int:
    """EPANET durations: ``1:30`` (h:mm[:ss]), ``90 MIN``, or bare hours."""
    tokens = raw.split()
    if not tokens:
        raise ValueError("empty duration")
    value = tokens[0]
    if ":" in value:
        parts = [int(p) for p in value.split(":")]
        while len(parts) < 3:
            parts.append(0)
        h, m, s = parts[:3]
        return h * 3600 + m * 60 + s
    unit = tokens[1].upper() if len(tokens) > 1 else "HOURS"
    if unit not in _UNIT_SECONDS:
        raise ValueError(f"unknown time unit {tokens[1]!r}")
    return int(round(float(value) * _UNIT_SECONDS[unit]))


def _status_of(token: str) -> LinkStatus:
    t = token.strip().upper()
    if t == "CLOSED":
        return LinkStatus.CLOSED
    if t == "CV":
        return LinkStatus.CV
    return LinkStatus.OPEN


def read_inp(path: Path) -> InpNetwork:
    net = InpNetwork()
    links: Dict[str, Element] = {}
    section: Optional[str] = None

    text = Path(path).read_text(encoding="utf-8", errors="replace")
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.split(";", 1)[0].strip()
        if not line:
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip().upper()
            continue
        tokens = line.split()

        if section in _NODE_SECTIONS:
            net.elements.append(Element(tokens[0], _NODE_SECTIONS[section]))

        elif section in _LINK_SECTIONS:
            if len(tokens) < 3:
                raise InpFormatError(path, lineno, f"[{section}] entry needs id and two end nodes")
            kind = _LINK_SECTIONS[section]
            status = LinkStatus.OPEN
            if kind is ElementKind.PIPE and len(tokens) >= 8:
                status = _status_of(tokens[7])
            link = Element(tokens[0], kind, node1=tokens[1], node2=tokens[2], status=status)
            links[link.name] = link
            net.elements.append(link)

        elif section == "STATUS":
            if len(tokens) < 2:
                raise InpFormatError(path, lineno, "[STATUS] entry needs id and status")
            link = links.get(tokens[0])
            if link is not None and tokens[1].upper() in ("OPEN", "CLOSED"):
                link.status = _status_of(tokens[1])

        elif section == "CONTROLS":
            net.controls.append(line)

        elif section == "RULES":
            net.rules.append(line)

        elif section == "TIMES":
            upper = [t.upper() for t in tokens]
            if len(tokens) >= 3 and upper[1] == "TIMESTEP":
                net.times[f"{upper[0]} TIMESTEP"] = " ".join(tokens[2:])
            elif len(tokens) >= 2:
                net.times[upper[0]] = " ".join(tokens[1:])

    return net
