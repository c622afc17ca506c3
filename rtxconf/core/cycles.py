from __future__ import annotations

from collections import defaultdict, deque
from typing import Dict, Iterator, List, Mapping, Set, Tuple

from rtxconf.timeseries.base import TimeSeries

from .diagnostics import DiagnosticLog


class CircularDependencyError(Exception):
    pass


def upstream_names(node: TimeSeries) -> List[str]:
    """Names of every series ``node`` reads from, in link order."""
    out: List[str] = []
    links = node.linked_names()
    for key in ("source", "basis"):
        if links.get(key):
            out.append(links[key])
    for name, _ in links.get("sources", []):
        out.append(name)
    return out


class LinkGraph:
    """Resolved links as a dependency graph (upstream -> dependent)."""

    def __init__(self) -> None:
        self.nodes: Dict[str, List[str]] = {}
        self.edges: Dict[str, List[str]] = defaultdict(list)

    @classmethod
    def from_timeseries(cls, series: Mapping[str, TimeSeries]) -> "LinkGraph":
        g = cls()
        for name, ts in series.items():
            g.add_node(name, upstream_names(ts))
        return g

    def add_node(self, name: str, depends_on: List[str]) -> None:
        self.nodes[name] = list(depends_on)
        for dep in depends_on:
            self.edges[dep].append(name)

    def topological_sort(self) -> List[str]:
        in_degree: Dict[str, int] = {name: 0 for name in self.nodes}
        for dep, dependents in self.edges.items():
            if dep not in self.nodes:
                continue
            for n in dependents:
                in_degree[n] += 1

        queue = deque(sorted(n for n, d in in_degree.items() if d == 0))
        order: List[str] = []
        while queue:
            current = queue.popleft()
            order.append(current)
            for neighbor in sorted(self.edges[current]):
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(order) != len(self.nodes):
            raise CircularDependencyError("Circular time series link detected")
        return order

    def find_cycles(self) -> List[List[str]]:
        """Each distinct cycle once, rotated to start at its smallest name."""
        seen: Set[tuple] = set()
        cycles: List[List[str]] = []
        state: Dict[str, int] = {}  # 1 = on stack, 2 = done

        # explicit stack: link chains can be far deeper than the recursion limit
        for root in sorted(self.nodes):
            if root in state:
                continue
            path: List[str] = [root]
            frames: List[Tuple[str, Iterator[str]]] = [(root, iter(self.nodes[root]))]
            state[root] = 1
            while frames:
                name, deps = frames[-1]
                dep = next(deps, None)
                if dep is None:
                    frames.pop()
                    path.pop()
                    state[name] = 2
                    continue
                if dep not in self.nodes:
                    continue
                if state.get(dep) == 1:
                    cycle = path[path.index(dep):]
                    i = cycle.index(min(cycle))
                    key = tuple(cycle[i:] + cycle[:i])
                    if key not in seen:
                        seen.add(key)
                        cycles.append(list(key))
                elif state.get(dep) is None:
                    state[dep] = 1
                    path.append(dep)
                    frames.append((dep, iter(self.nodes[dep])))
        return cycles


def report_cycles(series: Mapping[str, TimeSeries], diagnostics: DiagnosticLog) -> List[List[str]]:
    cycles = LinkGraph.from_timeseries(series).find_cycles()
    for cycle in cycles:
        path = " -> ".join(cycle + [cycle[0]])
        diagnostics.warn(
            "link.cycle",
            f"time series link cycle: {path}",
            cycle=cycle,
        )
    return cycles
