from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping

from rtxconf.timeseries.base import TimeSeries

from . import metrics
from .diagnostics import DiagnosticLog
from .pending import LinkKind, PendingLink

_log = logging.getLogger("rtxconf.link")


@dataclass
class LinkStats:
    resolved: int = 0
    unresolved: int = 0


def _unresolved(node: TimeSeries, entry: PendingLink, ref: str, diagnostics: DiagnosticLog, stats: LinkStats) -> None:
    stats.unresolved += 1
    metrics.inc_link(entry.kind.value, "unresolved")
    diagnostics.warn(
        "link.unresolved",
        f"cannot locate specified {entry.kind.value} time series {ref!r} (specified by time series {node.name!r})",
        node=node.name,
        kind=entry.kind.value,
        ref=ref,
    )


def _resolve_single(
    node: TimeSeries,
    entry: PendingLink,
    nodes: Mapping[str, TimeSeries],
    diagnostics: DiagnosticLog,
    stats: LinkStats,
) -> None:
    name, _ = entry.refs[0]
    target = nodes.get(name)
    if target is None:
        _unresolved(node, entry, name, diagnostics, stats)
        return
    node.attach(entry.kind, target)
    stats.resolved += 1
    metrics.inc_link(entry.kind.value, "resolved")


def _resolve_weighted(
    node: TimeSeries,
    entry: PendingLink,
    nodes: Mapping[str, TimeSeries],
    diagnostics: DiagnosticLog,
    stats: LinkStats,
) -> None:
    # each pair stands alone: a missing name is dropped, the rest keep their order
    for name, weight in entry.refs:
        target = nodes.get(name)
        if target is None:
            _unresolved(node, entry, name, diagnostics, stats)
            continue
        node.attach(entry.kind, target, weight)
        stats.resolved += 1
        metrics.inc_link(entry.kind.value, "resolved")


_RESOLVERS: Dict[LinkKind, Callable[..., None]] = {
    LinkKind.SOURCE: _resolve_single,
    LinkKind.BASIS: _resolve_single,
    LinkKind.SOURCES: _resolve_weighted,
}


def resolve_links(
    nodes: Mapping[str, TimeSeries],
    pending: Iterable[PendingLink],
    diagnostics: DiagnosticLog,
) -> LinkStats:
    """Fill in the linkage fields of already-declared nodes.

    Only linkage fields are written; no node is created, replaced or removed.
    """
    stats = LinkStats()
    for entry in pending:
        node = nodes.get(entry.node)
        if node is None:
            stats.unresolved += 1
            metrics.inc_link(entry.kind.value, "unresolved")
            diagnostics.warn(
                "link.unresolved",
                f"cannot locate time series {entry.node!r}",
                node=entry.node,
                kind=entry.kind.value,
            )
            continue
        if not node.supports_link(entry.kind):
            stats.unresolved += 1
            metrics.inc_link(entry.kind.value, "unsupported")
            diagnostics.warn(
                "link.unresolved",
                f"time series {node.name!r} of type {node.kind} takes no {entry.kind.value} link",
                node=node.name,
                kind=entry.kind.value,
            )
            continue
        _RESOLVERS[entry.kind](node, entry, nodes, diagnostics, stats)

    _log.info("Resolved %d links (%d unresolved)", stats.resolved, stats.unresolved)
    return stats
