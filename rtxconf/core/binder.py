from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping

from rtxconf.timeseries.base import TimeSeries

from . import metrics
from .diagnostics import DiagnosticLog
from .registry import TypeRegistry

_log = logging.getLogger("rtxconf.bind")


@dataclass(frozen=True)
class ElementBinding:
    model_id: str
    parameter: str
    timeseries: str


@dataclass
class BindStats:
    attached: int = 0
    skipped: int = 0
    mismatched: int = 0


def parse_bindings(entries: List[Any], diagnostics: DiagnosticLog) -> List[ElementBinding]:
    out: List[ElementBinding] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            diagnostics.warn("bind.invalid_entry", f"element entry {index} is not a group; skipped", index=index)
            continue
        missing = [k for k in ("model_id", "parameter", "timeseries") if not isinstance(entry.get(k), str) or not entry.get(k)]
        if missing:
            diagnostics.warn(
                "bind.invalid_entry",
                f"skipping element {entry.get('model_id')!r}: missing {', '.join(missing)}",
                index=index,
                missing=missing,
            )
            continue
        out.append(ElementBinding(entry["model_id"], entry["parameter"], entry["timeseries"]))
    return out


def bind_elements(
    model: Any,
    bindings: List[ElementBinding],
    series: Mapping[str, TimeSeries],
    binders: TypeRegistry,
    diagnostics: DiagnosticLog,
    *,
    strict: bool = False,
) -> BindStats:
    """Attach named series onto model element slots.

    Each binding is independent: a missing element, unknown parameter tag or
    unknown series skips that binding only. An element whose kind lacks the
    parameter's slot is skipped without a diagnostic unless ``strict``.
    """
    stats = BindStats()
    for b in bindings:
        elements = model.elements_named(b.model_id)
        if not elements:
            stats.skipped += 1
            metrics.inc_binding("element_not_found")
            diagnostics.warn(
                "bind.element_not_found",
                f"model has no element {b.model_id!r}",
                model_id=b.model_id,
                parameter=b.parameter,
            )
            continue

        if b.parameter not in binders:
            stats.skipped += 1
            metrics.inc_binding("unknown_parameter")
            diagnostics.warn(
                "bind.unknown_parameter",
                f"could not find parameter type {b.parameter!r} (element {b.model_id!r})",
                model_id=b.model_id,
                parameter=b.parameter,
            )
            continue

        target = series.get(b.timeseries)
        if target is None:
            stats.skipped += 1
            metrics.inc_binding("unresolved_timeseries")
            diagnostics.warn(
                "bind.unresolved_timeseries",
                f"could not find time series {b.timeseries!r} for element {b.model_id!r}",
                model_id=b.model_id,
                parameter=b.parameter,
                timeseries=b.timeseries,
            )
            continue

        for element in elements:
            result = binders.construct(b.parameter, element, target)
            if not result.ok:
                stats.skipped += 1
                metrics.inc_binding("failed")
                diagnostics.warn(
                    "bind.failed",
                    f"binding {b.parameter!r} on {element.name!r} failed: {result.error}",
                    model_id=b.model_id,
                    parameter=b.parameter,
                )
                continue
            if result.value is not False:
                stats.attached += 1
                metrics.inc_binding("attached")
                continue
            stats.mismatched += 1
            metrics.inc_binding("capability_mismatch")
            _log.debug(
                "%s %r has no slot for parameter %r; skipped",
                element.kind.value,
                element.name,
                b.parameter,
            )
            if strict:
                diagnostics.warn(
                    "bind.capability_mismatch",
                    f"{element.kind.value} {element.name!r} cannot take parameter {b.parameter!r}",
                    model_id=b.model_id,
                    parameter=b.parameter,
                    element_kind=element.kind.value,
                )

    _log.info("Bound %d element parameters (%d skipped)", stats.attached, stats.skipped)
    return stats
