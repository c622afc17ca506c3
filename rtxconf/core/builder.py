from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from rtxconf.records.base import PointRecord
from rtxconf.timeseries.base import Clock, TimeSeries

from . import metrics
from .context import DeclareContext
from .diagnostics import DiagnosticLog
from .errors import BuilderStateError
from .pending import LinkKind, LinkRequest, PendingLinkTable
from .registry import Registries, TypeRegistry, default_registries
from .settings import LoaderSettings
from .units import units_of_type

_log = logging.getLogger("rtxconf.declare")


class BuilderPhase(str, Enum):
    CONSTRUCTED = "constructed"
    DECLARED = "declared"
    LINKED = "linked"
    BOUND = "bound"
    FROZEN = "frozen"


class ClockSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    period: int


class GraphBuilder:
    """Builds one graph from one document, in phases.

    constructed -> declare() -> link() -> bind() -> frozen. Each phase runs
    once; a reload builds a new GraphBuilder instead of reusing this one.
    The name registries and the pending link table belong to this instance
    and are only mutated by its phases.
    """

    def __init__(
        self,
        document_path: Path | str,
        *,
        registries: Optional[Registries] = None,
        settings: Optional[LoaderSettings] = None,
        diagnostics: Optional[DiagnosticLog] = None,
    ):
        self.registries = registries or default_registries()
        self.settings = settings or LoaderSettings()
        self.diagnostics = diagnostics or DiagnosticLog()
        self.context = DeclareContext(document_path=Path(document_path), diagnostics=self.diagnostics)
        self.phase = BuilderPhase.CONSTRUCTED

        self.records: Dict[str, PointRecord] = {}
        self.clocks: Dict[str, Clock] = {}
        self.timeseries: Dict[str, TimeSeries] = {}
        self.pending = PendingLinkTable()

    def _advance(self, expected: BuilderPhase, to: BuilderPhase) -> None:
        if self.phase is not expected:
            raise BuilderStateError(f"cannot enter {to.value} phase from {self.phase.value}")
        self.phase = to

    # ------------------------------------------------------------------
    # phase 1: declare
    # ------------------------------------------------------------------

    def declare(self, config: Mapping[str, Any]) -> None:
        """Materialize records, clocks and time series, in that order.

        Clocks and records must precede the series naming them; references
        between series are queued and resolved by ``link``.
        """
        self._advance(BuilderPhase.CONSTRUCTED, BuilderPhase.DECLARED)
        self.declare_records(config.get("records") or [])
        self.declare_clocks(config.get("clocks") or [])
        self.declare_timeseries(config.get("timeseries") or [])
        _log.info(
            "Declared %d records, %d clocks, %d time series (%d pending links)",
            len(self.records),
            len(self.clocks),
            len(self.timeseries),
            len(self.pending),
        )

    def declare_records(self, entries: List[Any]) -> None:
        registry = self.registries.records
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                self._invalid_entry("record", index, entry)
                continue
            name = str(entry.get("name") or f"Record {index}")
            tag = entry.get("type")
            built = self._construct(registry, "record", name, tag, entry)
            if built is None:
                continue
            built.name = name
            self._put("record", self.records, name, built)

    def declare_clocks(self, entries: List[Any]) -> None:
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                self._invalid_entry("clock", index, entry)
                continue
            try:
                s = ClockSettings.model_validate(entry)
                clock = Clock(s.name, s.period)
            except (ValidationError, ValueError) as e:
                metrics.inc_declaration("clock", "failed")
                self.diagnostics.warn(
                    "declare.construct_failed",
                    f"could not create clock {entry.get('name')!r}: {e}",
                    family="clock",
                    name=entry.get("name"),
                )
                continue
            self._put("clock", self.clocks, clock.name, clock)

    def declare_timeseries(self, entries: List[Any]) -> None:
        registry = self.registries.timeseries
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                self._invalid_entry("timeseries", index, entry)
                continue
            name = entry.get("name")
            if not isinstance(name, str) or not name:
                metrics.inc_declaration("timeseries", "failed")
                self.diagnostics.warn(
                    "declare.missing_name",
                    f"time series entry {index} has no name; skipped",
                    family="timeseries",
                    index=index,
                )
                continue
            tag = entry.get("type")
            node = self._construct(registry, "timeseries", name, tag, entry)
            if node is None:
                continue
            node.name = name
            node.kind = tag
            self._apply_shared_attributes(node, entry)
            # a redeclared name must not keep the earlier declaration's links
            self.pending.forget(name)
            self._queue_links(node, entry)
            self._put("timeseries", self.timeseries, name, node)

    def _construct(self, registry: TypeRegistry, family: str, name: str, tag: Any, entry: Mapping[str, Any]):
        result = registry.construct(tag, entry, self.context)
        if result.unknown_tag:
            metrics.inc_declaration(family, "unknown_tag")
            self.diagnostics.warn(
                "declare.unknown_tag",
                f"{family} type [{tag if tag is not None else ''}] not implemented or not recognized; "
                f"could not create {family} {name!r}",
                family=family,
                name=name,
                tag=tag,
            )
            return None
        if not result.ok:
            metrics.inc_declaration(family, "failed")
            self.diagnostics.warn(
                "declare.construct_failed",
                f"could not create {family} {name!r} of type {tag}: {result.error}",
                family=family,
                name=name,
                tag=tag,
            )
            return None
        return result.value

    def _put(self, family: str, table: Dict[str, Any], name: str, value: Any) -> None:
        if name in table:
            self.diagnostics.info(
                "declare.duplicate_name",
                f"{family} {name!r} declared again; the later declaration replaces it",
                family=family,
                name=name,
            )
        table[name] = value
        metrics.inc_declaration(family, "ok")

    def _invalid_entry(self, family: str, index: int, entry: Any) -> None:
        metrics.inc_declaration(family, "failed")
        self.diagnostics.warn(
            "declare.invalid_entry",
            f"{family} entry {index} is not a group ({type(entry).__name__}); skipped",
            family=family,
            index=index,
        )

    def _apply_shared_attributes(self, node: TimeSeries, entry: Mapping[str, Any]) -> None:
        if "units" in entry:
            units = units_of_type(entry.get("units"))
            if units is None:
                self.diagnostics.warn(
                    "declare.unknown_units",
                    f"time series {node.name!r}: unknown units {entry.get('units')!r}; using dimensionless",
                    name=node.name,
                    units=entry.get("units"),
                )
            else:
                node.units = units

        if "clock" in entry:
            clock_name = entry.get("clock")
            clock = self.clocks.get(clock_name) if isinstance(clock_name, str) else None
            if clock is None:
                self.diagnostics.warn(
                    "declare.unresolved_clock",
                    f"time series {node.name!r}: clock {clock_name!r} not declared before it",
                    name=node.name,
                    clock=clock_name,
                )
            node.clock = clock

        if "pointRecord" in entry:
            record_name = entry.get("pointRecord")
            record = self.records.get(record_name) if isinstance(record_name, str) else None
            if record is None:
                self.diagnostics.warn(
                    "declare.unresolved_record",
                    f"time series {node.name!r}: point record {record_name!r} not declared",
                    name=node.name,
                    record=record_name,
                )
            node.record = record

    def _queue_links(self, node: TimeSeries, entry: Mapping[str, Any]) -> None:
        if "source" in entry:
            source = entry.get("source")
            if not isinstance(source, str) or not source:
                self.diagnostics.warn(
                    "declare.invalid_entry",
                    f"time series {node.name!r}: source must be a time series name",
                    name=node.name,
                )
            elif not node.supports_link(LinkKind.SOURCE):
                self.diagnostics.warn(
                    "declare.source_ignored",
                    f"time series {node.name!r} of type {node.kind} takes no upstream source; "
                    f"ignoring source {source!r}",
                    name=node.name,
                    source=source,
                )
            else:
                self.pending.add(node.name, LinkRequest.single(LinkKind.SOURCE, source))

        for request in node.take_link_requests():
            self.pending.add(node.name, request)

    # ------------------------------------------------------------------
    # phase 2: link
    # ------------------------------------------------------------------

    def link(self) -> None:
        from .linker import resolve_links

        self._advance(BuilderPhase.DECLARED, BuilderPhase.LINKED)
        resolve_links(self.timeseries, self.pending.drain(), self.diagnostics)

        if self.settings.detect_cycles:
            from .cycles import report_cycles

            report_cycles(self.timeseries, self.diagnostics)

    # ------------------------------------------------------------------
    # element binding
    # ------------------------------------------------------------------

    def bind(self, model: Any, entries: List[Any]) -> None:
        from .binder import bind_elements, parse_bindings

        self._advance(BuilderPhase.LINKED, BuilderPhase.BOUND)
        if model is None:
            if entries:
                self.diagnostics.warn(
                    "bind.no_model",
                    f"{len(entries)} element bindings skipped: no model loaded",
                    count=len(entries),
                )
            return
        bindings = parse_bindings(entries, self.diagnostics)
        bind_elements(
            model,
            bindings,
            self.timeseries,
            self.registries.parameters,
            self.diagnostics,
            strict=self.settings.strict_capabilities,
        )

    def freeze(self) -> None:
        self._advance(BuilderPhase.BOUND, BuilderPhase.FROZEN)
