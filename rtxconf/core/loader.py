from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from rtxconf.records.base import PointRecord
from rtxconf.timeseries.base import Clock, TimeSeries

from . import metrics
from .builder import GraphBuilder
from .cycles import LinkGraph
from .diagnostics import ERROR, WARN, Diagnostic, DiagnosticLog
from .document import CONFIG_VERSION, read_document, section_group, section_list
from .registry import Registries
from .settings import LoaderSettings
from .stages import apply_save, apply_simulation, apply_zones, create_model

_log = logging.getLogger("rtxconf.loader")


@dataclass(frozen=True)
class LoadedConfig:
    """Result of one load. Read-only once returned."""

    document_path: Path
    version: Optional[str]
    records: Mapping[str, PointRecord]
    clocks: Mapping[str, Clock]
    timeseries: Mapping[str, TimeSeries]
    model: Any
    default_record: Optional[PointRecord]
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        # reaching a LoadedConfig means no DocumentError; everything else degrades
        return True

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == WARN]

    def evaluation_order(self) -> List[str]:
        """Series names with every upstream before its dependents."""
        return LinkGraph.from_timeseries(self.timeseries).topological_sort()

    def to_dict(self) -> Dict[str, Any]:
        elements = []
        if self.model is not None:
            elements = [e.to_dict() for e in self.model.elements]
        return {
            "document": self.document_path.name,
            "version": self.version,
            "records": {n: r.to_dict() for n, r in sorted(self.records.items())},
            "clocks": {n: c.period for n, c in sorted(self.clocks.items())},
            "timeseries": {n: ts.to_dict() for n, ts in sorted(self.timeseries.items())},
            "model": self.model.to_dict() if self.model is not None else None,
            "elements": elements,
            "default_record": self.default_record.name if self.default_record is not None else None,
            "diagnostics": [d.code for d in self.diagnostics],
        }


def load_config(
    path: Path | str,
    *,
    settings: Optional[LoaderSettings] = None,
    registries: Optional[Registries] = None,
) -> LoadedConfig:
    """Read a document and assemble its graph with a fresh builder.

    Raises DocumentError for unreadable or malformed documents; every other
    problem lands in the returned ``diagnostics``.
    """
    t0 = time.perf_counter()
    path = Path(path)
    data = read_document(path)
    diagnostics = DiagnosticLog()

    version = data.get("version")
    if version is None:
        diagnostics.warn("document.version", f"document has no version; assuming {CONFIG_VERSION}")
    elif str(version) != CONFIG_VERSION:
        diagnostics.warn(
            "document.version",
            f"document version {version!r} differs from supported {CONFIG_VERSION}",
            version=str(version),
        )

    config = data["configuration"]
    builder = GraphBuilder(path, registries=registries, settings=settings, diagnostics=diagnostics)
    builder.declare(config)
    builder.link()

    model = create_model(section_group(config, "model"), builder.registries.models, builder.context, diagnostics)
    builder.bind(model, section_list(config, "elements"))

    apply_simulation(section_group(config, "simulation"), model, diagnostics)
    apply_zones(section_group(config, "zones", "zone-detection"), model, diagnostics)
    default_record = apply_save(section_group(config, "save"), model, builder.records, diagnostics)
    builder.freeze()

    elapsed = time.perf_counter() - t0
    metrics.LOAD_DURATION_SECONDS.observe(elapsed)
    _log.info(
        "Loaded %s in %d ms: %d time series, %d diagnostics",
        path,
        int(round(elapsed * 1000)),
        len(builder.timeseries),
        len(diagnostics),
    )

    return LoadedConfig(
        document_path=path,
        version=str(version) if version is not None else None,
        records=MappingProxyType(dict(builder.records)),
        clocks=MappingProxyType(dict(builder.clocks)),
        timeseries=MappingProxyType(dict(builder.timeseries)),
        model=model,
        default_record=default_record,
        diagnostics=list(diagnostics),
    )


class ConfigLoader:
    """Holds the current LoadedConfig and swaps it on reload.

    Loads are serialized on an instance lock. Each load builds a new graph;
    a failed load leaves ``current`` untouched.
    """

    def __init__(
        self,
        settings: Optional[LoaderSettings] = None,
        registries: Optional[Registries] = None,
    ):
        self.settings = settings or LoaderSettings()
        self.registries = registries
        self._lock = threading.Lock()
        self._current: Optional[LoadedConfig] = None

    @property
    def current(self) -> Optional[LoadedConfig]:
        return self._current

    def load(self, path: Optional[Path | str] = None) -> LoadedConfig:
        target = path or (self._current.document_path if self._current is not None else None) or self.settings.document
        if not target:
            raise ValueError("no document path given and RTXCONF_DOCUMENT is not set")
        with self._lock:
            registries = self.registries.copy() if self.registries is not None else None
            result = load_config(target, settings=self.settings, registries=registries)
            self._current = result
            return result
