"""
Stages run after the graph is linked: model creation, simulation defaults,
zone detection and result persistence. Each stage works on whatever the
earlier ones produced and degrades to a diagnostic when a prerequisite is
missing.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from rtxconf.network.elements import Capability
from rtxconf.records.base import PointRecord

from .context import DeclareContext
from .diagnostics import DiagnosticLog
from .registry import TypeRegistry


class SimulationTime(BaseModel):
    model_config = ConfigDict(extra="ignore")

    hydraulic: int
    quality: int


class SimulationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time: SimulationTime


class ZoneSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    auto_detect: bool = False
    detect_closed_links: bool = False


SAVE_ALL = "all"
SAVE_MEASURED = "measured"
SAVE_ZONE_DEMAND = "zone_demand"


def create_model(
    group: Optional[Mapping[str, Any]],
    models: TypeRegistry,
    ctx: DeclareContext,
    diagnostics: DiagnosticLog,
):
    if group is None:
        return None
    tag = group.get("type")
    result = models.construct(tag, group, ctx)
    if result.unknown_tag:
        diagnostics.warn("model.unknown_type", f"model type {tag!r} not supported; no model loaded", tag=tag)
        return None
    if not result.ok:
        diagnostics.error("model.load_failed", f"could not load model: {result.error}", tag=tag)
        return None
    return result.value


def apply_simulation(group: Optional[Mapping[str, Any]], model: Any, diagnostics: DiagnosticLog) -> None:
    if group is None:
        return
    if model is None:
        diagnostics.warn("simulation.no_model", "simulation settings ignored: no model loaded")
        return
    try:
        s = SimulationSettings.model_validate(group)
    except ValidationError as e:
        diagnostics.warn("simulation.invalid", f"simulation settings ignored: {e}")
        return
    model.set_hydraulic_time_step(s.time.hydraulic)
    model.set_quality_time_step(s.time.quality)


def apply_zones(group: Optional[Mapping[str, Any]], model: Any, diagnostics: DiagnosticLog) -> None:
    if group is None:
        return
    try:
        s = ZoneSettings.model_validate(group)
    except ValidationError as e:
        diagnostics.warn("zones.invalid", f"zone settings ignored: {e}")
        return
    if not s.auto_detect:
        return
    if model is None:
        diagnostics.warn("zones.no_model", "zone detection skipped: no model loaded")
        return
    model.init_demand_zones(s.detect_closed_links)


def _save_measured(model: Any, record: PointRecord) -> None:
    for e in model.nodes():
        if e.slot(Capability.HEAD_MEASURE) is not None:
            e.states["head"].record = record
        if e.slot(Capability.QUALITY_MEASURE) is not None:
            e.states["quality"].record = record
    for e in model.links():
        if e.slot(Capability.FLOW_MEASURE) is not None:
            e.states["flow"].record = record


def apply_save(
    group: Optional[Mapping[str, Any]],
    model: Any,
    records: Mapping[str, PointRecord],
    diagnostics: DiagnosticLog,
) -> Optional[PointRecord]:
    """Wire the default state record; returns it (or None)."""
    if group is None or group.get("staterecord") is None:
        diagnostics.warn("save.no_state_record", "no state record specified; model results will not be persisted")
        return None

    name = group.get("staterecord")
    record = records.get(name) if isinstance(name, str) else None
    if record is None:
        diagnostics.warn("save.unresolved_record", f"could not retrieve point record by name: {name!r}", record=name)

    states = group.get("save_states")
    if states is None:
        return record
    if not isinstance(states, list):
        diagnostics.warn("save.invalid", "save_states should be a list; check config format")
        return record
    if record is None:
        diagnostics.warn("save.skipped", "save_states ignored: no usable state record")
        return None
    if model is None:
        diagnostics.warn("save.no_model", "save_states ignored: no model loaded")
        return record

    for state in states:
        if state == SAVE_ALL:
            model.set_storage(record)
        elif state == SAVE_MEASURED:
            _save_measured(model, record)
        elif state == SAVE_ZONE_DEMAND:
            for zone in model.zones:
                zone.record = record
        else:
            diagnostics.warn("save.unknown_state", f"unknown save state {state!r}", state=state)
    return record
