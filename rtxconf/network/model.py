from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from rtxconf.core.context import DeclareContext
from rtxconf.core.errors import ConstructionError

from .elements import Element, ElementKind
from .inp import read_inp
from .zones import Zone, detect_zones

_log = logging.getLogger("rtxconf.model")

DEFAULT_HYDRAULIC_STEP = 3600
DEFAULT_QUALITY_STEP = 300


class ModelSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    file: str


class Model:
    """Loaded network model: elements plus the settings assembly writes."""

    kind = "model"

    def __init__(self) -> None:
        self.path: Optional[Path] = None
        self.elements: List[Element] = []
        self.controls: List[str] = []
        self.rules: List[str] = []
        self.hydraulic_time_step: int = DEFAULT_HYDRAULIC_STEP
        self.quality_time_step: int = DEFAULT_QUALITY_STEP
        self.storage: Any = None
        self.zones: List[Zone] = []
        self._index: Dict[str, List[Element]] = {}

    def load_model_from_file(self, path: Path) -> None:
        net = read_inp(path)
        self.path = Path(path)
        self.elements = list(net.elements)
        self.controls = list(net.controls)
        self.rules = list(net.rules)
        self.hydraulic_time_step = net.time_step("HYDRAULIC TIMESTEP") or DEFAULT_HYDRAULIC_STEP
        self.quality_time_step = net.time_step("QUALITY TIMESTEP") or DEFAULT_QUALITY_STEP
        self._index = {}
        for e in self.elements:
            self._index.setdefault(e.name, []).append(e)
        _log.info("Loaded model %s: %d elements", path, len(self.elements))

    def elements_named(self, name: str) -> List[Element]:
        # node and link ids may collide, so a name can match more than one element
        return list(self._index.get(name, []))

    def nodes(self) -> List[Element]:
        return [e for e in self.elements if e.kind.is_node]

    def links(self) -> List[Element]:
        return [e for e in self.elements if e.kind.is_link]

    def of_kind(self, kind: ElementKind) -> List[Element]:
        return [e for e in self.elements if e.kind is kind]

    def junctions(self) -> List[Element]:
        return self.of_kind(ElementKind.JUNCTION)

    def pipes(self) -> List[Element]:
        return self.of_kind(ElementKind.PIPE)

    def set_hydraulic_time_step(self, seconds: int) -> None:
        self.hydraulic_time_step = int(seconds)

    def set_quality_time_step(self, seconds: int) -> None:
        self.quality_time_step = int(seconds)

    def set_storage(self, record: Any) -> None:
        self.storage = record
        for e in self.elements:
            for state in e.states.values():
                state.record = record

    def init_demand_zones(self, detect_closed_links: bool = False) -> List[Zone]:
        self.zones = detect_zones(self.elements, detect_closed_links=detect_closed_links)
        _log.info("Detected %d demand zones", len(self.zones))
        return self.zones

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "file": self.path.name if self.path else None,
            "hydraulic_time_step": self.hydraulic_time_step,
            "quality_time_step": self.quality_time_step,
            "controls": len(self.controls),
            "rules": len(self.rules),
            "storage": getattr(self.storage, "name", None),
            "zones": [z.to_dict() for z in self.zones],
        }


class EpanetModel(Model):
    kind = "epanet"

    def override_controls(self) -> None:
        """Drop file controls and rules; bound series drive the model instead."""
        if self.controls or self.rules:
            _log.info("Overriding %d controls and %d rule lines", len(self.controls), len(self.rules))
        self.controls = []
        self.rules = []


class SyntheticEpanetModel(Model):
    kind = "synthetic_epanet"


def _model_path(settings: Mapping[str, Any], ctx: DeclareContext) -> Path:
    s = ModelSettings.model_validate(settings)
    path = ctx.resolve_path(s.file)
    if not path.is_file():
        raise ConstructionError(f"model file not found: {path}")
    return path


def create_epanet_model(settings: Mapping[str, Any], ctx: DeclareContext) -> Model:
    path = _model_path(settings, ctx)
    model = EpanetModel()
    try:
        model.load_model_from_file(path)
    except OSError as e:
        raise ConstructionError(f"cannot read model file {path}: {e}") from e
    model.override_controls()
    return model


def create_synthetic_epanet_model(settings: Mapping[str, Any], ctx: DeclareContext) -> Model:
    path = _model_path(settings, ctx)
    model = SyntheticEpanetModel()
    try:
        model.load_model_from_file(path)
    except OSError as e:
        raise ConstructionError(f"cannot read model file {path}: {e}") from e
    return model
