from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from rtxconf.core.context import DeclareContext
from rtxconf.core.pending import LinkKind, LinkRequest
from rtxconf.core.units import DIMENSIONLESS, Units, units_of_type

from .base import AggregatorTimeSeries, ModularTimeSeries, MultiplierTimeSeries, TimeSeries


class _Settings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ---------------------------------------------------------------------------
# node classes
# ---------------------------------------------------------------------------

class ConstantTimeSeries(TimeSeries):
    def __init__(self) -> None:
        super().__init__()
        self.value: float = 0.0

    def parameters(self) -> Dict[str, Any]:
        return {"value": self.value}


class MovingAverage(ModularTimeSeries):
    def __init__(self) -> None:
        super().__init__()
        self.window: int = 1

    def parameters(self) -> Dict[str, Any]:
        return {"window": self.window}


class Resampler(ModularTimeSeries):
    pass


class FirstDerivative(ModularTimeSeries):
    pass


class OffsetTimeSeries(ModularTimeSeries):
    def __init__(self) -> None:
        super().__init__()
        self.offset: float = 0.0

    def parameters(self) -> Dict[str, Any]:
        return {"offset": self.offset}


class ThresholdTimeSeries(ModularTimeSeries):
    def __init__(self) -> None:
        super().__init__()
        self.threshold: float = 0.0

    def parameters(self) -> Dict[str, Any]:
        return {"threshold": self.threshold}


class CurveFunction(ModularTimeSeries):
    def __init__(self) -> None:
        super().__init__()
        self.input_units: Units = DIMENSIONLESS
        self.curve: List[Tuple[float, float]] = []

    def add_curve_coordinate(self, x: float, y: float) -> None:
        self.curve.append((float(x), float(y)))

    def parameters(self) -> Dict[str, Any]:
        return {"input_units": self.input_units.name, "curve": [list(p) for p in self.curve]}


class ValidRangeTimeSeries(ModularTimeSeries):
    DROP = "drop"
    SATURATE = "saturate"

    def __init__(self) -> None:
        super().__init__()
        self.range: Tuple[float, float] = (-math.inf, math.inf)
        self.mode: str = self.SATURATE

    def parameters(self) -> Dict[str, Any]:
        # unbounded ends render as null so snapshots stay valid JSON
        return {"range": [None if math.isinf(v) else v for v in self.range], "mode": self.mode}


# ---------------------------------------------------------------------------
# settings models
# ---------------------------------------------------------------------------

class MovingAverageSettings(_Settings):
    window: int


class AggregatorSource(_Settings):
    source: str
    multiplier: float = 1.0


class AggregatorSettings(_Settings):
    sources: List[AggregatorSource]


class OffsetSettings(_Settings):
    offset_value: float = Field(0.0, alias="offsetValue")


class ThresholdSettings(_Settings):
    threshold_value: float = Field(0.0, alias="thresholdValue")


class CurvePoint(_Settings):
    x: Optional[float] = None
    y: Optional[float] = None


class CurveFunctionSettings(_Settings):
    input_units: Optional[str] = Field(None, alias="inputUnits")
    function: List[CurvePoint]


class ValidRangeSettings(_Settings):
    range_min: Optional[float] = None
    range_max: Optional[float] = None
    mode: Optional[str] = None


class MultiplierSettings(_Settings):
    multiplier: Optional[str] = None


class ConstantSettings(_Settings):
    value: float = 0.0


# ---------------------------------------------------------------------------
# constructors: (settings, ctx) -> TimeSeries
# ---------------------------------------------------------------------------

def create_time_series(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    return TimeSeries()


def create_moving_average(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = MovingAverageSettings.model_validate(settings)
    ts = MovingAverage()
    ts.window = s.window
    return ts


def create_aggregator(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = AggregatorSettings.model_validate(settings)
    ts = AggregatorTimeSeries()
    ts.request_link(LinkRequest(
        kind=LinkKind.SOURCES,
        refs=tuple((src.source, src.multiplier) for src in s.sources),
    ))
    return ts


def create_resampler(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    return Resampler()


def create_derivative(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    return FirstDerivative()


def create_offset(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = OffsetSettings.model_validate(settings)
    ts = OffsetTimeSeries()
    ts.offset = s.offset_value
    return ts


def create_threshold(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = ThresholdSettings.model_validate(settings)
    ts = ThresholdTimeSeries()
    ts.threshold = s.threshold_value
    return ts


def create_curve_function(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = CurveFunctionSettings.model_validate(settings)
    ts = CurveFunction()
    if s.input_units is not None:
        units = units_of_type(s.input_units)
        if units is None:
            ctx.diagnostics.warn(
                "declare.unknown_units",
                f"unknown input units {s.input_units!r}; using dimensionless",
                units=s.input_units,
            )
        else:
            ts.input_units = units
    for point in s.function:
        if point.x is None or point.y is None:
            continue
        ts.add_curve_coordinate(point.x, point.y)
    return ts


def create_valid_range(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = ValidRangeSettings.model_validate(settings)
    ts = ValidRangeTimeSeries()
    lo, hi = ts.range
    if s.range_min is not None:
        lo = s.range_min
    if s.range_max is not None:
        hi = s.range_max
    ts.range = (lo, hi)
    if s.mode is not None:
        if s.mode in (ValidRangeTimeSeries.DROP, ValidRangeTimeSeries.SATURATE):
            ts.mode = s.mode
        else:
            ctx.diagnostics.warn(
                "declare.invalid_entry",
                f"could not resolve valid-range mode {s.mode!r}; keeping {ts.mode!r}",
                mode=s.mode,
            )
    return ts


def create_multiplier(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = MultiplierSettings.model_validate(settings)
    ts = MultiplierTimeSeries()
    if s.multiplier:
        ts.request_link(LinkRequest.single(LinkKind.BASIS, s.multiplier))
    return ts


def create_constant(settings: Mapping[str, Any], ctx: DeclareContext) -> TimeSeries:
    s = ConstantSettings.model_validate(settings)
    ts = ConstantTimeSeries()
    ts.value = s.value
    return ts
