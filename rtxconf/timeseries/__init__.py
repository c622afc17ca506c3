from rtxconf.core.registry import TypeRegistry

from .base import (
    AggregatorTimeSeries,
    Clock,
    ModularTimeSeries,
    MultiplierTimeSeries,
    TimeSeries,
)
from . import kinds

TIMESERIES_TYPES = TypeRegistry("timeseries")
TIMESERIES_TYPES.register("TimeSeries", kinds.create_time_series)
TIMESERIES_TYPES.register("MovingAverage", kinds.create_moving_average)
TIMESERIES_TYPES.register("Aggregator", kinds.create_aggregator)
TIMESERIES_TYPES.register("Resampler", kinds.create_resampler)
TIMESERIES_TYPES.register("Derivative", kinds.create_derivative)
TIMESERIES_TYPES.register("FirstDerivative", kinds.create_derivative)
TIMESERIES_TYPES.register("Offset", kinds.create_offset)
TIMESERIES_TYPES.register("Threshold", kinds.create_threshold)
TIMESERIES_TYPES.register("CurveFunction", kinds.create_curve_function)
TIMESERIES_TYPES.register("Multiplier", kinds.create_multiplier)
TIMESERIES_TYPES.register("ValidRange", kinds.create_valid_range)
TIMESERIES_TYPES.register("Constant", kinds.create_constant)

__all__ = [
    "AggregatorTimeSeries",
    "Clock",
    "ModularTimeSeries",
    "MultiplierTimeSeries",
    "TIMESERIES_TYPES",
    "TimeSeries",
]
