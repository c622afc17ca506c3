from __future__ import annotations

from typing import Callable, Optional

from rtxconf.timeseries.base import TimeSeries

from .elements import Capability, Element

# Binders return False when the element has no slot for the parameter.
# Any other return value (None included) counts as attached.
ParameterBinder = Callable[[Element, TimeSeries], Optional[bool]]


def slot_binder(capability: Capability) -> ParameterBinder:
    """Binder that attaches a series to one capability slot.

    Returns False, attaching nothing, when the element's kind lacks the slot.
    """

    def bind(element: Element, series: TimeSeries) -> bool:
        if not element.has_capability(capability):
            return False
        element.attach(capability, series)
        return True

    bind.__name__ = f"bind_{capability.value}"
    bind.capability = capability  # type: ignore[attr-defined]
    return bind


BUILTIN_PARAMETERS = {
    # junction-like
    "qualitysource": Capability.QUALITY_SOURCE,
    "quality": Capability.QUALITY_MEASURE,
    "boundaryflow": Capability.BOUNDARY_FLOW,
    "headmeasure": Capability.HEAD_MEASURE,
    "pressuremeasure": Capability.PRESSURE_MEASURE,
    # tanks, reservoirs
    "levelmeasure": Capability.LEVEL_MEASURE,
    "boundaryhead": Capability.BOUNDARY_HEAD,
    # pipe-like
    "status": Capability.STATUS,
    "flow": Capability.FLOW_MEASURE,
    # pumps
    "curve": Capability.CURVE,
    "energy": Capability.ENERGY_MEASURE,
    # valves
    "setting": Capability.SETTING,
}
