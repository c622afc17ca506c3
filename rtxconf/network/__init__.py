from rtxconf.core.registry import TypeRegistry

from .elements import CAPABILITIES, Capability, Element, ElementKind, LinkStatus
from .model import EpanetModel, Model, SyntheticEpanetModel, create_epanet_model, create_synthetic_epanet_model
from .parameters import BUILTIN_PARAMETERS, slot_binder
from .zones import Zone, detect_zones

PARAMETER_BINDERS = TypeRegistry("parameter")
for _tag, _capability in BUILTIN_PARAMETERS.items():
    PARAMETER_BINDERS.register(_tag, slot_binder(_capability))

MODEL_TYPES = TypeRegistry("model")
MODEL_TYPES.register("epanet", create_epanet_model)
MODEL_TYPES.register("synthetic_epanet", create_synthetic_epanet_model)

__all__ = [
    "CAPABILITIES",
    "Capability",
    "Element",
    "ElementKind",
    "EpanetModel",
    "LinkStatus",
    "MODEL_TYPES",
    "Model",
    "PARAMETER_BINDERS",
    "SyntheticEpanetModel",
    "Zone",
    "detect_zones",
    "slot_binder",
]
