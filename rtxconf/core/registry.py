from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from .errors import ConstructionError

Constructor = Callable[..., Any]

# Constructor failures the registry turns into a failed Construction.
# Anything else is a bug in the constructor and propagates.
RECOVERABLE_ERRORS = (ConstructionError, ValidationError, KeyError, TypeError, ValueError)


@dataclass(frozen=True)
class Construction:
    tag: str
    value: Any = None
    error: Optional[str] = None
    unknown_tag: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


class TypeRegistry:
    """Open map from a string tag to a constructor, for one family of kinds.

    Adding a kind is one ``register`` call; nothing that dispatches through
    the registry has to change.
    """

    def __init__(self, family: str):
        self.family = family
        self._constructors: Dict[str, Constructor] = {}

    def register(self, tag: str, constructor: Constructor) -> None:
        if not tag:
            raise ValueError(f"{self.family} registry: tag must be non-empty")
        self._constructors[tag] = constructor

    def construct(self, tag: Optional[str], *args: Any, **kwargs: Any) -> Construction:
        fn = self._constructors.get(tag) if isinstance(tag, str) and tag else None
        if fn is None:
            return Construction(
                tag=str(tag or ""),
                error=f"{self.family} type [{tag or ''}] not supported",
                unknown_tag=True,
            )
        try:
            return Construction(tag=tag, value=fn(*args, **kwargs))
        except RECOVERABLE_ERRORS as e:
            return Construction(tag=tag, error=f"{type(e).__name__}: {e}")

    def get(self, tag: str) -> Optional[Constructor]:
        return self._constructors.get(tag)

    def tags(self) -> List[str]:
        return sorted(self._constructors.keys())

    def copy(self) -> "TypeRegistry":
        other = TypeRegistry(self.family)
        other._constructors = dict(self._constructors)
        return other

    def __contains__(self, tag: object) -> bool:
        return tag in self._constructors

    def __len__(self) -> int:
        return len(self._constructors)


@dataclass
class Registries:
    records: TypeRegistry
    timeseries: TypeRegistry
    parameters: TypeRegistry
    models: TypeRegistry

    def copy(self) -> "Registries":
        return Registries(
            records=self.records.copy(),
            timeseries=self.timeseries.copy(),
            parameters=self.parameters.copy(),
            models=self.models.copy(),
        )


def default_registries() -> Registries:
    """Fresh registries holding every built-in kind."""
    from rtxconf.network import MODEL_TYPES, PARAMETER_BINDERS
    from rtxconf.records import RECORD_TYPES
    from rtxconf.timeseries import TIMESERIES_TYPES

    return Registries(
        records=RECORD_TYPES.copy(),
        timeseries=TIMESERIES_TYPES.copy(),
        parameters=PARAMETER_BINDERS.copy(),
        models=MODEL_TYPES.copy(),
    )
