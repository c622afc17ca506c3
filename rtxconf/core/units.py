from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Units:
    name: str
    dimension: str

    @property
    def is_dimensionless(self) -> bool:
        return self.dimension == "dimensionless"

    def __str__(self) -> str:
        return self.name


DIMENSIONLESS = Units("dimensionless", "dimensionless")

_TABLE: Dict[str, Units] = {
    u.name: u
    for u in (
        DIMENSIONLESS,
        # flow
        Units("gpm", "flow"),
        Units("mgd", "flow"),
        Units("cfs", "flow"),
        Units("lps", "flow"),
        Units("lpm", "flow"),
        Units("cms", "flow"),
        Units("cmh", "flow"),
        Units("cmd", "flow"),
        # pressure
        Units("psi", "pressure"),
        Units("kpa", "pressure"),
        Units("bar", "pressure"),
        # length / head
        Units("ft", "length"),
        Units("in", "length"),
        Units("m", "length"),
        Units("cm", "length"),
        # volume
        Units("gal", "volume"),
        Units("mg", "volume"),
        Units("l", "volume"),
        Units("m3", "volume"),
        Units("ft3", "volume"),
        # concentration
        Units("mg/l", "concentration"),
        Units("ug/l", "concentration"),
        # time
        Units("s", "time"),
        Units("min", "time"),
        Units("hr", "time"),
        Units("day", "time"),
        # energy / power
        Units("kwh", "energy"),
        Units("kw", "power"),
        Units("hp", "power"),
    )
}

_ALIASES = {
    "none": "dimensionless",
    "": "dimensionless",
    "feet": "ft",
    "meters": "m",
    "gallons": "gal",
    "hours": "hr",
    "seconds": "s",
    "minutes": "min",
    "days": "day",
}


def units_of_type(name: Optional[str]) -> Optional[Units]:
    """Look up a unit by name, case-insensitive. Unknown names give None."""
    key = ("" if name is None else str(name)).strip().lower()
    key = _ALIASES.get(key, key)
    return _TABLE.get(key)
