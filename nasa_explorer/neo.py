"""
Near Earth Object aggregation: one sorted list and summary statistics
out of the date-keyed NEO feed.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

NearEarthObject = Mapping[str, Any]

NO_AVERAGE = "N/A"


@dataclass(frozen=True)
class NeoStats:
    """Summary of a NEO feed."""

    total: int
    hazardous: int
    avg_diameter: str
    largest: Optional[NearEarthObject]


def max_diameter_km(neo: NearEarthObject) -> float:
    """Estimated maximum diameter in kilometers."""
    diameter = neo.get("estimated_diameter", {}).get("kilometers", {})
    return float(diameter.get("estimated_diameter_max", 0) or 0)


def min_diameter_km(neo: NearEarthObject) -> float:
    diameter = neo.get("estimated_diameter", {}).get("kilometers", {})
    return float(diameter.get("estimated_diameter_min", 0) or 0)


def close_approach(neo: NearEarthObject) -> Mapping[str, Any]:
    """First close-approach record, or an empty mapping."""
    approaches = neo.get("close_approach_data") or []
    return approaches[0] if approaches else {}


def format_distance(distance: Any) -> str:
    """Render a miss distance: ``2.50M km`` from a million up, ``123,456.78 km`` below."""
    km = float(distance)
    if km >= 1_000_000:
        return f"{km / 1_000_000:.2f}M km"
    text = f"{km:,.3f}".rstrip("0").rstrip(".")
    return f"{text} km"


def format_velocity(velocity: Any) -> str:
    return f"{float(velocity):.2f} km/s"


def format_diameter_range(neo: NearEarthObject) -> str:
    """Render the estimated diameter as ``0.12 - 0.27 km``."""
    return f"{min_diameter_km(neo):.2f} - {max_diameter_km(neo):.2f} km"


class NeoAggregator:
    """Read-only view over ``near_earth_objects`` from the NEO feed."""

    def __init__(self, objects_by_date: Optional[Mapping[str, Sequence[NearEarthObject]]] = None):
        self._objects_by_date = objects_by_date or {}

    @classmethod
    def from_feed(cls, payload: Optional[Mapping[str, Any]]) -> "NeoAggregator":
        """Build from a whole NEO feed response; a missing payload is an empty feed."""
        return cls((payload or {}).get("near_earth_objects") or {})

    def flatten(self) -> List[NearEarthObject]:
        """Every object across all dates, largest first; ties keep feed order."""
        objects: List[NearEarthObject] = []
        for day_objects in self._objects_by_date.values():
            objects.extend(day_objects)
        # list.sort is stable, so equal diameters stay in encounter order
        objects.sort(key=max_diameter_km, reverse=True)
        return objects

    def stats(self) -> NeoStats:
        objects = self.flatten()
        if not objects:
            return NeoStats(total=0, hazardous=0, avg_diameter=NO_AVERAGE, largest=None)

        hazardous = sum(1 for neo in objects if neo.get("is_potentially_hazardous_asteroid"))
        average = sum(max_diameter_km(neo) for neo in objects) / len(objects)
        return NeoStats(
            total=len(objects),
            hazardous=hazardous,
            avg_diameter=f"{average:.2f}",
            largest=objects[0],
        )

