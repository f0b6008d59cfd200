from __future__ import annotations

import math

from .models import Distance, NearbyPlace, Property


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, so ``0.25 -> 0.3`` and ``12.5 -> 13``."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _closest(places: list[NearbyPlace]) -> float:
    if not places:
        return 0.0
    nearest = min(places, key=lambda p: p.distance)
    return round_half_up(nearest.distance, 1)


def compute_distances(prop: Property) -> Property:
    """
    Fill ``prop.distance`` from the nearby college and place lists.

    Distances that were already set are left untouched; a distance of
    zero to both college and hospital counts as unset.
    """
    current = prop.distance
    if current is not None and (current.college != 0 or current.hospital != 0):
        return prop

    transport = prop.nearby_places.transport
    distance = Distance(
        college=_closest(prop.nearby_colleges),
        hospital=_closest(prop.nearby_places.hospitals),
        bus_stop=_closest([t for t in transport if t.type == "bus_stop"]),
        metro=_closest([t for t in transport if t.type == "metro_station"]),
    )
    return prop.model_copy(update={"distance": distance})
