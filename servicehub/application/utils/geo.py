from __future__ import annotations

import math

from servicehub.domain.entities.coordinate import Coordinate, MapRegion
from servicehub.domain.entities.search_filters import normalize_radius_km

KM_PER_DEGREE = 111.0


def radius_km_for_region(region: MapRegion) -> int:
    """Half the larger span at 111 km/degree, clamped to [5, 100] and rounded to 5 km."""
    span_km = max(region.latitude_delta, region.longitude_delta) * KM_PER_DEGREE
    return normalize_radius_km(span_km / 2)


def coordinate_distance(a: Coordinate, b: Coordinate) -> float:
    return math.hypot(a.latitude - b.latitude, a.longitude - b.longitude)


def region_changed(previous: MapRegion | None, current: MapRegion, epsilon: float) -> bool:
    if previous is None:
        return True
    center_delta = coordinate_distance(previous.center, current.center)
    span_delta = math.hypot(
        previous.latitude_delta - current.latitude_delta,
        previous.longitude_delta - current.longitude_delta,
    )
    return center_delta > epsilon or span_delta > epsilon
