from __future__ import annotations

import math
from dataclasses import dataclass, replace

from servicehub.domain.entities.coordinate import Coordinate

MIN_RADIUS_KM = 5
MAX_RADIUS_KM = 100
RADIUS_STEP_KM = 5


def normalize_radius_km(kilometers: float) -> int:
    """Clamp to [5, 100] and round half-up to the nearest multiple of 5."""
    clamped = max(MIN_RADIUS_KM, min(MAX_RADIUS_KM, kilometers))
    return int(math.floor(clamped / RADIUS_STEP_KM + 0.5)) * RADIUS_STEP_KM


@dataclass(frozen=True)
class SearchFilters:
    center: Coordinate
    free_text: str = ""
    radius_meters: int = 25_000
    minimum_rating: int = 0  # 0..5
    selected_service_tags: frozenset[str] = frozenset()

    @property
    def radius_km(self) -> int:
        return self.radius_meters // 1000

    def with_radius_km(self, kilometers: float) -> "SearchFilters":
        return replace(self, radius_meters=normalize_radius_km(kilometers) * 1000)

    def with_minimum_rating(self, rating: int) -> "SearchFilters":
        return replace(self, minimum_rating=max(0, min(5, int(rating))))

    def for_request(self) -> "SearchFilters":
        return replace(self, free_text=self.free_text.strip())
