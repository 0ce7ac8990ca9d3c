from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class MapRegion:
    center: Coordinate
    latitude_delta: float
    longitude_delta: float

    def recentered(self, center: Coordinate) -> "MapRegion":
        return MapRegion(center=center, latitude_delta=self.latitude_delta, longitude_delta=self.longitude_delta)
