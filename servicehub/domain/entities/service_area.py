from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.coordinate import Coordinate


@dataclass(frozen=True)
class ServiceArea:
    uuid: str | None = None
    name: str | None = None
    coordinate: Coordinate | None = None
    radius: float | None = None

    @property
    def id(self) -> str:
        if self.uuid:
            return self.uuid
        lat = self.coordinate.latitude if self.coordinate else 0.0
        lon = self.coordinate.longitude if self.coordinate else 0.0
        return f"{lat}-{lon}"

    @property
    def radius_meters(self) -> float:
        return max(self.radius or 0.0, 0.0)

    @property
    def display_title(self) -> str:
        return self.name or "Service Area"

    @property
    def formatted_radius(self) -> str:
        meters = self.radius_meters
        if meters >= 1000:
            return f"{meters / 1000:.1f} km radius"
        return f"{int(meters)} m radius"
