from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.coordinate import Coordinate


@dataclass(frozen=True)
class Place:
    coordinate: Coordinate
    place_id: int | None = None
    name: str | None = None
    display_name: str | None = None
    type: str | None = None
    importance: float | None = None
    bounding_box: tuple[float, ...] = ()

    @property
    def label(self) -> str:
        if self.display_name:
            return self.display_name
        if self.name:
            return self.name
        if self.type:
            return self.type.title()
        return "Unknown place"
