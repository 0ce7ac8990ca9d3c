from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.business_hour import BusinessHour
from servicehub.domain.entities.company import CompanyDetail, CompanyResult
from servicehub.domain.entities.service_area import ServiceArea


@dataclass(frozen=True)
class DetailState:
    selected: CompanyResult | None = None
    detail: CompanyDetail | None = None
    hours: tuple[BusinessHour, ...] = ()
    areas: tuple[ServiceArea, ...] = ()
    is_loading: bool = False
    error_message: str | None = None
    needs_login: bool = False

    @property
    def selected_id(self) -> str | None:
        return self.selected.uuid if self.selected else None
