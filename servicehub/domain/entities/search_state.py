from __future__ import annotations

from dataclasses import dataclass

from servicehub.domain.entities.catalog import CatalogCategory
from servicehub.domain.entities.company import CompanyResult
from servicehub.domain.entities.coordinate import MapRegion
from servicehub.domain.entities.place import Place
from servicehub.domain.entities.search_filters import SearchFilters


@dataclass(frozen=True)
class SearchState:
    filters: SearchFilters
    map_region: MapRegion
    companies: tuple[CompanyResult, ...] = ()
    total_elements: int = 0
    is_loading: bool = False
    error_message: str | None = None
    location_query: str = ""
    suggestions: tuple[Place, ...] = ()
    user_pinned: bool = False
    catalog_categories: tuple[CatalogCategory, ...] = ()
    is_loading_catalogs: bool = False
    catalog_error_message: str | None = None
    needs_login: bool = False
