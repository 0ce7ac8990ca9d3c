from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable

from servicehub.application.exceptions import GatewayError
from servicehub.application.ports.gateway import RemoteGatewayPort
from servicehub.application.use_cases.base import SessionBoundOrchestrator
from servicehub.application.use_cases.session import SessionStore
from servicehub.application.use_cases.session_expiry import SessionExpiryPolicy
from servicehub.application.utils.geo import coordinate_distance, radius_km_for_region, region_changed
from servicehub.application.utils.task_slots import TaskSlots
from servicehub.core.config import settings
from servicehub.domain.entities.catalog import CatalogCategory, CatalogItem, CatalogOption
from servicehub.domain.entities.coordinate import Coordinate, MapRegion
from servicehub.domain.entities.place import Place
from servicehub.domain.entities.search_filters import SearchFilters
from servicehub.domain.entities.search_state import SearchState

SEARCH = "search"
SUGGESTIONS = "suggestions"
MAP = "map"


@dataclass(frozen=True)
class CompanyAnnotation:
    id: str
    coordinate: Coordinate
    title: str
    subtitle: str | None


def group_catalog_items(items: Iterable[CatalogItem]) -> tuple[CatalogCategory, ...]:
    """Group by parent name and sort categories and options case-insensitively."""
    grouped: dict[str, list[CatalogOption]] = {}
    for item in items:
        option = CatalogOption.from_item(item)
        grouped.setdefault(option.parent_title, []).append(option)
    categories = [
        CatalogCategory(
            id=title,
            title=title,
            options=tuple(sorted(options, key=lambda o: o.name.casefold())),
        )
        for title, options in grouped.items()
    ]
    return tuple(sorted(categories, key=lambda c: c.title.casefold()))


class SearchOrchestrator(SessionBoundOrchestrator[SearchState]):
    """
    Owns the search filters and the three kinds of restartable work behind the
    company list: place suggestions, the primary search and map-driven searches.

    Each kind lives in its own TaskSlots category, so a new keystroke cancels
    only the pending suggestion lookup and a new search cancels only the
    in-flight search. Every state mutation after a suspension point is guarded
    by `TaskSlots.is_current`.

    The search center has three sources. An explicit place selection or a map
    pan pins it; geolocation only moves an unpinned center and ignores jitter
    below the noise threshold.
    """

    def __init__(
        self,
        gateway: RemoteGatewayPort,
        session: SessionStore,
        expiry: SessionExpiryPolicy,
        *,
        default_center: Coordinate | None = None,
        default_radius_km: int | None = None,
        debounce_seconds: float | None = None,
        noise_threshold: float | None = None,
        region_epsilon: float | None = None,
        suggestion_min_chars: int | None = None,
        suggestion_limit: int | None = None,
        page_size: int | None = None,
    ) -> None:
        center = default_center or Coordinate(
            latitude=settings.DEFAULT_CENTER_LATITUDE,
            longitude=settings.DEFAULT_CENTER_LONGITUDE,
        )
        radius_km = default_radius_km if default_radius_km is not None else settings.DEFAULT_RADIUS_KM
        span = settings.DEFAULT_MAP_SPAN_DEGREES
        region = MapRegion(center=center, latitude_delta=span, longitude_delta=span)
        initial = SearchState(filters=SearchFilters(center=center).with_radius_km(radius_km), map_region=region)
        super().__init__(initial, session, expiry)

        self._gateway = gateway
        self._default_center = center
        self._debounce = debounce_seconds if debounce_seconds is not None else settings.DEBOUNCE_SECONDS
        self._noise_threshold = (
            noise_threshold if noise_threshold is not None else settings.LOCATION_NOISE_THRESHOLD_DEGREES
        )
        self._region_epsilon = region_epsilon if region_epsilon is not None else settings.REGION_CHANGE_EPSILON_DEGREES
        self._suggestion_min_chars = (
            suggestion_min_chars if suggestion_min_chars is not None else settings.SUGGESTION_MIN_CHARS
        )
        self._suggestion_limit = suggestion_limit if suggestion_limit is not None else settings.SUGGESTION_LIMIT
        self._page_size = page_size if page_size is not None else settings.SEARCH_PAGE_SIZE

        self._slots = TaskSlots()
        self._has_loaded_initial = False
        self._last_automatic: Coordinate | None = None
        self._last_observed_region: MapRegion | None = region
        self._logger = logging.getLogger(__name__)

    @property
    def annotations(self) -> tuple[CompanyAnnotation, ...]:
        return tuple(
            CompanyAnnotation(
                id=company.uuid,
                coordinate=company.coordinate,
                title=company.name,
                subtitle=company.formatted_distance,
            )
            for company in self.state.companies
            if company.coordinate is not None
        )

    def close(self) -> None:
        self._slots.cancel_all()

    # Filters

    def set_search_text(self, text: str) -> None:
        self._publish(filters=replace(self.state.filters, free_text=text))

    def set_minimum_rating(self, rating: int) -> None:
        self._publish(filters=self.state.filters.with_minimum_rating(rating))

    def set_radius_km(self, kilometers: float) -> None:
        self._publish(filters=self.state.filters.with_radius_km(kilometers))

    def set_selected_services(self, names: Iterable[str]) -> None:
        self._publish(filters=replace(self.state.filters, selected_service_tags=frozenset(names)))

    def toggle_service(self, name: str) -> None:
        tags = set(self.state.filters.selected_service_tags)
        if name in tags:
            tags.remove(name)
        else:
            tags.add(name)
        self.set_selected_services(tags)

    def clear_advanced_filters(self) -> None:
        self._publish(
            filters=replace(
                self.state.filters,
                free_text="",
                minimum_rating=0,
                selected_service_tags=frozenset(),
            )
        )

    # Primary search

    async def load_initial_if_needed(self) -> None:
        if self._has_loaded_initial:
            return
        self._has_loaded_initial = True
        await self.search()

    async def search(self) -> None:
        """Restart the search and wait for it; returns early if newer work supersedes it."""
        self._has_loaded_initial = True
        await self._slots.run(SEARCH, self._run_search())

    def _start_search(self) -> asyncio.Task[Any]:
        self._has_loaded_initial = True
        return self._slots.start(SEARCH, self._run_search())

    async def _run_search(self) -> None:
        self._publish(is_loading=True, error_message=None)
        filters = self.state.filters.for_request()
        try:
            result = await self._gateway.search_companies(filters, page=0, size=self._page_size)
        except GatewayError as e:
            if not self._slots.is_current(SEARCH):
                self._logger.debug("Discarding superseded search failure", extra={"category": SEARCH})
                return
            self._handle_failure(
                e,
                "Unable to load companies.",
                companies=(),
                total_elements=0,
                is_loading=False,
            )
            return
        if not self._slots.is_current(SEARCH):
            self._logger.debug("Discarding superseded search result", extra={"category": SEARCH})
            return
        self._absorb_token(result.token)
        self._publish(
            companies=result.payload.companies,
            total_elements=result.payload.total_elements,
            is_loading=False,
        )

    # Place suggestions

    def set_location_query(self, text: str) -> asyncio.Task[Any] | None:
        self._publish(location_query=text)
        return self.lookup_places(text)

    def lookup_places(self, query: str) -> asyncio.Task[Any] | None:
        self._slots.cancel(SUGGESTIONS)
        trimmed = query.strip()
        if len(trimmed) < self._suggestion_min_chars:
            self._publish(suggestions=())
            return None
        return self._slots.start(SUGGESTIONS, self._run_suggestions(trimmed))

    async def _run_suggestions(self, query: str) -> None:
        await asyncio.sleep(self._debounce)
        if not self._slots.is_current(SUGGESTIONS):
            return
        try:
            result = await self._gateway.find_places(query)
        except GatewayError as e:
            if not self._slots.is_current(SUGGESTIONS):
                return
            if self._expiry.applies_to(e):
                self._handle_failure(e, "")
            else:
                self._publish(suggestions=())
            return
        if not self._slots.is_current(SUGGESTIONS):
            return
        self._absorb_token(result.token)
        self._publish(suggestions=tuple(result.payload[: self._suggestion_limit]))

    # Center reconciliation

    def select_place(self, place: Place) -> asyncio.Task[Any]:
        self._slots.cancel(SUGGESTIONS)
        self._slots.cancel(MAP)
        self._publish(
            user_pinned=True,
            location_query=place.label,
            suggestions=(),
            filters=replace(self.state.filters, center=place.coordinate),
            map_region=self._recentered(place.coordinate),
        )
        return self._start_search()

    def update_user_location(self, coordinate: Coordinate) -> asyncio.Task[Any] | None:
        if self.state.user_pinned:
            return None
        if (
            self._last_automatic is not None
            and coordinate_distance(self._last_automatic, coordinate) <= self._noise_threshold
        ):
            return None
        self._last_automatic = coordinate
        self._publish(
            filters=replace(self.state.filters, center=coordinate),
            map_region=self._recentered(coordinate),
        )
        return self._start_search()

    def pan_map(self, center: Coordinate, region: MapRegion | None = None) -> asyncio.Task[Any]:
        self._publish(user_pinned=True)
        return self._slots.start(MAP, self._run_map_pan(center, region))

    def handle_region_change(self, region: MapRegion) -> asyncio.Task[Any] | None:
        """React to a user gesture on the map; echoes of our own camera updates are ignored."""
        if not region_changed(self._last_observed_region, region, self._region_epsilon):
            return None
        self._last_observed_region = region
        return self.pan_map(region.center, region)

    async def _run_map_pan(self, center: Coordinate, region: MapRegion | None) -> None:
        await asyncio.sleep(self._debounce)
        if not self._slots.is_current(MAP):
            return
        self._slots.cancel(SUGGESTIONS)
        filters = replace(self.state.filters, center=center)
        if region is not None:
            filters = filters.with_radius_km(radius_km_for_region(region))
            self._last_observed_region = region
            map_region = region
        else:
            map_region = self._recentered(center)
        self._publish(location_query="", suggestions=(), filters=filters, map_region=map_region)
        await self.search()

    def reset_to_default_location(self) -> asyncio.Task[Any]:
        self._slots.cancel(MAP)
        self._slots.cancel(SUGGESTIONS)
        self._last_automatic = None
        self._publish(
            user_pinned=False,
            location_query="",
            suggestions=(),
            filters=replace(self.state.filters, center=self._default_center),
            map_region=self._recentered(self._default_center),
        )
        return self._start_search()

    def _recentered(self, center: Coordinate) -> MapRegion:
        region = self.state.map_region.recentered(center)
        self._last_observed_region = region
        return region

    # Catalog filter options

    async def load_catalogs_if_needed(self) -> None:
        if self.state.catalog_categories:
            return
        await self._fetch_catalogs()

    async def refresh_catalogs(self) -> None:
        await self._fetch_catalogs()

    async def _fetch_catalogs(self) -> None:
        if self.state.is_loading_catalogs:
            return
        self._publish(is_loading_catalogs=True, catalog_error_message=None)
        try:
            result = await self._gateway.list_catalogs()
        except GatewayError as e:
            if self._expiry.applies_to(e):
                self._handle_failure(e, "")
                self._publish(is_loading_catalogs=False)
            else:
                self._publish(
                    catalog_categories=(),
                    catalog_error_message=e.message or "Unable to load service filters.",
                    is_loading_catalogs=False,
                )
            return
        except asyncio.CancelledError:
            self._publish(is_loading_catalogs=False)
            raise
        self._absorb_token(result.token)
        self._publish(catalog_categories=group_catalog_items(result.payload), is_loading_catalogs=False)

    def _cached_state_reset(self) -> dict[str, Any]:
        return {"companies": (), "total_elements": 0, "suggestions": ()}
