"""
Tests for company search: restartable searches, suggestions and center reconciliation.
"""

from __future__ import annotations

import asyncio

import pytest

from conftest import make_company, make_user, page_of

from servicehub.application.exceptions import ApplicationError, TransportError, UnauthorizedError
from servicehub.application.ports.gateway import GatewayResult
from servicehub.application.use_cases.company_search import SearchOrchestrator, group_catalog_items
from servicehub.application.use_cases.session_expiry import SESSION_EXPIRED_MESSAGE
from servicehub.domain.entities.catalog import CatalogItem
from servicehub.domain.entities.coordinate import Coordinate, MapRegion
from servicehub.domain.entities.place import Place

DEFAULT_CENTER = Coordinate(-33.9249, 18.4241)


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def search(gateway, session, expiry):
    orchestrator = SearchOrchestrator(
        gateway=gateway,
        session=session,
        expiry=expiry,
        default_center=DEFAULT_CENTER,
        default_radius_km=25,
        debounce_seconds=0.01,
    )
    yield orchestrator
    orchestrator.close()


class TestPrimarySearch:
    @pytest.mark.asyncio
    async def test_only_last_search_is_rendered_when_earlier_resolves_late(self, search, gateway):
        gateway.defer("search_companies")
        rendered = []
        search.subscribe(lambda state: rendered.append(state.companies))

        search.set_search_text("plumb")
        first = asyncio.create_task(search.search())
        await settle()
        search.set_search_text("plumber")
        second = asyncio.create_task(search.search())
        await settle()
        assert gateway.count("search_companies") == 2

        gateway.resolve("search_companies", 1, page_of(make_company("new")))
        await second
        gateway.resolve("search_companies", 0, page_of(make_company("old")))
        await first
        await settle()

        assert [c.uuid for c in search.state.companies] == ["new"]
        assert all(c.uuid != "old" for companies in rendered for c in companies)
        assert search.state.is_loading is False

    @pytest.mark.asyncio
    async def test_result_arriving_before_cancellation_is_still_discarded(self, search, gateway):
        gateway.defer("search_companies")
        rendered = []
        search.subscribe(lambda state: rendered.append(state.companies))

        first = asyncio.create_task(search.search())
        await settle()
        gateway.resolve("search_companies", 0, page_of(make_company("old")))
        second = search.reset_to_default_location()
        await settle()
        gateway.resolve("search_companies", 1, page_of(make_company("new")))
        await second
        await first

        assert [c.uuid for c in search.state.companies] == ["new"]
        assert all(c.uuid != "old" for companies in rendered for c in companies)

    @pytest.mark.asyncio
    async def test_superseded_failure_does_not_set_error(self, search, gateway):
        gateway.defer("search_companies")

        first = asyncio.create_task(search.search())
        await settle()
        second = asyncio.create_task(search.search())
        await settle()
        gateway.resolve("search_companies", 1, page_of(make_company("ok")))
        gateway.resolve("search_companies", 0, TransportError("offline"))
        await asyncio.gather(first, second)

        assert search.state.error_message is None
        assert [c.uuid for c in search.state.companies] == ["ok"]

    @pytest.mark.asyncio
    async def test_search_sends_trimmed_text_and_filters(self, search, gateway):
        search.set_search_text("  roof  ")
        search.set_minimum_rating(4)
        search.toggle_service("Roofing")
        search.set_radius_km(42)

        await search.search()

        filters, page, size = gateway.args("search_companies")[0]
        assert filters.free_text == "roof"
        assert filters.minimum_rating == 4
        assert filters.selected_service_tags == frozenset({"Roofing"})
        assert filters.radius_meters == 40_000
        assert filters.center == DEFAULT_CENTER
        assert (page, size) == (0, 20)
        assert search.state.filters.free_text == "  roof  "

    @pytest.mark.asyncio
    async def test_clear_advanced_filters_keeps_center_and_radius(self, search):
        search.set_search_text("tiles")
        search.set_minimum_rating(5)
        search.toggle_service("Tiling")
        search.set_radius_km(60)

        search.clear_advanced_filters()

        filters = search.state.filters
        assert filters.free_text == ""
        assert filters.minimum_rating == 0
        assert filters.selected_service_tags == frozenset()
        assert filters.radius_km == 60

    @pytest.mark.asyncio
    async def test_load_initial_runs_once(self, search, gateway):
        await search.load_initial_if_needed()
        await search.load_initial_if_needed()

        assert gateway.count("search_companies") == 1

    @pytest.mark.asyncio
    async def test_application_error_surfaces_message(self, search, gateway, session):
        session.update("token-1", make_user())
        gateway.respond("search_companies", ApplicationError("ERROR", "Search is unavailable."))

        await search.search()

        assert search.state.error_message == "Search is unavailable."
        assert search.state.companies == ()
        assert search.state.needs_login is False
        assert session.token == "token-1"

    @pytest.mark.asyncio
    async def test_refreshed_token_is_fed_back_into_session(self, search, gateway, session):
        session.update("token-1", make_user())
        gateway.respond("search_companies", GatewayResult(payload=page_of().payload, token="token-2"))

        await search.search()

        assert session.token == "token-2"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [UnauthorizedError(), ApplicationError("TOKEN_EXPIRED")],
    )
    async def test_unauthorized_search_clears_session(self, search, gateway, session, error):
        session.update("token-1", make_user())
        gateway.respond("search_companies", page_of(make_company("c1")))
        await search.search()
        gateway.respond("search_companies", error)

        await search.search()

        assert session.token is None
        assert session.user is None
        assert search.state.needs_login is True
        assert search.state.error_message == SESSION_EXPIRED_MESSAGE
        assert search.state.companies == ()
        assert search.state.is_loading is False

        search.dismiss_login_prompt()
        assert search.state.needs_login is False


class TestSuggestions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "ab", "  a  ", "    "])
    async def test_short_input_clears_without_network_call(self, search, gateway, text):
        gateway.respond("find_places", GatewayResult(payload=[Place(coordinate=Coordinate(1, 1), name="Old")]))
        await search.set_location_query("Old town")
        assert search.state.suggestions

        task = search.set_location_query(text)

        assert task is None
        assert search.state.suggestions == ()
        assert gateway.count("find_places") == 1

    @pytest.mark.asyncio
    async def test_keystrokes_are_debounced(self, search, gateway):
        search.set_location_query("Cap")
        search.set_location_query("Cape")
        last = search.set_location_query("Cape Town ")

        await last

        assert gateway.args("find_places") == [("Cape Town",)]
        assert search.state.location_query == "Cape Town "

    @pytest.mark.asyncio
    async def test_suggestions_are_capped(self, search, gateway):
        places = [Place(coordinate=Coordinate(i, i), name=f"Place {i}") for i in range(15)]
        gateway.respond("find_places", GatewayResult(payload=places))

        await search.set_location_query("Place")

        assert len(search.state.suggestions) == 10
        assert search.state.suggestions[0].name == "Place 0"

    @pytest.mark.asyncio
    async def test_lookup_failure_clears_suggestions(self, search, gateway):
        gateway.respond("find_places", TransportError("offline"))

        await search.set_location_query("Durban")

        assert search.state.suggestions == ()
        assert search.state.error_message is None

    @pytest.mark.asyncio
    async def test_suggestion_lookup_does_not_cancel_search(self, search, gateway):
        gateway.defer("search_companies")
        running = asyncio.create_task(search.search())
        await settle()

        await search.set_location_query("Stellenbosch")
        gateway.resolve("search_companies", 0, page_of(make_company("c1")))
        await running

        assert [c.uuid for c in search.state.companies] == ["c1"]


class TestCenterReconciliation:
    @pytest.mark.asyncio
    async def test_select_place_pins_and_searches(self, search, gateway):
        place = Place(coordinate=Coordinate(-29.85, 31.02), display_name="Durban, South Africa")

        await search.select_place(place)

        state = search.state
        assert state.user_pinned is True
        assert state.filters.center == place.coordinate
        assert state.map_region.center == place.coordinate
        assert state.location_query == "Durban, South Africa"
        assert gateway.args("search_companies")[-1][0].center == place.coordinate

    @pytest.mark.asyncio
    async def test_geolocation_ignored_while_pinned(self, search, gateway):
        place = Place(coordinate=Coordinate(-29.85, 31.02), name="Durban")
        await search.select_place(place)
        calls = gateway.count("search_companies")

        task = search.update_user_location(Coordinate(-26.2, 28.04))

        assert task is None
        assert search.state.filters.center == place.coordinate
        assert gateway.count("search_companies") == calls

    @pytest.mark.asyncio
    async def test_geolocation_noise_is_ignored(self, search, gateway):
        await search.update_user_location(Coordinate(-26.2, 28.04))
        assert gateway.count("search_companies") == 1

        assert search.update_user_location(Coordinate(-26.2003, 28.0403)) is None
        assert search.state.filters.center == Coordinate(-26.2, 28.04)

        await search.update_user_location(Coordinate(-26.21, 28.04))
        assert search.state.filters.center == Coordinate(-26.21, 28.04)
        assert gateway.count("search_companies") == 2

    @pytest.mark.asyncio
    async def test_pan_pins_immediately_and_searches_once_after_quiet_period(self, search, gateway):
        await search.set_location_query("Cape Town")
        assert search.state.suggestions == ()

        search.pan_map(Coordinate(-33.0, 18.0))
        assert search.state.user_pinned is True
        assert search.update_user_location(Coordinate(-26.2, 28.04)) is None

        search.pan_map(Coordinate(-33.1, 18.1))
        last = search.pan_map(Coordinate(-33.2, 18.2))
        await last

        assert gateway.count("search_companies") == 1
        assert search.state.filters.center == Coordinate(-33.2, 18.2)
        assert search.state.location_query == ""
        assert search.state.suggestions == ()

    @pytest.mark.asyncio
    async def test_programmatic_region_echo_is_ignored(self, search, gateway):
        await search.update_user_location(Coordinate(-26.2, 28.04))

        assert search.handle_region_change(search.state.map_region) is None
        nudged = MapRegion(
            center=Coordinate(-26.20005, 28.04),
            latitude_delta=search.state.map_region.latitude_delta,
            longitude_delta=search.state.map_region.longitude_delta,
        )
        assert search.handle_region_change(nudged) is None
        assert search.state.user_pinned is False

    @pytest.mark.asyncio
    async def test_user_region_change_derives_radius(self, search, gateway):
        span = 20 / 111
        region = MapRegion(center=Coordinate(-34.0, 18.5), latitude_delta=span, longitude_delta=span)

        task = search.handle_region_change(region)
        await task

        assert search.state.user_pinned is True
        assert search.state.filters.radius_km == 10
        assert search.state.filters.center == Coordinate(-34.0, 18.5)
        assert search.state.map_region == region
        assert gateway.count("search_companies") == 1
        assert search.handle_region_change(region) is None

    @pytest.mark.asyncio
    async def test_reset_restores_default_center_and_unpins(self, search, gateway):
        await search.select_place(Place(coordinate=Coordinate(-29.85, 31.02), name="Durban"))

        await search.reset_to_default_location()

        assert search.state.user_pinned is False
        assert search.state.filters.center == DEFAULT_CENTER
        assert search.state.location_query == ""
        assert gateway.args("search_companies")[-1][0].center == DEFAULT_CENTER

        await search.update_user_location(Coordinate(-26.2, 28.04))
        assert search.state.filters.center == Coordinate(-26.2, 28.04)

    @pytest.mark.asyncio
    async def test_reset_drops_pending_suggestions(self, search, gateway):
        gateway.defer("find_places")
        lookup = search.set_location_query("Cape Town")
        while gateway.count("find_places") == 0:
            await asyncio.sleep(0.01)

        await search.reset_to_default_location()
        gateway.resolve("find_places", 0, GatewayResult(payload=[Place(coordinate=Coordinate(1, 1), name="X")]))
        await settle()

        assert lookup.cancelled()
        assert search.state.location_query == ""
        assert search.state.suggestions == ()

    @pytest.mark.asyncio
    async def test_annotations_only_include_located_companies(self, search, gateway):
        gateway.respond(
            "search_companies",
            page_of(make_company("c1", coordinate=Coordinate(-33.9, 18.4)), make_company("c2")),
        )

        await search.search()

        assert [a.id for a in search.annotations] == ["c1"]
        assert search.state.total_elements == 2


class TestCatalogs:
    def test_grouping_sorts_case_insensitively(self):
        items = [
            CatalogItem(name="tiling", uuid="3", parent_name="building"),
            CatalogItem(name="Bricklaying", uuid="2", parent_name="building"),
            CatalogItem(name="Gardening"),
            CatalogItem(name="Wiring", uuid="1", parent_name="Electrical"),
        ]

        categories = group_catalog_items(items)

        assert [c.title for c in categories] == ["building", "Electrical", "Other Services"]
        assert [o.name for o in categories[0].options] == ["Bricklaying", "tiling"]
        assert categories[2].options[0].id == "Ungrouped-Gardening"

    @pytest.mark.asyncio
    async def test_catalogs_load_once_until_refresh(self, search, gateway):
        gateway.respond("list_catalogs", GatewayResult(payload=[CatalogItem(name="Plumbing", parent_name="Water")]))

        await search.load_catalogs_if_needed()
        await search.load_catalogs_if_needed()
        assert gateway.count("list_catalogs") == 1

        await search.refresh_catalogs()
        assert gateway.count("list_catalogs") == 2
        assert search.state.catalog_categories[0].title == "Water"

    @pytest.mark.asyncio
    async def test_concurrent_catalog_load_is_ignored(self, search, gateway):
        gateway.defer("list_catalogs")

        first = asyncio.create_task(search.load_catalogs_if_needed())
        await settle()
        await search.refresh_catalogs()
        gateway.resolve("list_catalogs", 0, GatewayResult(payload=[]))
        await first

        assert gateway.count("list_catalogs") == 1
        assert search.state.is_loading_catalogs is False

    @pytest.mark.asyncio
    async def test_catalog_failure_sets_its_own_error(self, search, gateway):
        gateway.respond("list_catalogs", TransportError("offline"))

        await search.load_catalogs_if_needed()

        assert search.state.catalog_error_message == "offline"
        assert search.state.error_message is None
        assert search.state.is_loading_catalogs is False
