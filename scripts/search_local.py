#!/usr/bin/env python3
"""
Interactive company search against a live LabourLink backend (no UI).

Usage:
  python3 scripts/search_local.py

What it does:
- Builds the search orchestrator through the project wiring
- Runs a search for each line you type and prints the result page
- Lets you move the search center with a place lookup and tweak filters
- Shows the detail bundle (hours, service areas) for a numbered result
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from servicehub.application.use_cases.company_detail import DetailOrchestrator
from servicehub.application.use_cases.company_search import SearchOrchestrator
from servicehub.core.logging import configure_logging
from servicehub.domain.entities.search_state import SearchState
from servicehub.wiring.dependencies import get_container


def _print_header() -> None:
    print("\nLocal Search Harness")
    print("-" * 60)
    print("Type search text and press Enter.")
    print("Commands: /place <name>, /detail <#>, /radius <km>, /rating <0-5>, /reset, /help, /quit")
    print("-" * 60)


def _print_results(state: SearchState) -> None:
    filters = state.filters
    print(
        f"\ncenter=({filters.center.latitude:.4f}, {filters.center.longitude:.4f}) "
        f"radius={filters.radius_km}km rating>={filters.minimum_rating} pinned={state.user_pinned}"
    )
    if state.error_message:
        print(f"ERROR: {state.error_message}")
        return
    print(f"--- {len(state.companies)} of {state.total_elements} companies ---")
    for index, company in enumerate(state.companies, start=1):
        distance = company.formatted_distance or "-"
        print(f"{index:>2}. {company.name:<36} {company.formatted_rating:<8} {distance}")


async def _pick_place(search: SearchOrchestrator, query: str) -> None:
    task = search.set_location_query(query)
    if task is None:
        print("Place names need at least three characters.")
        return
    await task
    suggestions = search.state.suggestions
    if not suggestions:
        print("No places found.")
        return
    for index, place in enumerate(suggestions, start=1):
        print(f"{index:>2}. {place.label}")
    choice = (await asyncio.to_thread(input, "pick #> ")).strip()
    if not choice.isdigit() or not 1 <= int(choice) <= len(suggestions):
        print("Cancelled.")
        return
    await search.select_place(suggestions[int(choice) - 1])


async def _show_detail(detail: DetailOrchestrator, search: SearchOrchestrator, arg: str) -> None:
    companies = search.state.companies
    if not arg.strip().isdigit() or not 1 <= int(arg) <= len(companies):
        print(f"Pick a result between 1 and {len(companies)}.")
        return
    await detail.select(companies[int(arg) - 1])
    state = detail.state
    if state.error_message:
        print(f"ERROR: {state.error_message}")
    if state.detail is not None:
        print(f"\n{state.detail.name} ({state.detail.formatted_rating})")
        if state.detail.service_names:
            print("Services: " + ", ".join(state.detail.service_names))
    for hour in state.hours:
        print(f"  {hour.display_day_name:<10} {hour.display_range}")
    for area in state.areas:
        print(f"  {area.display_title}: {area.formatted_radius}")


async def main() -> None:
    configure_logging()
    container = get_container()
    search = container["search"]
    detail = container["detail"]
    _print_header()
    await search.load_initial_if_needed()
    _print_results(search.state)

    try:
        while True:
            try:
                text = (await asyncio.to_thread(input, "\n> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            cmd, _, arg = text.partition(" ")
            cmd = cmd.lower()
            if cmd in ("/quit", "/exit"):
                print("Bye!")
                return
            if cmd == "/help":
                _print_header()
                continue
            if cmd == "/place":
                await _pick_place(search, arg)
            elif cmd == "/radius" and arg.strip().isdigit():
                search.set_radius_km(int(arg))
                await search.search()
            elif cmd == "/rating" and arg.strip().isdigit():
                search.set_minimum_rating(int(arg))
                await search.search()
            elif cmd == "/detail":
                await _show_detail(detail, search, arg)
                continue
            elif cmd == "/reset":
                await search.reset_to_default_location()
            else:
                search.set_search_text(text)
                await search.search()
            _print_results(search.state)
    finally:
        search.close()
        detail.close()
        await container["gateway"].aclose()


if __name__ == "__main__":
    asyncio.run(main())
