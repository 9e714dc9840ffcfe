"""
Location-driven refresh pipeline.

A trigger (initial load, destination search, search-around, current
location) yields a coordinate. The orchestrator moves the user marker right
away, then runs the weather/advice fetch and the facility fetch. The two
fetches are independent; both have already degraded any upstream failure
into a FetchResult, and the fallback policy is applied here.

Each refresh takes a new generation from the session. A fetch that finishes
after a newer refresh has started drops its result, so the map and text
always reflect the most recently requested location.
"""
from __future__ import annotations

import asyncio

from babymap.config import settings
from babymap.data_sources.base import UpstreamDataSource
from babymap.domain import Coordinate, RefreshTrigger
from babymap.errors import BabymapError, GeocodeNotFoundError
from babymap.facility_finder import FacilityFinder
from babymap.fallback_policy import advice_or_fallback, facilities_or_empty, weather_line_or_none
from babymap.geolocation import GeolocationReport, coordinate_from_report
from babymap.session import ANALYZING_ADVICE, MapSession, SessionView
from babymap.weather_advice import WeatherAdviceGenerator
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="orchestrator")

CURRENT_LOCATION_LABEL = "現在地"


def destination_label(query: str) -> str:
    return f"目的地: {query}"


class RefreshOrchestrator:
    """Sequences refreshes for one MapSession."""

    def __init__(
        self,
        session: MapSession,
        source: UpstreamDataSource,
        *,
        finder: FacilityFinder | None = None,
        advisor: WeatherAdviceGenerator | None = None,
    ) -> None:
        self.session = session
        self.source = source
        self.finder = finder or FacilityFinder(source)
        self.advisor = advisor or WeatherAdviceGenerator(source)

    @property
    def surface(self):
        return self.session.surface

    async def refresh(
        self,
        coordinate: Coordinate,
        label: str,
        trigger: RefreshTrigger,
        *,
        zoom: int | None = None,
        move_marker: bool = True,
    ) -> SessionView:
        """Run one full refresh for `coordinate`."""
        generation = self.session.begin_refresh()
        self.session.current = coordinate
        logger.info(
            "Refresh %d (%s) at %.5f,%.5f",
            generation, trigger.value, coordinate.latitude, coordinate.longitude,
        )

        self.surface.set_view(coordinate, zoom)
        if move_marker:
            self.surface.place_user_marker(coordinate, label)

        if trigger == RefreshTrigger.DESTINATION_SEARCH:
            # advice first so the text panel updates before the markers
            await self.refresh_advice(generation, coordinate)
            await self.refresh_facilities(generation, coordinate)
        else:
            await asyncio.gather(
                self.refresh_advice(generation, coordinate),
                self.refresh_facilities(generation, coordinate),
            )
        return self.session.view()

    async def refresh_advice(self, generation: int, coordinate: Coordinate) -> bool:
        """Fetch weather and advice; returns False when the result was stale and dropped."""
        weather, advice = await asyncio.to_thread(self.advisor.fetch, coordinate)
        if not self.session.is_current(generation):
            logger.info("Dropping stale advice from generation %d (current %d)", generation, self.session.generation)
            return False
        line = weather_line_or_none(weather)
        if line is not None:
            self.session.weather_line = line
        self.session.advice = advice_or_fallback(advice, self.advisor.rng)
        return True

    async def refresh_facilities(self, generation: int, center: Coordinate) -> bool:
        """Clear the layer, fetch, and render; returns False when the result was stale and dropped."""
        if not self.session.is_current(generation):
            logger.info("Skipping facilities for superseded generation %d (current %d)", generation, self.session.generation)
            return False
        self.surface.clear_facilities()
        result = await asyncio.to_thread(self.finder.fetch, center)
        if not self.session.is_current(generation):
            logger.info("Dropping stale facilities from generation %d (current %d)", generation, self.session.generation)
            return False
        self.surface.replace_facilities(facilities_or_empty(result))
        return True

    async def initial_load(self) -> SessionView:
        coordinate = Coordinate(latitude=settings.default_latitude, longitude=settings.default_longitude)
        return await self.refresh(
            coordinate, settings.default_label, RefreshTrigger.INITIAL_LOAD, zoom=settings.default_zoom
        )

    async def search_destination(self, query: str) -> SessionView:
        """Geocode `query` and refresh there.

        GeocodeNotFoundError and TransportError propagate before anything on
        the map changes.
        """
        query = (query or "").strip()
        if not query:
            raise GeocodeNotFoundError(query)
        started = self.session.generation
        previous_advice = self.session.advice
        self.session.advice = ANALYZING_ADVICE
        try:
            coordinate = await asyncio.to_thread(self.source.geocode, query)
        except BabymapError as exc:
            logger.warning("Destination search aborted: %s", exc, extra={"query": query})
            # a refresh that ran meanwhile owns the advice text now
            if self.session.is_current(started):
                self.session.advice = previous_advice
            raise
        return await self.refresh(
            coordinate,
            destination_label(query),
            RefreshTrigger.DESTINATION_SEARCH,
            zoom=settings.focus_zoom,
        )

    async def search_around(self, center: Coordinate) -> SessionView:
        """Refresh around the current viewport center; the user marker stays put."""
        return await self.refresh(center, "", RefreshTrigger.SEARCH_AROUND, move_marker=False)

    async def locate(self, report: GeolocationReport) -> SessionView:
        """Refresh at the browser's position; PermissionDeniedError when none was reported."""
        coordinate = coordinate_from_report(report)
        return await self.refresh(
            coordinate, CURRENT_LOCATION_LABEL, RefreshTrigger.CURRENT_LOCATION, zoom=settings.focus_zoom
        )
