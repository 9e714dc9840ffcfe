import asyncio
import threading
import unittest

from babymap.advice import FALLBACK_TIPS
from babymap.data_sources.base import CallableDataSource
from babymap.domain import Coordinate, WeatherSnapshot
from babymap.errors import GeocodeNotFoundError, PermissionDeniedError, TransportError
from babymap.geolocation import GeolocationReport
from babymap.orchestrator import RefreshOrchestrator
from babymap.session import MapSession


TOKYO = Coordinate(latitude=35.6812, longitude=139.7671)
OSAKA = Coordinate(latitude=34.7025, longitude=135.4959)


def _element_near(coord, name):
    return {"type": "node", "lat": coord.latitude + 0.001, "lon": coord.longitude,
            "tags": {"amenity": "baby_feeding", "name": name}}


class FakeUpstream:
    """Records call order; Tokyo gets 10℃ weather, everywhere else 30℃."""

    def __init__(self, geocode_result=None):
        self.calls = []
        self.geocode_result = geocode_result or OSAKA
        self.fail_overpass = False
        self.fail_weather = False

    def geocode(self, query):
        self.calls.append("geocode")
        if not query.strip() or query == "nowhere":
            raise GeocodeNotFoundError(query)
        return self.geocode_result

    def overpass(self, query):
        self.calls.append("overpass")
        if self.fail_overpass:
            raise TransportError("overpass down", endpoint="overpass")
        center = TOKYO if f"{TOKYO.latitude},{TOKYO.longitude}" in query else OSAKA
        return [_element_near(center, f"near {center.latitude}")]

    def weather(self, coord):
        self.calls.append("weather")
        if self.fail_weather:
            raise TransportError("weather down", endpoint="openweather")
        temp = 10 if coord == TOKYO else 30
        return WeatherSnapshot(temperature_c=temp, description="晴れ", humidity_percent=40)

    def generate(self, prompt):
        self.calls.append("generate")
        return "手袋を持っていこう" if "気温10度" in prompt else "帽子をかぶせてあげて"

    def source(self):
        return CallableDataSource(
            geocoder=self.geocode, overpass=self.overpass, weather=self.weather, text_generator=self.generate
        )


class TestRefreshOrchestrator(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.upstream = FakeUpstream()
        self.session = MapSession.create()
        self.orch = RefreshOrchestrator(self.session, self.upstream.source())

    async def test_initial_load(self):
        view = await self.orch.initial_load()

        self.assertEqual(view.generation, 1)
        self.assertEqual(view.map.user_marker.label, "東京駅 (サンプル)")
        self.assertEqual(view.map.user_marker.position, TOKYO)
        self.assertEqual(len(view.map.facilities), 1)
        self.assertEqual(view.map.facilities[0].icon, "🍼")
        self.assertEqual(view.weather_line, "🌡 10℃ / 晴れ (湿度40%)")
        self.assertEqual(view.advice, "手袋を持っていこう")

    async def test_destination_search_runs_advice_before_facilities(self):
        view = await self.orch.search_destination("Osaka Station")

        calls = self.upstream.calls
        self.assertEqual(calls[0], "geocode")
        self.assertLess(calls.index("generate"), calls.index("overpass"))
        self.assertEqual(view.map.user_marker.label, "目的地: Osaka Station")
        self.assertEqual(view.map.user_marker.position, OSAKA)
        self.assertEqual(view.map.viewport.zoom, 16)
        self.assertEqual(view.advice, "帽子をかぶせてあげて")

    async def test_destination_not_found_changes_nothing(self):
        await self.orch.initial_load()
        before = self.session.view()

        with self.assertRaises(GeocodeNotFoundError):
            await self.orch.search_destination("nowhere")

        after = self.session.view()
        self.assertEqual(after.generation, before.generation)
        self.assertEqual(after.map, before.map)
        self.assertEqual(after.advice, before.advice)
        self.assertNotIn("overpass", self.upstream.calls[self.upstream.calls.index("geocode"):])

    async def test_blank_destination_is_not_found(self):
        with self.assertRaises(GeocodeNotFoundError):
            await self.orch.search_destination("   ")
        self.assertIsNone(self.session.surface.user_marker)

    async def test_search_around_keeps_user_marker(self):
        await self.orch.initial_load()
        view = await self.orch.search_around(OSAKA)

        self.assertEqual(view.map.user_marker.position, TOKYO)
        self.assertEqual(view.map.viewport.center, OSAKA)
        self.assertEqual(view.current, OSAKA)
        self.assertAlmostEqual(view.map.facilities[0].facility.position.latitude, OSAKA.latitude + 0.001)

    async def test_current_location(self):
        view = await self.orch.locate(GeolocationReport(latitude=OSAKA.latitude, longitude=OSAKA.longitude))
        self.assertEqual(view.map.user_marker.label, "現在地")
        self.assertEqual(view.map.user_marker.position, OSAKA)

    async def test_current_location_denied_does_not_refresh(self):
        with self.assertRaises(PermissionDeniedError):
            await self.orch.locate(GeolocationReport(error="denied"))
        self.assertEqual(self.session.generation, 0)
        self.assertEqual(self.upstream.calls, [])

    async def test_facility_failure_does_not_block_advice(self):
        self.upstream.fail_overpass = True
        view = await self.orch.initial_load()
        self.assertEqual(view.map.facilities, [])
        self.assertEqual(view.advice, "手袋を持っていこう")

    async def test_weather_failure_keeps_previous_line_and_falls_back(self):
        await self.orch.initial_load()
        self.upstream.fail_weather = True

        view = await self.orch.search_around(OSAKA)

        self.assertEqual(view.weather_line, "🌡 10℃ / 晴れ (湿度40%)")
        self.assertIn(view.advice, FALLBACK_TIPS)
        self.assertEqual(len(view.map.facilities), 1)

    async def test_stale_refresh_is_discarded(self):
        """Refresh A is requested first but its responses arrive after B's."""
        b_done = threading.Event()
        base = FakeUpstream()

        def overpass(query):
            if f"{TOKYO.latitude},{TOKYO.longitude}" in query:
                b_done.wait(5)
                return [_element_near(TOKYO, "stale")]
            try:
                return base.overpass(query)
            finally:
                b_done.set()

        def weather(coord):
            if coord == TOKYO:
                b_done.wait(5)
            return base.weather(coord)

        source = CallableDataSource(
            geocoder=base.geocode, overpass=overpass, weather=weather, text_generator=base.generate
        )
        orch = RefreshOrchestrator(self.session, source)

        task_a = asyncio.create_task(orch.initial_load())
        await asyncio.sleep(0)
        task_b = asyncio.create_task(
            orch.locate(GeolocationReport(latitude=OSAKA.latitude, longitude=OSAKA.longitude))
        )
        await asyncio.gather(task_a, task_b)

        view = self.session.view()
        self.assertEqual(view.generation, 2)
        self.assertEqual(view.current, OSAKA)
        self.assertEqual(view.map.user_marker.position, OSAKA)
        self.assertEqual([m.title for m in view.map.facilities], [f"near {OSAKA.latitude}"])
        self.assertEqual(view.weather_line, "🌡 30℃ / 晴れ (湿度40%)")
        self.assertEqual(view.advice, "帽子をかぶせてあげて")

    async def test_slow_destination_search_does_not_wipe_newer_layer(self):
        """A destination search still waiting on weather is overtaken by search-around."""
        a_waiting = threading.Event()
        release = threading.Event()
        base = FakeUpstream(geocode_result=TOKYO)

        def weather(coord):
            if coord == TOKYO:
                a_waiting.set()
                release.wait(5)
            return base.weather(coord)

        source = CallableDataSource(
            geocoder=base.geocode, overpass=base.overpass, weather=weather, text_generator=base.generate
        )
        orch = RefreshOrchestrator(self.session, source)

        task_a = asyncio.create_task(orch.search_destination("Tokyo Station"))
        self.assertTrue(await asyncio.to_thread(a_waiting.wait, 5))
        await orch.search_around(OSAKA)
        after_b = [m.title for m in self.session.surface.facility_markers]

        release.set()
        await task_a

        view = self.session.view()
        self.assertEqual(after_b, [f"near {OSAKA.latitude}"])
        self.assertEqual([m.title for m in view.map.facilities], after_b)
        self.assertEqual(base.calls.count("overpass"), 1)
        self.assertEqual(view.advice, "帽子をかぶせてあげて")
        self.assertEqual(view.current, OSAKA)

    async def test_failed_geocode_keeps_advice_from_newer_refresh(self):
        geocode_started = threading.Event()
        release = threading.Event()
        base = FakeUpstream()

        def geocode(query):
            geocode_started.set()
            release.wait(5)
            raise GeocodeNotFoundError(query)

        source = CallableDataSource(
            geocoder=geocode, overpass=base.overpass, weather=base.weather, text_generator=base.generate
        )
        orch = RefreshOrchestrator(self.session, source)

        task = asyncio.create_task(orch.search_destination("nowhere"))
        self.assertTrue(await asyncio.to_thread(geocode_started.wait, 5))
        await orch.search_around(OSAKA)
        release.set()

        with self.assertRaises(GeocodeNotFoundError):
            await task
        self.assertEqual(self.session.advice, "帽子をかぶせてあげて")

    async def test_failed_geocode_restores_previous_advice(self):
        await self.orch.initial_load()
        with self.assertRaises(GeocodeNotFoundError):
            await self.orch.search_destination("nowhere")
        self.assertEqual(self.session.advice, "手袋を持っていこう")

    async def test_stale_helpers_report_drop(self):
        generation = self.session.begin_refresh()
        self.session.begin_refresh()
        self.assertFalse(await self.orch.refresh_facilities(generation, TOKYO))
        self.assertFalse(await self.orch.refresh_advice(generation, TOKYO))
        self.assertEqual(self.session.surface.facility_markers, [])


if __name__ == "__main__":
    unittest.main()
