import unittest

from babymap.config import Settings
from babymap.data_sources.base import CallableDataSource
from babymap.data_sources.factory import build_data_source
from babymap.data_sources.nominatim_client import resolve
from babymap.data_sources.openweather_client import fetch_current_weather
from babymap.data_sources.overpass_client import fetch_elements
from babymap.gemini_client import generate_text


class TestDataSourceFactory(unittest.TestCase):
    def test_binds_public_upstreams(self):
        ds = build_data_source(Settings())
        self.assertIsInstance(ds, CallableDataSource)
        self.assertIs(ds.geocoder, resolve)
        self.assertIs(ds.overpass, fetch_elements)
        self.assertIs(ds.weather, fetch_current_weather)
        self.assertIs(ds.text_generator, generate_text)

    def test_default_settings(self):
        self.assertIsInstance(build_data_source(), CallableDataSource)

    def test_callables_are_swappable(self):
        ds = CallableDataSource(
            geocoder=lambda q: q,
            overpass=lambda q: [{"query": q}],
            weather=lambda c: c,
            text_generator=lambda p: p.upper(),
        )
        self.assertEqual(ds.geocode("x"), "x")
        self.assertEqual(ds.facility_elements("q"), [{"query": "q"}])
        self.assertEqual(ds.generate_text("hi"), "HI")


if __name__ == "__main__":
    unittest.main()
