import unittest

from babymap.data_sources import nominatim_client
from babymap.errors import GeocodeNotFoundError, ResponseFormatError, TransportError


class DummyResp:
    def __init__(self, payload=None, status_code=200, text=""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class RecordingSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.resp


class TestNominatimClient(unittest.TestCase):
    def setUp(self):
        self._orig_session = nominatim_client.session

    def tearDown(self):
        nominatim_client.session = self._orig_session

    def _use(self, resp):
        nominatim_client.session = RecordingSession(resp)
        return nominatim_client.session

    def test_resolves_first_match(self):
        session = self._use(DummyResp([
            {"lat": "35.6812362", "lon": "139.7671248", "display_name": "東京駅"},
            {"lat": "0", "lon": "0"},
        ]))

        coord = nominatim_client.resolve("Tokyo Station")

        self.assertAlmostEqual(coord.latitude, 35.681, places=2)
        self.assertAlmostEqual(coord.longitude, 139.767, places=2)
        method, _url, kwargs = session.calls[0]
        self.assertEqual(method, "GET")
        self.assertEqual(kwargs["params"], {"format": "json", "q": "Tokyo Station", "limit": 1})
        self.assertIn("User-Agent", kwargs["headers"])

    def test_zero_matches_is_not_found(self):
        self._use(DummyResp([]))
        with self.assertRaises(GeocodeNotFoundError):
            nominatim_client.resolve("nowhere at all")

    def test_blank_query_is_not_found_without_request(self):
        session = self._use(DummyResp([{"lat": "1", "lon": "2"}]))
        for query in ("", "   "):
            with self.assertRaises(GeocodeNotFoundError):
                nominatim_client.resolve(query)
        self.assertEqual(session.calls, [])

    def test_http_error_is_transport_error(self):
        self._use(DummyResp(status_code=503, text="busy"))
        with self.assertRaises(TransportError) as ctx:
            nominatim_client.resolve("Tokyo Station")
        self.assertEqual(ctx.exception.status_code, 503)

    def test_non_json_is_format_error(self):
        self._use(DummyResp(ValueError("no json"), text="<html>"))
        with self.assertRaises(ResponseFormatError):
            nominatim_client.resolve("Tokyo Station")

    def test_match_without_coordinates_is_format_error(self):
        self._use(DummyResp([{"display_name": "?"}]))
        with self.assertRaises(ResponseFormatError):
            nominatim_client.resolve("Tokyo Station")


if __name__ == "__main__":
    unittest.main()
