import logging
import unittest

from utils import logging_utils
from utils.logging_utils import build_logging_config, get_tagged_logger, mask_secret_url


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        self.records.append(record)


class TestLoggingUtils(unittest.TestCase):
    def test_build_logging_config_has_expected_handlers_and_filters(self):
        cfg = build_logging_config(job_name="jobtest")
        self.assertIn("stdout", cfg["handlers"])
        self.assertIn("stderr", cfg["handlers"])
        self.assertEqual(cfg["filters"]["job_name"]["job_name"], "jobtest")

    def test_default_job_name(self):
        cfg = build_logging_config()
        self.assertEqual(cfg["filters"]["job_name"]["job_name"], "babymap")

    def test_get_tagged_logger_injects_tag(self):
        handler = _ListHandler()
        logger = get_tagged_logger("babymap.orchestrator", tag="custom_tag")
        base_logger = logger.logger
        base_logger.setLevel(logging.DEBUG)
        base_logger.addHandler(handler)
        base_logger.propagate = False
        try:
            logger.info("hello world")
            self.assertEqual(handler.records[-1].tag, "custom_tag")
        finally:
            base_logger.removeHandler(handler)
            base_logger.propagate = True

    def test_get_tagged_logger_defaults_tag_to_last_segment(self):
        logger = get_tagged_logger("babymap.data_sources.overpass_client")
        self.assertEqual(logger.extra["tag"], "overpass_client")

    def test_setup_logging_override_applies_filters(self):
        root = logging.getLogger()
        orig_handlers = root.handlers[:]
        orig_level = root.level
        try:
            logging_utils.setup_logging(level="INFO", job_name="jobtest", override_existing=True)
            self.assertTrue(
                any(
                    any(f.__class__.__name__ == "JobNameFilter" for f in h.filters)
                    for h in root.handlers
                )
            )
        finally:
            root.handlers = orig_handlers
            root.setLevel(orig_level)
            logging_utils._CONFIGURED = False


class TestMaskSecretUrl(unittest.TestCase):
    def test_masks_gemini_key(self):
        url = "https://generativelanguage.googleapis.com/v1beta/models/m:generateContent?key=abc123"
        masked = mask_secret_url(url)
        self.assertNotIn("abc123", masked)
        self.assertIn("key=%2A%2A%2A", masked)

    def test_masks_only_secret_params(self):
        url = "https://api.openweathermap.org/data/2.5/weather?lat=1.0&lon=2.0&appid=xyz"
        masked = mask_secret_url(url)
        self.assertIn("lat=1.0", masked)
        self.assertIn("lon=2.0", masked)
        self.assertNotIn("xyz", masked)

    def test_leaves_urls_without_secrets(self):
        url = "https://nominatim.openstreetmap.org/search?format=json&q=Tokyo"
        self.assertEqual(mask_secret_url(url), url)

    def test_leaves_urls_without_query(self):
        url = "https://overpass-api.de/api/interpreter"
        self.assertEqual(mask_secret_url(url), url)


if __name__ == "__main__":
    unittest.main()
