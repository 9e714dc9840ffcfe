"""
Logging setup shared by the babymap service, its clients, and scripts.

Call setup_logging() once from an entrypoint (run_server.py, a script) and
obtain per-module adapters with get_tagged_logger():

    from utils.logging_utils import get_tagged_logger

    logger = get_tagged_logger(__name__, tag="overpass_client")
    logger.info("Querying Overpass", extra={"radius_m": 2500})

Every record carries `job_name` and `tag` so the service, the upstream
clients, and the refresh pipeline can be told apart in a single stream.
Upstream URLs embed API keys (Gemini `key=`, OpenWeatherMap `appid=`); pass
them through mask_secret_url() before they reach a log line.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional


# Records emitted before setup_logging() still get timestamps and levels.
BOOTSTRAP_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
BOOTSTRAP_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(
    level=logging.INFO,
    format=BOOTSTRAP_FORMAT,
    datefmt=BOOTSTRAP_DATEFMT,
)


DEFAULT_LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
)
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_JOB_NAME = "babymap"

SECRET_QUERY_TOKENS = ("key", "appid", "token", "secret")

_CONFIGURED: bool = False


class MaxLevelFilter(logging.Filter):
    """Pass only records at or below `max_level` (stdout gets DEBUG/INFO)."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class EnsureTagFilter(logging.Filter):
    """
    Guarantee a `tag` attribute on every record.

    Records from plain loggers (uvicorn, requests, third-party code) get the
    last segment of their logger name, e.g. "uvicorn.error" -> "error".
    """

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            logger_name = getattr(record, "name", "")
            record.tag = logger_name.split(".")[-1] if logger_name else "-"
        return True


class JobNameFilter(logging.Filter):
    """Stamp a fixed `job_name` on records that do not already carry one."""

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self._job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self._job_name
        return True


def build_logging_config(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = DEFAULT_JOB_NAME,
) -> Mapping[str, Any]:
    """
    Build a dictConfig mapping that routes INFO and below to stdout and
    WARNING and above to stderr.

    Parameters
    ----------
    level:
        Root logger level ("DEBUG", "INFO", logging.INFO, ...).
    log_format:
        Formatter pattern; the default includes job_name and tag.
    date_format:
        Formatter pattern for asctime.
    job_name:
        Logical process name placed in `%(job_name)s`.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "stdout_max_info": {
                "()": MaxLevelFilter,
                "max_level": logging.INFO,
            },
        },
        "formatters": {
            "standard": {
                "format": log_format,
                "datefmt": date_format,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name", "stdout_max_info"],
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "filters": ["ensure_tag", "job_name"],
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["stdout", "stderr"],
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    log_format: str = DEFAULT_LOG_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    job_name: Optional[str] = DEFAULT_JOB_NAME,
    override_existing: bool = False,
) -> None:
    """
    Apply the process-wide logging configuration.

    Repeated calls are no-ops unless `override_existing` is True.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    config_dict = build_logging_config(
        level=level,
        log_format=log_format,
        date_format=date_format,
        job_name=job_name,
    )
    logging.config.dictConfig(config_dict)
    _CONFIGURED = True


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """
    Return a LoggerAdapter whose records always carry `tag`.

    `tag` defaults to the last segment of `name`
    ("babymap.data_sources.overpass_client" -> "overpass_client").
    """
    base_logger = logging.getLogger(name)
    if tag is None:
        tag = name.split(".")[-1]
    return logging.LoggerAdapter(base_logger, {"tag": tag})


def mask_secret_url(url: str) -> str:
    """Return `url` with secret-looking query parameters replaced by ***.

    Examples
    --------
    - https://api.example.com/weather?lat=1&appid=abc -> ...?lat=1&appid=%2A%2A%2A
    - https://nominatim.example.org/search?q=Tokyo -> unchanged
    """
    from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    if not parsed.query:
        return url

    masked_pairs = []
    changed = False
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        if any(token in key.lower() for token in SECRET_QUERY_TOKENS):
            masked_pairs.append((key, "***"))
            changed = True
        else:
            masked_pairs.append((key, value))
    if not changed:
        return url

    return urlunparse(parsed._replace(query=urlencode(masked_pairs)))
