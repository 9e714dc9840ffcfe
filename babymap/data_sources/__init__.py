"""Upstream service clients and the bundle that plugs them into the pipeline."""

from .base import CallableDataSource, UpstreamDataSource
from .factory import build_data_source
from .nominatim_client import resolve
from .openweather_client import fetch_current_weather
from .overpass_client import build_facility_query, fetch_elements

__all__ = [
    "build_data_source",
    "CallableDataSource",
    "UpstreamDataSource",
    "build_facility_query",
    "fetch_current_weather",
    "fetch_elements",
    "resolve",
]
