"""Interfaces for the upstream services the refresh pipeline depends on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Protocol

from babymap.domain import Coordinate, WeatherSnapshot


class UpstreamDataSource(Protocol):
    """Everything the pipeline needs from the outside world."""

    def geocode(self, query: str) -> Coordinate:
        """Resolve a place name; raise GeocodeNotFoundError when nothing matches."""
        ...

    def facility_elements(self, query: str) -> List[Dict[str, Any]]:
        """Run an Overpass QL query and return the raw elements."""
        ...

    def current_weather(self, coordinate: Coordinate) -> WeatherSnapshot:
        """Return the current weather at `coordinate`."""
        ...

    def generate_text(self, prompt: str) -> str:
        """Return generated text for `prompt`."""
        ...


@dataclass
class CallableDataSource(UpstreamDataSource):
    """Wrap four callables so backends (or test fakes) can be swapped per concern."""

    geocoder: Callable[[str], Coordinate]
    overpass: Callable[[str], List[Dict[str, Any]]]
    weather: Callable[[Coordinate], WeatherSnapshot]
    text_generator: Callable[[str], str]

    def geocode(self, query: str) -> Coordinate:
        """Delegate to the configured geocoder callable."""
        return self.geocoder(query)

    def facility_elements(self, query: str) -> List[Dict[str, Any]]:
        """Delegate to the configured Overpass callable."""
        return self.overpass(query)

    def current_weather(self, coordinate: Coordinate) -> WeatherSnapshot:
        """Delegate to the configured weather callable."""
        return self.weather(coordinate)

    def generate_text(self, prompt: str) -> str:
        """Delegate to the configured text-generation callable."""
        return self.text_generator(prompt)
