"""Per-visitor refresh context: map surface, text fields and request generation."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel

from babymap.config import settings
from babymap.domain import Coordinate
from babymap.map_surface import MapState, MapSurface

PLACEHOLDER_ADVICE = "アドバイスを準備中..."
ANALYZING_ADVICE = "新しい目的地を分析中..."


class SessionView(BaseModel):
    """What the browser needs to redraw: map plus the two text fields."""
    session_id: str
    generation: int
    current: Optional[Coordinate] = None
    weather_line: Optional[str] = None
    advice: str
    map: MapState


@dataclass
class MapSession:
    """Mutable state for one map widget; mutated only on the event loop."""
    surface: MapSurface
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    generation: int = 0
    current: Optional[Coordinate] = None
    weather_line: Optional[str] = None
    advice: str = PLACEHOLDER_ADVICE

    @classmethod
    def create(cls, center: Coordinate | None = None, zoom: int | None = None) -> "MapSession":
        center = center or Coordinate(latitude=settings.default_latitude, longitude=settings.default_longitude)
        return cls(surface=MapSurface(center, settings.default_zoom if zoom is None else zoom))

    def begin_refresh(self) -> int:
        """Start a new request generation and return it."""
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def view(self) -> SessionView:
        return SessionView(
            session_id=self.session_id,
            generation=self.generation,
            current=self.current,
            weather_line=self.weather_line,
            advice=self.advice,
            map=self.surface.snapshot(),
        )
