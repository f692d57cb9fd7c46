"""Core domain entities, matching rules and errors."""

from .entities import (
    Point, Rectangle, Detection, Zone, ZoneSet, ComboScript, GamePhase,
    ZONE_NAMES, ZONE_COUNT, BBox,
)
from .exceptions import (
    ApplicationError, ConfigError, DetectionError, ModelError, WebcamError,
    GeometryStoreError, GeometryNotFoundError, MalformedGeometryError,
)
from .matching import MatchPolicy, matches

__all__ = [
    "Point", "Rectangle", "Detection", "Zone", "ZoneSet", "ComboScript", "GamePhase",
    "ZONE_NAMES", "ZONE_COUNT", "BBox",
    "ApplicationError", "ConfigError", "DetectionError", "ModelError", "WebcamError",
    "GeometryStoreError", "GeometryNotFoundError", "MalformedGeometryError",
    "MatchPolicy", "matches",
]
