"""Persistence of calibrated zone geometry.

The record is a single line of 24 comma-separated numbers: for each zone in
ZONE_NAMES order, ``pt1.x, pt1.y, pt2.x, pt2.y``. No header, no version.
"""
from __future__ import annotations
import logging
import math
import os
from pathlib import Path
from typing import List, Union

from ..core.entities import Rectangle, ZoneSet, ZONE_COUNT
from ..core.exceptions import GeometryNotFoundError, GeometryStoreError, MalformedGeometryError

logger = logging.getLogger(__name__)

DELIMITER = ","
COORDS_PER_ZONE = 4
TOKEN_COUNT = COORDS_PER_ZONE * ZONE_COUNT


def format_zone_set(zone_set: ZoneSet) -> str:
    return DELIMITER.join(f"{value:.1f}" for rect in zone_set for value in rect.as_xyxy())


def parse_zone_set(line: str) -> ZoneSet:
    """Parse one persisted record; any deviation raises MalformedGeometryError."""
    tokens = line.strip().split(DELIMITER)
    if len(tokens) != TOKEN_COUNT:
        raise MalformedGeometryError(f"Expected {TOKEN_COUNT} values, found {len(tokens)}")

    values: List[float] = []
    for position, token in enumerate(tokens):
        try:
            value = float(token)
        except ValueError:
            raise MalformedGeometryError(f"Value {position} is not numeric: {token!r}") from None
        # float() also takes "nan", "inf" and digit underscores; none of those are ever written
        if not math.isfinite(value) or "_" in token:
            raise MalformedGeometryError(f"Value {position} is not a finite coordinate: {token!r}")
        values.append(value)

    rects = [
        Rectangle.from_xyxy(*values[i:i + COORDS_PER_ZONE])
        for i in range(0, TOKEN_COUNT, COORDS_PER_ZONE)
    ]
    return ZoneSet(rects)


class GeometryStore:
    """Loads and saves the six zone rectangles in a single-line text file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> ZoneSet:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                line = f.readline()
        except FileNotFoundError:
            raise GeometryNotFoundError(f"No zone geometry at '{self.path}'") from None
        except UnicodeDecodeError as e:
            raise MalformedGeometryError(f"Zone geometry '{self.path}' is not text: {e}") from e
        except OSError as e:
            raise GeometryNotFoundError(f"Unable to read zone geometry '{self.path}': {e}") from e

        zone_set = parse_zone_set(line)
        for zone in zone_set.zones():
            r = zone.rect
            logger.info(f"Zone {zone.name} retrieved: ({r.pt1.x:.1f},{r.pt1.y:.1f}), ({r.pt2.x:.1f},{r.pt2.y:.1f})")
        return zone_set

    def save(self, zone_set: ZoneSet) -> None:
        """Write the record to a temp file beside the target, then rename over it."""
        temp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(format_zone_set(zone_set))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.debug(f"Could not remove temp file '{temp_path}'")
            raise GeometryStoreError(f"Failed to write zone geometry '{self.path}': {e}") from e

        logger.info(f"Zone geometry written to '{self.path}'")
