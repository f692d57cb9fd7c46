"""Pytest configuration and shared fixtures for the speed reflex trainer.

Provides a controllable clock, temporary geometry files, sample zone sets
and detections, and mocked camera/detector collaborators.
"""
import sys
import logging
from pathlib import Path
from typing import List
from unittest.mock import Mock

import numpy as np
import pytest

# Add the project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from speed_reflex.config.settings import Config
from speed_reflex.core.entities import ComboScript, Detection, Rectangle, ZoneSet
from speed_reflex.services.geometry_store import GeometryStore


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


def detection_for(rect: Rectangle, score: float = 0.9, class_id: int = 0) -> Detection:
    """Build a detector output whose box is exactly ``rect``."""
    return Detection(class_id=class_id, score=score, bbox=rect.as_xyxy(), class_name="glove")


@pytest.fixture
def clock():
    """Provide a fake clock starting at t=100s."""
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    """Provide a real configuration pointing at a temporary geometry file."""
    return Config(
        geometry_file=str(tmp_path / "game.settings.txt"),
        log_dir=str(tmp_path / "logs"),
        enable_file_logging=False,
        show_window=False,
    )


@pytest.fixture
def store(config):
    return GeometryStore(config.geometry_file)


@pytest.fixture
def unit_zone_rects() -> List[Rectangle]:
    """Six unit squares at distinct, well separated positions."""
    origins = [(100, 100), (300, 100), (100, 300), (300, 300), (100, 500), (300, 500)]
    return [Rectangle.from_xyxy(x, y, x + 1, y + 1) for x, y in origins]


@pytest.fixture
def unit_zone_set(unit_zone_rects) -> ZoneSet:
    return ZoneSet(unit_zone_rects)


@pytest.fixture
def sample_zone_set() -> ZoneSet:
    """Realistic glove-sized zones, all on a 0.1px grid."""
    return ZoneSet([
        Rectangle.from_xyxy(520.5, 180.0, 640.0, 300.2),
        Rectangle.from_xyxy(660.0, 180.0, 780.5, 300.0),
        Rectangle.from_xyxy(380.0, 260.0, 500.0, 380.0),
        Rectangle.from_xyxy(800.0, 260.0, 920.0, 380.0),
        Rectangle.from_xyxy(450.0, 420.0, 570.0, 540.0),
        Rectangle.from_xyxy(710.0, 420.0, 830.0, 540.7),
    ])


@pytest.fixture
def combo() -> ComboScript:
    return ComboScript((0, 1, 0, 0, 1, 0, 1, 2))


@pytest.fixture
def sample_frame():
    return np.zeros((720, 1280, 3), dtype=np.uint8)


@pytest.fixture
def mock_camera(sample_frame):
    """Camera collaborator that always returns the same frame."""
    camera = Mock()
    camera.capture.return_value = sample_frame
    camera.convert_to_display_format.side_effect = lambda frame: frame
    return camera


@pytest.fixture
def mock_detector():
    detector = Mock()
    detector.predict.return_value = []
    return detector
