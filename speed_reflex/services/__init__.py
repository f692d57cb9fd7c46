"""Game services: zone geometry, calibration, play session and the frame loop."""

from .geometry_store import GeometryStore
from .calibration import CalibrationController
from .play_session import PlaySessionController
from .game_state import GameStateMachine

__all__ = [
    "GeometryStore",
    "CalibrationController",
    "PlaySessionController",
    "GameStateMachine",
]
