"""
Speed Reflex Trainer: detector-driven punch-zone reflex game.
"""

__version__ = "1.0.0"
__author__ = "Speed Reflex Dev Team"

from .config.settings import Config, load_config, save_config
from .core.entities import Detection, Rectangle, ZoneSet, ComboScript, GamePhase

__all__ = [
    "Config", "load_config", "save_config",
    "Detection", "Rectangle", "ZoneSet", "ComboScript", "GamePhase"
]
