"""Top-level game phase holder and per-frame dispatcher."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..config.settings import Config
from ..core.clock import Clock, monotonic_clock
from ..core.entities import Detection, FrameOverlay, GamePhase, ZoneSet
from ..core.exceptions import GeometryNotFoundError, MalformedGeometryError
from .calibration import CalibrationController
from .geometry_store import GeometryStore
from .play_session import PlaySessionController

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _CalibrationState:
    controller: CalibrationController
    phase = GamePhase.CALIBRATION


@dataclass(slots=True)
class _PlayState:
    controller: PlaySessionController
    zone_set: ZoneSet
    phase = GamePhase.PLAY


_State = Union[_CalibrationState, _PlayState]


class GameStateMachine:
    """Owns the game phase and the zone set; routes each frame to the active controller.

    The only phase change is Calibration -> Play, taken once when the
    calibration controller has committed all six zones.
    """

    def __init__(self, store: GeometryStore, config: Config, clock: Clock = monotonic_clock):
        self.store = store
        self.config = config
        self.clock = clock
        self._state: Optional[_State] = None

    def start(self) -> GamePhase:
        """Load persisted zones; play if they are valid, calibrate otherwise."""
        try:
            zone_set = self.store.load()
        except GeometryNotFoundError as e:
            logger.info(f"{e}; entering calibration mode")
            self._enter_calibration()
        except MalformedGeometryError as e:
            logger.warning(f"Unable to retrieve all zone settings ({e}); entering calibration mode")
            self._enter_calibration()
        else:
            logger.info("Retrieved all zone settings, entering play mode")
            self._enter_play(zone_set, geometry_saved=True)
        return self.phase

    @property
    def started(self) -> bool:
        return self._state is not None

    @property
    def phase(self) -> GamePhase:
        return self._require_state().phase

    @property
    def zone_set(self) -> Optional[ZoneSet]:
        """The complete zone set once in Play; None while calibrating."""
        state = self._require_state()
        return state.zone_set if isinstance(state, _PlayState) else None

    @property
    def controller(self) -> Union[CalibrationController, PlaySessionController]:
        return self._require_state().controller

    def process_frame(self, detections: Sequence[Detection]) -> FrameOverlay:
        state = self._require_state()
        if isinstance(state, _CalibrationState):
            overlay = state.controller.process(detections)
            if state.controller.is_complete:
                self._enter_play(state.controller.zone_set, geometry_saved=state.controller.geometry_saved)
            return overlay
        return state.controller.process(detections)

    def _enter_calibration(self) -> None:
        controller = CalibrationController.from_config(self.config, self.store, clock=self.clock)
        self._state = _CalibrationState(controller)

    def _enter_play(self, zone_set: ZoneSet, geometry_saved: bool) -> None:
        if isinstance(self._state, _CalibrationState):
            logger.info("Calibration complete, entering play mode")
        controller = PlaySessionController.from_config(
            self.config, zone_set, clock=self.clock, geometry_saved=geometry_saved)
        self._state = _PlayState(controller, zone_set)

    def _require_state(self) -> _State:
        if self._state is None:
            raise RuntimeError("GameStateMachine.start() has not been called")
        return self._state
