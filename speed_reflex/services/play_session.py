"""Play session: time the player through the combo script, forever."""
from __future__ import annotations
import logging
from typing import Optional, Sequence

from ..config.settings import Config
from ..core.clock import Clock, monotonic_clock
from ..core.entities import (
    ComboScript, Detection, FrameOverlay, GamePhase, HitEvent, OverlayText,
    PassEvent, SessionCursor, Zone, ZoneSet,
)
from ..core.matching import MatchPolicy, matches

logger = logging.getLogger(__name__)

TARGET_TEXT_POSITION = (10, 10)
FASTEST_TEXT_POSITION = (10, 30)
WARNING_TEXT_POSITION = (10, 50)


class PlaySessionController:
    """Drives the combo script and keeps the best full-pass time of the run."""

    def __init__(
        self,
        zone_set: ZoneSet,
        combo: ComboScript,
        clock: Clock = monotonic_clock,
        tolerance_px: float = 2.0,
        geometry_saved: bool = True,
    ):
        self.zone_set = zone_set
        self.combo = combo
        self.clock = clock
        self.tolerance_px = tolerance_px
        self.geometry_saved = geometry_saved
        self.cursor = SessionCursor()

    @classmethod
    def from_config(cls, config: Config, zone_set: ZoneSet, clock: Clock = monotonic_clock,
                    geometry_saved: bool = True) -> "PlaySessionController":
        return cls(
            zone_set,
            config.get_combo_script(),
            clock=clock,
            tolerance_px=config.play_tolerance_px,
            geometry_saved=geometry_saved,
        )

    @property
    def current_target(self) -> Zone:
        return self.zone_set.zone(self.combo[self.cursor.step])

    @property
    def best_pass_seconds(self) -> Optional[float]:
        return self.cursor.best_pass_seconds

    def process(self, detections: Sequence[Detection]) -> FrameOverlay:
        """Check the first detection against the current target and advance on a hit."""
        cursor = self.cursor
        now = self.clock()
        if cursor.hit_started is None:
            cursor.hit_started = now
        if cursor.pass_started is None:
            cursor.pass_started = now

        overlay = FrameOverlay(phase=GamePhase.PLAY, detections=list(detections))
        target = self.current_target

        observed = detections[0].rect if detections else None
        if observed is not None and matches(MatchPolicy.CONTAINED, target.rect, observed, self.tolerance_px):
            hit_seconds = now - cursor.hit_started
            logger.info(f"Time to hit {target.name}: {hit_seconds:.2f}s")
            overlay.hit = HitEvent(zone=target, seconds=hit_seconds)
            cursor.hit_started = None

            cursor.step += 1
            if cursor.step >= len(self.combo):
                overlay.completed_pass = self._complete_pass(now)
                cursor.step = 0

        overlay.target = self.current_target
        overlay.texts.append(OverlayText(overlay.target.name, TARGET_TEXT_POSITION))
        if cursor.best_pass_seconds is not None:
            overlay.texts.append(OverlayText(f"FASTEST SESSION: {cursor.best_pass_seconds:.2f}s", FASTEST_TEXT_POSITION))
        if not self.geometry_saved:
            overlay.texts.append(OverlayText("GEOMETRY NOT SAVED", WARNING_TEXT_POSITION))
        return overlay

    def _complete_pass(self, now: float) -> PassEvent:
        cursor = self.cursor
        pass_seconds = now - cursor.pass_started
        if cursor.best_pass_seconds is None or pass_seconds < cursor.best_pass_seconds:
            cursor.best_pass_seconds = pass_seconds
        logger.info(f"Total session time: {pass_seconds:.2f}s (fastest {cursor.best_pass_seconds:.2f}s)")
        cursor.pass_started = None
        return PassEvent(seconds=pass_seconds, best_seconds=cursor.best_pass_seconds)
