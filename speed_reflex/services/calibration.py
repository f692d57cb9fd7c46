"""Zone calibration: learn the six zone rectangles from held-steady detections.

Zones are acquired in ZONE_NAMES order. A zone commits only after the
player has held the detected object inside the hold tolerance for the
configured duration; a run of missed detections or a drifted box restarts
the hold. Nothing here times out: a zone that never sees a confident
detection simply waits.
"""
from __future__ import annotations
import logging
import math
from typing import Optional, Sequence

from ..config.settings import Config
from ..core.clock import Clock, monotonic_clock
from ..core.entities import (
    CalibrationCursor, Detection, FrameOverlay, GamePhase, OverlayText,
    Zone, ZoneSet, ZONE_COUNT, ZONE_NAMES,
)
from ..core.exceptions import GeometryStoreError
from ..core.matching import MatchPolicy, matches
from .geometry_store import GeometryStore

logger = logging.getLogger(__name__)

TITLE_POSITION = (10, 10)
HOLD_TEXT_POSITION = (10, 40)


class CalibrationController:
    """Per-zone acquisition state machine."""

    def __init__(
        self,
        store: GeometryStore,
        clock: Clock = monotonic_clock,
        confidence_threshold: float = 0.6,
        max_misses: int = 5,
        hold_seconds: float = 3.0,
        tolerance_px: float = 15.0,
        save_retries: int = 3,
    ):
        self.store = store
        self.clock = clock
        self.confidence_threshold = confidence_threshold
        self.max_misses = max_misses
        self.hold_seconds = hold_seconds
        self.tolerance_px = tolerance_px
        self.save_retries = max(1, save_retries)
        self.cursor = CalibrationCursor()
        self._zone_set: Optional[ZoneSet] = None
        self.geometry_saved = False

    @classmethod
    def from_config(cls, config: Config, store: GeometryStore, clock: Clock = monotonic_clock) -> "CalibrationController":
        return cls(
            store,
            clock=clock,
            confidence_threshold=config.calibration_confidence_threshold,
            max_misses=config.calibration_max_misses,
            hold_seconds=config.calibration_hold_seconds,
            tolerance_px=config.calibration_tolerance_px,
            save_retries=config.geometry_save_retries,
        )

    @property
    def is_complete(self) -> bool:
        return self._zone_set is not None

    @property
    def zone_set(self) -> Optional[ZoneSet]:
        """The calibrated zones, or None until all six have committed."""
        return self._zone_set

    @property
    def current_zone_name(self) -> str:
        return ZONE_NAMES[min(self.cursor.index, ZONE_COUNT - 1)]

    def hold_progress_seconds(self) -> int:
        """Whole seconds shown on the hold counter, capped at the hold duration.

        Rounds up (``1 + int(elapsed)``) so the counter reads 1 as soon as a
        hold starts; commit timing uses the raw elapsed value instead.
        """
        if self.cursor.hold_started is None:
            return 0
        shown = 1 + int(self.clock() - self.cursor.hold_started)
        return min(shown, math.ceil(self.hold_seconds))

    def process(self, detections: Sequence[Detection]) -> FrameOverlay:
        """Advance acquisition by one frame. Only the first detection is used."""
        if self.is_complete:
            raise RuntimeError("Calibration already complete")

        overlay = FrameOverlay(phase=GamePhase.CALIBRATION)
        overlay.texts.append(OverlayText(f"CALIBRATE: {self.current_zone_name}", TITLE_POSITION))
        if self.cursor.hold_started is not None:
            overlay.texts.append(OverlayText(
                f"HOLD FOR {self.hold_seconds:g}s ({self.hold_progress_seconds()}s)", HOLD_TEXT_POSITION))

        detection = detections[0] if detections else None
        if detection is None or detection.score < self.confidence_threshold:
            self._record_miss()
            return overlay

        cursor = self.cursor
        cursor.misses = 0
        now = self.clock()
        if cursor.hold_started is None:
            cursor.hold_started = now

        overlay.detections.append(detection)
        observed = detection.rect

        if cursor.last_observed is not None and not matches(
                MatchPolicy.HOLD, cursor.last_observed, observed, self.tolerance_px):
            logger.debug(f"Drift while holding {self.current_zone_name}, restarting hold")
            cursor.hold_started = None
        elif now - cursor.hold_started >= self.hold_seconds:
            overlay.committed_zone = self._commit(observed)
            overlay.calibration_complete = self.is_complete
            cursor.hold_started = None

        cursor.last_observed = observed
        return overlay

    def _record_miss(self) -> None:
        cursor = self.cursor
        cursor.misses += 1
        if cursor.misses >= self.max_misses:
            if cursor.hold_started is not None:
                logger.debug(f"{cursor.misses} missed detections, restarting hold for {self.current_zone_name}")
            cursor.hold_started = None
            cursor.misses = 0
            cursor.last_observed = None

    def _commit(self, observed) -> Zone:
        cursor = self.cursor
        zone = Zone(index=cursor.index, name=ZONE_NAMES[cursor.index], rect=observed)
        cursor.committed.append(observed)
        logger.info(
            f"Zone {zone.name} calibrated: ({observed.pt1.x:.1f},{observed.pt1.y:.1f}), "
            f"({observed.pt2.x:.1f},{observed.pt2.y:.1f})")

        cursor.index += 1
        if cursor.index >= ZONE_COUNT:
            self._zone_set = ZoneSet(cursor.committed)
            self._persist(self._zone_set)
        return zone

    def _persist(self, zone_set: ZoneSet) -> None:
        logger.info("Writing zone geometry")
        for attempt in range(1, self.save_retries + 1):
            try:
                self.store.save(zone_set)
                self.geometry_saved = True
                return
            except GeometryStoreError as e:
                logger.warning(f"Saving zone geometry failed (attempt {attempt}/{self.save_retries}): {e}")
        logger.error("Zone geometry could not be saved; it will be lost when the game exits")
