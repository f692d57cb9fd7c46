"""Single-threaded frame loop: capture, detect, update the game, draw."""
from __future__ import annotations
import logging
import signal
import threading
import time
from typing import Callable, List, Optional

from ..core.entities import Detection, FrameOverlay
from ..core.exceptions import DetectionError, WebcamError
from .game_state import GameStateMachine
from .overlay_renderer import DisplayWindow, OverlayRenderer, status_title

logger = logging.getLogger(__name__)


class GameLoop:
    """Runs one frame at a time until the stop event is set.

    Each iteration finishes completely (including any zone geometry write)
    before the stop event is checked again.
    """

    def __init__(self, camera, detector, game: GameStateMachine, renderer: Optional[OverlayRenderer] = None,
                 window: Optional[DisplayWindow] = None, capture_timeout_ms: int = 1000):
        self.camera = camera
        self.detector = detector
        self.game = game
        self.renderer = renderer or OverlayRenderer()
        self.window = window
        self.capture_timeout_ms = capture_timeout_ms
        self._listeners: List[Callable[[FrameOverlay], None]] = []
        self.frames_processed = 0
        self.frames_skipped = 0
        self._fps = 0.0

    def add_listener(self, callback: Callable[[FrameOverlay], None]) -> None:
        """Add a listener called with every frame's overlay."""
        self._listeners.append(callback)

    def run(self, stop_event: threading.Event) -> None:
        if not self.game.started:
            self.game.start()
        logger.info(f"Game loop started in {self.game.phase.value} mode")
        try:
            while not stop_event.is_set():
                if not self.tick():
                    stop_event.set()
        finally:
            self.close()
        logger.info(f"Game loop stopped after {self.frames_processed} frames ({self.frames_skipped} skipped)")

    def tick(self) -> bool:
        """Process one frame. Returns False when the window asked to quit."""
        start_time = time.perf_counter()

        try:
            frame = self.camera.capture(self.capture_timeout_ms)
            frame = self.camera.convert_to_display_format(frame)
            detections: List[Detection] = self.detector.predict(frame) or []
        except (WebcamError, DetectionError) as e:
            logger.warning(f"Skipping frame: {e}")
            self.frames_skipped += 1
            return True

        overlay = self.game.process_frame(detections)
        self.frames_processed += 1

        for callback in self._listeners:
            try:
                callback(overlay)
            except Exception as e:
                logger.error(f"Error in frame listener: {e}")

        if self.window is None:
            return True

        self.renderer.render(frame, overlay)
        keep_running = self.window.show(frame)

        latency = time.perf_counter() - start_time
        if latency > 0:
            self._fps = 1.0 / latency
        self.window.set_title(status_title(self.window.name, self._fps, {"mode": self.game.phase.value}))
        return keep_running

    def close(self) -> None:
        self.camera.close()
        if self.window is not None:
            self.window.close()


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set ``stop_event`` on SIGINT (and SIGTERM where the platform has it)."""

    def _handler(signum, _frame):
        logger.info(f"Received {signal.Signals(signum).name}, stopping after this frame")
        stop_event.set()

    signal.signal(signal.SIGINT, _handler)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handler)
