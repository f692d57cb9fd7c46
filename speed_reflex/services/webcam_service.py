"""Webcam service for blocking, frame-at-a-time capture."""

import cv2
import logging
from typing import Optional
import numpy as np

from ..config.settings import Config
from ..core.exceptions import WebcamError

logger = logging.getLogger(__name__)


class WebcamService:
    """Opens a camera and hands out one frame per call.

    Reads block until a frame arrives or the backend's read timeout
    expires; there is no background streaming thread.
    """

    def __init__(self, camera_index: int = 0, width: int = 1280, height: int = 720, fps: int = 30,
                 timeout_ms: int = 1000):
        """Initialize webcam service.

        Args:
            camera_index: Camera device index
            width: Frame width
            height: Frame height
            fps: Target frames per second
            timeout_ms: Open/read timeout handed to the capture backend
        """
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.target_fps = fps
        self.timeout_ms = timeout_ms
        self._capture: Optional[cv2.VideoCapture] = None

    @classmethod
    def from_config(cls, config: Config) -> "WebcamService":
        return cls(
            camera_index=config.camera_index,
            width=config.camera_width,
            height=config.camera_height,
            fps=config.camera_fps,
            timeout_ms=config.capture_timeout_ms,
        )

    def open(self) -> None:
        """Open the camera. Raises WebcamError if it cannot be opened."""
        self.close()
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            raise WebcamError(f"Failed to open camera {self.camera_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        capture.set(cv2.CAP_PROP_FPS, self.target_fps)
        capture.set(cv2.CAP_PROP_READ_TIMEOUT_MSEC, self.timeout_ms)
        self._capture = capture

        actual_width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        logger.info(f"Camera {self.camera_index} opened: {actual_width}x{actual_height}")

    def is_opened(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    def capture(self, timeout_ms: Optional[int] = None) -> np.ndarray:
        """Return the next frame. Raises WebcamError on timeout or read failure."""
        if not self.is_opened():
            raise WebcamError("Camera is not open")
        if timeout_ms is not None and timeout_ms != self.timeout_ms:
            self._capture.set(cv2.CAP_PROP_READ_TIMEOUT_MSEC, timeout_ms)
            self.timeout_ms = timeout_ms

        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise WebcamError(f"Failed to capture frame within {self.timeout_ms}ms")
        return frame

    @staticmethod
    def convert_to_display_format(frame: np.ndarray) -> np.ndarray:
        """Return a 3-channel BGR frame, converting grayscale or BGRA input."""
        if frame is None or frame.size == 0:
            raise WebcamError("Cannot convert an empty frame")
        if frame.ndim == 2:
            return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        channels = frame.shape[2]
        if channels == 3:
            return frame
        if channels == 4:
            return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
        if channels == 1:
            return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        raise WebcamError(f"Unsupported frame with {channels} channels")

    def close(self) -> None:
        """Release the camera."""
        if self._capture is not None:
            self._capture.release()
            logger.info(f"Camera {self.camera_index} released")
        self._capture = None
