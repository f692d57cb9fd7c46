"""OpenCV drawing of the per-frame overlay, and the game window."""
from __future__ import annotations
import logging
from itertools import groupby
from typing import Dict, Iterable, List, Tuple

import cv2
import numpy as np

from ..core.entities import Detection, FrameOverlay, OverlayText, Rectangle

logger = logging.getLogger(__name__)

# B, G, R
TARGET_COLOR = (50, 50, 250)
TARGET_ALPHA = 100 / 255.0
TEXT_COLOR = (255, 255, 255)
CLASS_COLORS: List[Tuple[int, int, int]] = [
    (0, 200, 0),
    (255, 128, 0),
    (0, 215, 255),
    (255, 0, 255),
    (255, 255, 0),
    (128, 0, 255),
]
FONT = cv2.FONT_HERSHEY_SIMPLEX
FONT_SCALE = 0.8
FONT_THICKNESS = 2

ESCAPE_KEY = 27


def class_color(class_id: int) -> Tuple[int, int, int]:
    return CLASS_COLORS[class_id % len(CLASS_COLORS)]


def _int_corners(rect: Rectangle):
    return (int(rect.pt1.x), int(rect.pt1.y)), (int(rect.pt2.x), int(rect.pt2.y))


class OverlayRenderer:
    """Draws a FrameOverlay onto a BGR frame in place."""

    def render(self, frame: np.ndarray, overlay: FrameOverlay) -> np.ndarray:
        if overlay.target is not None:
            self.draw_target(frame, overlay.target.rect)
        self.draw_detections(frame, overlay.detections)
        self.draw_texts(frame, overlay.texts)
        return frame

    def draw_target(self, frame: np.ndarray, rect: Rectangle) -> None:
        """Translucent filled box over the zone the player must hit."""
        pt1, pt2 = _int_corners(rect)
        layer = frame.copy()
        cv2.rectangle(layer, pt1, pt2, TARGET_COLOR, thickness=-1)
        cv2.addWeighted(layer, TARGET_ALPHA, frame, 1 - TARGET_ALPHA, 0, dst=frame)
        cv2.rectangle(frame, pt1, pt2, TARGET_COLOR, thickness=2)

    def draw_detections(self, frame: np.ndarray, detections: Iterable[Detection]) -> None:
        """Draw boxes one class at a time, each class in its own colour."""
        ordered = sorted(detections, key=lambda d: d.class_id)
        for class_id, group in groupby(ordered, key=lambda d: d.class_id):
            color = class_color(class_id)
            for detection in group:
                pt1, pt2 = _int_corners(detection.rect)
                cv2.rectangle(frame, pt1, pt2, color, thickness=2)
                label = f"{detection.class_name or class_id} {detection.score:.2f}"
                cv2.putText(frame, label, (pt1[0], max(pt1[1] - 6, 12)), FONT, 0.5, color, 1)

    def draw_texts(self, frame: np.ndarray, texts: Iterable[OverlayText]) -> None:
        for item in texts:
            x, y = item.position
            (_, text_h), _ = cv2.getTextSize(item.text, FONT, FONT_SCALE, FONT_THICKNESS)
            # positions are top-left; putText wants the baseline
            cv2.putText(frame, item.text, (x, y + text_h), FONT, FONT_SCALE, TEXT_COLOR, FONT_THICKNESS)


class DisplayWindow:
    """Thin wrapper over a HighGUI window."""

    def __init__(self, name: str):
        self.name = name
        self._created = False

    def show(self, frame: np.ndarray) -> bool:
        """Show a frame; returns False if the user asked to quit (q or Esc)."""
        if not self._created:
            cv2.namedWindow(self.name, cv2.WINDOW_NORMAL)
            self._created = True
        cv2.imshow(self.name, frame)
        key = cv2.waitKey(1) & 0xFF
        return key not in (ord('q'), ESCAPE_KEY)

    def set_title(self, title: str) -> None:
        if self._created:
            cv2.setWindowTitle(self.name, title)

    def close(self) -> None:
        if self._created:
            cv2.destroyWindow(self.name)
            self._created = False


def status_title(window_name: str, fps: float, extra: Dict[str, str] = None) -> str:
    parts = [window_name, f"{fps:04.1f} FPS"]
    if extra:
        parts.extend(f"{k} {v}" for k, v in extra.items())
    return " | ".join(parts)
