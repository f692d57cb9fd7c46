"""Domain entities (data-only structures) used across services."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

BBox = Tuple[float, float, float, float]  # (x1,y1,x2,y2)

ZONE_NAMES: Tuple[str, ...] = (
    "JAB", "CROSS", "LEFT HOOK", "RIGHT HOOK", "LEFT UPPERCUT", "RIGHT UPPERCUT"
)
ZONE_COUNT = len(ZONE_NAMES)

DEFAULT_COMBO: Tuple[int, ...] = (0, 1, 0, 0, 1, 0, 1, 2)


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class Rectangle:
    """Two corners in detector pixel space; pt1 top-left-ish, pt2 bottom-right-ish."""
    pt1: Point
    pt2: Point

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "Rectangle":
        return cls(Point(float(x1), float(y1)), Point(float(x2), float(y2)))

    def as_xyxy(self) -> BBox:
        return (self.pt1.x, self.pt1.y, self.pt2.x, self.pt2.y)


@dataclass(slots=True)
class Detection:
    class_id: int
    score: float
    bbox: BBox
    class_name: Optional[str] = None  # Human-readable class name

    @property
    def rect(self) -> Rectangle:
        return Rectangle.from_xyxy(*self.bbox)


@dataclass(frozen=True, slots=True)
class Zone:
    index: int
    name: str
    rect: Rectangle


class ZoneSet:
    """Exactly six zone rectangles, in ZONE_NAMES order. Immutable."""

    __slots__ = ("_rects",)

    def __init__(self, rects: Sequence[Rectangle]):
        rects = tuple(rects)
        if len(rects) != ZONE_COUNT:
            raise ValueError(f"ZoneSet needs exactly {ZONE_COUNT} zones, got {len(rects)}")
        self._rects = rects

    def __len__(self) -> int:
        return ZONE_COUNT

    def __getitem__(self, index: int) -> Rectangle:
        return self._rects[index]

    def __iter__(self) -> Iterator[Rectangle]:
        return iter(self._rects)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ZoneSet):
            return NotImplemented
        return self._rects == other._rects

    def __hash__(self) -> int:
        return hash(self._rects)

    def __repr__(self) -> str:
        return f"ZoneSet({list(self._rects)!r})"

    def zone(self, index: int) -> Zone:
        return Zone(index=index, name=ZONE_NAMES[index], rect=self._rects[index])

    def zones(self) -> List[Zone]:
        return [self.zone(i) for i in range(ZONE_COUNT)]


@dataclass(frozen=True, slots=True)
class ComboScript:
    """Fixed, repeating sequence of zone indices the player must hit."""
    steps: Tuple[int, ...] = DEFAULT_COMBO

    def __post_init__(self):
        if not self.steps:
            raise ValueError("Combo script must contain at least one step")
        for step in self.steps:
            if not isinstance(step, int) or isinstance(step, bool) or not 0 <= step < ZONE_COUNT:
                raise ValueError(f"Combo step {step!r} is not a zone index in 0..{ZONE_COUNT - 1}")

    @classmethod
    def from_sequence(cls, steps: Sequence[int]) -> "ComboScript":
        return cls(tuple(steps))

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, step: int) -> int:
        return self.steps[step]


class GamePhase(Enum):
    CALIBRATION = "calibration"
    PLAY = "play"


@dataclass(slots=True)
class CalibrationCursor:
    """Acquisition-in-progress state for the zone currently being calibrated."""
    index: int = 0
    last_observed: Optional[Rectangle] = None
    misses: int = 0
    hold_started: Optional[float] = None
    committed: List[Rectangle] = field(default_factory=list)


@dataclass(slots=True)
class SessionCursor:
    step: int = 0
    hit_started: Optional[float] = None
    pass_started: Optional[float] = None
    best_pass_seconds: Optional[float] = None


@dataclass(frozen=True, slots=True)
class OverlayText:
    text: str
    position: Tuple[int, int]


@dataclass(frozen=True, slots=True)
class HitEvent:
    zone: Zone
    seconds: float


@dataclass(frozen=True, slots=True)
class PassEvent:
    seconds: float
    best_seconds: float


@dataclass(slots=True)
class FrameOverlay:
    """What the renderer should show for one frame, plus what happened in it."""
    phase: GamePhase
    texts: List[OverlayText] = field(default_factory=list)
    detections: List[Detection] = field(default_factory=list)
    target: Optional[Zone] = None
    committed_zone: Optional[Zone] = None
    hit: Optional[HitEvent] = None
    completed_pass: Optional[PassEvent] = None
    calibration_complete: bool = False
