"""Rectangle-to-zone matching rules (pure, easily unit tested)."""
from __future__ import annotations
from enum import Enum
from .entities import Rectangle


class MatchPolicy(Enum):
    HOLD = "hold"            # calibration: still roughly where it was last frame
    TIGHT = "tight"          # 'donut': every corner coordinate within threshold
    CONTAINED = "contained"  # 'cake': observed box inside the inflated zone


def corner_deltas(zone: Rectangle, observed: Rectangle):
    return (
        abs(zone.pt1.x - observed.pt1.x),
        abs(zone.pt1.y - observed.pt1.y),
        abs(zone.pt2.x - observed.pt2.x),
        abs(zone.pt2.y - observed.pt2.y),
    )


def matches(policy: MatchPolicy, zone: Rectangle, observed: Rectangle, threshold: float) -> bool:
    """Return True if ``observed`` matches ``zone`` under ``policy``.

    HOLD only fails when all four coordinates moved by more than threshold,
    so one steady corner is enough to count as still held.
    """
    if policy is MatchPolicy.HOLD:
        return not all(d > threshold for d in corner_deltas(zone, observed))
    if policy is MatchPolicy.TIGHT:
        return all(d < threshold for d in corner_deltas(zone, observed))
    if policy is MatchPolicy.CONTAINED:
        pt1_within = observed.pt1.x >= zone.pt1.x - threshold and observed.pt1.y >= zone.pt1.y - threshold
        pt2_within = observed.pt2.x <= zone.pt2.x + threshold and observed.pt2.y <= zone.pt2.y + threshold
        return pt1_within and pt2_within
    raise ValueError(f"Unknown match policy: {policy!r}")
