"""
Player movement & speed from pose landmarks.

Each frame's ground position is the mean world position of the visible
foot / ankle landmarks, taken through the current court calibration.
Displacement between consecutive positions over the frame interval
gives speed, smoothed by a short moving average.

A frame without a calibration or without visible feet is recorded as
"no data" and breaks the displacement chain, so the next good frame
starts a fresh segment instead of producing a jump.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import List, Optional, Sequence
import numpy as np

from ..errors import NotCalibrated
from ..models.court import Point2
import config


@dataclass(frozen=True)
class MovementSample:
    timestamp: float
    position: Optional[Point2]      # world metres, None = no data
    speed_ms: Optional[float]       # smoothed, None until two positions chain


def _visibility(lm) -> float:
    if isinstance(lm, dict):
        return float(lm.get("visibility", 1.0))
    if hasattr(lm, "visibility"):
        v = lm.visibility
        return 1.0 if v is None else float(v)
    if len(lm) > 3:
        return float(lm[3])     # (x, y, z, visibility)
    return 1.0


def _xy(lm) -> Point2:
    if isinstance(lm, dict):
        return (float(lm["x"]), float(lm["y"]))
    if hasattr(lm, "x"):
        return (float(lm.x), float(lm.y))
    return (float(lm[0]), float(lm[1]))


class MovementAnalyser:
    """Speed and distance for one tracked player."""

    def __init__(
        self,
        transform,
        window: int = config.SPEED_SMOOTHING_WINDOW,
        min_visibility: float = config.MIN_LANDMARK_VISIBILITY,
    ):
        """
        Args:
            transform: anything with `batch_transform(points)` raising
                NotCalibrated before calibration (CoordinateTransformService
                or CalibrationSession).
        """
        self._transform      = transform
        self.min_visibility  = min_visibility
        self._speed_buf      = deque(maxlen=window)
        self._speeds: List[float] = []
        self._total_dist     = 0.0
        self._last: Optional[Point2] = None
        self._last_t: Optional[float] = None
        self.samples: List[MovementSample] = []

    def ground_position(self, landmarks: Sequence) -> Optional[Point2]:
        """Mean world position of visible feet, or None."""
        feet = [_xy(landmarks[i]) for i in config.FOOT_LANDMARKS
                if i < len(landmarks) and _visibility(landmarks[i]) >= self.min_visibility]
        if not feet:
            return None
        world = np.array(self._transform.batch_transform(feet), dtype=np.float64)
        x, y = world.mean(axis=0)
        return float(x), float(y)

    def update(self, landmarks: Sequence, timestamp: float) -> MovementSample:
        """Feed one frame of landmarks (normalised image coordinates)."""
        try:
            pos = self.ground_position(landmarks)
        except NotCalibrated:
            pos = None

        if pos is None:
            self._last, self._last_t = None, None
            sample = MovementSample(timestamp, None, None)
            self.samples.append(sample)
            return sample

        speed = None
        if self._last is not None and timestamp > self._last_t:
            dist = float(np.hypot(pos[0] - self._last[0], pos[1] - self._last[1]))
            self._total_dist += dist
            self._speed_buf.append(dist / (timestamp - self._last_t))
            speed = float(np.mean(self._speed_buf))
            self._speeds.append(speed)

        self._last, self._last_t = pos, timestamp
        sample = MovementSample(timestamp, pos, speed)
        self.samples.append(sample)
        return sample

    def reset(self) -> None:
        self._speed_buf.clear()
        self._speeds.clear()
        self._total_dist = 0.0
        self._last, self._last_t = None, None
        self.samples.clear()

    # ── Read ───────────────────────────────────────────────────────────────────

    @property
    def current_speed(self) -> float:
        """Smoothed speed in m/s (0 before the first interval)."""
        return float(np.mean(self._speed_buf)) if self._speed_buf else 0.0

    @property
    def total_distance(self) -> float:
        return self._total_dist

    def track(self) -> List[Point2]:
        """Ground positions of frames that had data, in feed order."""
        return [s.position for s in self.samples if s.position is not None]

    def summary(self) -> dict:
        cur = self.current_speed
        avg = float(np.mean(self._speeds)) if self._speeds else 0.0
        mx  = float(max(self._speeds)) if self._speeds else 0.0
        return {
            "current_speed_ms":  round(cur, 3),
            "current_speed_kmh": round(cur * config.KMH_PER_MS, 2),
            "current_speed_mph": round(cur * config.MPH_PER_MS, 2),
            "avg_speed_ms":      round(avg, 3),
            "max_speed_ms":      round(mx, 3),
            "max_speed_kmh":     round(mx * config.KMH_PER_MS, 2),
            "total_distance_m":  round(self._total_dist, 2),
            "frames":            len(self.samples),
            "frames_no_data":    sum(1 for s in self.samples if s.position is None),
        }
