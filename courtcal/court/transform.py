"""
Coordinate transform service – the runtime face of a calibration.

Holds exactly one current Homography. `publish` swaps in a fully built
replacement with a single reference assignment, so a reader that
grabbed the old matrix keeps a complete old matrix and every later
read sees the complete new one.
"""
from __future__ import annotations
from typing import List, Optional, Sequence
import cv2
import numpy as np

from ..errors import NotCalibrated
from ..models.calibration import Homography
from ..models.court import Point2, Point3
import config


def project(matrix: np.ndarray, points) -> np.ndarray:
    """Apply a 3x3 homography to (N, 2) points; returns (N, 2) float64."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) == 0:
        return np.empty((0, 2), dtype=np.float64)
    out = cv2.perspectiveTransform(pts.reshape(-1, 1, 2).copy(), np.array(matrix, dtype=np.float64))
    return out.reshape(-1, 2)


class CoordinateTransformService:
    """Image ↔ court transforms against the current calibration."""

    def __init__(self, homography: Optional[Homography] = None):
        self._homography = homography

    # ── State ──────────────────────────────────────────────────────────────────

    def publish(self, homography: Homography) -> None:
        """Atomically replace the current homography."""
        if not isinstance(homography, Homography):
            raise TypeError(f"Expected Homography, got {type(homography).__name__}")
        self._homography = homography

    def clear(self) -> None:
        self._homography = None

    @property
    def homography(self) -> Optional[Homography]:
        return self._homography

    def is_ready(self) -> bool:
        return self._homography is not None

    def _current(self) -> Homography:
        h = self._homography
        if h is None:
            raise NotCalibrated("No calibration yet; draw and confirm the court lines first")
        return h

    # ── Transforms ─────────────────────────────────────────────────────────────

    def image_to_world(self, point: Point2) -> Point2:
        """Normalised image point → court metres."""
        wx, wy = project(self._current().matrix, [point])[0]
        return float(wx), float(wy)

    def world_to_image(self, point) -> Point2:
        """Court metres (z ignored) → normalised image point."""
        px, py = project(self._current().inverse, [point[:2]])[0]
        return float(px), float(py)

    def batch_transform(self, points: Sequence[Point2]) -> List[Point2]:
        """
        Image → world for a whole landmark set.

        One output per input, in input order. The matrix is read once, so
        a concurrent recalibration cannot mix two calibrations in one batch.
        """
        out = project(self._current().matrix, [(p[0], p[1]) for p in points])
        return [(float(x), float(y)) for x, y in out]

    def batch_world_to_image(self, points: Sequence) -> List[Point2]:
        out = project(self._current().inverse, [(p[0], p[1]) for p in points])
        return [(float(x), float(y)) for x, y in out]

    def transform_landmarks(self, landmarks: Sequence) -> List[Point3]:
        """
        Pose landmarks (normalised x, y) → world points with estimated height.

        Feet and ankles stand on the court (z = 0); other landmarks get a
        nominal height by body region. Landmarks may be (x, y) tuples or
        objects/dicts with x and y.
        """
        xy = [_landmark_xy(lm) for lm in landmarks]
        ground = self.batch_transform(xy)
        return [(x, y, _landmark_height(i)) for i, (x, y) in enumerate(ground)]


def _landmark_xy(lm) -> Point2:
    if isinstance(lm, dict):
        return (float(lm["x"]), float(lm["y"]))
    if hasattr(lm, "x"):
        return (float(lm.x), float(lm.y))
    return (float(lm[0]), float(lm[1]))


def _landmark_height(index: int) -> float:
    if index in config.FOOT_LANDMARKS:
        return 0.0
    if index <= config.UPPER_BODY_LAST_INDEX:
        return config.UPPER_BODY_HEIGHT
    if index in config.HIP_LANDMARKS:
        return config.HIP_HEIGHT
    return config.OTHER_LANDMARK_HEIGHT
