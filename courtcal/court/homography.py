"""
Court homography – maps normalised image coordinates ↔ court metres.

Each confirmed line contributes its two endpoints as point pairs
(image point → known world endpoint from the court template). The
homography is the weighted DLT solution:

    1. normalise image and world points (centroid → 0, mean radius → √2)
    2. stack two rows per pair, each scaled by the pair's weight
    3. h = right-singular vector of the smallest singular value
    4. denormalise, scale so H[2][2] = 1

Weights come from the camera position guess: lines parallel to the
court edge the camera sits behind run across the frame with the least
foreshortening and get ALIGNED_LINE_WEIGHT; everything else gets
DEFAULT_LINE_WEIGHT.

Degenerate inputs are reported as SolveResult statuses, never as a
silently wrong matrix. The caller commits a result with `accept()`;
the last accepted homography is kept on the solver.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
import numpy as np

from ..models.calibration import Homography, LineCorrespondence, SolveResult, SolveStatus
from ..models.camera import CameraPosition
from ..models.court import CourtLine, CourtModel
from .refinement import HomographyRefiner
import config


_COLLINEAR_TOL = 1e-9   # metres, world lines are exact


class HomographySolver:
    """Weighted DLT solver with degeneracy guards and last-good caching."""

    def __init__(
        self,
        court: CourtModel,
        min_lines: int = config.MIN_CALIBRATION_LINES,
        aligned_weight: float = config.ALIGNED_LINE_WEIGHT,
        default_weight: float = config.DEFAULT_LINE_WEIGHT,
        max_condition: float = config.MAX_CONDITION_NUMBER,
        min_spread: float = config.MIN_POINT_SPREAD,
        refine: bool = config.REFINE_HOMOGRAPHY,
        verbose: bool = False,
    ):
        self._court          = court
        self.min_lines       = min_lines
        self.aligned_weight  = aligned_weight
        self.default_weight  = default_weight
        self.max_condition   = max_condition
        self.min_spread      = min_spread
        self.verbose         = verbose
        self._refiner        = HomographyRefiner() if refine else None
        self._last_good: Optional[Homography] = None

    @property
    def last_good(self) -> Optional[Homography]:
        return self._last_good

    # ── Public API ─────────────────────────────────────────────────────────────

    def solve(
        self,
        correspondences: Sequence[LineCorrespondence],
        camera: Optional[CameraPosition] = None,
    ) -> SolveResult:
        """
        Solve image → world from confirmed line correspondences.

        Returns a SolveResult tagged OK, INSUFFICIENT_DATA or
        ILL_CONDITIONED. `last_good` only moves on `accept()`.
        """
        confirmed = [c for c in correspondences if c.confirmed]

        if len(confirmed) < self.min_lines:
            return self._fail(SolveStatus.INSUFFICIENT_DATA,
                              self._insufficient_message(confirmed))

        supports = self._independent_lines([self._court.line(c.court_line_id)
                                            for c in confirmed])
        if supports < self.min_lines:
            return self._fail(
                SolveStatus.INSUFFICIENT_DATA,
                f"Only {supports} independent court line(s) among {len(confirmed)} drawn; "
                f"lines on the same court line do not add constraints",
            )

        img, world, weights = self.point_pairs(confirmed, camera)

        T_img   = _normalising_transform(img)
        T_world = _normalising_transform(world)
        if T_img is None or T_world is None:
            return self._fail(SolveStatus.ILL_CONDITIONED,
                              "Drawn lines collapse to a single point; redraw them apart")

        A = _dlt_system(_apply(T_img, img), _apply(T_world, world), weights)
        _, S, Vt = np.linalg.svd(A)
        if len(S) < 9:
            S = np.append(S, 0.0)   # fewer rows than unknowns: 9th singular value is 0
        condition = float(S[0] / S[-2]) if S[-2] > 0 else float("inf")

        spread = _point_spread(confirmed)
        if condition > self.max_condition or spread < self.min_spread:
            return self._fail(
                SolveStatus.ILL_CONDITIONED,
                "Lines are too close to collinear for a stable fit; "
                "redraw a more distinct line",
                condition,
            )

        Hn = Vt[-1].reshape(3, 3)
        H  = np.linalg.inv(T_world) @ Hn @ T_img
        try:
            homography = Homography.from_matrix(H)
        except (ValueError, np.linalg.LinAlgError) as e:
            return self._fail(SolveStatus.ILL_CONDITIONED,
                              f"Solved homography is singular: {e}", condition)

        if self._refiner is not None:
            dims = _native_dims(confirmed)
            homography = self._refiner.refine(homography, img, world, weights, dims)

        if self.verbose:
            print(f"[Solver] {len(confirmed)} lines, {len(img)} points, "
                  f"cond={condition:.1f}, spread={spread:.3f}")
        return SolveResult(
            status           = SolveStatus.OK,
            homography       = homography,
            message          = f"Calibrated from {len(confirmed)} lines",
            condition_number = condition,
            weights          = tuple(float(w) for w in weights),
        )

    def accept(self, result: SolveResult) -> None:
        """Commit an OK result as the last good homography."""
        if result.ok:
            self._last_good = result.homography

    def point_pairs(
        self,
        correspondences: Sequence[LineCorrespondence],
        camera: Optional[CameraPosition] = None,
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Expand lines into point pairs.

        Returns:
            img:     (2N, 2) normalised image points, start then end per line
            world:   (2N, 2) court ground-plane points in metres
            weights: (2N,)   per-pair weight
        """
        img, world, weights = [], [], []
        for corr in correspondences:
            line = self._court.line(corr.court_line_id)
            w = self.line_weight(line, camera)
            img.extend([corr.start, corr.end])
            world.extend([line.start_2d, line.end_2d])
            weights.extend([w, w])
        return (np.array(img, dtype=np.float64),
                np.array(world, dtype=np.float64),
                np.array(weights, dtype=np.float64))

    def line_weight(self, line: CourtLine, camera: Optional[CameraPosition]) -> float:
        if camera is not None and camera.is_aligned(line):
            return self.aligned_weight
        return self.default_weight

    # ── Internals ──────────────────────────────────────────────────────────────

    def _fail(self, status: SolveStatus, message: str,
              condition: float = float("nan")) -> SolveResult:
        if self.verbose:
            kept = "keeping previous calibration" if self._last_good else "no calibration yet"
            print(f"[Solver] {status.value}: {message} ({kept})")
        return SolveResult(status=status, message=message, condition_number=condition)

    def _insufficient_message(self, confirmed: List[LineCorrespondence]) -> str:
        drawn   = {c.court_line_id for c in confirmed}
        missing = [lid for lid in self._court.required_lines if lid not in drawn]
        msg = f"Need at least {self.min_lines} lines, have {len(confirmed)}"
        if missing:
            msg += f"; draw the {missing[0].replace('-', ' ')} line"
        return msg

    @staticmethod
    def _independent_lines(lines: List[CourtLine]) -> int:
        """Number of distinct supporting lines (collinear court lines count once)."""
        supports: List[Tuple[np.ndarray, np.ndarray]] = []
        for line in lines:
            p = np.array(line.start_2d)
            d = np.subtract(line.end_2d, line.start_2d)
            d = d / np.linalg.norm(d)
            duplicate = False
            for q, e in supports:
                parallel = abs(d[0] * e[1] - d[1] * e[0]) < _COLLINEAR_TOL
                off      = p - q
                on_line  = abs(off[0] * e[1] - off[1] * e[0]) < _COLLINEAR_TOL
                if parallel and on_line:
                    duplicate = True
                    break
            if not duplicate:
                supports.append((p, d))
        return len(supports)


def _normalising_transform(pts: np.ndarray) -> Optional[np.ndarray]:
    """Similarity moving the centroid to 0 and the mean radius to √2."""
    centroid = pts.mean(axis=0)
    mean_dist = float(np.mean(np.linalg.norm(pts - centroid, axis=1)))
    if mean_dist < 1e-12:
        return None
    s = np.sqrt(2.0) / mean_dist
    return np.array([
        [s,   0.0, -s * centroid[0]],
        [0.0, s,   -s * centroid[1]],
        [0.0, 0.0, 1.0],
    ])


def _point_spread(correspondences: Sequence[LineCorrespondence]) -> float:
    """σ_min / σ_max of the centred drawn endpoints in native pixels; 0 when collinear."""
    pts = []
    for corr in correspondences:
        pts.extend([corr.start_px, corr.end_px])
    pts = np.array(pts, dtype=np.float64)
    s = np.linalg.svd(pts - pts.mean(axis=0), compute_uv=False)
    if s[0] <= 0:
        return 0.0
    return float(s[-1] / s[0])


def _apply(T: np.ndarray, pts: np.ndarray) -> np.ndarray:
    homog = np.hstack([pts, np.ones((len(pts), 1))]) @ T.T
    return homog[:, :2] / homog[:, 2:3]


def _dlt_system(src: np.ndarray, dst: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Two weighted rows per pair of A·h = 0 for dst ~ H·src."""
    rows = []
    for (x, y), (X, Y), w in zip(src, dst, weights):
        rows.append(w * np.array([x, y, 1.0, 0.0, 0.0, 0.0, -X * x, -X * y, -X]))
        rows.append(w * np.array([0.0, 0.0, 0.0, x, y, 1.0, -Y * x, -Y * y, -Y]))
    return np.array(rows)


def _native_dims(correspondences: Sequence[LineCorrespondence]) -> np.ndarray:
    """(2N, 2) native (width, height) per point pair, matching point_pairs order."""
    dims = []
    for corr in correspondences:
        dims.extend([(corr.native_width, corr.native_height)] * 2)
    return np.array(dims, dtype=np.float64)
