"""
Line correspondence store.

Holds at most one confirmed drawn line per court line for the active
session. Drawn endpoints arrive in native video pixels and are stored
normalised to [0, 1]; lines drawn on a scaled canvas go through
`add_display_line`, which back-projects canvas clicks to native pixels
first so the stored mapping never depends on the on-screen size.

Every mutation bumps `revision`, which lets a solver tell whether the
set it solved is still current.
"""
from __future__ import annotations
import math
import numbers
import threading
from typing import Dict, Iterator, List, Optional, Tuple

from ..errors import InvalidInput
from ..models.calibration import LineCorrespondence
from ..models.court import CourtModel, Point2
import config


def _check_dimension(name: str, value) -> float:
    if (isinstance(value, bool) or not isinstance(value, numbers.Real)
            or not math.isfinite(value) or value <= 0):
        raise InvalidInput(f"{name} must be a positive number, got {value!r}")
    return float(value)


def _check_pixel(name: str, point) -> Point2:
    try:
        if isinstance(point[0], bool) or isinstance(point[1], bool):
            raise TypeError(name)
        x, y = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        raise InvalidInput(f"{name} must be an (x, y) pair, got {point!r}") from None
    if math.isnan(x) or math.isnan(y) or math.isinf(x) or math.isinf(y):
        raise InvalidInput(f"{name} has invalid coordinates: ({x}, {y})")
    return (x, y)


class LineCorrespondenceStore:
    """Court-line id → drawn line, insertion ordered."""

    def __init__(
        self,
        court: CourtModel,
        min_lines: int = config.MIN_CALIBRATION_LINES,
        frame_tolerance: float = config.FRAME_TOLERANCE,
        verbose: bool = False,
    ):
        self._court     = court
        self.min_lines  = min_lines
        self._tolerance = frame_tolerance
        self.verbose    = verbose
        self._lines: Dict[str, LineCorrespondence] = {}
        self._revision  = 0
        self._lock      = threading.Lock()

    # ── Write ──────────────────────────────────────────────────────────────────

    def add_line(
        self,
        court_line_id: str,
        pixel_start,
        pixel_end,
        native_width,
        native_height,
    ) -> LineCorrespondence:
        """
        Store a drawn line given in native video pixels.

        Replaces any earlier line for the same court line. Endpoints
        outside the frame are kept unclamped and reported in the returned
        correspondence's `warnings`.

        Raises:
            InvalidInput: unknown court line, non-positive dimensions,
                or NaN / infinite coordinates. The store is left untouched.
        """
        self._court.line(court_line_id)
        w  = _check_dimension("native_width", native_width)
        h  = _check_dimension("native_height", native_height)
        x1, y1 = _check_pixel("pixel_start", pixel_start)
        x2, y2 = _check_pixel("pixel_end", pixel_end)

        start = (x1 / w, y1 / h)
        end   = (x2 / w, y2 / h)
        warnings = self._frame_warnings(court_line_id, start, end)

        corr = LineCorrespondence(
            court_line_id = court_line_id,
            start         = start,
            end           = end,
            native_width  = w,
            native_height = h,
            warnings      = tuple(warnings),
        )

        with self._lock:
            replaced = court_line_id in self._lines
            self._lines.pop(court_line_id, None)
            self._lines[court_line_id] = corr
            self._revision += 1

        if self.verbose:
            action = "Replaced" if replaced else "Added"
            print(f"[Correspondences] {action} {court_line_id}: "
                  f"({start[0]:.3f}, {start[1]:.3f}) → ({end[0]:.3f}, {end[1]:.3f})")
            for w_msg in warnings:
                print(f"[Correspondences] Warning: {w_msg}")
        return corr

    def add_display_line(
        self,
        court_line_id: str,
        display_start,
        display_end,
        display_size: Tuple[float, float],
        native_size: Tuple[float, float],
    ) -> LineCorrespondence:
        """
        Store a line drawn on a scaled canvas.

        Canvas clicks are back-projected to native pixels (independent
        x/y scale, so letterboxed canvases need their offset removed by
        the caller) before normalisation.
        """
        dw = _check_dimension("display_width", display_size[0])
        dh = _check_dimension("display_height", display_size[1])
        nw = _check_dimension("native_width", native_size[0])
        nh = _check_dimension("native_height", native_size[1])
        sx, sy = nw / dw, nh / dh

        x1, y1 = _check_pixel("display_start", display_start)
        x2, y2 = _check_pixel("display_end", display_end)
        return self.add_line(court_line_id, (x1 * sx, y1 * sy), (x2 * sx, y2 * sy), nw, nh)

    def remove_line(self, court_line_id: str) -> bool:
        with self._lock:
            if court_line_id not in self._lines:
                return False
            del self._lines[court_line_id]
            self._revision += 1
        if self.verbose:
            print(f"[Correspondences] Removed {court_line_id}")
        return True

    def reset(self) -> None:
        with self._lock:
            self._lines.clear()
            self._revision += 1

    def restore(self, correspondences: List[LineCorrespondence]) -> None:
        """Replace the whole set (used when loading a saved session)."""
        for corr in correspondences:
            self._court.line(corr.court_line_id)
        with self._lock:
            self._lines = {c.court_line_id: c for c in correspondences}
            self._revision += 1

    # ── Read ───────────────────────────────────────────────────────────────────

    @property
    def court(self) -> CourtModel:
        return self._court

    @property
    def revision(self) -> int:
        return self._revision

    def count(self) -> int:
        return len(self._lines)

    def is_complete(self) -> bool:
        return self.count() >= self.min_lines

    def missing_required(self) -> List[str]:
        """Required court lines not drawn yet, in guidance order."""
        return [lid for lid in self._court.required_lines if lid not in self._lines]

    def get(self, court_line_id: str) -> Optional[LineCorrespondence]:
        return self._lines.get(court_line_id)

    def lines(self) -> Tuple[LineCorrespondence, ...]:
        with self._lock:
            return tuple(self._lines.values())

    def snapshot(self) -> Tuple[int, Tuple[LineCorrespondence, ...]]:
        """Consistent (revision, correspondences) pair."""
        with self._lock:
            return self._revision, tuple(self._lines.values())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, court_line_id: str) -> bool:
        return court_line_id in self._lines

    def __iter__(self) -> Iterator[LineCorrespondence]:
        return iter(self.lines())

    # ── Helpers ────────────────────────────────────────────────────────────────

    def _frame_warnings(self, line_id: str, start: Point2, end: Point2) -> List[str]:
        lo, hi = -self._tolerance, 1.0 + self._tolerance
        warnings = []
        for label, (u, v) in (("start", start), ("end", end)):
            if not (lo <= u <= hi and lo <= v <= hi):
                warnings.append(
                    f"{line_id} {label} point ({u:.3f}, {v:.3f}) lies outside the video frame"
                )
        return warnings
