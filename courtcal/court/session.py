"""
Calibration session – owns the state of one calibration.

    set_court_model → set_camera_position → add_line × N → recalibrate
                                                            │
                              SolveResult OK ──→ evaluate → publish
                              failure ──────────→ keep previous homography

Recalibration is serialised. A solve works on a snapshot of the line
store; if the store (or the camera guess) changed while it was running,
the result is thrown away and the solve repeats on the new inputs, so
the published homography always belongs to the latest input set.
"""
from __future__ import annotations
import threading
from typing import List, Optional, Sequence, Type

from ..models.calibration import (
    CalibrationResult, Homography, LineCorrespondence, SolveResult, SolveStatus,
)
from ..models.camera import CameraPosition
from ..models.court import CourtModel, Point2
from .camera_position import CameraPositionModel
from .correspondences import LineCorrespondenceStore
from .homography import HomographySolver
from .quality import QualityEvaluator
from .template import get_court_model
from .transform import CoordinateTransformService
import config


class CalibrationSession:
    """
    Single-user calibration state behind an explicit update API.

    With `auto_recalibrate` on, every line or camera change re-solves as
    soon as enough lines are confirmed.
    """

    def __init__(
        self,
        sport: str = "badminton",
        refine: bool = config.REFINE_HOMOGRAPHY,
        auto_recalibrate: bool = True,
        verbose: bool = False,
        solver_cls: Type[HomographySolver] = HomographySolver,
    ):
        self.refine           = refine
        self.auto_recalibrate = auto_recalibrate
        self.verbose          = verbose
        self._solver_cls      = solver_cls
        self._lock            = threading.RLock()
        self.camera           = CameraPositionModel()
        self.transform        = CoordinateTransformService()
        self.set_court_model(sport)

    # ── Setup ──────────────────────────────────────────────────────────────────

    def set_court_model(self, sport) -> CourtModel:
        """
        Switch sport. Drops all drawn lines and the current calibration.

        Raises:
            InvalidInput: unsupported sport; the session is left as it was.
        """
        court = get_court_model(sport)
        with self._lock:
            self._court     = court
            self.store      = LineCorrespondenceStore(court, verbose=self.verbose)
            self.solver     = self._solver_cls(court, refine=self.refine,
                                               verbose=self.verbose)
            self.evaluator  = QualityEvaluator(court)
            self.transform.clear()
            self._result: Optional[CalibrationResult] = None
            self._last_solve: Optional[SolveResult] = None
            self._stale     = False
        self._log(f"Court model: {court.sport.value} "
                  f"({court.length:.2f} x {court.width:.2f} m)")
        return court

    def set_camera_position(self, edge, distance: float, height: float) -> CameraPosition:
        """Replace the camera guess. Raises InvalidInput without changing it."""
        position = self.camera.set(edge, distance, height)
        self._log(f"Camera: {position.edge.value}, {position.distance} m back, "
                  f"{position.height} m up")
        self._maybe_recalibrate()
        return position

    # ── Lines ──────────────────────────────────────────────────────────────────

    def add_line(
        self,
        court_line_id: str,
        pixel_start,
        pixel_end,
        native_width,
        native_height,
    ) -> LineCorrespondence:
        """Confirm a drawn line in native video pixels (see LineCorrespondenceStore)."""
        corr = self.store.add_line(court_line_id, pixel_start, pixel_end,
                                   native_width, native_height)
        self._maybe_recalibrate()
        return corr

    def remove_line(self, court_line_id: str) -> bool:
        removed = self.store.remove_line(court_line_id)
        if removed:
            self._maybe_recalibrate()
        return removed

    def reset(self) -> None:
        """Forget drawn lines and the calibration; keep sport and camera guess."""
        with self._lock:
            self.store.reset()
            self.solver = self._solver_cls(self._court, refine=self.refine,
                                           verbose=self.verbose)
            self.transform.clear()
            self._result     = None
            self._last_solve = None
            self._stale      = False
        self._log("Reset")

    # ── Solve ──────────────────────────────────────────────────────────────────

    def recalibrate(self) -> SolveResult:
        """
        Solve over the current lines and camera guess.

        On success the new homography and report are published together.
        On failure the previous homography stays current and
        `is_using_stale()` turns True if there was one.
        """
        with self._lock:
            while True:
                revision, lines = self.store.snapshot()
                camera = self.camera.position
                result = self.solver.solve(lines, camera)
                if revision == self.store.revision and camera is self.camera.position:
                    break
                self._log("Inputs changed during solve; solving again")

            self._last_solve = result
            if result.ok:
                report = self.evaluator.evaluate(result.homography, lines, camera)
                self.solver.accept(result)
                self.transform.publish(result.homography)
                self._result = report
                self._stale  = False
                self._log(f"{report.quality_label} "
                          f"({report.reprojection_error_px:.2f} px, "
                          f"{report.accuracy_percent}%)")
            else:
                self._stale = self.transform.is_ready()
                self._log(f"{result.message}"
                          + (" (keeping previous calibration)" if self._stale else ""))
            return result

    def _maybe_recalibrate(self) -> None:
        if not self.auto_recalibrate:
            return
        if self.store.is_complete() or self.transform.is_ready():
            self.recalibrate()

    # ── Read ───────────────────────────────────────────────────────────────────

    @property
    def court(self) -> CourtModel:
        return self._court

    def get_current_result(self) -> Optional[CalibrationResult]:
        """Report of the homography currently in use, or None before the first solve."""
        return self._result

    def current_homography(self) -> Optional[Homography]:
        return self.transform.homography

    @property
    def last_solve(self) -> Optional[SolveResult]:
        return self._last_solve

    def is_calibrated(self) -> bool:
        return self.transform.is_ready()

    def is_using_stale(self) -> bool:
        """True when the latest solve failed and an older homography is in use."""
        return self._stale

    def status_message(self) -> str:
        """One line for the results display."""
        if not self.store.is_complete():
            need = self.store.min_lines
            msg = (f"Complete line drawing to see results "
                   f"({self.store.count()}/{need} lines)")
            missing = self.store.missing_required()
            if missing:
                msg += f"; next: {missing[0].replace('-', ' ')}"
            return msg
        solve = self._last_solve
        if solve is not None and solve.status != SolveStatus.OK:
            suffix = "; using previous calibration" if self._stale else ""
            return f"{solve.message}{suffix}"
        if self._result is None:
            return "Not calibrated yet"
        r = self._result
        return (f"{r.quality_label}: {r.reprojection_error_px:.2f} px error, "
                f"{r.accuracy_percent}% accuracy")

    # ── Transforms ─────────────────────────────────────────────────────────────

    def image_to_world(self, point: Point2) -> Point2:
        return self.transform.image_to_world(point)

    def world_to_image(self, point) -> Point2:
        return self.transform.world_to_image(point)

    def batch_transform(self, points: Sequence[Point2]) -> List[Point2]:
        return self.transform.batch_transform(points)

    # ── Persistence ────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        with self._lock:
            camera = self.camera.position
            homography = self.transform.homography
            return {
                "sport":      self._court.sport.value,
                "camera":     camera.to_dict() if camera else None,
                "lines":      [c.to_dict() for c in self.store.lines()],
                "homography": homography.to_dict() if homography else None,
                "result":     self._result.to_dict() if self._result else None,
                "stale":      self._stale,
            }

    @classmethod
    def from_dict(cls, d: dict, **kwargs) -> "CalibrationSession":
        """
        Rebuild a session from `to_dict` output.

        The saved homography is restored as-is rather than re-solved, and
        its report is recomputed from the restored lines.
        """
        session = cls(sport=d.get("sport", "badminton"), **kwargs)
        if d.get("camera"):
            cam = CameraPosition.from_dict(d["camera"])
            session.camera.set(cam.edge, cam.distance, cam.height)
        session.store.restore([LineCorrespondence.from_dict(c) for c in d.get("lines", [])])

        if d.get("homography"):
            homography = Homography.from_dict(d["homography"])
            with session._lock:
                session.transform.publish(homography)
                session._result = session.evaluator.evaluate(
                    homography, session.store.lines(), session.camera.position)
                session._stale = bool(d.get("stale", False))
        return session

    def _log(self, msg: str) -> None:
        if self.verbose:
            print(f"[Session] {msg}")
