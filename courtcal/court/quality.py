"""
Calibration quality – one scoring function for every solved homography.

    error = mean pixel reprojection error (world → image, native pixels)
          + ORIENTATION_PENALTY_WEIGHT × orientation penalty

The orientation penalty compares each drawn line's on-screen direction
with the direction expected from the camera edge: +3 for a mismatch,
+2 more when the line is diagonal. The sum is banded by the quality
table into a label and an accuracy score. Pure function of its inputs.
"""
from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np

from ..models.calibration import (
    CalibrationResult, ExampleTransform, Homography, LineCorrespondence,
)
from ..models.camera import CameraPosition, ScreenOrientation
from ..models.court import CourtModel, Sport
from .transform import project
import config


class QualityEvaluator:
    """Scores a homography against the correspondences that produced it."""

    def __init__(
        self,
        court: CourtModel,
        thresholds: Sequence[Tuple[float, str, int]] = tuple(config.QUALITY_THRESHOLDS),
        penalty_weight: float = config.ORIENTATION_PENALTY_WEIGHT,
        wrong_penalty: float = config.WRONG_ORIENTATION_PENALTY,
        diagonal_penalty: float = config.DIAGONAL_PENALTY,
    ):
        self._court           = court
        self.thresholds       = list(thresholds)
        self.penalty_weight   = penalty_weight
        self.wrong_penalty    = wrong_penalty
        self.diagonal_penalty = diagonal_penalty

    # ── Error terms ────────────────────────────────────────────────────────────

    def reprojection_error(
        self,
        homography: Homography,
        correspondences: Sequence[LineCorrespondence],
    ) -> float:
        """Mean endpoint distance in native pixels, world → image direction."""
        errors = self._endpoint_errors(homography, correspondences)
        if not errors:
            return 0.0
        return float(np.mean([e for pair in errors.values() for e in pair]))

    def orientation_penalty(
        self,
        correspondences: Sequence[LineCorrespondence],
        camera: Optional[CameraPosition],
    ) -> float:
        """Unweighted sum of orientation penalties; 0 without a camera guess."""
        if camera is None:
            return 0.0
        total = 0.0
        for corr in correspondences:
            total += self._line_penalty(corr, camera)
        return total

    def _line_penalty(self, corr: LineCorrespondence, camera: CameraPosition) -> float:
        observed = corr.screen_orientation()
        expected = camera.expected_orientation(self._court.line(corr.court_line_id))
        penalty = 0.0
        if observed != expected:
            penalty += self.wrong_penalty
        if observed == ScreenOrientation.DIAGONAL:
            penalty += self.diagonal_penalty
        return penalty

    # ── Banding ────────────────────────────────────────────────────────────────

    def classify(self, error: float, sport=None, edge=None) -> Tuple[str, int]:
        """Quality label and accuracy score for a total error in pixels."""
        scale = self._threshold_scale(sport, edge)
        for bound, label, accuracy in self.thresholds:
            if error < bound * scale:
                return label, accuracy
        return config.POOR_LABEL, config.POOR_ACCURACY

    @staticmethod
    def _threshold_scale(sport, edge) -> float:
        scale = 1.0
        if sport is not None:
            key = sport.value if isinstance(sport, Sport) else str(sport)
            scale *= config.SPORT_THRESHOLD_SCALE.get(key, 1.0)
        if edge is not None:
            key = getattr(edge, "value", edge)
            scale *= config.EDGE_THRESHOLD_SCALE.get(str(key), 1.0)
        return scale

    # ── Report ─────────────────────────────────────────────────────────────────

    def line_scores(
        self,
        homography: Homography,
        correspondences: Sequence[LineCorrespondence],
    ) -> Dict[str, float]:
        """Per-line alignment in [0, 1]; 1 means both endpoints reproject exactly."""
        scores = {}
        for line_id, (e1, e2) in self._endpoint_errors(homography, correspondences).items():
            mean_err = (e1 + e2) / 2
            scores[line_id] = max(0.0, 1.0 - mean_err / config.LINE_SCORE_FALLOFF_PX)
        return scores

    def example_transform(
        self,
        homography: Homography,
        native_width: float,
        native_height: float,
    ) -> Optional[ExampleTransform]:
        """Frame center on the court, with local pixels-per-metre."""
        center = (0.5, 0.5)
        wx, wy = project(homography.matrix, [center])[0]
        if not (math.isfinite(wx) and math.isfinite(wy)):
            return None
        around = project(homography.inverse, [(wx, wy), (wx + 1.0, wy), (wx, wy + 1.0)])
        px = around * np.array([native_width, native_height])
        ppm = float(np.mean([np.linalg.norm(px[1] - px[0]),
                             np.linalg.norm(px[2] - px[0])]))
        return ExampleTransform(
            image_point      = center,
            world_point      = (float(wx), float(wy)),
            pixels_per_meter = ppm,
        )

    def evaluate(
        self,
        homography: Homography,
        correspondences: Sequence[LineCorrespondence],
        camera: Optional[CameraPosition] = None,
    ) -> CalibrationResult:
        """Full quality report. Deterministic for identical inputs."""
        confirmed = [c for c in correspondences if c.confirmed]
        residual  = self.reprojection_error(homography, confirmed)
        penalty   = self.penalty_weight * self.orientation_penalty(confirmed, camera)
        error     = residual + penalty
        label, accuracy = self.classify(error, self._court.sport,
                                        camera.edge if camera else None)

        scores    = self.line_scores(homography, confirmed)
        condition = homography.condition_number
        example   = None
        if confirmed:
            example = self.example_transform(homography, confirmed[0].native_width,
                                             confirmed[0].native_height)

        return CalibrationResult(
            accuracy_percent       = accuracy,
            reprojection_error_px  = error,
            quality_label          = label,
            dlt_residual_px        = residual,
            orientation_penalty_px = penalty,
            condition_number       = condition,
            line_scores            = scores,
            recommendations        = self.recommendations(
                residual, condition, scores, confirmed, camera),
            example_transform      = example,
            camera_position        = camera.world_position(self._court) if camera else None,
            viewing_angle_deg      = camera.viewing_angle_deg(self._court) if camera else None,
        )

    def recommendations(
        self,
        residual: float,
        condition: float,
        scores: Dict[str, float],
        correspondences: Sequence[LineCorrespondence],
        camera: Optional[CameraPosition],
    ) -> List[str]:
        recs = []
        if residual > config.HIGH_ERROR_PX:
            recs.append("High reprojection error: redraw lines more precisely "
                        "along the painted edges")
        if not math.isfinite(condition) or condition > config.UNSTABLE_CONDITION:
            recs.append("Calibration matrix is unstable: draw lines that are "
                        "further apart")
        poor = [lid for lid, s in scores.items() if s < config.POOR_LINE_SCORE]
        if poor:
            recs.append(f"Poor alignment on: {', '.join(poor)}")
        if camera is not None:
            wrong = [c.court_line_id for c in correspondences
                     if self._line_penalty(c, camera) > 0]
            if wrong:
                recs.append(f"Unexpected on-screen orientation for a {camera.edge.value} "
                            f"camera: {', '.join(wrong)}; check the camera position "
                            f"or the line labels")
        outside = [c.court_line_id for c in correspondences if c.out_of_frame]
        if outside:
            recs.append(f"Endpoints outside the video frame: {', '.join(outside)}")
        return recs

    # ── Internals ──────────────────────────────────────────────────────────────

    def _endpoint_errors(
        self,
        homography: Homography,
        correspondences: Sequence[LineCorrespondence],
    ) -> Dict[str, Tuple[float, float]]:
        errors = {}
        for corr in correspondences:
            line = self._court.line(corr.court_line_id)
            proj = project(homography.inverse, [line.start_2d, line.end_2d])
            drawn = np.array([corr.start, corr.end])
            diff = (proj - drawn) * np.array([corr.native_width, corr.native_height])
            e = np.linalg.norm(diff, axis=1)
            errors[corr.court_line_id] = (float(e[0]), float(e[1]))
        return errors
