"""
Court Calibration – source package.

Public API:  all major components are importable directly from `courtcal`.

    from courtcal import CalibrationSession
    from courtcal import HomographySolver, QualityEvaluator, CoordinateTransformService
    from courtcal import MovementAnalyser, PositionHeatmap
    from courtcal.models import CourtModel, LineCorrespondence, Homography, CalibrationResult
"""

# ── Session (top-level entry point) ──────────────────────────────────────────
from .court.session import CalibrationSession

# ── Court geometry & inputs ───────────────────────────────────────────────────
from .court.template        import get_court_model, supported_sports
from .court.correspondences import LineCorrespondenceStore
from .court.camera_position import CameraPositionModel

# ── Solve & score ─────────────────────────────────────────────────────────────
from .court.homography import HomographySolver
from .court.refinement import HomographyRefiner
from .court.quality    import QualityEvaluator
from .court.transform  import CoordinateTransformService

# ── Stats ─────────────────────────────────────────────────────────────────────
from .stats.movement import MovementAnalyser
from .stats.heatmap  import PositionHeatmap

# ── Errors ────────────────────────────────────────────────────────────────────
from .errors import (
    CalibrationError, InvalidInput, InsufficientData, IllConditioned, NotCalibrated,
)

# ── Models (data classes) ─────────────────────────────────────────────────────
from .models import (
    Sport, LineAxis, CourtLine, CourtModel,
    CameraEdge, ScreenOrientation, CameraPosition,
    LineCorrespondence, Homography, SolveStatus, SolveResult,
    ExampleTransform, CalibrationResult,
)

__all__ = [
    # Session
    "CalibrationSession",
    # Court
    "get_court_model", "supported_sports",
    "LineCorrespondenceStore", "CameraPositionModel",
    # Solve
    "HomographySolver", "HomographyRefiner",
    "QualityEvaluator", "CoordinateTransformService",
    # Stats
    "MovementAnalyser", "PositionHeatmap",
    # Errors
    "CalibrationError", "InvalidInput", "InsufficientData",
    "IllConditioned", "NotCalibrated",
    # Models
    "Sport", "LineAxis", "CourtLine", "CourtModel",
    "CameraEdge", "ScreenOrientation", "CameraPosition",
    "LineCorrespondence", "Homography", "SolveStatus", "SolveResult",
    "ExampleTransform", "CalibrationResult",
]
