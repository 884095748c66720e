"""
Core data models for Court Calibration.
Split across sub-modules; this __init__ re-exports everything.
"""
from .court       import Sport, LineAxis, CourtLine, CourtModel, Point2, Point3
from .camera      import CameraEdge, ScreenOrientation, CameraPosition
from .calibration import (
    LineCorrespondence, Homography, SolveStatus, SolveResult,
    ExampleTransform, CalibrationResult,
)

__all__ = [
    "Sport", "LineAxis", "CourtLine", "CourtModel", "Point2", "Point3",
    "CameraEdge", "ScreenOrientation", "CameraPosition",
    "LineCorrespondence", "Homography", "SolveStatus", "SolveResult",
    "ExampleTransform", "CalibrationResult",
]
