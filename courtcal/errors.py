"""
Calibration error taxonomy.

InvalidInput is raised at the boundary (store, camera model, court lookup)
before any state changes. InsufficientData and IllConditioned are normally
reported through SolveResult rather than raised;
SolveResult.raise_for_status() escalates a failed solve to them.
"""


class CalibrationError(Exception):
    """Base class for all calibration failures."""


class InvalidInput(CalibrationError, ValueError):
    """Malformed coordinates, non-positive dimensions or unknown enum value."""


class InsufficientData(CalibrationError):
    """Fewer correspondences than a solve needs."""


class IllConditioned(CalibrationError):
    """Correspondences too close to degenerate for a stable solve."""


class NotCalibrated(CalibrationError):
    """A transform was requested before any successful solve."""
