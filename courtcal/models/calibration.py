"""
Calibration data models: drawn-line correspondences, the solved
homography and the quality report built from it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import math
import numbers
import numpy as np

from ..errors import IllConditioned, InsufficientData, InvalidInput
from .camera import ScreenOrientation
from .court import Point2, Point3
import config


def _finite_point(name: str, point) -> Point2:
    try:
        x, y = float(point[0]), float(point[1])
    except (TypeError, ValueError, IndexError):
        raise InvalidInput(f"{name} must be an (x, y) pair, got {point!r}") from None
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidInput(f"{name} has non-finite coordinates: ({x}, {y})")
    return (x, y)


@dataclass(frozen=True)
class LineCorrespondence:
    """
    A confirmed drawn line paired with a court line.

    Endpoints are normalised to [0, 1] against the *native* video
    resolution. Values outside [0, 1] are kept as-is (a line may be drawn
    past the frame edge); they are only flagged in `warnings`.
    """
    court_line_id: str
    start: Point2
    end: Point2
    native_width: float
    native_height: float
    confirmed: bool = True
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.court_line_id:
            raise InvalidInput("Correspondence needs a court line id")
        for name in ("native_width", "native_height"):
            value = getattr(self, name)
            if (isinstance(value, bool) or not isinstance(value, numbers.Real)
                    or not math.isfinite(value) or value <= 0):
                raise InvalidInput(f"{name} must be a positive number, got {value!r}")
        object.__setattr__(self, "start", _finite_point("start", self.start))
        object.__setattr__(self, "end", _finite_point("end", self.end))
        if self.start == self.end:
            raise InvalidInput(f"Line {self.court_line_id!r} has zero length")

    # ── Pixel-space views ─────────────────────────────────────────────────────

    @property
    def start_px(self) -> Point2:
        return (self.start[0] * self.native_width, self.start[1] * self.native_height)

    @property
    def end_px(self) -> Point2:
        return (self.end[0] * self.native_width, self.end[1] * self.native_height)

    @property
    def length_px(self) -> float:
        (x1, y1), (x2, y2) = self.start_px, self.end_px
        return float(math.hypot(x2 - x1, y2 - y1))

    @property
    def angle_deg(self) -> float:
        """Angle above the horizontal in native pixels, folded into [0, 90]."""
        (x1, y1), (x2, y2) = self.start_px, self.end_px
        return math.degrees(math.atan2(abs(y2 - y1), abs(x2 - x1)))

    def screen_orientation(
        self,
        horizontal_max_deg: float = config.HORIZONTAL_MAX_ANGLE_DEG,
        vertical_min_deg: float = config.VERTICAL_MIN_ANGLE_DEG,
    ) -> ScreenOrientation:
        angle = self.angle_deg
        if angle <= horizontal_max_deg:
            return ScreenOrientation.HORIZONTAL
        if angle >= vertical_min_deg:
            return ScreenOrientation.VERTICAL
        return ScreenOrientation.DIAGONAL

    @property
    def out_of_frame(self) -> bool:
        return any(not (0.0 <= v <= 1.0) for v in (*self.start, *self.end))

    def to_dict(self) -> dict:
        return {
            "court_line_id": self.court_line_id,
            "start":         list(self.start),
            "end":           list(self.end),
            "native_width":  self.native_width,
            "native_height": self.native_height,
            "confirmed":     self.confirmed,
            "warnings":      list(self.warnings),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LineCorrespondence":
        return cls(
            court_line_id = d["court_line_id"],
            start         = tuple(d["start"]),
            end           = tuple(d["end"]),
            native_width  = d["native_width"],
            native_height = d["native_height"],
            confirmed     = d.get("confirmed", True),
            warnings      = tuple(d.get("warnings", ())),
        )


@dataclass(frozen=True, eq=False)
class Homography:
    """
    Planar mapping between normalised image coordinates and court metres.

    `matrix` maps image → world, `inverse` maps world → image. Both are
    scaled so the bottom-right entry is 1 and stored read-only; a new
    calibration produces a new Homography rather than editing this one.
    """
    matrix: np.ndarray
    inverse: np.ndarray

    def __post_init__(self):
        for name in ("matrix", "inverse"):
            m = np.array(getattr(self, name), dtype=np.float64)
            if m.shape != (3, 3):
                raise ValueError(f"Homography {name} must be 3x3, got {m.shape}")
            if not np.all(np.isfinite(m)):
                raise ValueError(f"Homography {name} has non-finite entries")
            m.setflags(write=False)
            object.__setattr__(self, name, m)

    @classmethod
    def from_matrix(cls, H: np.ndarray) -> "Homography":
        """Normalise an image → world matrix and derive its inverse."""
        H = np.asarray(H, dtype=np.float64)
        if abs(H[2, 2]) < config.MIN_HOMOGRAPHY_SCALE:
            raise ValueError("Homography cannot be normalised (H[2][2] ≈ 0)")
        H = H / H[2, 2]
        H_inv = np.linalg.inv(H)
        if abs(H_inv[2, 2]) < config.MIN_HOMOGRAPHY_SCALE:
            raise ValueError("Inverse homography cannot be normalised")
        return cls(matrix=H, inverse=H_inv / H_inv[2, 2])

    @property
    def coefficients(self) -> Tuple[float, ...]:
        """The 8 free parameters (row-major, H[2][2] omitted)."""
        return tuple(float(v) for v in self.matrix.flatten()[:8])

    @property
    def condition_number(self) -> float:
        return float(np.linalg.cond(self.matrix))

    def allclose(self, other: "Homography", atol: float = 1e-9) -> bool:
        return bool(np.allclose(self.matrix, other.matrix, atol=atol))

    def to_dict(self) -> dict:
        return {"matrix": self.matrix.tolist(), "inverse": self.inverse.tolist()}

    @classmethod
    def from_dict(cls, d: dict) -> "Homography":
        return cls(matrix=np.array(d["matrix"]), inverse=np.array(d["inverse"]))


class SolveStatus(Enum):
    OK                = "ok"
    INSUFFICIENT_DATA = "insufficient_data"
    ILL_CONDITIONED   = "ill_conditioned"


@dataclass(frozen=True)
class SolveResult:
    """Tagged outcome of one solve; `homography` is set only when status is OK."""
    status: SolveStatus
    homography: Optional[Homography] = None
    message: str = ""
    condition_number: float = float("nan")
    weights: Tuple[float, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == SolveStatus.OK

    def raise_for_status(self) -> None:
        """Raise InsufficientData or IllConditioned for a failed solve."""
        if self.status == SolveStatus.INSUFFICIENT_DATA:
            raise InsufficientData(self.message)
        if self.status == SolveStatus.ILL_CONDITIONED:
            raise IllConditioned(self.message)


@dataclass(frozen=True)
class ExampleTransform:
    image_point: Point2       # normalised image coordinates
    world_point: Point2       # metres
    pixels_per_meter: float   # native pixels per metre around world_point

    def to_dict(self) -> dict:
        return {
            "image_point":      list(self.image_point),
            "world_point":      list(self.world_point),
            "pixels_per_meter": self.pixels_per_meter,
        }


@dataclass(frozen=True)
class CalibrationResult:
    """Quality report for one solved homography. Superseded, never merged."""
    accuracy_percent: int
    reprojection_error_px: float      # DLT residual + orientation penalty
    quality_label: str
    dlt_residual_px: float
    orientation_penalty_px: float
    condition_number: float
    line_scores: Dict[str, float] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)
    example_transform: Optional[ExampleTransform] = None
    camera_position: Optional[Point3] = None
    viewing_angle_deg: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "accuracy_percent":       self.accuracy_percent,
            "reprojection_error_px":  round(self.reprojection_error_px, 4),
            "quality_label":          self.quality_label,
            "dlt_residual_px":        round(self.dlt_residual_px, 4),
            "orientation_penalty_px": round(self.orientation_penalty_px, 4),
            "condition_number":       self.condition_number,
            "line_scores":            {k: round(v, 3) for k, v in self.line_scores.items()},
            "recommendations":        list(self.recommendations),
            "example_transform":      (self.example_transform.to_dict()
                                       if self.example_transform else None),
            "camera_position":        (list(self.camera_position)
                                       if self.camera_position else None),
            "viewing_angle_deg":      self.viewing_angle_deg,
        }
