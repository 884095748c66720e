"""
Camera-position data models.
"""
from dataclasses import dataclass
from enum import Enum
import math
import numbers

from ..errors import InvalidInput
from .court import CourtLine, CourtModel, LineAxis, Point3


class CameraEdge(Enum):
    """Side of the court the camera is mounted behind."""
    TOP    = "top"      # beyond the far baseline
    BOTTOM = "bottom"   # beyond the near baseline
    LEFT   = "left"     # beyond the left sideline
    RIGHT  = "right"    # beyond the right sideline

    @property
    def is_baseline(self) -> bool:
        return self in (CameraEdge.TOP, CameraEdge.BOTTOM)

    @classmethod
    def parse(cls, value) -> "CameraEdge":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidInput(f"Unknown camera edge: {value!r}") from None


class ScreenOrientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL   = "vertical"
    DIAGONAL   = "diagonal"


@dataclass(frozen=True)
class CameraPosition:
    """
    Coarse pose guess entered by the user before drawing lines.

    Read-only input to weighting and the orientation check; a new guess
    replaces the old one wholesale.
    """
    edge: CameraEdge
    distance: float     # metres beyond the court edge
    height: float       # metres above the ground

    def __post_init__(self):
        if not isinstance(self.edge, CameraEdge):
            object.__setattr__(self, "edge", CameraEdge.parse(self.edge))
        for name in ("distance", "height"):
            value = getattr(self, name)
            if (isinstance(value, bool) or not isinstance(value, numbers.Real)
                    or not math.isfinite(value)):
                raise InvalidInput(f"Camera {name} must be a finite number, got {value!r}")
            if value <= 0:
                raise InvalidInput(f"Camera {name} must be positive, got {value}")

    # ── Orientation expectations ──────────────────────────────────────────────

    def expected_orientation(self, line: CourtLine) -> ScreenOrientation:
        """
        How a court line should appear on screen from this edge.

        Lines parallel to the edge the camera sits behind run left-right
        across the frame; lines perpendicular to it recede into depth.
        """
        parallel = (line.axis == LineAxis.ACROSS) == self.edge.is_baseline
        return ScreenOrientation.HORIZONTAL if parallel else ScreenOrientation.VERTICAL

    def is_aligned(self, line: CourtLine) -> bool:
        """True for lines on the camera's primary viewing axis."""
        return self.expected_orientation(line) == ScreenOrientation.HORIZONTAL

    # ── Derived extrinsics ────────────────────────────────────────────────────

    def world_position(self, court: CourtModel) -> Point3:
        """Camera position estimate in court coordinates (centered on its edge)."""
        cx, cy = court.width / 2, court.length / 2
        if self.edge == CameraEdge.BOTTOM:
            return (cx, -self.distance, self.height)
        if self.edge == CameraEdge.TOP:
            return (cx, court.length + self.distance, self.height)
        if self.edge == CameraEdge.LEFT:
            return (-self.distance, cy, self.height)
        return (court.width + self.distance, cy, self.height)

    def viewing_angle_deg(self, court: CourtModel) -> float:
        """Depression angle from the camera down to the court center."""
        x, y, z = self.world_position(court)
        ground = math.hypot(x - court.width / 2, y - court.length / 2)
        return math.degrees(math.atan2(z, ground))

    def to_dict(self) -> dict:
        return {"edge": self.edge.value, "distance": self.distance, "height": self.height}

    @classmethod
    def from_dict(cls, d: dict) -> "CameraPosition":
        return cls(edge=CameraEdge.parse(d["edge"]),
                   distance=d["distance"], height=d["height"])
