"""
Court-related data models.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple
import numpy as np

from ..errors import InvalidInput


Point2 = Tuple[float, float]
Point3 = Tuple[float, float, float]


class Sport(Enum):
    BADMINTON = "badminton"
    TENNIS    = "tennis"


class LineAxis(Enum):
    ACROSS = "across"   # parallel to the court width (baselines, service lines)
    ALONG  = "along"    # parallel to the court length (sidelines, center lines)


@dataclass(frozen=True)
class CourtLine:
    """A painted reference line with endpoints in world metres."""
    id: str
    start: Point3
    end: Point3
    axis: LineAxis

    @property
    def start_2d(self) -> Point2:
        return (self.start[0], self.start[1])

    @property
    def end_2d(self) -> Point2:
        return (self.end[0], self.end[1])

    @property
    def length(self) -> float:
        return float(np.linalg.norm(np.subtract(self.end, self.start)))


@dataclass(frozen=True)
class CourtModel:
    """
    Immutable line geometry of one sport's court.

    World frame: origin at the near-left corner of the near baseline,
    x across the width, y along the length, z up. All reference lines
    lie on the ground (z = 0); the net is described only by its position
    and height.
    """
    sport: Sport
    length: float
    width: float
    singles_width: float
    net_height: float
    lines: Dict[str, CourtLine] = field(default_factory=dict)
    required_lines: Tuple[str, ...] = ()

    @property
    def net_y(self) -> float:
        return self.length / 2

    def line(self, line_id: str) -> CourtLine:
        try:
            return self.lines[line_id]
        except KeyError:
            raise InvalidInput(
                f"Unknown {self.sport.value} court line: {line_id!r}"
            ) from None

    def has_line(self, line_id: str) -> bool:
        return line_id in self.lines

    def bounds(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) of the outer court."""
        return (0.0, 0.0, self.width, self.length)

    def corners(self) -> np.ndarray:
        """Outer corners [near-left, near-right, far-right, far-left], shape (4, 2)."""
        return np.array([
            [0.0,        0.0        ],
            [self.width, 0.0        ],
            [self.width, self.length],
            [0.0,        self.length],
        ], dtype=np.float64)

    def contains(self, x: float, y: float, margin: float = 0.0) -> bool:
        return (-margin <= x <= self.width + margin
                and -margin <= y <= self.length + margin)
