"""
Position heatmap over the court floor.

Ground positions (metres) are binned into a grid of
HEATMAP_CELLS_PER_METER cells per metre, and counted per zone on a
3 x 3 layout: rows front / mid / back by distance from the near
baseline, columns left / center / right.
"""
from __future__ import annotations
import math
from typing import Dict, Optional
import numpy as np

from ..models.court import CourtModel
import config


class PositionHeatmap:

    def __init__(self, court: CourtModel, cells_per_meter: int = config.HEATMAP_CELLS_PER_METER):
        self._court = court
        self.cells_per_meter = cells_per_meter
        rows = int(math.ceil(court.length * cells_per_meter))
        cols = int(math.ceil(court.width * cells_per_meter))
        self._grid  = np.zeros((rows, cols), np.float32)
        self._zones: Dict[str, int] = {self._zone_name(r, c): 0
                                       for r, _ in config.HEATMAP_ZONE_ROWS
                                       for c in config.HEATMAP_ZONE_COLUMNS}
        self.total = 0

    @staticmethod
    def _zone_name(row: str, col: str) -> str:
        return f"{row}-{col}"

    def update(self, x: float, y: float) -> bool:
        """Add one ground position; False if it lies off the court."""
        if not (math.isfinite(x) and math.isfinite(y)) or not self._court.contains(x, y):
            return False
        rows, cols = self._grid.shape
        gx = min(int(x * self.cells_per_meter), cols - 1)
        gy = min(int(y * self.cells_per_meter), rows - 1)
        self._grid[gy, gx] += 1.0
        self._zones[self.zone_of(x, y)] += 1
        self.total += 1
        return True

    def zone_of(self, x: float, y: float) -> str:
        fx = x / self._court.width
        fy = y / self._court.length
        cols = config.HEATMAP_ZONE_COLUMNS
        col = cols[min(int(fx * len(cols)), len(cols) - 1)]
        row = config.HEATMAP_ZONE_ROWS[-1][0]
        for name, upper in config.HEATMAP_ZONE_ROWS:
            if fy < upper:
                row = name
                break
        return self._zone_name(row, col)

    @property
    def grid(self) -> np.ndarray:
        return self._grid.copy()

    def intensities(self) -> np.ndarray:
        """Grid scaled to [0, 1] by the busiest cell."""
        peak = float(self._grid.max())
        if peak <= 0:
            return np.zeros_like(self._grid)
        return self._grid / peak

    def zone_counts(self) -> Dict[str, int]:
        return dict(self._zones)

    def most_visited_zone(self) -> Optional[str]:
        if self.total == 0:
            return None
        return max(self._zones, key=self._zones.get)

    def reset(self) -> None:
        self._grid[:] = 0
        for k in self._zones:
            self._zones[k] = 0
        self.total = 0
