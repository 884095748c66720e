"""
Camera position model – holds the user's coarse pose guess.
"""
from __future__ import annotations
from typing import Optional

from ..models.camera import CameraEdge, CameraPosition


class CameraPositionModel:
    """Single-slot holder; `set` validates before replacing the guess."""

    def __init__(self, position: Optional[CameraPosition] = None):
        self._position = position

    def set(self, edge, distance: float, height: float) -> CameraPosition:
        """
        Replace the current guess.

        Raises:
            InvalidInput: edge not in top/bottom/left/right, or a
                non-positive distance / height. The old guess is kept.
        """
        position = CameraPosition(edge=CameraEdge.parse(edge),
                                  distance=distance, height=height)
        self._position = position
        return position

    def clear(self) -> None:
        self._position = None

    @property
    def position(self) -> Optional[CameraPosition]:
        return self._position

    @property
    def is_set(self) -> bool:
        return self._position is not None
