from .movement import MovementAnalyser, MovementSample
from .heatmap  import PositionHeatmap

__all__ = ["MovementAnalyser", "MovementSample", "PositionHeatmap"]
