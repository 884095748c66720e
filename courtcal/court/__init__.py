from .template        import get_court_model, parse_sport, supported_sports
from .correspondences import LineCorrespondenceStore
from .camera_position import CameraPositionModel
from .homography      import HomographySolver
from .refinement      import HomographyRefiner
from .quality         import QualityEvaluator
from .transform       import CoordinateTransformService
from .session         import CalibrationSession

__all__ = [
    "get_court_model", "parse_sport", "supported_sports",
    "LineCorrespondenceStore", "CameraPositionModel",
    "HomographySolver", "HomographyRefiner",
    "QualityEvaluator", "CoordinateTransformService",
    "CalibrationSession",
]
