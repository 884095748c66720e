"""
Pytest fixtures for court calibration tests.

The synthetic camera is a fixed world → normalised-image homography for
a camera behind the near baseline: lines across the court stay level on
screen and the badminton center line (x = 3.05) projects to u = 0.5.
"""
import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from courtcal.court.template import get_court_model
from courtcal.models import CameraEdge, CameraPosition, Homography


GROUND_TRUTH = np.array([
    [0.1,  0.04, 0.195],
    [0.0, -0.03, 0.9  ],
    [0.0,  0.08, 1.0  ],
])

CALIBRATION_LINES = ("service-long-doubles", "center-line", "service-short")


def world_to_norm(x, y, G=GROUND_TRUTH):
    """Project a court point through the synthetic camera."""
    p = G @ np.array([x, y, 1.0])
    return (p[0] / p[2], p[1] / p[2])


def draw_line(court, line_id, width, height, G=GROUND_TRUTH):
    """Native-pixel endpoints of a court line as the synthetic camera sees it."""
    line = court.line(line_id)
    u1, v1 = world_to_norm(*line.start_2d, G=G)
    u2, v2 = world_to_norm(*line.end_2d, G=G)
    return (u1 * width, v1 * height), (u2 * width, v2 * height)


@pytest.fixture
def badminton():
    return get_court_model("badminton")


@pytest.fixture
def tennis():
    return get_court_model("tennis")


@pytest.fixture
def true_homography():
    """Image → world homography of the synthetic camera."""
    return Homography.from_matrix(np.linalg.inv(GROUND_TRUTH))


@pytest.fixture
def bottom_camera():
    return CameraPosition(edge=CameraEdge.BOTTOM, distance=3.0, height=2.5)


@pytest.fixture
def left_camera():
    return CameraPosition(edge=CameraEdge.LEFT, distance=3.0, height=2.5)


@pytest.fixture
def pixel_lines(badminton):
    """{line_id: (start_px, end_px)} for the three calibration lines at 1920x1080."""
    return {lid: draw_line(badminton, lid, 1920, 1080) for lid in CALIBRATION_LINES}


@pytest.fixture
def filled_store(badminton, pixel_lines):
    """Store holding the three calibration lines, exactly drawn."""
    from courtcal.court.correspondences import LineCorrespondenceStore
    store = LineCorrespondenceStore(badminton)
    for lid, (start, end) in pixel_lines.items():
        store.add_line(lid, start, end, 1920, 1080)
    return store


@pytest.fixture
def correspondences(filled_store):
    return filled_store.lines()
