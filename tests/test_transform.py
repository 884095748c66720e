"""
Tests for the coordinate transform service.
"""
import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import world_to_norm
from courtcal.court.transform import CoordinateTransformService, project
from courtcal.errors import NotCalibrated
from courtcal.models import Homography


@pytest.fixture
def service(true_homography):
    return CoordinateTransformService(true_homography)


class TestProject:
    """Tests for the project helper."""

    def test_identity(self):
        pts = [(0.1, 0.2), (0.9, 0.4)]
        assert np.allclose(project(np.eye(3), pts), pts)

    def test_empty(self):
        assert project(np.eye(3), []).shape == (0, 2)

    def test_read_only_matrix(self, true_homography):
        out = project(true_homography.matrix, [world_to_norm(2.0, 3.0)])
        assert np.allclose(out[0], (2.0, 3.0))


class TestNotCalibrated:
    """Transforms before the first successful solve."""

    def test_image_to_world(self):
        with pytest.raises(NotCalibrated):
            CoordinateTransformService().image_to_world((0.5, 0.5))

    def test_batch(self):
        with pytest.raises(NotCalibrated):
            CoordinateTransformService().batch_transform([(0.5, 0.5)])

    def test_is_ready(self, true_homography):
        service = CoordinateTransformService()
        assert not service.is_ready()
        service.publish(true_homography)
        assert service.is_ready()


class TestTransforms:
    """Tests for image ↔ world transforms."""

    def test_image_to_world(self, service):
        x, y = service.image_to_world(world_to_norm(1.5, 4.0))
        assert x == pytest.approx(1.5, abs=1e-9)
        assert y == pytest.approx(4.0, abs=1e-9)

    def test_world_to_image_ignores_z(self, service):
        u, v = service.world_to_image((3.05, 2.0, 1.7))
        assert u == pytest.approx(0.5, abs=1e-9)
        assert (u, v) == pytest.approx(world_to_norm(3.05, 2.0), abs=1e-9)

    @pytest.mark.parametrize("point", [
        (0.5, 0.5), (0.0, 0.0), (1.0, 1.0), (0.25, 0.8), (0.73, 0.61),
    ])
    def test_round_trip(self, service, point):
        back = service.world_to_image(service.image_to_world(point))
        assert back == pytest.approx(point, abs=1e-6)

    def test_batch_preserves_order(self, service):
        world = [(0.0, 0.0), (6.1, 0.76), (3.05, 4.72), (1.0, 1.0), (0.0, 0.0)]
        image = [world_to_norm(x, y) for x, y in world]
        out = service.batch_transform(image)
        assert len(out) == len(image)
        assert np.allclose(out, world, atol=1e-9)

    def test_batch_empty(self, service):
        assert service.batch_transform([]) == []

    def test_batch_world_to_image(self, service):
        out = service.batch_world_to_image([(3.05, 2.0, 0.0), (0.0, 0.0)])
        assert out[0][0] == pytest.approx(0.5, abs=1e-9)
        assert len(out) == 2

    def test_publish_replaces(self, service):
        shifted = Homography.from_matrix(np.array([[1.0, 0, 5.0], [0, 1.0, 0], [0, 0, 1.0]]))
        service.publish(shifted)
        assert service.image_to_world((0.0, 0.0)) == pytest.approx((5.0, 0.0))

    def test_publish_rejects_raw_matrix(self, service):
        with pytest.raises(TypeError):
            service.publish(np.eye(3))


class TestLandmarks:
    """Tests for pose landmark transforms."""

    def test_heights_by_region(self, service):
        landmarks = [(0.5, 0.5)] * 33
        out = service.transform_landmarks(landmarks)
        assert len(out) == 33
        assert out[0][2] == 1.5       # nose
        assert out[15][2] == 0.7      # wrist
        assert out[23][2] == 0.9      # hip
        assert out[27][2] == 0.0      # ankle
        assert out[32][2] == 0.0      # foot index

    def test_ground_position(self, service):
        landmarks = [{"x": 0.5, "y": 0.5, "visibility": 0.9}] * 33
        x, y, _ = service.transform_landmarks(landmarks)[28]
        assert x == pytest.approx(3.05, abs=1e-6)
        assert y == pytest.approx(0.4 / 0.07, abs=1e-6)

    def test_object_landmarks(self, service):
        class Lm:
            def __init__(self, x, y):
                self.x, self.y = x, y
        out = service.transform_landmarks([Lm(*world_to_norm(2.0, 2.0))])
        assert out[0][:2] == pytest.approx((2.0, 2.0), abs=1e-6)
