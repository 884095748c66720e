"""
Tests for the line correspondence store and camera position model.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from courtcal.court.camera_position import CameraPositionModel
from courtcal.court.correspondences import LineCorrespondenceStore
from courtcal.errors import InvalidInput
from courtcal.models import CameraEdge


@pytest.fixture
def store(badminton):
    return LineCorrespondenceStore(badminton)


class TestAddLine:
    """Tests for adding drawn lines."""

    def test_normalises_to_native(self, store):
        corr = store.add_line("service-short", (480, 540), (1440, 540), 1920, 1080)
        assert corr.start == (0.25, 0.5)
        assert corr.end == (0.75, 0.5)
        assert corr.warnings == ()

    def test_replaces_same_line(self, store):
        store.add_line("service-short", (480, 540), (1440, 540), 1920, 1080)
        store.add_line("service-short", (400, 600), (1500, 600), 1920, 1080)
        assert store.count() == 1
        assert store.get("service-short").start[0] == pytest.approx(400 / 1920)

    def test_revision_bumps(self, store):
        r0 = store.revision
        store.add_line("service-short", (480, 540), (1440, 540), 1920, 1080)
        assert store.revision == r0 + 1

    def test_unknown_line_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("free-throw", (0, 0), (10, 10), 1920, 1080)
        assert store.count() == 0

    @pytest.mark.parametrize("w,h", [(0, 1080), (1920, -5), (float("nan"), 1080)])
    def test_bad_dimensions_rejected(self, store, w, h):
        r0 = store.revision
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (480, 540), (1440, 540), w, h)
        assert store.count() == 0
        assert store.revision == r0

    def test_bool_dimension_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (480, 540), (1440, 540), True, 1080)
        assert store.count() == 0

    def test_bool_point_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (True, 540), (1440, 540), 1920, 1080)
        assert store.count() == 0

    def test_nan_point_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (float("nan"), 540), (1440, 540), 1920, 1080)

    def test_infinite_point_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (480, 540), (float("inf"), 540), 1920, 1080)

    def test_zero_length_rejected(self, store):
        with pytest.raises(InvalidInput):
            store.add_line("service-short", (480, 540), (480, 540), 1920, 1080)
        assert "service-short" not in store

    def test_out_of_frame_accepted_with_warning(self, store):
        corr = store.add_line("baseline", (-100, 1000), (2000, 1000), 1920, 1080)
        assert len(corr.warnings) == 2
        assert corr.start[0] < 0
        assert "baseline" in store

    def test_resolution_independent(self, badminton):
        a = LineCorrespondenceStore(badminton)
        b = LineCorrespondenceStore(badminton)
        ca = a.add_line("center-line", (960, 972), (960, 594.5), 1920, 1080)
        cb = b.add_line("center-line", (1920, 1944), (1920, 1189), 3840, 2160)
        assert ca.start == cb.start
        assert ca.end == cb.end

    def test_display_line_back_projected(self, store):
        corr = store.add_display_line("service-short", (240, 270), (720, 270),
                                      display_size=(960, 540), native_size=(1920, 1080))
        assert corr.start == (0.25, 0.5)
        assert corr.end == (0.75, 0.5)
        assert corr.native_width == 1920


class TestStoreState:
    """Tests for store bookkeeping."""

    def test_remove(self, filled_store):
        assert filled_store.remove_line("center-line")
        assert not filled_store.remove_line("center-line")
        assert filled_store.count() == 2

    def test_is_complete(self, filled_store):
        assert filled_store.is_complete()
        filled_store.remove_line("service-short")
        assert not filled_store.is_complete()

    def test_missing_required(self, store):
        assert store.missing_required() == ["service-long-doubles", "center-line", "service-short"]
        store.add_line("center-line", (960, 972), (960, 594.5), 1920, 1080)
        assert store.missing_required() == ["service-long-doubles", "service-short"]

    def test_order_preserved(self, filled_store):
        ids = [c.court_line_id for c in filled_store]
        assert ids == ["service-long-doubles", "center-line", "service-short"]

    def test_snapshot(self, filled_store):
        rev, lines = filled_store.snapshot()
        assert rev == filled_store.revision
        assert len(lines) == 3

    def test_reset(self, filled_store):
        filled_store.reset()
        assert len(filled_store) == 0


class TestCameraPositionModel:
    """Tests for the camera position holder."""

    def test_set(self):
        model = CameraPositionModel()
        pos = model.set("left", 4.0, 3.0)
        assert model.is_set
        assert pos.edge == CameraEdge.LEFT

    def test_invalid_keeps_previous(self):
        model = CameraPositionModel()
        model.set("bottom", 4.0, 3.0)
        with pytest.raises(InvalidInput):
            model.set("bottom", -1.0, 3.0)
        with pytest.raises(InvalidInput):
            model.set("diagonal", 4.0, 3.0)
        with pytest.raises(InvalidInput):
            model.set("left", True, True)
        assert model.position.distance == 4.0
        assert model.position.edge == CameraEdge.BOTTOM
