"""
Tests for the calibration session.
"""
import json
import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import CALIBRATION_LINES, GROUND_TRUTH, draw_line, world_to_norm
from courtcal.court.homography import HomographySolver
from courtcal.court.session import CalibrationSession
from courtcal.errors import InvalidInput, NotCalibrated
from courtcal.models import SolveStatus


def _expected():
    H = np.linalg.inv(GROUND_TRUTH)
    return H / H[2, 2]


def _draw_all(session, width=1920, height=1080):
    for lid in CALIBRATION_LINES:
        start, end = draw_line(session.court, lid, width, height)
        session.add_line(lid, start, end, width, height)


def _draw_collinear(session):
    session.add_line("service-long-doubles", (100, 500), (400, 500), 1920, 1080)
    session.add_line("center-line", (600, 500), (900, 500), 1920, 1080)
    session.add_line("service-short", (1100, 500), (1600, 500), 1920, 1080)


class InterruptingSolver(HomographySolver):
    """Runs a hook once, in the middle of the next solve."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hook = None
        self.calls = 0

    def solve(self, correspondences, camera=None):
        self.calls += 1
        if self.hook is not None:
            hook, self.hook = self.hook, None
            hook()
        return super().solve(correspondences, camera)


@pytest.fixture
def session():
    s = CalibrationSession("badminton")
    s.set_camera_position("bottom", 3.0, 2.5)
    return s


class TestWorkflow:
    """Tests for the draw → calibrate flow."""

    def test_placeholder_before_three_lines(self, session):
        start, end = draw_line(session.court, "service-short", 1920, 1080)
        session.add_line("service-short", start, end, 1920, 1080)
        assert session.get_current_result() is None
        assert not session.is_calibrated()
        msg = session.status_message()
        assert msg.startswith("Complete line drawing to see results")
        assert "1/3" in msg
        assert "service long doubles" in msg

    def test_auto_calibrates_on_third_line(self, session):
        _draw_all(session)
        assert session.is_calibrated()
        result = session.get_current_result()
        assert result.quality_label == "Excellent"
        assert np.allclose(session.current_homography().matrix, _expected(),
                           rtol=1e-6, atol=1e-8)
        assert session.status_message().startswith("Excellent")

    def test_image_to_world(self, session):
        _draw_all(session)
        x, y = session.image_to_world(world_to_norm(2.0, 3.0))
        assert (x, y) == pytest.approx((2.0, 3.0), abs=1e-6)

    def test_not_calibrated(self, session):
        with pytest.raises(NotCalibrated):
            session.image_to_world((0.5, 0.5))

    def test_camera_change_rescored(self, session):
        _draw_all(session)
        session.set_camera_position("left", 3.0, 2.5)
        assert session.get_current_result().quality_label == "Poor"

    def test_invalid_camera_keeps_state(self, session):
        _draw_all(session)
        before = session.get_current_result()
        with pytest.raises(InvalidInput):
            session.set_camera_position("bottom", -3.0, 2.5)
        assert session.get_current_result() is before

    def test_manual_mode(self):
        s = CalibrationSession("badminton", auto_recalibrate=False)
        _draw_all(s)
        assert not s.is_calibrated()
        assert s.recalibrate().ok
        assert s.is_calibrated()

    def test_set_court_model_clears(self, session):
        _draw_all(session)
        session.set_court_model("tennis")
        assert session.store.count() == 0
        assert not session.is_calibrated()
        assert session.court.sport.value == "tennis"

    def test_unsupported_sport_keeps_court(self, session):
        with pytest.raises(InvalidInput):
            session.set_court_model("curling")
        assert session.court.sport.value == "badminton"

    def test_reset(self, session):
        _draw_all(session)
        session.reset()
        assert not session.is_calibrated()
        assert session.get_current_result() is None
        assert session.camera.is_set


class TestStaleOnFailure:
    """A failed solve never replaces a working calibration."""

    def test_degenerate_redraw(self):
        s = CalibrationSession("badminton", auto_recalibrate=False)
        _draw_all(s)
        assert s.recalibrate().ok
        good = s.current_homography()
        probe = world_to_norm(2.0, 3.0)
        expected = s.image_to_world(probe)

        _draw_collinear(s)
        result = s.recalibrate()
        assert result.status == SolveStatus.ILL_CONDITIONED
        assert s.current_homography() is good
        assert s.image_to_world(probe) == expected
        assert s.is_using_stale()
        assert "previous calibration" in s.status_message()

    def test_nearly_collinear_redraw(self):
        s = CalibrationSession("badminton", auto_recalibrate=False)
        _draw_all(s)
        assert s.recalibrate().ok
        good = s.current_homography()

        s.add_line("service-long-doubles", (100, 500), (400, 500), 1920, 1080)
        s.add_line("center-line", (600, 502), (900, 502), 1920, 1080)
        s.add_line("service-short", (1100, 502), (1600, 502), 1920, 1080)
        result = s.recalibrate()
        assert result.status == SolveStatus.ILL_CONDITIONED
        assert s.current_homography() is good
        assert s.solver.last_good is good
        assert s.get_current_result().quality_label == "Excellent"
        assert s.is_using_stale()

    def test_removed_line(self, session):
        _draw_all(session)
        good = session.current_homography()
        session.remove_line("center-line")
        assert session.last_solve.status == SolveStatus.INSUFFICIENT_DATA
        assert session.current_homography() is good
        assert session.is_using_stale()

    def test_rejected_input(self, session):
        _draw_all(session)
        good = session.current_homography()
        with pytest.raises(InvalidInput):
            session.add_line("center-line", (960, 600), (960, 600), 1920, 1080)
        assert session.current_homography() is good
        assert not session.is_using_stale()

    def test_recovery_clears_stale(self, session):
        _draw_all(session)
        session.remove_line("center-line")
        assert session.is_using_stale()
        start, end = draw_line(session.court, "center-line", 1920, 1080)
        session.add_line("center-line", start, end, 1920, 1080)
        assert not session.is_using_stale()


class TestSupersededSolve:
    """A line added during a solve wins over the in-flight result."""

    def test_in_flight_solve_discarded(self):
        s = CalibrationSession("badminton", auto_recalibrate=False,
                               solver_cls=InterruptingSolver)
        for lid in CALIBRATION_LINES:
            start, end = draw_line(s.court, lid, 1920, 1080)
            if lid == "center-line":
                # misdrawn: 40 px to the right
                start, end = (start[0] + 40, start[1]), (end[0] + 40, end[1])
            s.add_line(lid, start, end, 1920, 1080)

        start, end = draw_line(s.court, "center-line", 1920, 1080)
        s.solver.hook = lambda: s.store.add_line("center-line", start, end, 1920, 1080)

        result = s.recalibrate()
        assert result.ok
        assert s.solver.calls == 2
        assert np.allclose(s.current_homography().matrix, _expected(),
                           rtol=1e-6, atol=1e-8)
        assert s.get_current_result().reprojection_error_px == pytest.approx(0.0, abs=1e-6)

    def test_camera_change_during_solve(self):
        s = CalibrationSession("badminton", auto_recalibrate=False,
                               solver_cls=InterruptingSolver)
        s.set_camera_position("bottom", 3.0, 2.5)
        _draw_all(s)
        s.solver.hook = lambda: s.camera.set("left", 3.0, 2.5)
        s.recalibrate()
        assert s.solver.calls == 2
        assert s.get_current_result().quality_label == "Poor"

    def test_discarded_result_not_kept_as_last_good(self):
        s = CalibrationSession("badminton", auto_recalibrate=False,
                               solver_cls=InterruptingSolver)
        _draw_all(s)
        s.solver.hook = lambda: _draw_collinear(s)
        result = s.recalibrate()
        assert result.status == SolveStatus.ILL_CONDITIONED
        assert s.solver.calls == 2
        assert s.current_homography() is None
        assert s.solver.last_good is None

    def test_last_good_matches_published(self):
        s = CalibrationSession("badminton", auto_recalibrate=False,
                               solver_cls=InterruptingSolver)
        _draw_all(s)
        assert s.recalibrate().ok
        assert s.solver.last_good is s.current_homography()


class TestPersistence:
    """Tests for session snapshots."""

    def test_round_trip(self, session):
        _draw_all(session)
        data = json.loads(json.dumps(session.to_dict()))
        restored = CalibrationSession.from_dict(data)
        assert restored.court.sport == session.court.sport
        assert restored.camera.position == session.camera.position
        assert [c.court_line_id for c in restored.store] == list(CALIBRATION_LINES)
        assert restored.current_homography().allclose(session.current_homography())
        assert restored.get_current_result().quality_label == "Excellent"

    def test_uncalibrated_snapshot(self):
        s = CalibrationSession("tennis")
        d = s.to_dict()
        assert d["homography"] is None and d["result"] is None
        restored = CalibrationSession.from_dict(d)
        assert not restored.is_calibrated()
