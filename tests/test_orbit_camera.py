import math

import numpy as np
import pytest

from herdkit.orbit_camera import OrbitCamera


def test_defaults():
    cam = OrbitCamera()
    assert cam.radius == 2.0
    assert cam.azimuth == pytest.approx(0.3)
    assert cam.elevation == pytest.approx(0.2)
    assert np.allclose(cam.target, 0.0)
    assert cam.flip_x is False


def test_begin_drag_sets_flip_when_upside_down():
    cam = OrbitCamera(elevation=2.0)
    cam.begin_drag()
    assert cam.flip_x is True
    cam.elevation = 0.1
    cam.begin_drag()
    assert cam.flip_x is False


def test_dolly_round_trip():
    cam = OrbitCamera()
    cam.dolly(1.0)
    assert cam.radius < 2.0
    cam.dolly(-1.0)
    assert cam.radius == pytest.approx(2.0)


def test_dolly_clamps():
    cam = OrbitCamera()
    cam.dolly(1000.0)
    assert cam.radius == pytest.approx(1e-1)
    cam.dolly(-10000.0)
    assert cam.radius == pytest.approx(1e6)


def test_zero_drag_changes_nothing():
    cam = OrbitCamera()
    cam.drag(0.0, 0.0, (800, 600))
    assert cam.azimuth == pytest.approx(0.3)
    assert cam.elevation == pytest.approx(0.2)


def test_tumble_keeps_angles_wrapped():
    cam = OrbitCamera()
    for _ in range(50):
        cam.drag(137.0, -91.0, (800, 600))
        assert -math.pi - 1e-6 <= cam.azimuth <= math.pi + 1e-6
        assert -math.pi - 1e-6 <= cam.elevation <= math.pi + 1e-6


def test_flip_reverses_azimuth_direction():
    normal = OrbitCamera()
    flipped = OrbitCamera(flip_x=True)
    normal.drag(10.0, 0.0, (800, 800))
    flipped.drag(10.0, 0.0, (800, 800))
    assert normal.azimuth < 0.3
    assert flipped.azimuth > 0.3
    assert normal.azimuth - 0.3 == pytest.approx(-(flipped.azimuth - 0.3))


def test_pan_moves_target_not_orientation():
    cam = OrbitCamera()
    before = cam.rotation()
    cam.drag(40.0, 25.0, (800, 600), pan=True)
    assert not np.allclose(cam.target, 0.0)
    assert np.allclose(cam.rotation(), before)
    assert cam.azimuth == pytest.approx(0.3)


def test_pan_moves_perpendicular_to_view():
    cam = OrbitCamera()
    view = cam.position() - cam.target
    cam.drag(40.0, 25.0, (800, 600), pan=True)
    assert float(np.dot(cam.target, view)) == pytest.approx(0.0, abs=1e-9)


def test_rotation_is_unit():
    cam = OrbitCamera(azimuth=1.1, elevation=-0.7)
    assert np.linalg.norm(cam.rotation()) == pytest.approx(1.0)


def test_position_is_radius_from_target():
    cam = OrbitCamera(radius=5.0, target=np.array([1.0, 2.0, 3.0]))
    assert np.linalg.norm(cam.position() - cam.target) == pytest.approx(5.0)


def test_positive_elevation_is_above_target():
    cam = OrbitCamera(elevation=0.5)
    assert cam.position()[2] > 0.0
    cam.elevation = -0.5
    assert cam.position()[2] < 0.0