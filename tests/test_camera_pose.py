"""Tests for camera pose and orientation math."""

import math

import numpy as np
import pytest

from earthspeed.rendering.camera_state import LOOK_DISTANCE, CameraPose
from earthspeed.rendering.quaternion_utils import (
    forward_from_yaw_pitch,
    quat_from_axis_angle,
    quat_from_yaw_pitch,
    quat_rotate,
    right_from_yaw,
    yaw_pitch_from_direction,
)
from earthspeed.shared.math import ease_in_out_quad, lerp_angle, wrap_angle


class TestOrientation:
    """Test the yaw/pitch convention (Y up, looking down -Z at yaw 0)."""

    def test_zero_looks_down_negative_z(self):
        np.testing.assert_allclose(forward_from_yaw_pitch(0.0, 0.0), [0.0, 0.0, -1.0], atol=1e-12)

    def test_positive_yaw_turns_left(self):
        np.testing.assert_allclose(
            forward_from_yaw_pitch(math.pi / 2, 0.0), [-1.0, 0.0, 0.0], atol=1e-12
        )

    def test_positive_pitch_looks_up(self):
        forward = forward_from_yaw_pitch(0.0, 0.3)
        assert forward[1] == pytest.approx(math.sin(0.3))

    def test_direction_inverse(self):
        yaw, pitch = 2.1, -0.4
        direction = forward_from_yaw_pitch(yaw, pitch) * 37.0
        assert yaw_pitch_from_direction(direction) == pytest.approx((yaw, pitch))

    def test_zero_direction(self):
        assert yaw_pitch_from_direction(np.zeros(3)) == (0.0, 0.0)

    def test_right_vector_is_perpendicular(self):
        yaw = 0.7
        assert np.dot(right_from_yaw(yaw), forward_from_yaw_pitch(yaw, 0.0)) == pytest.approx(0.0)

    def test_quaternion_is_unit(self):
        assert np.linalg.norm(quat_from_yaw_pitch(1.0, 0.5)) == pytest.approx(1.0)

    def test_axis_angle_rotation(self):
        q = quat_from_axis_angle(np.array([0.0, 0.0, 1.0]), math.pi / 2)
        np.testing.assert_allclose(quat_rotate(q, np.array([1.0, 0.0, 0.0])), [0.0, 1.0, 0.0], atol=1e-12)


class TestCameraPose:
    """Test pose construction and viser conversion."""

    def test_looking_at_derives_orientation(self):
        pose = CameraPose.looking_at([0.0, 0.0, 0.0], [10.0, 0.0, 0.0], 60.0)
        assert pose.yaw == pytest.approx(-math.pi / 2)
        assert pose.pitch == pytest.approx(0.0)

    def test_set_orientation_moves_target(self):
        pose = CameraPose(position=[1.0, 2.0, 3.0])
        pose.set_orientation(0.0, 0.0)
        np.testing.assert_allclose(pose.target, [1.0, 2.0, 3.0 - LOOK_DISTANCE])
        assert pose.distance == pytest.approx(LOOK_DISTANCE)

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            CameraPose(position=[1.0, 2.0])

    def test_to_viser_params(self):
        pose = CameraPose(position=[1.0, 2.0, 3.0], target=[0.0, 0.0, 0.0], fov=90.0)
        params = pose.to_viser_params()
        assert params["position"] == (1.0, 2.0, 3.0)
        assert params["look_at"] == (0.0, 0.0, 0.0)
        assert params["up_direction"] == (0.0, 1.0, 0.0)
        assert params["fov"] == pytest.approx(math.pi / 2)

    def test_set_from_viser(self):
        pose = CameraPose()
        pose.set_from_viser((0.0, 5.0, 0.0), (0.0, 5.0, -10.0), math.radians(50.0))
        assert pose.fov == pytest.approx(50.0)
        assert pose.yaw == pytest.approx(0.0)

    def test_copy_is_independent(self):
        pose = CameraPose(position=[1.0, 1.0, 1.0])
        clone = pose.copy()
        clone.position[0] = 99.0
        assert pose.position[0] == 1.0


class TestEasing:
    """Test interpolation helpers."""

    def test_ease_midpoint(self):
        assert ease_in_out_quad(0.5) == 0.5

    def test_ease_quarter_points(self):
        assert ease_in_out_quad(0.25) == pytest.approx(0.125)
        assert ease_in_out_quad(0.75) == pytest.approx(0.875)

    def test_ease_clamps(self):
        assert ease_in_out_quad(-1.0) == 0.0
        assert ease_in_out_quad(2.0) == 1.0

    def test_wrap_angle(self):
        assert wrap_angle(3 * math.pi / 2) == pytest.approx(-math.pi / 2)

    def test_lerp_angle_shorter_arc(self):
        assert lerp_angle(3.0, -3.0, 0.5) == pytest.approx(3.0 + (2 * math.pi - 6.0) / 2)
