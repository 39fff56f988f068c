"""Tests for the input state record."""

import numpy as np
import pytest

from earthspeed.interaction.input_state import InputState


class TestWalkingKeys:
    """Test the walking key map."""

    def test_wasd_flags(self):
        state = InputState()
        for key in "WASD":
            assert state.apply_walking_key(key, True)
        assert state.forward and state.left and state.backward and state.right

        state.apply_walking_key("w", False)
        assert not state.forward

    def test_shift_runs(self):
        state = InputState()
        state.apply_walking_key("Shift", True)
        assert state.running

    def test_space_requests_jump_on_press_only(self):
        state = InputState()
        state.apply_walking_key("space", False)
        assert not state.jump_requested
        state.apply_walking_key(" ", True)
        assert state.consume_jump()
        assert not state.consume_jump()

    def test_other_keys_ignored(self):
        assert not InputState().apply_walking_key("q", True)


class TestIntent:
    """Test movement intent and one-shot consumption."""

    def test_forward_is_negative_z(self):
        state = InputState(forward=True)
        np.testing.assert_allclose(state.move_intent(), [0.0, 0.0, -1.0])

    def test_opposite_keys_cancel(self):
        state = InputState(forward=True, backward=True)
        assert not np.any(state.move_intent())

    def test_diagonal_normalized(self):
        state = InputState(forward=True, left=True)
        assert np.linalg.norm(state.move_intent()) == pytest.approx(1.0)

    def test_look_accumulates_until_consumed(self):
        state = InputState()
        state.add_look_delta(3.0, 1.0)
        state.add_look_delta(2.0, -4.0)
        assert state.consume_look() == (5.0, -3.0)
        assert state.consume_look() == (0.0, 0.0)

    def test_zoom_multiplies_and_rejects_invalid(self):
        state = InputState()
        state.add_zoom(2.0)
        state.add_zoom(0.5)
        state.add_zoom(-1.0)
        state.add_zoom(float("nan"))
        assert state.consume_orbit() == (0.0, 0.0, 1.0)

    def test_release_all(self):
        state = InputState(forward=True, running=True, jump_requested=True, look_dx=4.0)
        state.release_all()
        assert state == InputState()
