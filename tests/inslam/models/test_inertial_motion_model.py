"""
Unit tests for InertialMotionModel.

Tests cover:
    - Model dimensions (19 / 6 / 12)
    - Zero-length step is the identity
    - Unit quaternion norm and bias behavior over many steps
    - Stationary and pure-rotation scenarios
    - Input validation (dt < 0, shapes, non-unit quaternion)

Run with: pytest tests/inslam/models/test_inertial_motion_model.py -v
"""

import unittest

import numpy as np
import pytest

from inslam.models import (
    InertialMotionModel,
    InertialState,
    JacobianWorkspace,
    pack_control,
    pack_state,
    unpack_state,
)
from inslam.models.state_layout import AB_SLICE, G_SLICE, P_SLICE, Q_SLICE, V_SLICE, WB_SLICE


GRAVITY = 9.81
AT_REST_CONTROL = np.array([0.0, 0.0, GRAVITY, 0.0, 0.0, 0.0])


class TestInertialModelDimensions(unittest.TestCase):
    """Test suite for the fixed model dimensions."""

    def test_sizes(self) -> None:
        model = InertialMotionModel()
        assert model.size() == 19
        assert model.size_control() == 6
        assert model.size_perturbation() == 12

    def test_sizes_are_class_level(self) -> None:
        """Dimensions are available without an instance."""
        assert InertialMotionModel.size() == 19
        assert InertialMotionModel.name == "inertial"

    def test_output_shapes(self) -> None:
        model = InertialMotionModel()
        x = InertialState.at_rest().to_vector()
        x_new, Jx, Jn = model.propagate(x, AT_REST_CONTROL, np.zeros(12), 0.01)
        assert x_new.shape == (19,)
        assert Jx.shape == (19, 19)
        assert Jn.shape == (19, 12)


class TestZeroStep(unittest.TestCase):
    """A step with dt == 0 leaves everything untouched."""

    def setUp(self) -> None:
        rng = np.random.default_rng(3)
        q = rng.normal(size=4)
        self.x = pack_state(
            p=rng.normal(size=3),
            q=q / np.linalg.norm(q),
            v=rng.normal(size=3),
            ab=rng.normal(scale=0.1, size=3),
            wb=rng.normal(scale=0.01, size=3),
            g=np.array([0.0, 0.0, -GRAVITY]),
        )
        self.u = rng.normal(size=6)
        self.n = rng.normal(size=12)
        self.model = InertialMotionModel()

    def test_state_unchanged_with_nonzero_perturbation(self) -> None:
        """x is returned bit for bit even though n, u are nonzero."""
        x_new, _, _ = self.model.propagate(self.x, self.u, self.n, 0.0)
        np.testing.assert_array_equal(x_new, self.x)

    def test_jacobians(self) -> None:
        _, Jx, Jn = self.model.propagate(self.x, self.u, self.n, 0.0)
        np.testing.assert_array_equal(Jx, np.eye(19))
        np.testing.assert_array_equal(Jn, np.zeros((19, 12)))

    def test_returns_a_copy(self) -> None:
        x_new, _, _ = self.model.propagate(self.x, self.u, self.n, 0.0)
        x_new[0] += 1.0
        assert x_new[0] != self.x[0]


class TestPropagation(unittest.TestCase):
    """Test suite for the state transition."""

    def setUp(self) -> None:
        self.model = InertialMotionModel()

    def test_stationary_robot_stays_put(self) -> None:
        """Level robot at rest, reading exactly gravity, does not move."""
        x = InertialState.at_rest(g=GRAVITY).to_vector()
        ws = JacobianWorkspace()

        for _ in range(1000):
            x, _, _ = self.model.propagate(x, AT_REST_CONTROL, np.zeros(12), 0.01, workspace=ws)

        state = unpack_state(x)
        np.testing.assert_allclose(state.p, 0.0, atol=1e-12)
        np.testing.assert_allclose(state.v, 0.0, atol=1e-12)
        np.testing.assert_allclose(state.q, [1.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_pure_rotation_about_z(self) -> None:
        """ω = π/2 rad/s about z for 1 s gives a 90° yaw and no translation."""
        x = InertialState.at_rest(g=GRAVITY).to_vector()
        u = pack_control([0.0, 0.0, GRAVITY], [0.0, 0.0, np.pi / 2])

        for _ in range(100):
            x, _, _ = self.model.propagate(x, u, np.zeros(12), 0.01)

        state = unpack_state(x)
        expected_q = np.array([np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
        np.testing.assert_allclose(state.q, expected_q, atol=1e-9)
        np.testing.assert_allclose(state.p, 0.0, atol=1e-9)
        np.testing.assert_allclose(state.v, 0.0, atol=1e-9)

    def test_single_large_rotation_step(self) -> None:
        """One step of dt = 1 s matches the closed-form quarter turn."""
        x = InertialState.at_rest().to_vector()
        u = pack_control([0.0, 0.0, GRAVITY], [0.0, 0.0, np.pi / 2])
        x_new, _, _ = self.model.propagate(x, u, None, 1.0)
        expected_q = np.array([np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
        np.testing.assert_allclose(x_new[Q_SLICE], expected_q, atol=1e-15)
        np.testing.assert_array_equal(x_new[P_SLICE], x[P_SLICE])
        np.testing.assert_allclose(x_new[V_SLICE], x[V_SLICE], atol=1e-15)

    def test_constant_acceleration(self) -> None:
        """v grows linearly; p uses the pre-update velocity (no dt² term)."""
        x = InertialState.at_rest(g=GRAVITY).to_vector()
        u = pack_control([1.0, 0.0, GRAVITY], [0.0, 0.0, 0.0])

        x1, _, _ = self.model.propagate(x, u, None, 0.1)
        np.testing.assert_allclose(x1[V_SLICE], [0.1, 0.0, 0.0], atol=1e-12)
        np.testing.assert_array_equal(x1[P_SLICE], np.zeros(3))

        x2, _, _ = self.model.propagate(x1, u, None, 0.1)
        np.testing.assert_allclose(x2[V_SLICE], [0.2, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(x2[P_SLICE], [0.01, 0.0, 0.0], atol=1e-12)

    def test_biases_subtracted_from_readings(self) -> None:
        """A reading equal to the estimated bias produces no motion."""
        ab = np.array([0.05, -0.02, 0.01])
        wb = np.array([0.001, 0.002, -0.003])
        x = pack_state(np.zeros(3), [1.0, 0.0, 0.0, 0.0], np.zeros(3), ab, wb, [0.0, 0.0, -GRAVITY])
        u = pack_control(ab + [0.0, 0.0, GRAVITY], wb)

        x_new, _, _ = self.model.propagate(x, u, None, 0.05)
        np.testing.assert_allclose(x_new[V_SLICE], 0.0, atol=1e-14)
        np.testing.assert_allclose(x_new[Q_SLICE], [1.0, 0.0, 0.0, 0.0], atol=1e-15)

    def test_unit_norm_after_many_steps(self) -> None:
        """||q|| stays 1 within 1e-9 under random rates and noise."""
        rng = np.random.default_rng(11)
        x = InertialState.at_rest().to_vector()

        for _ in range(2000):
            u = pack_control(rng.normal(size=3), rng.normal(scale=2.0, size=3))
            n = rng.normal(scale=0.01, size=12)
            x, _, _ = self.model.propagate(x, u, n, rng.uniform(0.001, 0.05))
            assert abs(np.linalg.norm(x[Q_SLICE]) - 1.0) < 1e-9

    def test_biases_and_gravity_constant_without_random_walk(self) -> None:
        """ab, wb and g are bit-identical when ar = wr = 0."""
        rng = np.random.default_rng(12)
        x0 = pack_state(
            np.zeros(3), [1.0, 0.0, 0.0, 0.0], np.zeros(3),
            [0.01, 0.02, 0.03], [0.004, 0.005, 0.006], [0.0, 0.0, -GRAVITY],
        )
        x = x0
        for _ in range(500):
            u = pack_control(rng.normal(size=3), rng.normal(size=3))
            n = np.concatenate([rng.normal(size=6), np.zeros(6)])
            x, _, _ = self.model.propagate(x, u, n, 0.01)

        np.testing.assert_array_equal(x[AB_SLICE], x0[AB_SLICE])
        np.testing.assert_array_equal(x[WB_SLICE], x0[WB_SLICE])
        np.testing.assert_array_equal(x[G_SLICE], x0[G_SLICE])

    def test_bias_random_walk_is_additive(self) -> None:
        x = InertialState.at_rest().to_vector()
        n = np.zeros(12)
        n[6:9] = [0.1, 0.2, 0.3]
        n[9:12] = [-0.01, 0.0, 0.01]
        x_new, _, _ = self.model.propagate(x, AT_REST_CONTROL, n, 0.01)
        np.testing.assert_allclose(x_new[AB_SLICE], [0.1, 0.2, 0.3])
        np.testing.assert_allclose(x_new[WB_SLICE], [-0.01, 0.0, 0.01])

    def test_inputs_not_mutated(self) -> None:
        rng = np.random.default_rng(13)
        x = InertialState.at_rest().to_vector()
        u = rng.normal(size=6)
        n = rng.normal(size=12)
        x_copy, u_copy, n_copy = x.copy(), u.copy(), n.copy()

        self.model.propagate(x, u, n, 0.02)

        np.testing.assert_array_equal(x, x_copy)
        np.testing.assert_array_equal(u, u_copy)
        np.testing.assert_array_equal(n, n_copy)

    def test_accepts_slightly_denormalized_quaternion(self) -> None:
        """Quaternions within tolerance are accepted and renormalized."""
        x = InertialState.at_rest(q=[1.0 + 5e-4, 0.0, 0.0, 0.0]).to_vector()
        x_new, _, _ = self.model.propagate(x, AT_REST_CONTROL, None, 0.01)
        assert np.isclose(np.linalg.norm(x_new[Q_SLICE]), 1.0, atol=1e-12)


class TestInputValidation(unittest.TestCase):
    """Test suite for argument checks."""

    def setUp(self) -> None:
        self.model = InertialMotionModel()
        self.x = InertialState.at_rest().to_vector()

    def test_negative_dt(self) -> None:
        with pytest.raises(ValueError, match="dt must be non-negative"):
            self.model.propagate(self.x, AT_REST_CONTROL, None, -0.01)

    def test_wrong_state_shape(self) -> None:
        with pytest.raises(ValueError, match=r"x must have shape \(19,\)"):
            self.model.propagate(np.zeros(18), AT_REST_CONTROL, None, 0.01)

    def test_wrong_control_shape(self) -> None:
        with pytest.raises(ValueError, match=r"u must have shape \(6,\)"):
            self.model.propagate(self.x, np.zeros(5), None, 0.01)

    def test_wrong_perturbation_shape(self) -> None:
        with pytest.raises(ValueError, match=r"n must have shape \(12,\)"):
            self.model.propagate(self.x, AT_REST_CONTROL, np.zeros(6), 0.01)

    def test_non_unit_quaternion(self) -> None:
        x = self.x.copy()
        x[Q_SLICE] = [2.0, 0.0, 0.0, 0.0]
        with pytest.raises(ValueError, match="unit norm"):
            self.model.propagate(x, AT_REST_CONTROL, None, 0.01)

    def test_nan_quaternion_rejected(self) -> None:
        x = self.x.copy()
        x[Q_SLICE] = [np.nan, 0.0, 0.0, 0.0]
        with pytest.raises(ValueError, match="unit norm"):
            self.model.propagate(x, AT_REST_CONTROL, None, 0.01)

    def test_non_unit_quaternion_rejected_even_for_zero_step(self) -> None:
        x = self.x.copy()
        x[Q_SLICE] = [0.5, 0.0, 0.0, 0.0]
        with pytest.raises(ValueError, match="unit norm"):
            self.model.propagate(x, AT_REST_CONTROL, None, 0.0)

    def test_custom_tolerance(self) -> None:
        model = InertialMotionModel(quat_tolerance=0.2)
        x = self.x.copy()
        x[Q_SLICE] = [1.1, 0.0, 0.0, 0.0]
        x_new, _, _ = model.propagate(x, AT_REST_CONTROL, None, 0.01)
        assert np.isclose(np.linalg.norm(x_new[Q_SLICE]), 1.0)

    def test_invalid_tolerance(self) -> None:
        with pytest.raises(ValueError, match="quat_tolerance must be positive"):
            InertialMotionModel(quat_tolerance=0.0)
