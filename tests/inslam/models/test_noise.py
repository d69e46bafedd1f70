"""
Unit tests for perturbation covariances.

Run with: pytest tests/inslam/models/test_noise.py -v
"""

import unittest

import numpy as np
import pytest

from inslam.models import (
    constant_velocity_perturbation_covariance,
    perturbation_covariance,
)
from inslam.sensors import ImuNoiseParams


class TestPerturbationCovariance(unittest.TestCase):
    """Test suite for the inertial perturbation covariance."""

    def setUp(self) -> None:
        self.params = ImuNoiseParams(
            gyro_bias_rad_s=0.0,
            gyro_arw_rad_sqrt_s=0.002,
            gyro_rrw_rad_s_sqrt_s=0.0001,
            accel_bias_mps2=0.0,
            accel_vrw_mps_sqrt_s=0.01,
            accel_rrw_mps2_sqrt_s=0.001,
        )

    def test_diagonal_blocks(self) -> None:
        dt = 0.01
        Q = perturbation_covariance(self.params, dt)

        assert Q.shape == (12, 12)
        np.testing.assert_allclose(np.diag(Q)[0:3], 0.01**2 / dt)
        np.testing.assert_allclose(np.diag(Q)[3:6], 0.002**2 / dt)
        np.testing.assert_allclose(np.diag(Q)[6:9], 0.001**2 * dt)
        np.testing.assert_allclose(np.diag(Q)[9:12], 0.0001**2 * dt)
        np.testing.assert_array_equal(Q, np.diag(np.diag(Q)))

    def test_velocity_variance_scales_with_dt(self) -> None:
        """Var(R an dt) = VRW² dt regardless of how dt is split."""
        for dt in [0.001, 0.01, 0.1]:
            Q = perturbation_covariance(self.params, dt)
            np.testing.assert_allclose(Q[0, 0] * dt**2, 0.01**2 * dt)

    def test_rejects_non_positive_dt(self) -> None:
        with pytest.raises(ValueError, match="dt must be positive"):
            perturbation_covariance(self.params, 0.0)


class TestConstantVelocityCovariance(unittest.TestCase):
    """Test suite for the constant-velocity impulse covariance."""

    def test_values(self) -> None:
        Q = constant_velocity_perturbation_covariance(2.0, 0.5, 0.1)
        np.testing.assert_allclose(np.diag(Q), [0.4] * 3 + [0.025] * 3)

    def test_rejects_negative_sigma(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            constant_velocity_perturbation_covariance(-1.0, 0.5, 0.1)
