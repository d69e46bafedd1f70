"""
Unit tests for the state, control and perturbation layouts.

Run with: pytest tests/inslam/models/test_state_layout.py -v
"""

import unittest

import numpy as np
import pytest

from inslam.models import (
    InertialState,
    pack_control,
    pack_state,
    unpack_control,
    unpack_cv_perturbation,
    unpack_perturbation,
    unpack_state,
)


class TestInertialStateLayout(unittest.TestCase):
    """Test suite for the 19-element state layout."""

    def setUp(self) -> None:
        self.x = np.arange(19, dtype=float)

    def test_field_order(self) -> None:
        """Fields sit at [p 0:3 | q 3:7 | v 7:10 | ab 10:13 | wb 13:16 | g 16:19]."""
        s = unpack_state(self.x)
        np.testing.assert_array_equal(s.p, [0, 1, 2])
        np.testing.assert_array_equal(s.q, [3, 4, 5, 6])
        np.testing.assert_array_equal(s.v, [7, 8, 9])
        np.testing.assert_array_equal(s.ab, [10, 11, 12])
        np.testing.assert_array_equal(s.wb, [13, 14, 15])
        np.testing.assert_array_equal(s.g, [16, 17, 18])

    def test_pack_inverts_unpack(self) -> None:
        s = unpack_state(self.x)
        np.testing.assert_array_equal(pack_state(s.p, s.q, s.v, s.ab, s.wb, s.g), self.x)
        np.testing.assert_array_equal(InertialState.from_vector(self.x).to_vector(), self.x)

    def test_unpack_returns_copies(self) -> None:
        s = unpack_state(self.x)
        s.p[:] = -1.0
        s.q[0] = -1.0
        assert self.x[0] == 0.0
        assert self.x[3] == 3.0

    def test_pack_rejects_wrong_field_size(self) -> None:
        with pytest.raises(ValueError, match=r"q must have shape \(4,\)"):
            pack_state(np.zeros(3), np.zeros(3), np.zeros(3), np.zeros(3), np.zeros(3), np.zeros(3))

    def test_unpack_rejects_wrong_size(self) -> None:
        with pytest.raises(ValueError, match=r"x must have shape \(19,\)"):
            unpack_state(np.zeros(20))

    def test_at_rest(self) -> None:
        s = InertialState.at_rest(g=9.8)
        np.testing.assert_array_equal(s.q, [1.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(s.g, [0.0, 0.0, -9.8])
        assert not s.p.any() and not s.v.any()


class TestControlAndPerturbationLayout(unittest.TestCase):
    """Test suite for u = [am wm] and n = [an wn ar wr]."""

    def test_control(self) -> None:
        u = pack_control([1.0, 2.0, 3.0], [4.0, 5.0, 6.0])
        np.testing.assert_array_equal(u, [1, 2, 3, 4, 5, 6])
        am, wm = unpack_control(u)
        np.testing.assert_array_equal(am, [1, 2, 3])
        np.testing.assert_array_equal(wm, [4, 5, 6])

    def test_control_wrong_size(self) -> None:
        with pytest.raises(ValueError, match=r"u must have shape \(6,\)"):
            unpack_control(np.zeros(7))

    def test_perturbation(self) -> None:
        an, wn, ar, wr = unpack_perturbation(np.arange(12, dtype=float))
        np.testing.assert_array_equal(an, [0, 1, 2])
        np.testing.assert_array_equal(wn, [3, 4, 5])
        np.testing.assert_array_equal(ar, [6, 7, 8])
        np.testing.assert_array_equal(wr, [9, 10, 11])

    def test_cv_perturbation(self) -> None:
        vi, wi = unpack_cv_perturbation(np.arange(6, dtype=float))
        np.testing.assert_array_equal(vi, [0, 1, 2])
        np.testing.assert_array_equal(wi, [3, 4, 5])
