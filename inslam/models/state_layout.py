"""
Fixed state, control and perturbation layouts for the motion models.

Inertial robot (size 19 / 6 / 12):

    x = [p (3), q (4), v (3), ab (3), wb (3), g (3)]
        p:  position in world frame (m)
        q:  orientation quaternion, body-to-world, scalar-first
        v:  velocity in world frame (m/s)
        ab: accelerometer bias (m/s²)
        wb: gyrometer bias (rad/s)
        g:  gravity vector in world frame (m/s²)

    u = [am (3), wm (3)]
        am: raw accelerometer reading (specific force, m/s²)
        wm: raw gyrometer reading (rad/s)

    n = [an (3), wn (3), ar (3), wr (3)]
        an, wn: measurement noise on am, wm
        ar, wr: bias random-walk driving noise

Constant-velocity robot (size 13 / 0 / 6):

    x = [p (3), q (4), v (3), w (3)]
    n = [vi (3), wi (3)]   velocity and angular-rate impulses

All unpack functions return copies, so callers may modify the pieces
without touching the source vector.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

# Inertial state
STATE_SIZE = 19
CONTROL_SIZE = 6
PERTURBATION_SIZE = 12

P_SLICE = slice(0, 3)
Q_SLICE = slice(3, 7)
V_SLICE = slice(7, 10)
AB_SLICE = slice(10, 13)
WB_SLICE = slice(13, 16)
G_SLICE = slice(16, 19)

AM_SLICE = slice(0, 3)
WM_SLICE = slice(3, 6)

AN_SLICE = slice(0, 3)
WN_SLICE = slice(3, 6)
AR_SLICE = slice(6, 9)
WR_SLICE = slice(9, 12)

# Constant-velocity state
CV_STATE_SIZE = 13
CV_CONTROL_SIZE = 0
CV_PERTURBATION_SIZE = 6

CV_P_SLICE = slice(0, 3)
CV_Q_SLICE = slice(3, 7)
CV_V_SLICE = slice(7, 10)
CV_W_SLICE = slice(10, 13)

CV_VI_SLICE = slice(0, 3)
CV_WI_SLICE = slice(3, 6)


def _as_vector(name: str, a: NDArray[np.float64], size: int) -> NDArray[np.float64]:
    a = np.asarray(a, dtype=float)
    if a.shape != (size,):
        raise ValueError(f"{name} must have shape ({size},), got {a.shape}")
    return a


@dataclass
class InertialState:
    """
    Named view of the 19-element inertial state vector.

    Attributes:
        p: Position in world frame (m), shape (3,).
        q: Orientation quaternion (body-to-world), shape (4,), scalar-first.
        v: Velocity in world frame (m/s), shape (3,).
        ab: Accelerometer bias (m/s²), shape (3,).
        wb: Gyrometer bias (rad/s), shape (3,).
        g: Gravity vector in world frame (m/s²), shape (3,).
    """

    p: NDArray[np.float64]
    q: NDArray[np.float64]
    v: NDArray[np.float64]
    ab: NDArray[np.float64]
    wb: NDArray[np.float64]
    g: NDArray[np.float64]

    def to_vector(self) -> NDArray[np.float64]:
        """Pack into the fixed [p, q, v, ab, wb, g] layout."""
        return pack_state(self.p, self.q, self.v, self.ab, self.wb, self.g)

    @classmethod
    def from_vector(cls, x: NDArray[np.float64]) -> "InertialState":
        """Unpack a 19-element vector."""
        return unpack_state(x)

    @classmethod
    def at_rest(
        cls,
        q: Optional[NDArray[np.float64]] = None,
        g: float = 9.81,
    ) -> "InertialState":
        """
        State of a robot at rest at the origin with zero biases.

        Args:
            q: Initial orientation. Default: identity.
            g: Gravity magnitude; the gravity vector is [0, 0, -g].
        """
        if q is None:
            q = np.array([1.0, 0.0, 0.0, 0.0])
        return cls(
            p=np.zeros(3),
            q=np.asarray(q, dtype=float).copy(),
            v=np.zeros(3),
            ab=np.zeros(3),
            wb=np.zeros(3),
            g=np.array([0.0, 0.0, -g]),
        )


def unpack_state(x: NDArray[np.float64]) -> InertialState:
    """
    Split the inertial state vector into its named fields.

    Args:
        x: State vector, shape (19,).

    Returns:
        InertialState holding copies of p, q, v, ab, wb and g.

    Raises:
        ValueError: If x does not have shape (19,).
    """
    x = _as_vector("x", x, STATE_SIZE)
    return InertialState(
        p=x[P_SLICE].copy(),
        q=x[Q_SLICE].copy(),
        v=x[V_SLICE].copy(),
        ab=x[AB_SLICE].copy(),
        wb=x[WB_SLICE].copy(),
        g=x[G_SLICE].copy(),
    )


def pack_state(
    p: NDArray[np.float64],
    q: NDArray[np.float64],
    v: NDArray[np.float64],
    ab: NDArray[np.float64],
    wb: NDArray[np.float64],
    g: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Compose the inertial state vector x = [p, q, v, ab, wb, g].

    Raises:
        ValueError: If any field has the wrong size.
    """
    x = np.empty(STATE_SIZE)
    x[P_SLICE] = _as_vector("p", p, 3)
    x[Q_SLICE] = _as_vector("q", q, 4)
    x[V_SLICE] = _as_vector("v", v, 3)
    x[AB_SLICE] = _as_vector("ab", ab, 3)
    x[WB_SLICE] = _as_vector("wb", wb, 3)
    x[G_SLICE] = _as_vector("g", g, 3)
    return x


def unpack_control(u: NDArray[np.float64]) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split u = [am, wm] into (am, wm)."""
    u = _as_vector("u", u, CONTROL_SIZE)
    return u[AM_SLICE].copy(), u[WM_SLICE].copy()


def pack_control(am: NDArray[np.float64], wm: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compose u = [am, wm] from an accelerometer and a gyrometer reading."""
    return np.concatenate([_as_vector("am", am, 3), _as_vector("wm", wm, 3)])


def unpack_perturbation(
    n: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Split n = [an, wn, ar, wr] into (an, wn, ar, wr)."""
    n = _as_vector("n", n, PERTURBATION_SIZE)
    return (
        n[AN_SLICE].copy(),
        n[WN_SLICE].copy(),
        n[AR_SLICE].copy(),
        n[WR_SLICE].copy(),
    )


def unpack_cv_state(
    x: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """Split a constant-velocity state x = [p, q, v, w] into (p, q, v, w)."""
    x = _as_vector("x", x, CV_STATE_SIZE)
    return (
        x[CV_P_SLICE].copy(),
        x[CV_Q_SLICE].copy(),
        x[CV_V_SLICE].copy(),
        x[CV_W_SLICE].copy(),
    )


def pack_cv_state(
    p: NDArray[np.float64],
    q: NDArray[np.float64],
    v: NDArray[np.float64],
    w: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Compose a constant-velocity state x = [p, q, v, w]."""
    x = np.empty(CV_STATE_SIZE)
    x[CV_P_SLICE] = _as_vector("p", p, 3)
    x[CV_Q_SLICE] = _as_vector("q", q, 4)
    x[CV_V_SLICE] = _as_vector("v", v, 3)
    x[CV_W_SLICE] = _as_vector("w", w, 3)
    return x


def unpack_cv_perturbation(
    n: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split n = [vi, wi] into (vi, wi)."""
    n = _as_vector("n", n, CV_PERTURBATION_SIZE)
    return n[CV_VI_SLICE].copy(), n[CV_WI_SLICE].copy()
