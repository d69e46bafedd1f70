"""Quaternion kinematics and their Jacobians.

This module provides the quaternion algebra needed by the inertial motion
model:
- Hamilton product and its left/right multiplication matrices
- Exponential map of a rotation vector (ω·Δt) to a unit quaternion
- Rotation of 3-vectors by a quaternion
- Normalization and unit-norm checks
- Jacobians of all of the above with respect to each input

Conventions:
- Quaternions are scalar-first: q = [w, x, y, z]
- Hamilton product: q1 ⊗ q2
- q represents the body-to-world rotation: v_world = R(q) @ v_body
- Identity quaternion: [1, 0, 0, 0]

Product identities used throughout:
    q1 ⊗ q2 = L(q1) @ q2 = R(q2) @ q1

so that ∂(q1 ⊗ q2)/∂q1 = R(q2) and ∂(q1 ⊗ q2)/∂q2 = L(q1).

Rotation matrices are written in homogeneous quadratic form, e.g.
R[0, 0] = w² + x² - y² - z², rather than 1 - 2(y² + z²). Both agree for a
unit quaternion, but only the quadratic form is differentiated by
rotate_jacobians() without an extra normalization term.
"""

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

# Below this rotation angle (rad) the exponential map switches to its
# Taylor expansion.
SMALL_ANGLE_THRESHOLD = 1e-4

# Norms below this are treated as an undefined rotation.
MIN_QUAT_NORM = 1e-12


def _check_shape(name: str, a: NDArray[np.float64], shape: Tuple[int, ...]) -> None:
    if a.shape != shape:
        raise ValueError(f"{name} must have shape {shape}, got {a.shape}")


def _check_norm(name: str, q: NDArray[np.float64]) -> None:
    norm = np.linalg.norm(q)
    if not norm >= MIN_QUAT_NORM:
        raise ValueError(f"{name} has norm {norm:.3e} and does not define a rotation")


def identity_quat() -> NDArray[np.float64]:
    """Return the identity quaternion [1, 0, 0, 0]."""
    return np.array([1.0, 0.0, 0.0, 0.0])


def skew(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cross-product (skew-symmetric) matrix [v]x such that [v]x @ u = v × u."""
    v = np.asarray(v, dtype=float)
    _check_shape("v", v, (3,))
    return np.array(
        [
            [0.0, -v[2], v[1]],
            [v[2], 0.0, -v[0]],
            [-v[1], v[0], 0.0],
        ]
    )


def quat_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Quaternion conjugate [w, -x, -y, -z]."""
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    return np.array([q[0], -q[1], -q[2], -q[3]])


def quat_left_matrix(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Left multiplication matrix L(q) such that q ⊗ p = L(q) @ p.

    Args:
        q: Quaternion [w, x, y, z], shape (4,).

    Returns:
        4x4 matrix L(q).
    """
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    w, x, y, z = q
    return np.array(
        [
            [w, -x, -y, -z],
            [x, w, -z, y],
            [y, z, w, -x],
            [z, -y, x, w],
        ]
    )


def quat_right_matrix(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Right multiplication matrix R(q) such that p ⊗ q = R(q) @ p.

    Args:
        q: Quaternion [w, x, y, z], shape (4,).

    Returns:
        4x4 matrix R(q).
    """
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    w, x, y, z = q
    return np.array(
        [
            [w, -x, -y, -z],
            [x, w, z, -y],
            [y, -z, w, x],
            [z, y, -x, w],
        ]
    )


def quat_compose(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """Hamilton product q1 ⊗ q2.

    Composes two rotations: applying q1 ⊗ q2 to a vector is the same as
    applying q2 first (in the body frame) and then q1. The product is
    associative but not commutative.

    Args:
        q1: Left quaternion [w, x, y, z], shape (4,).
        q2: Right quaternion [w, x, y, z], shape (4,).

    Returns:
        Product quaternion, shape (4,). Not renormalized.

    Raises:
        ValueError: If either quaternion is near zero or not finite.

    Example:
        >>> qz = np.array([np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)])
        >>> q180 = quat_compose(qz, qz)  # ≈ [0, 0, 0, 1], 180 deg about z
    """
    q1 = np.asarray(q1, dtype=float)
    q2 = np.asarray(q2, dtype=float)
    _check_shape("q1", q1, (4,))
    _check_shape("q2", q2, (4,))
    _check_norm("q1", q1)
    _check_norm("q2", q2)

    a1, b1, c1, d1 = q1
    a2, b2, c2, d2 = q2
    return np.array(
        [
            a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2,
            a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2,
            a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2,
            a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2,
        ]
    )


def quat_compose_jacobians(
    q1: NDArray[np.float64],
    q2: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Jacobians of q1 ⊗ q2 with respect to q1 and q2.

    Returns:
        Tuple (J_q1, J_q2), each 4x4: J_q1 = R(q2), J_q2 = L(q1).
    """
    return quat_right_matrix(q2), quat_left_matrix(q1)


def rotation_vector_to_quat(theta: NDArray[np.float64]) -> NDArray[np.float64]:
    """Exponential map of a rotation vector to a unit quaternion.

    For a rotation vector θ with angle a = ||θ|| and axis u = θ/a:

        q = [cos(a/2), sin(a/2) * u] = [cos(a/2), (sin(a/2)/a) * θ]

    The sinc-like factor sin(a/2)/a is evaluated with its Taylor series
    1/2 - a²/48 + a⁴/3840 below SMALL_ANGLE_THRESHOLD, so θ = 0 maps
    exactly to the identity quaternion.

    Args:
        theta: Rotation vector, shape (3,). Units: rad.

    Returns:
        Unit quaternion [w, x, y, z], shape (4,).
    """
    theta = np.asarray(theta, dtype=float)
    _check_shape("theta", theta, (3,))

    angle = np.linalg.norm(theta)
    if angle < SMALL_ANGLE_THRESHOLD:
        a2 = angle * angle
        w = 1.0 - a2 / 8.0 + a2 * a2 / 384.0
        s = 0.5 - a2 / 48.0 + a2 * a2 / 3840.0
    else:
        half = 0.5 * angle
        w = np.cos(half)
        s = np.sin(half) / angle

    return np.concatenate(([w], s * theta))


def rotation_vector_to_quat_jacobian(theta: NDArray[np.float64]) -> NDArray[np.float64]:
    """Jacobian of rotation_vector_to_quat() with respect to θ.

    With s(a) = sin(a/2)/a the vector part is s(a)·θ, hence

        ∂w/∂θ   = -(s/2) θᵀ
        ∂vec/∂θ = s I + c θθᵀ,    c = (a/2·cos(a/2) - sin(a/2)) / a³

    For small angles s and c use their Taylor series
    (c = -1/24 + a²/960).

    Args:
        theta: Rotation vector, shape (3,).

    Returns:
        4x3 Jacobian.
    """
    theta = np.asarray(theta, dtype=float)
    _check_shape("theta", theta, (3,))

    angle = np.linalg.norm(theta)
    if angle < SMALL_ANGLE_THRESHOLD:
        a2 = angle * angle
        s = 0.5 - a2 / 48.0 + a2 * a2 / 3840.0
        c = -1.0 / 24.0 + a2 / 960.0
    else:
        half = 0.5 * angle
        sin_half = np.sin(half)
        s = sin_half / angle
        c = (half * np.cos(half) - sin_half) / angle**3

    J = np.empty((4, 3))
    J[0, :] = -0.5 * s * theta
    J[1:, :] = s * np.eye(3) + c * np.outer(theta, theta)
    return J


def exponential(omega: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
    """Quaternion increment for a constant angular rate over dt.

    Equivalent to rotation_vector_to_quat(omega * dt).

    Args:
        omega: Angular rate in body frame, shape (3,). Units: rad/s.
        dt: Time step in seconds.

    Returns:
        Unit quaternion increment, shape (4,).

    Example:
        >>> dq = exponential(np.array([0.0, 0.0, np.pi / 2]), 1.0)
        >>> np.round(dq, 6)  # 90 deg about z
        array([0.707107, 0.      , 0.      , 0.707107])
    """
    omega = np.asarray(omega, dtype=float)
    _check_shape("omega", omega, (3,))
    return rotation_vector_to_quat(omega * dt)


def exponential_jacobian(omega: NDArray[np.float64], dt: float) -> NDArray[np.float64]:
    """Jacobian of exponential(omega, dt) with respect to θ = omega * dt (4x3).

    Multiply by dt to obtain the Jacobian with respect to omega.
    """
    omega = np.asarray(omega, dtype=float)
    _check_shape("omega", omega, (3,))
    return rotation_vector_to_quat_jacobian(omega * dt)


def quat_to_rotmat(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotation matrix R(q) such that rotate(q, v) = R(q) @ v.

    Uses the homogeneous quadratic form and does NOT normalize q. Callers
    are expected to supply a unit quaternion (see check_unit_quaternion).

    Args:
        q: Quaternion [w, x, y, z], shape (4,).

    Returns:
        3x3 rotation matrix (orthogonal when ||q|| = 1).

    Raises:
        ValueError: If q is near zero or not finite.
    """
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    _check_norm("q", q)
    w, x, y, z = q
    ww, xx, yy, zz = w * w, x * x, y * y, z * z
    return np.array(
        [
            [ww + xx - yy - zz, 2.0 * (x * y - w * z), 2.0 * (x * z + w * y)],
            [2.0 * (x * y + w * z), ww - xx + yy - zz, 2.0 * (y * z - w * x)],
            [2.0 * (x * z - w * y), 2.0 * (y * z + w * x), ww - xx - yy + zz],
        ]
    )


def rotate(q: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate a 3-vector by quaternion q (body to world).

    Args:
        q: Unit quaternion [w, x, y, z], shape (4,).
        v: Vector in body frame, shape (3,).

    Returns:
        Rotated vector R(q) @ v, shape (3,).
    """
    v = np.asarray(v, dtype=float)
    _check_shape("v", v, (3,))
    return quat_to_rotmat(q) @ v


def rotate_jacobians(
    q: NDArray[np.float64],
    v: NDArray[np.float64],
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Jacobians of rotate(q, v) with respect to q and v.

    Writing q = [w, ρ]:

        R(q) v = (w² - ρᵀρ) v + 2 ρ (ρᵀ v) + 2 w (ρ × v)

        ∂(R v)/∂w = 2 (w v + ρ × v)
        ∂(R v)/∂ρ = 2 (ρᵀv I + ρ vᵀ - v ρᵀ - w [v]x)
        ∂(R v)/∂v = R(q)

    Args:
        q: Quaternion [w, x, y, z], shape (4,).
        v: Vector, shape (3,).

    Returns:
        Tuple (J_q, J_v) with shapes (3, 4) and (3, 3).
    """
    q = np.asarray(q, dtype=float)
    v = np.asarray(v, dtype=float)
    _check_shape("q", q, (4,))
    _check_shape("v", v, (3,))
    _check_norm("q", q)

    w = q[0]
    rho = q[1:]

    J_q = np.empty((3, 4))
    J_q[:, 0] = 2.0 * (w * v + np.cross(rho, v))
    J_q[:, 1:] = 2.0 * (
        np.dot(rho, v) * np.eye(3)
        + np.outer(rho, v)
        - np.outer(v, rho)
        - w * skew(v)
    )
    return J_q, quat_to_rotmat(q)


def quat_normalize(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length.

    Raises:
        ValueError: If ||q|| is too small to define a rotation.
    """
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    norm = np.linalg.norm(q)
    if norm < MIN_QUAT_NORM:
        raise ValueError(f"Cannot normalize quaternion with norm {norm:.3e}")
    return q / norm


def quat_normalize_jacobian(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Jacobian of quat_normalize() at q: (I - q̂ q̂ᵀ) / ||q||, shape (4, 4)."""
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    norm = np.linalg.norm(q)
    if norm < MIN_QUAT_NORM:
        raise ValueError(f"Cannot normalize quaternion with norm {norm:.3e}")
    q_hat = q / norm
    return (np.eye(4) - np.outer(q_hat, q_hat)) / norm


def check_unit_quaternion(q: NDArray[np.float64], tol: float = 1e-3) -> None:
    """Reject quaternions whose norm deviates from 1 by more than tol.

    Raises:
        ValueError: If | ||q|| - 1 | > tol or the norm is not finite.
    """
    q = np.asarray(q, dtype=float)
    _check_shape("q", q, (4,))
    norm = np.linalg.norm(q)
    if not abs(norm - 1.0) <= tol:
        raise ValueError(
            f"Quaternion must be unit norm (tolerance {tol:g}), got norm {norm:.9f}"
        )


def euler_to_quat(roll: float, pitch: float, yaw: float) -> NDArray[np.float64]:
    """Convert roll-pitch-yaw (ZYX convention) to a scalar-first quaternion.

    Args:
        roll: Rotation about x in radians.
        pitch: Rotation about y in radians.
        yaw: Rotation about z in radians.

    Returns:
        Unit quaternion [w, x, y, z].
    """
    cr, sr = np.cos(0.5 * roll), np.sin(0.5 * roll)
    cp, sp = np.cos(0.5 * pitch), np.sin(0.5 * pitch)
    cy, sy = np.cos(0.5 * yaw), np.sin(0.5 * yaw)
    return np.array(
        [
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ]
    )


def quat_to_euler(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert a quaternion (or an (N, 4) array of them) to [roll, pitch, yaw].

    Pitch is clipped to ±90 deg at gimbal lock.
    """
    q = np.asarray(q, dtype=float)
    squeeze = q.ndim == 1
    q = np.atleast_2d(q)
    if q.shape[1] != 4:
        raise ValueError(f"q must have shape (4,) or (N, 4), got {q.shape}")

    w, x, y, z = q[:, 0], q[:, 1], q[:, 2], q[:, 3]
    roll = np.arctan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x**2 + y**2))
    pitch = np.arcsin(np.clip(2.0 * (w * y - z * x), -1.0, 1.0))
    yaw = np.arctan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y**2 + z**2))

    euler = np.column_stack([roll, pitch, yaw])
    return euler[0] if squeeze else euler
