"""Rotation algebra for the motion models.

Scalar-first Hamilton quaternions, their composition, exponential map,
vector rotation and the Jacobians of each operation.
"""

from inslam.coords.quaternion import (
    check_unit_quaternion,
    euler_to_quat,
    exponential,
    exponential_jacobian,
    identity_quat,
    quat_compose,
    quat_compose_jacobians,
    quat_conjugate,
    quat_left_matrix,
    quat_normalize,
    quat_normalize_jacobian,
    quat_right_matrix,
    quat_to_euler,
    quat_to_rotmat,
    rotate,
    rotate_jacobians,
    rotation_vector_to_quat,
    rotation_vector_to_quat_jacobian,
    skew,
)

__all__ = [
    # Quaternion algebra
    "identity_quat",
    "quat_conjugate",
    "quat_compose",
    "quat_compose_jacobians",
    "quat_left_matrix",
    "quat_right_matrix",
    # Exponential map
    "exponential",
    "exponential_jacobian",
    "rotation_vector_to_quat",
    "rotation_vector_to_quat_jacobian",
    # Rotation of vectors
    "quat_to_rotmat",
    "rotate",
    "rotate_jacobians",
    "skew",
    # Normalization
    "quat_normalize",
    "quat_normalize_jacobian",
    "check_unit_quaternion",
    # Euler angles
    "euler_to_quat",
    "quat_to_euler",
]
