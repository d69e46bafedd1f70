"""
Robot motion models for EKF prediction.

Provides:
- Fixed state / control / perturbation layouts and their pack/unpack codecs
- Motion models sharing the {size, size_control, size_perturbation,
  propagate} contract, selected by tag through create_motion_model()
- JacobianWorkspace scratch buffers with single-thread ownership
- Perturbation covariances built from IMU noise densities
"""

from inslam.models.state_layout import (
    CONTROL_SIZE,
    PERTURBATION_SIZE,
    STATE_SIZE,
    InertialState,
    pack_control,
    pack_cv_state,
    pack_state,
    unpack_control,
    unpack_cv_perturbation,
    unpack_cv_state,
    unpack_perturbation,
    unpack_state,
)
from inslam.models.workspace import JacobianWorkspace
from inslam.models.motion_models import (
    MOTION_MODELS,
    ConstantVelocityMotionModel,
    InertialMotionModel,
    MotionModel,
    create_motion_model,
)
from inslam.models.noise import (
    constant_velocity_perturbation_covariance,
    perturbation_covariance,
)

__all__ = [
    # Layouts
    'STATE_SIZE',
    'CONTROL_SIZE',
    'PERTURBATION_SIZE',
    'InertialState',
    'pack_state',
    'unpack_state',
    'pack_control',
    'unpack_control',
    'unpack_perturbation',
    'pack_cv_state',
    'unpack_cv_state',
    'unpack_cv_perturbation',

    # Workspace
    'JacobianWorkspace',

    # Motion models
    'MotionModel',
    'InertialMotionModel',
    'ConstantVelocityMotionModel',
    'MOTION_MODELS',
    'create_motion_model',

    # Process noise
    'perturbation_covariance',
    'constant_velocity_perturbation_covariance',
]
