"""Inertial robot motion models for EKF-based localization and mapping.

This package contains the prediction side of an EKF-SLAM robot:
- coords: Quaternion kinematics and their Jacobians
- models: State layouts, motion models, scratch workspaces, process noise
- sensors: IMU sample and noise parameter types, unit conversions
- estimators: Robot context that owns a state and covariance between cycles
"""

__version__ = "0.1.0"
