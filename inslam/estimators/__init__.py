"""
Per-robot prediction context for an EKF driver.

Available classes:
    - RobotConfig: motion model tag and process-noise settings
    - RobotContext: owns x, P and the latest control; move(dt) performs the
      EKF time update with the model's Jacobians
"""

from inslam.estimators.robot import RobotConfig, RobotContext

__all__ = [
    "RobotConfig",
    "RobotContext",
]
