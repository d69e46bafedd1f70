"""
Discrete perturbation covariances for the motion models.

The filter driver forms the additive covariance term Jn Q Jnᵀ from the
perturbation Jacobian Jn returned by a motion model and the covariance Q of
the perturbation vector n over one step. These helpers build Q from
continuous-time noise densities.

Inertial model, n = [an, wn, ar, wr]:

    an: accelerometer white noise, enters v' as R an dt
        Var(an) = VRW² / dt          so that Var(R an dt) = VRW² dt
    wn: gyrometer white noise, enters q' through (wm - wb + wn) dt
        Var(wn) = ARW² / dt
    ar: accelerometer bias increment over the step
        Var(ar) = accel_rrw² dt
    wr: gyrometer bias increment over the step
        Var(wr) = gyro_rrw² dt

Constant-velocity model, n = [vi, wi]:

    vi, wi: velocity and angular-rate impulses over the step
        Var(vi) = (sigma_v √dt)²,  Var(wi) = (sigma_w √dt)²
"""

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import block_diag

from inslam.sensors.types import ImuNoiseParams


def _check_dt(dt: float) -> None:
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")


def perturbation_covariance(params: ImuNoiseParams, dt: float) -> NDArray[np.float64]:
    """
    Covariance of the inertial perturbation vector n over one step.

    Args:
        params: IMU noise densities.
        dt: Step length in seconds, > 0.

    Returns:
        12x12 diagonal covariance, ordered [an, wn, ar, wr].

    Raises:
        ValueError: If dt <= 0.

    Example:
        >>> Q = perturbation_covariance(ImuNoiseParams.tactical_grade(), dt=0.01)
        >>> Q.shape
        (12, 12)
    """
    _check_dt(dt)
    I3 = np.eye(3)
    return block_diag(
        I3 * params.accel_vrw_mps_sqrt_s**2 / dt,
        I3 * params.gyro_arw_rad_sqrt_s**2 / dt,
        I3 * params.accel_rrw_mps2_sqrt_s**2 * dt,
        I3 * params.gyro_rrw_rad_s_sqrt_s**2 * dt,
    )


def constant_velocity_perturbation_covariance(
    sigma_v: float,
    sigma_w: float,
    dt: float,
) -> NDArray[np.float64]:
    """
    Covariance of the constant-velocity perturbation vector [vi, wi].

    Args:
        sigma_v: Linear acceleration noise density (m/s²/√Hz, i.e. m/s/√s).
        sigma_w: Angular acceleration noise density (rad/s/√s).
        dt: Step length in seconds, > 0.

    Returns:
        6x6 diagonal covariance.
    """
    _check_dt(dt)
    if sigma_v < 0 or sigma_w < 0:
        raise ValueError(
            f"Noise densities must be non-negative, got sigma_v={sigma_v}, sigma_w={sigma_w}"
        )
    I3 = np.eye(3)
    return block_diag(I3 * sigma_v**2 * dt, I3 * sigma_w**2 * dt)
