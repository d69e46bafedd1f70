"""
Unit conversions for IMU noise and bias specifications.

Datasheets quote inertial sensor errors in mixed units; the motion model and
its process-noise covariance work in SI only. Every function name states
both the input and the output unit.

    Gyro bias:               deg/hr      -> rad/s
    Gyro ARW:                deg/√hr     -> rad/√s
    Gyro rate random walk:   deg/hr/√hr  -> rad/s/√s
    Accel bias:              mg          -> m/s²
    Accel VRW:               m/s/√hr     -> m/s/√s
    Accel rate random walk:  mg/√hr      -> m/s²/√s
"""

from typing import Union

import numpy as np

Numeric = Union[float, np.ndarray]

STANDARD_GRAVITY = 9.80665  # m/s²

_SECONDS_PER_HOUR = 3600.0
_SQRT_SECONDS_PER_HOUR = 60.0


def deg_per_hour_to_rad_per_sec(deg_per_hr: Numeric) -> Numeric:
    """
    Convert a gyro bias from deg/hr to rad/s.

    Example:
        >>> f"{deg_per_hour_to_rad_per_sec(10.0):.3e}"
        '4.848e-05'
    """
    return np.deg2rad(deg_per_hr) / _SECONDS_PER_HOUR


def deg_per_sqrt_hour_to_rad_per_sqrt_sec(deg_per_sqrt_hr: Numeric) -> Numeric:
    """Convert a gyro angle random walk from deg/√hr to rad/√s."""
    return np.deg2rad(deg_per_sqrt_hr) / _SQRT_SECONDS_PER_HOUR


def deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec(value: Numeric) -> Numeric:
    """Convert a gyro rate random walk from deg/hr/√hr to rad/s/√s."""
    return np.deg2rad(value) / (_SECONDS_PER_HOUR * _SQRT_SECONDS_PER_HOUR)


def mg_to_mps2(mg: Numeric) -> Numeric:
    """
    Convert milli-g to m/s² using standard gravity.

    Example:
        >>> f"{mg_to_mps2(10.0):.5f}"
        '0.09807'
    """
    return mg * 1e-3 * STANDARD_GRAVITY


def mps_per_sqrt_hour_to_mps_per_sqrt_sec(mps_per_sqrt_hr: Numeric) -> Numeric:
    """Convert an accelerometer velocity random walk from m/s/√hr to m/s/√s."""
    return mps_per_sqrt_hr / _SQRT_SECONDS_PER_HOUR


def mg_per_sqrt_hour_to_mps2_per_sqrt_sec(mg_per_sqrt_hr: Numeric) -> Numeric:
    """Convert an accelerometer rate random walk from mg/√hr to m/s²/√s."""
    return mg_to_mps2(mg_per_sqrt_hr) / _SQRT_SECONDS_PER_HOUR


def rad_per_sec_to_deg_per_hour(rad_per_s: Numeric) -> Numeric:
    """Convert rad/s to deg/hr."""
    return np.rad2deg(rad_per_s) * _SECONDS_PER_HOUR


def rad_per_sqrt_sec_to_deg_per_sqrt_hour(rad_per_sqrt_s: Numeric) -> Numeric:
    """Convert rad/√s to deg/√hr."""
    return np.rad2deg(rad_per_sqrt_s) * _SQRT_SECONDS_PER_HOUR


def mps2_to_mg(mps2: Numeric) -> Numeric:
    """Convert m/s² to milli-g."""
    return mps2 / (1e-3 * STANDARD_GRAVITY)


def mps_per_sqrt_sec_to_mps_per_sqrt_hour(mps_per_sqrt_s: Numeric) -> Numeric:
    """Convert m/s/√s to m/s/√hr."""
    return mps_per_sqrt_s * _SQRT_SECONDS_PER_HOUR


def format_gyro_bias(bias_rad_s: float) -> str:
    """Format a gyro bias as '10.00 deg/hr'."""
    return f"{rad_per_sec_to_deg_per_hour(bias_rad_s):.2f} deg/hr"


def format_accel_bias(bias_mps2: float) -> str:
    """Format an accelerometer bias as '10.00 mg (0.0981 m/s²)'."""
    return f"{mps2_to_mg(bias_mps2):.2f} mg ({bias_mps2:.4f} m/s²)"


def format_arw(arw_rad_sqrt_s: float) -> str:
    """Format a gyro angle random walk as '0.10 deg/sqrt(hr)'."""
    return f"{rad_per_sqrt_sec_to_deg_per_sqrt_hour(arw_rad_sqrt_s):.2f} deg/sqrt(hr)"


def format_vrw(vrw_mps_sqrt_s: float) -> str:
    """Format an accelerometer velocity random walk as '0.0100 m/s/sqrt(hr)'."""
    return f"{mps_per_sqrt_sec_to_mps_per_sqrt_hour(vrw_mps_sqrt_s):.4f} m/s/sqrt(hr)"
