"""
IMU data and noise-parameter types.

    - ImuNoiseParams: continuous-time noise densities and bias figures,
      with explicit SI units in every field name
    - ImuSample: one accelerometer + gyrometer reading
    - ImuSeries: a time series of readings

Time Base Convention:
    All timestamps are float seconds (monotonic).

Frame Conventions:
    Accelerometer and gyrometer readings are expressed in the body frame.
    The accelerometer measures specific force, so a level robot at rest
    reads approximately [0, 0, +9.81] m/s².
"""

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ImuNoiseParams:
    """
    IMU noise and bias parameters with explicit units in field names.

    All values are SI. Use inslam.sensors.units to convert datasheet figures.

    Attributes:
        gyro_bias_rad_s: Gyroscope bias instability (rad/s).
                         Datasheet unit: deg/hr.
        gyro_arw_rad_sqrt_s: Gyroscope angle random walk (rad/√s).
                             Drives the wn perturbation channel.
        gyro_rrw_rad_s_sqrt_s: Gyroscope rate random walk (rad/s/√s).
                               Drives the wr (gyro bias) channel.
        accel_bias_mps2: Accelerometer bias instability (m/s²).
                         Datasheet unit: mg.
        accel_vrw_mps_sqrt_s: Accelerometer velocity random walk (m/s/√s).
                              Drives the an perturbation channel.
        accel_rrw_mps2_sqrt_s: Accelerometer rate random walk (m/s²/√s).
                               Drives the ar (accel bias) channel.
        grade: IMU grade label ('consumer', 'tactical', 'navigation').

    Raises:
        ValueError: If any parameter is negative.

    Example:
        >>> params = ImuNoiseParams.consumer_grade()
        >>> print(params.grade)
        consumer
    """

    gyro_bias_rad_s: float
    gyro_arw_rad_sqrt_s: float
    gyro_rrw_rad_s_sqrt_s: float
    accel_bias_mps2: float
    accel_vrw_mps_sqrt_s: float
    accel_rrw_mps2_sqrt_s: float = 0.0
    grade: str = 'unknown'

    def __post_init__(self) -> None:
        densities = {
            'gyro_bias_rad_s': self.gyro_bias_rad_s,
            'gyro_arw_rad_sqrt_s': self.gyro_arw_rad_sqrt_s,
            'gyro_rrw_rad_s_sqrt_s': self.gyro_rrw_rad_s_sqrt_s,
            'accel_bias_mps2': self.accel_bias_mps2,
            'accel_vrw_mps_sqrt_s': self.accel_vrw_mps_sqrt_s,
            'accel_rrw_mps2_sqrt_s': self.accel_rrw_mps2_sqrt_s,
        }
        for name, value in densities.items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

        if (
            self.gyro_arw_rad_sqrt_s == 0
            and self.gyro_rrw_rad_s_sqrt_s == 0
            and self.accel_vrw_mps_sqrt_s == 0
            and self.accel_rrw_mps2_sqrt_s == 0
        ):
            warnings.warn(
                "All IMU noise densities are zero; predicted covariance will not grow",
                UserWarning,
            )

    @classmethod
    def consumer_grade(cls) -> "ImuNoiseParams":
        """Typical smartphone / low-cost MEMS IMU."""
        from inslam.sensors import units

        return cls(
            gyro_bias_rad_s=units.deg_per_hour_to_rad_per_sec(10.0),
            gyro_arw_rad_sqrt_s=units.deg_per_sqrt_hour_to_rad_per_sqrt_sec(0.1),
            gyro_rrw_rad_s_sqrt_s=units.deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec(10.0),
            accel_bias_mps2=units.mg_to_mps2(10.0),
            accel_vrw_mps_sqrt_s=units.mps_per_sqrt_hour_to_mps_per_sqrt_sec(0.01),
            accel_rrw_mps2_sqrt_s=units.mg_per_sqrt_hour_to_mps2_per_sqrt_sec(1.0),
            grade='consumer',
        )

    @classmethod
    def tactical_grade(cls) -> "ImuNoiseParams":
        """Typical tactical-grade MEMS or FOG IMU."""
        from inslam.sensors import units

        return cls(
            gyro_bias_rad_s=units.deg_per_hour_to_rad_per_sec(1.0),
            gyro_arw_rad_sqrt_s=units.deg_per_sqrt_hour_to_rad_per_sqrt_sec(0.01),
            gyro_rrw_rad_s_sqrt_s=units.deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec(1.0),
            accel_bias_mps2=units.mg_to_mps2(1.0),
            accel_vrw_mps_sqrt_s=units.mps_per_sqrt_hour_to_mps_per_sqrt_sec(0.001),
            accel_rrw_mps2_sqrt_s=units.mg_per_sqrt_hour_to_mps2_per_sqrt_sec(0.1),
            grade='tactical',
        )

    @classmethod
    def navigation_grade(cls) -> "ImuNoiseParams":
        """Typical ring-laser-gyro navigation IMU."""
        from inslam.sensors import units

        return cls(
            gyro_bias_rad_s=units.deg_per_hour_to_rad_per_sec(0.01),
            gyro_arw_rad_sqrt_s=units.deg_per_sqrt_hour_to_rad_per_sqrt_sec(0.001),
            gyro_rrw_rad_s_sqrt_s=units.deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec(0.01),
            accel_bias_mps2=units.mg_to_mps2(0.1),
            accel_vrw_mps_sqrt_s=units.mps_per_sqrt_hour_to_mps_per_sqrt_sec(0.0001),
            accel_rrw_mps2_sqrt_s=units.mg_per_sqrt_hour_to_mps2_per_sqrt_sec(0.01),
            grade='navigation',
        )

    def format_specs(self) -> str:
        """
        Format the parameters for display.

        Example:
            >>> print(ImuNoiseParams.consumer_grade().format_specs())
            IMU Specifications (consumer grade):
              Gyro Bias:  10.00 deg/hr
              Gyro ARW:   0.10 deg/sqrt(hr)
              Accel Bias: 10.00 mg (0.0981 m/s²)
              Accel VRW:  0.0100 m/s/sqrt(hr)
        """
        from inslam.sensors import units

        lines = [
            f"IMU Specifications ({self.grade} grade):",
            f"  Gyro Bias:  {units.format_gyro_bias(self.gyro_bias_rad_s)}",
            f"  Gyro ARW:   {units.format_arw(self.gyro_arw_rad_sqrt_s)}",
            f"  Accel Bias: {units.format_accel_bias(self.accel_bias_mps2)}",
            f"  Accel VRW:  {units.format_vrw(self.accel_vrw_mps_sqrt_s)}",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class ImuSample:
    """
    Single IMU reading in the body frame.

    Attributes:
        t: Timestamp (s).
        accel: Specific force (m/s²), shape (3,).
        gyro: Angular rate (rad/s), shape (3,).
    """

    t: float
    accel: NDArray[np.float64]
    gyro: NDArray[np.float64]

    def to_control(self) -> NDArray[np.float64]:
        """Control vector u = [am, wm] for the inertial motion model."""
        return np.concatenate([
            np.asarray(self.accel, dtype=float),
            np.asarray(self.gyro, dtype=float),
        ])


@dataclass(frozen=True)
class ImuSeries:
    """
    Time series of IMU readings.

    Attributes:
        t: Timestamps (s), shape (N,), strictly increasing.
        accel: Specific force (m/s²), shape (N, 3).
        gyro: Angular rate (rad/s), shape (N, 3).
        meta: Free-form metadata (e.g. {'sample_rate_hz': 100}).

    Raises:
        ValueError: On inconsistent shapes or non-increasing timestamps.
    """

    t: NDArray[np.float64]
    accel: NDArray[np.float64]
    gyro: NDArray[np.float64]
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        n = len(self.t)
        if self.t.ndim != 1:
            raise ValueError(f"t must be 1D, got shape {self.t.shape}")
        if self.accel.shape != (n, 3):
            raise ValueError(f"accel must have shape ({n}, 3), got {self.accel.shape}")
        if self.gyro.shape != (n, 3):
            raise ValueError(f"gyro must have shape ({n}, 3), got {self.gyro.shape}")
        if n > 1 and not np.all(np.diff(self.t) > 0):
            raise ValueError("t must be strictly increasing")

    def __len__(self) -> int:
        return len(self.t)

    def __getitem__(self, k: int) -> ImuSample:
        return ImuSample(t=float(self.t[k]), accel=self.accel[k], gyro=self.gyro[k])

    def __iter__(self) -> Iterator[ImuSample]:
        for k in range(len(self)):
            yield self[k]
