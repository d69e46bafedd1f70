"""
IMU data types, noise parameters and unit conversions.

Modules:
    types: ImuNoiseParams, ImuSample, ImuSeries
    units: Datasheet-to-SI conversions for IMU noise figures

Example:
    >>> from inslam.sensors import ImuNoiseParams
    >>> params = ImuNoiseParams.tactical_grade()
    >>> print(params.format_specs())
"""

from inslam.sensors.types import ImuNoiseParams, ImuSample, ImuSeries
from inslam.sensors.units import (
    STANDARD_GRAVITY,
    deg_per_hour_to_rad_per_sec,
    deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec,
    deg_per_sqrt_hour_to_rad_per_sqrt_sec,
    mg_per_sqrt_hour_to_mps2_per_sqrt_sec,
    mg_to_mps2,
    mps_per_sqrt_hour_to_mps_per_sqrt_sec,
)

__all__ = [
    # Data types
    "ImuNoiseParams",
    "ImuSample",
    "ImuSeries",
    # Unit conversions
    "STANDARD_GRAVITY",
    "deg_per_hour_to_rad_per_sec",
    "deg_per_hour_per_sqrt_hour_to_rad_per_sec_per_sqrt_sec",
    "deg_per_sqrt_hour_to_rad_per_sqrt_sec",
    "mg_per_sqrt_hour_to_mps2_per_sqrt_sec",
    "mg_to_mps2",
    "mps_per_sqrt_hour_to_mps_per_sqrt_sec",
]
