"""
Robot context: owns the state and covariance of one robot between cycles.

The motion models are pure functions of (x, u, n, dt). A RobotContext is
the thin stateful layer that a filter driver keeps per robot:

    1. set_control(u)      store the freshly read control (e.g. IMU sample)
    2. move(dt)            x, Jx, Jn = propagate(x, u, 0, dt)
                           P = Jx P Jxᵀ + Jn Q Jnᵀ
    3. measurement update  (performed by the driver on state / covariance)

Each context owns its own JacobianWorkspace, created in the constructing
thread. Contexts are therefore independent of each other, but a single
context must be moved from the thread that created it.

Implements the EKF time update:
    x̂_k^- = f(x̂_{k-1}, u_k, 0)
    P_k^- = F P_{k-1} Fᵀ + G Q Gᵀ,   F = ∂f/∂x, G = ∂f/∂n at x̂_{k-1}
"""

import warnings
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from inslam.models.motion_models import (
    MOTION_MODELS,
    MotionModel,
    MotionModelKind,
    create_motion_model,
)
from inslam.models.noise import (
    constant_velocity_perturbation_covariance,
    perturbation_covariance,
)
from inslam.models.workspace import JacobianWorkspace
from inslam.sensors.types import ImuNoiseParams

CovarianceSource = Union[NDArray[np.float64], Callable[[float], NDArray[np.float64]]]


@dataclass(frozen=True)
class RobotConfig:
    """
    Configuration of a robot's motion model and process noise.

    Attributes:
        model: Motion model tag ('inertial' or 'constant_velocity').
        imu_noise: IMU noise densities, used by the inertial model.
                   Default: tactical grade.
        sigma_v: Linear acceleration noise density for the
                 constant-velocity model (m/s/√s).
        sigma_w: Angular acceleration noise density for the
                 constant-velocity model (rad/s/√s).
        max_dt: Steps longer than this (s) trigger a warning.
        quat_tolerance: Accepted deviation of ||q|| from 1 on input.

    Example:
        >>> config = RobotConfig(model='inertial', imu_noise=ImuNoiseParams.consumer_grade())
        >>> config.perturbation_covariance(0.01).shape
        (12, 12)
    """

    model: MotionModelKind = 'inertial'
    imu_noise: Optional[ImuNoiseParams] = None
    sigma_v: float = 1.0
    sigma_w: float = 1.0
    max_dt: float = 0.1
    quat_tolerance: float = 1e-3

    def __post_init__(self) -> None:
        if self.model not in MOTION_MODELS:
            raise ValueError(
                f"Unknown motion model '{self.model}', expected one of {sorted(MOTION_MODELS)}"
            )
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be positive, got {self.max_dt}")
        if self.sigma_v < 0 or self.sigma_w < 0:
            raise ValueError("sigma_v and sigma_w must be non-negative")

    def create_model(self) -> MotionModel:
        """Instantiate the configured motion model."""
        return create_motion_model(self.model, quat_tolerance=self.quat_tolerance)

    def perturbation_covariance(self, dt: float) -> NDArray[np.float64]:
        """Perturbation covariance Q for a step of length dt."""
        if self.model == 'inertial':
            params = self.imu_noise
            if params is None:
                params = ImuNoiseParams.tactical_grade()
            return perturbation_covariance(params, dt)
        return constant_velocity_perturbation_covariance(self.sigma_v, self.sigma_w, dt)


class RobotContext:
    """
    State, covariance and control of one robot driven by a motion model.

    Attributes:
        model: Motion model used for prediction.
        state: Current state estimate x, shape (model.size(),).
        covariance: Current state covariance P, shape (n, n).
        control: Latest control u, shape (model.size_control(),).
        Jx: State Jacobian of the last move (None before the first move).
        Jn: Perturbation Jacobian of the last move.
        workspace: Scratch workspace owned by this robot.
    """

    def __init__(
        self,
        model: MotionModel,
        x0: NDArray[np.float64],
        P0: NDArray[np.float64],
        perturbation_cov: CovarianceSource,
        max_dt: float = 0.1,
    ):
        """
        Initialize the robot context.

        Args:
            model: Motion model.
            x0: Initial state, shape (model.size(),).
            P0: Initial covariance, shape (model.size(), model.size()).
            perturbation_cov: Perturbation covariance Q, either a fixed
                (size_perturbation x size_perturbation) matrix or a callable
                Q(dt).
            max_dt: Steps longer than this (s) trigger a warning.

        Raises:
            ValueError: If dimensions are inconsistent with the model.
        """
        n = model.size()
        x0 = np.asarray(x0, dtype=float)
        P0 = np.asarray(P0, dtype=float)
        if x0.shape != (n,):
            raise ValueError(f"x0 must have shape ({n},), got {x0.shape}")
        if P0.shape != (n, n):
            raise ValueError(f"P0 shape {P0.shape} inconsistent with state size {n}")
        if not callable(perturbation_cov):
            perturbation_cov = np.asarray(perturbation_cov, dtype=float)
            m = model.size_perturbation()
            if perturbation_cov.shape != (m, m):
                raise ValueError(
                    f"Perturbation covariance must have shape ({m}, {m}), "
                    f"got {perturbation_cov.shape}"
                )

        self.model = model
        self.state = x0.copy()
        self.covariance = P0.copy()
        self.control = np.zeros(model.size_control())
        self.perturbation_cov = perturbation_cov
        self.max_dt = max_dt
        self.Jx: Optional[NDArray[np.float64]] = None
        self.Jn: Optional[NDArray[np.float64]] = None
        self.workspace = JacobianWorkspace()

    @classmethod
    def from_config(
        cls,
        config: RobotConfig,
        x0: NDArray[np.float64],
        P0: NDArray[np.float64],
    ) -> "RobotContext":
        """Build a robot context from a RobotConfig."""
        return cls(
            model=config.create_model(),
            x0=x0,
            P0=P0,
            perturbation_cov=config.perturbation_covariance,
            max_dt=config.max_dt,
        )

    def set_control(self, u: NDArray[np.float64]) -> None:
        """
        Store the control used by the next move().

        Raises:
            ValueError: If u does not match the model's control size.
        """
        u = np.asarray(u, dtype=float)
        m = self.model.size_control()
        if u.shape != (m,):
            raise ValueError(f"u must have shape ({m},), got {u.shape}")
        self.control = u.copy()

    def _perturbation_covariance(self, dt: float) -> NDArray[np.float64]:
        if callable(self.perturbation_cov):
            return self.perturbation_cov(dt)
        return self.perturbation_cov

    def move(self, dt: float) -> None:
        """
        Predict state and covariance one step of length dt ahead.

        Args:
            dt: Step length in seconds, >= 0.

        Raises:
            ValueError: If dt < 0 or the state quaternion is not unit norm.
            FloatingPointError: If the prediction is not finite. The state
                and covariance are left unchanged.
        """
        if dt > self.max_dt:
            warnings.warn(
                f"Step dt={dt:.4f} s exceeds max_dt={self.max_dt:.4f} s; "
                "linearization error may be significant",
                UserWarning,
            )

        n = np.zeros(self.model.size_perturbation())
        x_new, Jx, Jn = self.model.propagate(
            self.state, self.control, n, dt, workspace=self.workspace
        )

        if dt > 0:
            Q = self._perturbation_covariance(dt)
            P_new = Jx @ self.covariance @ Jx.T + Jn @ Q @ Jn.T
            P_new = 0.5 * (P_new + P_new.T)
        else:
            P_new = self.covariance.copy()

        if not (np.all(np.isfinite(x_new)) and np.all(np.isfinite(P_new))):
            raise FloatingPointError(
                f"Non-finite prediction from {self.model.name} model at dt={dt}"
            )

        self.state = x_new
        self.covariance = P_new
        self.Jx = Jx
        self.Jn = Jn

    def get_state(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Get current state estimate and covariance.

        Returns:
            Tuple of (state_vector, covariance_matrix), both copies.
        """
        return self.state.copy(), self.covariance.copy()
