"""
Robot motion models (process models) for EKF-SLAM prediction.

Every model implements the same contract:

    size(), size_control(), size_perturbation()   fixed dimensions
    propagate(x, u, n, dt) -> (x_new, Jx, Jn)      one prediction step

where Jx = ∂x_new/∂x and Jn = ∂x_new/∂n. The filter driver combines them
with the covariance P and the perturbation covariance Q as

    P' = Jx P Jxᵀ + Jn Q Jnᵀ

Models are stateless: the state flows in through arguments and out through
return values, so one instance may serve many robots and threads. The only
mutable object involved is the optional JacobianWorkspace, which belongs to
a single thread.

Available models:
    - InertialMotionModel ("inertial"): IMU-driven, 19 states
    - ConstantVelocityMotionModel ("constant_velocity"): 13 states, no control
"""

from abc import ABC, abstractmethod
from typing import Dict, Literal, Optional, Tuple, Type

import numpy as np
from numpy.typing import NDArray

from inslam.coords.quaternion import (
    check_unit_quaternion,
    exponential,
    exponential_jacobian,
    quat_compose,
    quat_left_matrix,
    quat_normalize,
    quat_normalize_jacobian,
    quat_right_matrix,
    rotate_jacobians,
)
from inslam.models import state_layout as layout
from inslam.models.workspace import JacobianWorkspace

MotionModelKind = Literal["inertial", "constant_velocity"]

PropagationResult = Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]


class MotionModel(ABC):
    """Abstract base class for robot motion models."""

    name: str = ""
    STATE_SIZE: int = 0
    CONTROL_SIZE: int = 0
    PERTURBATION_SIZE: int = 0

    def __init__(self, quat_tolerance: float = 1e-3):
        """
        Initialize motion model.

        Args:
            quat_tolerance: Largest accepted deviation of the input
                orientation quaternion norm from 1.
        """
        if quat_tolerance <= 0:
            raise ValueError(f"quat_tolerance must be positive, got {quat_tolerance}")
        self.quat_tolerance = quat_tolerance

    @classmethod
    def size(cls) -> int:
        """State dimension."""
        return cls.STATE_SIZE

    @classmethod
    def size_control(cls) -> int:
        """Control dimension."""
        return cls.CONTROL_SIZE

    @classmethod
    def size_perturbation(cls) -> int:
        """Perturbation dimension."""
        return cls.PERTURBATION_SIZE

    @abstractmethod
    def propagate(
        self,
        x: NDArray[np.float64],
        u: Optional[NDArray[np.float64]],
        n: Optional[NDArray[np.float64]],
        dt: float,
        workspace: Optional[JacobianWorkspace] = None,
    ) -> PropagationResult:
        """
        Predict the state one step of length dt ahead.

        Args:
            x: Current state, shape (size(),).
            u: Control, shape (size_control(),).
            n: Perturbation, shape (size_perturbation(),). None means zero.
            dt: Time step in seconds, >= 0.
            workspace: Scratch matrices owned by the calling thread. A
                call-local workspace is created when omitted.

        Returns:
            Tuple (x_new, Jx, Jn).
        """

    def _check_inputs(
        self,
        x: NDArray[np.float64],
        u: Optional[NDArray[np.float64]],
        n: Optional[NDArray[np.float64]],
        dt: float,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], float]:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.STATE_SIZE,):
            raise ValueError(f"x must have shape ({self.STATE_SIZE},), got {x.shape}")

        u = np.zeros(self.CONTROL_SIZE) if u is None else np.asarray(u, dtype=float)
        if u.shape != (self.CONTROL_SIZE,):
            raise ValueError(f"u must have shape ({self.CONTROL_SIZE},), got {u.shape}")

        n = np.zeros(self.PERTURBATION_SIZE) if n is None else np.asarray(n, dtype=float)
        if n.shape != (self.PERTURBATION_SIZE,):
            raise ValueError(
                f"n must have shape ({self.PERTURBATION_SIZE},), got {n.shape}"
            )

        dt = float(dt)
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        return x, u, n, dt

    def _zero_step(self, x: NDArray[np.float64]) -> PropagationResult:
        # A zero-length step leaves the state untouched whatever u and n are.
        return (
            x.copy(),
            np.eye(self.STATE_SIZE),
            np.zeros((self.STATE_SIZE, self.PERTURBATION_SIZE)),
        )

    def _orientation_update(
        self,
        q: NDArray[np.float64],
        omega: NDArray[np.float64],
        dt: float,
        ws: JacobianWorkspace,
    ) -> NDArray[np.float64]:
        """
        q' = normalize(q ⊗ exp(omega * dt)), filling the orientation blocks.

        On return ws.qnew_q holds ∂q'/∂q and ws.qnew_w holds ∂q'/∂omega.
        """
        dq = exponential(omega, dt)
        q_raw = quat_compose(q, dq)

        ws.normalize[:] = quat_normalize_jacobian(q_raw)
        ws.qnew_q[:] = ws.normalize @ quat_right_matrix(dq)
        ws.qnew_qwdt[:] = ws.normalize @ quat_left_matrix(q)
        ws.qwdt_w[:] = exponential_jacobian(omega, dt) * dt
        ws.qnew_w[:] = ws.qnew_qwdt @ ws.qwdt_w

        return quat_normalize(q_raw)


class InertialMotionModel(MotionModel):
    """
    Inertial (IMU-driven) robot motion model.

    State x = [p q v ab wb g] (19), control u = [am wm] (6),
    perturbation n = [an wn ar wr] (12).

    Transition over a step dt > 0:

        q'  = normalize(q ⊗ exp((wm - wb + wn) dt))
        v'  = v + (R(q)(am - ab + an) + g) dt
        p'  = p + v dt
        ab' = ab + ar
        wb' = wb + wr
        g'  = g

    Velocity and position use the pre-update orientation and velocity.
    The position update deliberately has no acceleration term.

    Jacobian blocks (rows: new state, columns: old state / perturbation),
    with N the renormalization Jacobian and E = ∂exp/∂θ:

        ∂p'/∂p = I          ∂p'/∂v = I dt
        ∂q'/∂q = N R(dq)    ∂q'/∂wb = -N L(q) E dt
        ∂v'/∂q = ∂(R a)/∂q dt
        ∂v'/∂v = I          ∂v'/∂ab = -R dt       ∂v'/∂g = I dt
        ∂ab'/∂ab = I        ∂wb'/∂wb = I          ∂g'/∂g = I

        ∂v'/∂an = R dt      ∂q'/∂wn = N L(q) E dt
        ∂ab'/∂ar = I        ∂wb'/∂wr = I

    A step with dt == 0 returns x unchanged, Jx = I and Jn = 0.

    Example:
        >>> from inslam.models.state_layout import InertialState
        >>> model = InertialMotionModel()
        >>> x = InertialState.at_rest().to_vector()
        >>> u = np.array([0.0, 0.0, 9.81, 0.0, 0.0, 0.0])  # at rest
        >>> x_new, Jx, Jn = model.propagate(x, u, np.zeros(12), dt=0.01)
        >>> Jx.shape, Jn.shape
        ((19, 19), (19, 12))
    """

    name = "inertial"
    STATE_SIZE = layout.STATE_SIZE
    CONTROL_SIZE = layout.CONTROL_SIZE
    PERTURBATION_SIZE = layout.PERTURBATION_SIZE

    def propagate(
        self,
        x: NDArray[np.float64],
        u: Optional[NDArray[np.float64]],
        n: Optional[NDArray[np.float64]],
        dt: float,
        workspace: Optional[JacobianWorkspace] = None,
    ) -> PropagationResult:
        """
        Predict the inertial state one step of length dt ahead.

        Args:
            x: State [p q v ab wb g], shape (19,). q must be unit norm
               within quat_tolerance.
            u: Control [am wm], shape (6,). Raw IMU sample.
            n: Perturbation [an wn ar wr], shape (12,). Zero (or None) for
               the nominal trajectory.
            dt: Time step in seconds, >= 0.
            workspace: Optional scratch workspace owned by the caller's thread.

        Returns:
            Tuple (x_new, Jx, Jn):
                x_new: Propagated state, shape (19,).
                Jx: ∂x_new/∂x, shape (19, 19).
                Jn: ∂x_new/∂n, shape (19, 12).

        Raises:
            ValueError: On wrong shapes, dt < 0 or a non-unit quaternion.
            RuntimeError: If workspace belongs to another thread.
        """
        x, u, n, dt = self._check_inputs(x, u, n, dt)
        state = layout.unpack_state(x)
        check_unit_quaternion(state.q, self.quat_tolerance)

        if dt == 0.0:
            return self._zero_step(x)

        ws = (workspace if workspace is not None else JacobianWorkspace()).acquire()

        am, wm = layout.unpack_control(u)
        an, wn, ar, wr = layout.unpack_perturbation(n)

        # Orientation
        q_new = self._orientation_update(state.q, wm - state.wb + wn, dt, ws)

        # Velocity, rotated with the pre-update orientation
        accel_body = am - state.ab + an
        J_q, R = rotate_jacobians(state.q, accel_body)
        ws.vnew_q[:] = J_q
        ws.rotation[:] = R
        v_new = state.v + (ws.rotation @ accel_body + state.g) * dt

        # Position, with the pre-update velocity
        p_new = state.p + state.v * dt

        # Bias random walks, gravity held constant
        ab_new = state.ab + ar
        wb_new = state.wb + wr
        g_new = state.g.copy()

        x_new = layout.pack_state(p_new, q_new, v_new, ab_new, wb_new, g_new)

        ws.idt[:] = np.eye(3) * dt
        I3 = np.eye(3)
        P, Q, V = layout.P_SLICE, layout.Q_SLICE, layout.V_SLICE
        AB, WB, G = layout.AB_SLICE, layout.WB_SLICE, layout.G_SLICE

        Jx = np.zeros((self.STATE_SIZE, self.STATE_SIZE))
        Jx[P, P] = I3
        Jx[P, V] = ws.idt
        Jx[Q, Q] = ws.qnew_q
        Jx[Q, WB] = -ws.qnew_w
        Jx[V, Q] = ws.vnew_q * dt
        Jx[V, V] = I3
        Jx[V, AB] = -ws.rotation * dt
        Jx[V, G] = ws.idt
        Jx[AB, AB] = I3
        Jx[WB, WB] = I3
        Jx[G, G] = I3

        Jn = np.zeros((self.STATE_SIZE, self.PERTURBATION_SIZE))
        Jn[V, layout.AN_SLICE] = ws.rotation * dt
        Jn[Q, layout.WN_SLICE] = ws.qnew_w
        Jn[AB, layout.AR_SLICE] = I3
        Jn[WB, layout.WR_SLICE] = I3

        return x_new, Jx, Jn


class ConstantVelocityMotionModel(MotionModel):
    """
    Constant-velocity robot driven only by random impulses.

    State x = [p q v w] (13), no control, perturbation n = [vi wi] (6):

        p' = p + v dt
        q' = normalize(q ⊗ exp(w dt))
        v' = v + vi
        w' = w + wi

    Used when no proprioceptive sensor is available and the robot motion
    is only constrained by smoothness.
    """

    name = "constant_velocity"
    STATE_SIZE = layout.CV_STATE_SIZE
    CONTROL_SIZE = layout.CV_CONTROL_SIZE
    PERTURBATION_SIZE = layout.CV_PERTURBATION_SIZE

    def propagate(
        self,
        x: NDArray[np.float64],
        u: Optional[NDArray[np.float64]],
        n: Optional[NDArray[np.float64]],
        dt: float,
        workspace: Optional[JacobianWorkspace] = None,
    ) -> PropagationResult:
        """
        Predict the constant-velocity state one step of length dt ahead.

        Args:
            x: State [p q v w], shape (13,).
            u: Ignored beyond a shape check; pass None or an empty array.
            n: Perturbation [vi wi], shape (6,), or None for zero.
            dt: Time step in seconds, >= 0.
            workspace: Optional scratch workspace owned by the caller's thread.

        Returns:
            Tuple (x_new, Jx, Jn) with shapes (13,), (13, 13), (13, 6).
        """
        x, u, n, dt = self._check_inputs(x, u, n, dt)
        p, q, v, w = layout.unpack_cv_state(x)
        check_unit_quaternion(q, self.quat_tolerance)

        if dt == 0.0:
            return self._zero_step(x)

        ws = (workspace if workspace is not None else JacobianWorkspace()).acquire()
        vi, wi = layout.unpack_cv_perturbation(n)

        q_new = self._orientation_update(q, w, dt, ws)
        p_new = p + v * dt
        x_new = layout.pack_cv_state(p_new, q_new, v + vi, w + wi)

        ws.idt[:] = np.eye(3) * dt
        I3 = np.eye(3)
        P, Q = layout.CV_P_SLICE, layout.CV_Q_SLICE
        V, W = layout.CV_V_SLICE, layout.CV_W_SLICE

        Jx = np.zeros((self.STATE_SIZE, self.STATE_SIZE))
        Jx[P, P] = I3
        Jx[P, V] = ws.idt
        Jx[Q, Q] = ws.qnew_q
        Jx[Q, W] = ws.qnew_w
        Jx[V, V] = I3
        Jx[W, W] = I3

        Jn = np.zeros((self.STATE_SIZE, self.PERTURBATION_SIZE))
        Jn[V, layout.CV_VI_SLICE] = I3
        Jn[W, layout.CV_WI_SLICE] = I3

        return x_new, Jx, Jn


MOTION_MODELS: Dict[str, Type[MotionModel]] = {
    InertialMotionModel.name: InertialMotionModel,
    ConstantVelocityMotionModel.name: ConstantVelocityMotionModel,
}


def create_motion_model(kind: MotionModelKind, **kwargs) -> MotionModel:
    """
    Instantiate a motion model from its tag.

    Args:
        kind: 'inertial' or 'constant_velocity'.
        **kwargs: Forwarded to the model constructor (e.g. quat_tolerance).

    Returns:
        New motion model instance.

    Raises:
        ValueError: If kind is not a known model tag.

    Example:
        >>> model = create_motion_model("inertial")
        >>> model.size(), model.size_control(), model.size_perturbation()
        (19, 6, 12)
    """
    try:
        model_cls = MOTION_MODELS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown motion model '{kind}', expected one of {sorted(MOTION_MODELS)}"
        ) from None
    return model_cls(**kwargs)
