"""
Scratch matrices for Jacobian assembly.

A JacobianWorkspace holds the fixed-size temporaries a motion model needs
while chaining quaternion Jacobians into the full state and perturbation
Jacobians. It is owned by the thread that created it: motion models refuse
to use a workspace from any other thread, so two concurrent propagations
can never share one. Every buffer is zero-filled before each use, so
nothing carries over from one propagation to the next.

Typical ownership patterns:
    - per call: pass nothing, the model creates a call-local workspace
    - per robot: a RobotContext creates one workspace and reuses it
    - per worker thread: each worker creates its own workspace
"""

import threading
from dataclasses import dataclass, field, fields

import numpy as np
from numpy.typing import NDArray


def _buffer(rows: int, cols: int):
    return field(default_factory=lambda: np.zeros((rows, cols)))


@dataclass(eq=False)
class JacobianWorkspace:
    """
    Reusable temporaries for motion-model Jacobians.

    Attributes:
        idt: I * dt, shape (3, 3).
        rotation: R(q) of the pre-update orientation, shape (3, 3).
        qnew_q: ∂q'/∂q including renormalization, shape (4, 4).
        qnew_qwdt: ∂q'/∂(quaternion increment), shape (4, 4).
        qwdt_w: ∂(quaternion increment)/∂(angular rate), shape (4, 3).
        qnew_w: ∂q'/∂(angular rate), shape (4, 3).
        vnew_q: ∂v'/∂q, shape (3, 4).
        normalize: Jacobian of the post-composition renormalization, shape (4, 4).
        owner: Identifier of the thread allowed to use this workspace.
    """

    idt: NDArray[np.float64] = _buffer(3, 3)
    rotation: NDArray[np.float64] = _buffer(3, 3)
    qnew_q: NDArray[np.float64] = _buffer(4, 4)
    qnew_qwdt: NDArray[np.float64] = _buffer(4, 4)
    qwdt_w: NDArray[np.float64] = _buffer(4, 3)
    qnew_w: NDArray[np.float64] = _buffer(4, 3)
    vnew_q: NDArray[np.float64] = _buffer(3, 4)
    normalize: NDArray[np.float64] = _buffer(4, 4)
    owner: int = field(default_factory=threading.get_ident)

    def reset(self) -> None:
        """Zero-fill every buffer."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value.fill(0.0)

    def acquire(self) -> "JacobianWorkspace":
        """
        Claim the workspace for one propagation.

        Returns:
            self, reset and ready for use.

        Raises:
            RuntimeError: If called from a thread other than the owner.
        """
        caller = threading.get_ident()
        if caller != self.owner:
            raise RuntimeError(
                f"JacobianWorkspace owned by thread {self.owner} "
                f"cannot be used from thread {caller}"
            )
        self.reset()
        return self
