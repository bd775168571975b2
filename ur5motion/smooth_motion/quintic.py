"""
Quintic polynomial joint trajectories.
"""
import numpy as np
from numpy.typing import ArrayLike, NDArray

from ur5motion.utils.errors import TrajectoryPlanningError


def quintic_coefficients(q0: ArrayLike, qf: ArrayLike, T: float) -> NDArray[np.float64]:
    """
    Coefficients of q(t) = c0 + c1*t + ... + c5*t^5 for every joint.

    Rest-to-rest boundary-value solution (zero velocity and acceleration at
    both ends): c3 = 10d/T^3, c4 = -15d/T^4, c5 = 6d/T^5 with d = qf - q0.

    Returns:
        array of shape (6, N): row k holds the t^k coefficient of each joint
    """
    q0 = np.asarray(q0, dtype=float).reshape(-1)
    qf = np.asarray(qf, dtype=float).reshape(-1)
    if q0.shape != qf.shape:
        raise TrajectoryPlanningError(f"start has {q0.shape[0]} joints but goal has {qf.shape[0]}")
    if T <= 0:
        raise TrajectoryPlanningError(f"Duration must be positive, got T={T}")

    d = qf - q0
    zeros = np.zeros_like(q0)
    return np.vstack([q0, zeros, zeros, 10 * d / T**3, -15 * d / T**4, 6 * d / T**5])


class JointQuinticTrajectory:
    """
    Synchronized quintic trajectory for N joints.

    Every joint shares the duration, so all of them start and stop together.
    Evaluation is vectorized across joints; times outside [0, T] clamp to the
    boundary values.
    """

    def __init__(self, q0: ArrayLike, qf: ArrayLike, T: float):
        self.T = float(T)
        self.coeffs = quintic_coefficients(q0, qf, self.T)
        self.q0 = self.coeffs[0].copy()
        self.qf = np.asarray(qf, dtype=float).reshape(-1)
        self.num_axes = self.q0.shape[0]

        c = self.coeffs
        self.vel_coeffs = np.vstack([c[1], 2 * c[2], 3 * c[3], 4 * c[4], 5 * c[5]])
        self.acc_coeffs = np.vstack([2 * c[2], 6 * c[3], 12 * c[4], 20 * c[5]])

    @staticmethod
    def _horner(coeffs: NDArray, t: float) -> NDArray[np.float64]:
        result = coeffs[-1].copy()
        for row in coeffs[-2::-1]:
            result = result * t + row
        return result

    def position(self, t: float) -> NDArray[np.float64]:
        if t <= 0:
            return self.q0.copy()
        if t >= self.T:
            return self.qf.copy()
        return self._horner(self.coeffs, t)

    def velocity(self, t: float) -> NDArray[np.float64]:
        if t <= 0 or t >= self.T:
            return np.zeros(self.num_axes)
        return self._horner(self.vel_coeffs, t)

    def acceleration(self, t: float) -> NDArray[np.float64]:
        if t <= 0 or t >= self.T:
            return np.zeros(self.num_axes)
        return self._horner(self.acc_coeffs, t)

    def evaluate(self, t: float) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """(position, velocity, acceleration) at time t."""
        return self.position(t), self.velocity(t), self.acceleration(t)

    def polynomial_position(self, t: float) -> NDArray[np.float64]:
        """Raw polynomial value, without the boundary clamp (used for drift checks)."""
        return self._horner(self.coeffs, t)
