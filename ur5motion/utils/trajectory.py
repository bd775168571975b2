"""
Point-to-point joint trajectory sampling.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
import logging

import numpy as np
from numpy.typing import NDArray

from ur5motion.config import TRAJ_EPS
from ur5motion.smooth_motion.quintic import JointQuinticTrajectory
from ur5motion.utils.errors import TrajectoryPlanningError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectorySample:
    index: int
    t: float
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    acceleration: NDArray[np.float64]


def _check_sample_count(sample_count: int) -> None:
    if sample_count < 1:
        raise TrajectoryPlanningError(f"sample_count must be >= 1, got {sample_count}")


def generate_joint_trajectory(
    q_start: Sequence[float],
    q_goal: Sequence[float],
    duration: float,
    sample_count: int,
    eps: float = TRAJ_EPS,
) -> Iterator[TrajectorySample]:
    """
    Lazily sample a zero-velocity, zero-acceleration quintic move.

    Samples are spaced dt = duration / sample_count apart and run from t=0 to
    t=duration inclusive, i.e. sample_count + 1 samples. The last one is
    emitted as exactly q_goal with zero velocity and acceleration; if the
    polynomial itself has drifted more than eps from the goal a warning is
    logged before that corrective sample.

    Parameters are validated when the generator is created, not on first
    iteration.
    """
    _check_sample_count(sample_count)
    traj = JointQuinticTrajectory(q_start, q_goal, duration)
    return _iter_samples(traj, sample_count, eps)


def _iter_samples(traj: JointQuinticTrajectory, sample_count: int, eps: float) -> Iterator[TrajectorySample]:
    dt = traj.T / sample_count
    for i in range(sample_count):
        t = i * dt
        pos, vel, acc = traj.evaluate(t)
        yield TrajectorySample(i, t, pos, vel, acc)

    drift = np.abs(traj.polynomial_position(sample_count * dt) - traj.qf)
    if np.any(drift > eps):
        logger.warning(f"Quintic end drifted {float(drift.max()):.2e} from goal; emitting exact goal")
    zeros = np.zeros(traj.num_axes)
    yield TrajectorySample(sample_count, traj.T, traj.qf.copy(), zeros, zeros.copy())


def plan_joint_quintic(
    q_start: Sequence[float],
    q_goal: Sequence[float],
    duration: float,
    sample_count: int,
) -> np.ndarray:
    """
    Eager form of generate_joint_trajectory.

    Returns: positions of shape (sample_count + 1, N)
    """
    return np.vstack(
        [s.position for s in generate_joint_trajectory(q_start, q_goal, duration, sample_count)]
    )
