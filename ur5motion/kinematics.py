"""
Kinematic model contract consumed by the IK solver, and an adapter for
roboticstoolbox robots.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray
import roboticstoolbox as rtb

from ur5motion.utils.errors import InvalidConfigurationError
from ur5motion.utils.pose import Pose

logger = logging.getLogger(__name__)


@runtime_checkable
class KinematicModel(Protocol):
    """
    Forward kinematics and world-frame Jacobian for a serial arm.

    Both calls must be deterministic for a fixed configuration. The Jacobian
    is 6 x n with rows [vx, vy, vz, wx, wy, wz].
    """

    n: int

    def forward_kinematics(self, q: ArrayLike) -> Pose: ...

    def jacobian(self, q: ArrayLike) -> NDArray[np.float64]: ...


class ToolboxModel:
    """KinematicModel backed by a roboticstoolbox robot (DHRobot, ERobot, ...)."""

    def __init__(self, robot: rtb.Robot):
        self.robot = robot
        self.n = int(robot.n)

    def __repr__(self):
        return f"ToolboxModel({self.robot.name!r}, n={self.n})"

    def forward_kinematics(self, q: ArrayLike) -> Pose:
        return Pose.from_se3(self.robot.fkine(check_configuration(self, q)))

    def jacobian(self, q: ArrayLike) -> NDArray[np.float64]:
        return np.asarray(self.robot.jacob0(check_configuration(self, q)), dtype=float)


def check_configuration(model: KinematicModel, q: ArrayLike) -> NDArray[np.float64]:
    """Return q as a float vector, failing fast if its length is not model.n."""
    q_arr = np.asarray(q, dtype=float).reshape(-1)
    if q_arr.shape[0] != model.n:
        raise InvalidConfigurationError(
            f"configuration has {q_arr.shape[0]} joints, model expects {model.n}"
        )
    return q_arr
