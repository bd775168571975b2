# UR5 reference robot: DH model, joint ranges and home posture
from dataclasses import dataclass
from math import pi
from typing import Final
import logging

import numpy as np
from numpy.typing import NDArray
import roboticstoolbox as rtb
from roboticstoolbox import RevoluteDH

from ur5motion.config import HOME_ANGLES_DEG
from ur5motion.kinematics import ToolboxModel

logger = logging.getLogger(__name__)

# -----------------------------
# Typing aliases
# -----------------------------
Vec6f = NDArray[np.float64]
Limits2f = NDArray[np.float64]  # shape (6,2)

Joint_num = 6

# -----------------------------
# Standard DH parameters (m, rad)
# -----------------------------
_dh_d: Vec6f = np.array([0.089159, 0.0, 0.0, 0.10915, 0.09465, 0.0823], dtype=np.float64)
_dh_a: Vec6f = np.array([0.0, -0.425, -0.39225, 0.0, 0.0, 0.0], dtype=np.float64)
_dh_alpha: Vec6f = np.array([pi / 2, 0.0, 0.0, pi / 2, -pi / 2, 0.0], dtype=np.float64)

# Every UR5 joint turns +/- one revolution
_joint_limits_radian: Limits2f = np.tile([-2.0 * pi, 2.0 * pi], (Joint_num, 1)).astype(np.float64)
_joint_limits_degree: Limits2f = np.rad2deg(_joint_limits_radian)

# Home posture: wrist centred, tool frame aligned with the world frame
_home_deg: Vec6f = np.array(HOME_ANGLES_DEG, dtype=np.float64)
_home_rad: Vec6f = np.deg2rad(_home_deg).astype(np.float64)


def _build_robot() -> rtb.DHRobot:
    links = [
        RevoluteDH(d=_dh_d[j], a=_dh_a[j], alpha=_dh_alpha[j], qlim=_joint_limits_radian[j])
        for j in range(Joint_num)
    ]
    return rtb.DHRobot(links, name="UR5", manufacturer="Universal Robots")


robot: Final[rtb.DHRobot] = _build_robot()
model: Final[ToolboxModel] = ToolboxModel(robot)


# -----------------------------
# Typed hierarchical API
# -----------------------------
@dataclass(frozen=True)
class JointLimits:
    deg: Limits2f
    rad: Limits2f


@dataclass(frozen=True)
class Home:
    deg: Vec6f
    rad: Vec6f


@dataclass(frozen=True)
class Joint:
    limits: JointLimits
    home: Home


joint: Final[Joint] = Joint(
    limits=JointLimits(deg=_joint_limits_degree, rad=_joint_limits_radian),
    home=Home(deg=_home_deg, rad=_home_rad),
)


def home_q() -> Vec6f:
    """Copy of the home configuration in radians."""
    return joint.home.rad.copy()
