"""
ur5motion Python Package

Inverse kinematics and smooth joint-space motion for 6-DOF arms.

Key components:
- solve_ik: damped Gauss-Newton IK for small displacements
- solve_ik_coarse_to_fine: chains solve_ik over sub-steps for large moves
- ConfigurationCache: nearest-position seed cache for warm starts
- generate_joint_trajectory: lazy quintic joint trajectory samples
- MoveServer: goal -> IK -> paced trajectory on a command channel
"""

from . import UR5_ROBOT, config
from .kinematics import KinematicModel, ToolboxModel
from .server.command_channel import CommandChannel, JointCommandPublisher
from .server.move_server import MoveGoal, MoveResult, MoveServer
from .server.streamer import StreamResult, TrajectoryStreamer
from .utils.ik import (
    IKResult,
    IKStatus,
    normalize_angles,
    unwrap_angles,
    solve_ik,
    solve_ik_cached,
    solve_ik_coarse_to_fine,
)
from .utils.ik_cache import ConfigurationCache
from .utils.pose import Pose
from .utils.trajectory import TrajectorySample, generate_joint_trajectory, plan_joint_quintic

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "config",
    "UR5_ROBOT",
    "KinematicModel",
    "ToolboxModel",
    "Pose",
    "IKResult",
    "IKStatus",
    "normalize_angles",
    "unwrap_angles",
    "solve_ik",
    "solve_ik_cached",
    "solve_ik_coarse_to_fine",
    "ConfigurationCache",
    "TrajectorySample",
    "generate_joint_trajectory",
    "plan_joint_quintic",
    "CommandChannel",
    "JointCommandPublisher",
    "TrajectoryStreamer",
    "StreamResult",
    "MoveGoal",
    "MoveResult",
    "MoveServer",
]
