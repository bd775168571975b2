"""
Pose representation and orientation error helpers.

Orientations are carried as 3x3 rotation matrices; roll-pitch-yaw is only an
input/output format. RPY convention: R = Rz(yaw) @ Ry(pitch) @ Rx(roll).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.transform import Rotation
from spatialmath import SE3
from spatialmath.base import rpy2r, tr2rpy

RPY_ORDER = "zyx"


def rpy_to_matrix(rpy: ArrayLike) -> NDArray[np.float64]:
    """Roll-pitch-yaw (rad) to rotation matrix."""
    return np.asarray(rpy2r(np.asarray(rpy, dtype=float), order=RPY_ORDER), dtype=float)


def matrix_to_rpy(R: ArrayLike) -> NDArray[np.float64]:
    """Rotation matrix to roll-pitch-yaw (rad)."""
    return np.asarray(tr2rpy(np.asarray(R, dtype=float), order=RPY_ORDER), dtype=float)


@dataclass(frozen=True)
class Pose:
    position: NDArray[np.float64]
    rotation: NDArray[np.float64]

    @classmethod
    def from_rpy(cls, position: Sequence[float], rpy: Sequence[float]) -> "Pose":
        return cls(np.asarray(position, dtype=float).reshape(3), rpy_to_matrix(rpy))

    @classmethod
    def from_se3(cls, T: SE3) -> "Pose":
        return cls(np.asarray(T.t, dtype=float).copy(), np.asarray(T.R, dtype=float).copy())

    @property
    def rpy(self) -> NDArray[np.float64]:
        return matrix_to_rpy(self.rotation)

    def to_se3(self) -> SE3:
        return SE3.Rt(self.rotation, self.position, check=False)


def orientation_error(R_current: ArrayLike, R_target: ArrayLike) -> NDArray[np.float64]:
    """
    SO(3) discrepancy between two rotations, as a world-frame rotation vector.

    log(R_current^T R_target) is the rotation taking the current frame onto
    the target in the current frame's coordinates; it is mapped back to world
    coordinates so it lines up with the angular rows of a world-frame Jacobian.
    """
    Rc = np.asarray(R_current, dtype=float)
    Rt = np.asarray(R_target, dtype=float)
    local = Rotation.from_matrix(Rc.T @ Rt).as_rotvec()
    return Rc @ local


def spatial_error(
    current: Pose, target_position: ArrayLike, target_rotation: ArrayLike
) -> NDArray[np.float64]:
    """6-vector [target_p - current_p ; orientation_error(current_R, target_R)]."""
    dp = np.asarray(target_position, dtype=float) - current.position
    return np.concatenate([dp, orientation_error(current.rotation, target_rotation)])
