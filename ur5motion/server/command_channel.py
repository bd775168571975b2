"""
Joint command channel contract and the joint/gripper publisher.

The transport behind a channel (ROS topic, UDP socket, serial link) lives
outside this package; all a channel does is "send this vector now".
"""

from collections.abc import Sequence
import logging
import threading
from typing import Protocol, runtime_checkable

import numpy as np

from ur5motion.config import GRIPPER_AXES

logger = logging.getLogger(__name__)


@runtime_checkable
class CommandChannel(Protocol):
    def send(self, values: Sequence[float]) -> None: ...


class JointCommandPublisher:
    """
    Merges arm joint positions and extra trailing axes into one command.

    Every update of either part re-sends the flat vector
    [j0..j(n-1), x0..x(m-1)] on the underlying channel. Used as a
    CommandChannel it accepts arm joint vectors only.
    """

    def __init__(self, channel: CommandChannel, n_joints: int = 6, n_extra: int = GRIPPER_AXES):
        self.channel = channel
        self._lock = threading.Lock()
        self.joint_positions = np.zeros(n_joints)
        self.extra_positions = np.zeros(n_extra)

    def set_joint_positions(self, q: Sequence[float]) -> None:
        q_arr = np.asarray(q, dtype=float).reshape(-1)
        if q_arr.shape != self.joint_positions.shape:
            raise ValueError(
                f"expected {self.joint_positions.shape[0]} joint values, got {q_arr.shape[0]}"
            )
        with self._lock:
            self.joint_positions = q_arr.copy()
            self._publish()

    def set_extra_positions(self, value: float | Sequence[float]) -> None:
        """Set all extra axes to one value, or each to its own value."""
        with self._lock:
            if np.isscalar(value):
                self.extra_positions = np.full_like(self.extra_positions, float(value))
            else:
                arr = np.asarray(value, dtype=float).reshape(-1)
                if arr.shape != self.extra_positions.shape:
                    raise ValueError(
                        f"expected {self.extra_positions.shape[0]} extra values, got {arr.shape[0]}"
                    )
                self.extra_positions = arr.copy()
            self._publish()

    def send(self, values: Sequence[float]) -> None:
        self.set_joint_positions(values)

    def _publish(self) -> None:
        command = np.concatenate([self.joint_positions, self.extra_positions]).tolist()
        self.channel.send(command)
