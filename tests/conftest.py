"""
Pytest configuration and shared fixtures for ur5motion tests.

Provides the reference UR5 model, small analytic kinematic models whose
behaviour is known exactly, and a channel that records what it is sent.
"""

import os
import sys
from dataclasses import dataclass, field

import numpy as np
import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from ur5motion.utils.pose import Pose


class GantryModel:
    """
    Cartesian gantry: end-effector position is q[0:3], orientation is
    rpy(q[3:6]). The Jacobian is computed by central differences so the
    solver sees a generic, consistent model.
    """

    n = 6

    def forward_kinematics(self, q):
        q = np.asarray(q, dtype=float)
        return Pose.from_rpy(q[:3], q[3:6])

    def jacobian(self, q):
        q = np.asarray(q, dtype=float)
        J = np.zeros((6, 6))
        base = self.forward_kinematics(q)
        h = 1e-7
        for j in range(6):
            dq = np.zeros(6)
            dq[j] = h
            plus = self.forward_kinematics(q + dq)
            minus = self.forward_kinematics(q - dq)
            J[:3, j] = (plus.position - minus.position) / (2 * h)
            dR = (plus.rotation - minus.rotation) / (2 * h)
            W = dR @ base.rotation.T
            J[3:, j] = [W[2, 1], W[0, 2], W[1, 0]]
        return J


class FlatGantryModel:
    """
    Gantry that cannot leave the z=0 plane: position is (q0, q1, 0) and the
    orientation is fixed. Any target with |z| > 0.1 is out of its workspace.
    """

    n = 6

    def forward_kinematics(self, q):
        q = np.asarray(q, dtype=float)
        return Pose(np.array([q[0], q[1], 0.0]), np.eye(3))

    def jacobian(self, q):
        J = np.zeros((6, 6))
        J[0, 0] = 1.0
        J[1, 1] = 1.0
        return J


class ReversedGantryModel(FlatGantryModel):
    """Reports a Jacobian with the wrong sign, so every Newton step makes things worse."""

    def forward_kinematics(self, q):
        q = np.asarray(q, dtype=float)
        return Pose(np.array([q[0], q[1], q[2]]), np.eye(3))

    def jacobian(self, q):
        J = np.zeros((6, 6))
        J[:3, :3] = -np.eye(3)
        J[3:, 3:] = np.eye(3)
        return J


class NaNJacobianModel(FlatGantryModel):
    def jacobian(self, q):
        return np.full((6, 6), np.nan)


@dataclass
class RecordingChannel:
    sent: list = field(default_factory=list)

    def send(self, values):
        self.sent.append(list(values))


@pytest.fixture(scope="session")
def ur5():
    import ur5motion.UR5_ROBOT as UR5_ROBOT
    return UR5_ROBOT.model


@pytest.fixture(scope="session")
def ur5_home():
    import ur5motion.UR5_ROBOT as UR5_ROBOT
    return UR5_ROBOT.home_q()


@pytest.fixture
def gantry():
    return GantryModel()


@pytest.fixture
def flat_gantry():
    return FlatGantryModel()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def reversed_gantry():
    return ReversedGantryModel()


@pytest.fixture
def nan_model():
    return NaNJacobianModel()


class FakeClock:
    """Monotonic clock whose sleep() just advances time."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()
