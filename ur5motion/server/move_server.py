"""
Move server: turns pose goals into streamed joint trajectories.

Each goal carries the arm's current configuration explicitly; the server
keeps no configuration of its own between goals.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import logging
import threading
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ur5motion.config import IK_COARSE_STEPS, TRAJ_DURATION_S, TRAJ_SAMPLES
from ur5motion.kinematics import KinematicModel, check_configuration
from ur5motion.server.command_channel import CommandChannel
from ur5motion.server.streamer import TrajectoryStreamer
from ur5motion.utils.ik import IKStatus, solve_ik_coarse_to_fine, unwrap_angles
from ur5motion.utils.ik_cache import ConfigurationCache
from ur5motion.utils.trajectory import generate_joint_trajectory

logger = logging.getLogger(__name__)


def _fmt(v: Sequence[float]) -> str:
    return "(" + ",".join(f"{x:.3f}" for x in v) + ")"


@dataclass(frozen=True)
class MoveGoal:
    position: Sequence[float]
    rpy: Sequence[float]
    current_q: Sequence[float]


@dataclass(frozen=True)
class MoveResult:
    success: bool
    q: NDArray[np.float64]
    status: IKStatus
    message: Optional[str] = None
    samples_sent: int = 0
    cancelled: bool = False


class MoveServer:
    """
    Goal -> IK -> quintic trajectory -> command channel.

    The coarse-to-fine solve is seeded from the goal's current configuration.
    If it fails and a cache is configured, one retry is made from the cached
    seed nearest the target. Successful solutions are added to the cache.

    The streamed goal is the solution shifted by whole turns to lie within
    pi of the current configuration, and it is what the result reports as q.
    """

    def __init__(
        self,
        model: KinematicModel,
        channel: CommandChannel,
        *,
        cache: Optional[ConfigurationCache] = None,
        home_q: Optional[Sequence[float]] = None,
        duration: float = TRAJ_DURATION_S,
        sample_count: int = TRAJ_SAMPLES,
        coarse_steps: int = IK_COARSE_STEPS,
        streamer: Optional[TrajectoryStreamer] = None,
    ):
        self.model = model
        self.cache = cache
        self.home_q = None if home_q is None else check_configuration(model, home_q)
        self.duration = duration
        self.sample_count = sample_count
        self.coarse_steps = coarse_steps
        self.streamer = streamer if streamer is not None else TrajectoryStreamer(channel)

    def execute(self, goal: MoveGoal, cancel_event: Optional[threading.Event] = None) -> MoveResult:
        current_q = check_configuration(self.model, goal.current_q)
        logger.info(f"target: {_fmt(goal.position)}, {_fmt(goal.rpy)}")

        res = solve_ik_coarse_to_fine(
            self.model, goal.position, goal.rpy, current_q, n_steps=self.coarse_steps
        )
        if not res.success and self.cache is not None:
            fallback = self.home_q if self.home_q is not None else current_q
            seed = self.cache.lookup(goal.position, default=fallback)
            logger.info("Retrying IK from cached seed")
            res = solve_ik_coarse_to_fine(
                self.model, goal.position, goal.rpy, seed, n_steps=self.coarse_steps
            )

        if not res.success:
            logger.warning(f"Warning: IK did not converge to the desired precision: {res.message}")
            return MoveResult(False, current_q, res.status, res.message)

        logger.info("Convergence achieved!")
        if self.cache is not None:
            self.cache.record(goal.position, res.q)

        # Within pi of current_q per joint; may leave (-2pi, 2pi]
        q_goal = unwrap_angles(res.q, current_q)
        samples = generate_joint_trajectory(current_q, q_goal, self.duration, self.sample_count)
        streamed = self.streamer.stream(samples, self.duration / self.sample_count, cancel_event)
        if streamed.cancelled:
            # The arm stopped somewhere along the way; report where
            q_reached = streamed.last_position if streamed.last_position is not None else current_q
            return MoveResult(
                False, np.asarray(q_reached, dtype=float), res.status,
                "trajectory cancelled", streamed.sent, True,
            )
        return MoveResult(True, q_goal, res.status, None, streamed.sent, False)

    def serve(
        self, goals: Iterable[MoveGoal], cancel_event: Optional[threading.Event] = None
    ) -> Iterator[MoveResult]:
        """One result per goal, in order. Stops early once cancel_event is set."""
        for goal in goals:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Goal source cancelled")
                return
            yield self.execute(goal, cancel_event)
