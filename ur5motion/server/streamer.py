"""
Real-time paced emission of trajectory samples to a command channel.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import logging
import threading
import time
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from ur5motion.config import TRACE
from ur5motion.server.command_channel import CommandChannel
from ur5motion.utils.trajectory import TrajectorySample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamResult:
    sent: int
    cancelled: bool
    last_position: Optional[NDArray[np.float64]]
    overruns: int = 0


class TrajectoryStreamer:
    """
    Sends samples one at a time, sleeping dt between them.

    Uses deadline scheduling on a monotonic clock: sample i is fully sent
    before the deadline for sample i+1 is computed. An overrun resets the
    deadline instead of bursting to catch up. Pacing happens on the calling
    thread.
    """

    def __init__(
        self,
        channel: CommandChannel,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.channel = channel
        self._clock = clock
        self._sleep = sleep

    def stream(
        self,
        samples: Iterable[TrajectorySample],
        dt: float,
        cancel_event: Optional[threading.Event] = None,
    ) -> StreamResult:
        """
        Emit every sample's position vector.

        If cancel_event gets set, emission stops before the next sample.
        Samples already sent are not rolled back.
        """
        sent = 0
        overruns = 0
        last = None
        next_t = self._clock()
        for sample in samples:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Trajectory cancelled after {sent} samples")
                return StreamResult(sent, True, last, overruns)

            self.channel.send(sample.position.tolist())
            last = sample.position
            sent += 1
            logger.log(TRACE, "traj_sample i=%d t=%.4f", sample.index, sample.t)

            next_t += dt
            remaining = next_t - self._clock()
            if remaining > 0:
                self._sleep(remaining)
            else:
                overruns += 1
                next_t = self._clock()

        if overruns:
            logger.warning(f"Trajectory streaming overran its period {overruns} times (dt={dt:.4f}s)")
        return StreamResult(sent, False, last, overruns)
