"""
Central configuration for ur5motion tunables and shared constants.
"""

import logging
import os
from pathlib import Path

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("UR5_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}; using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}; using {default}")
        return default


# IK solver (damped Gauss-Newton with backtracking line search)
IK_MAX_ITER: int = _env_int("UR5_IK_MAX_ITER", 20)
IK_EPS: float = _env_float("UR5_IK_EPS", 1e-6)  # gradient-norm convergence threshold
IK_DAMPING: float = _env_float("UR5_IK_DAMPING", 1e-8)
IK_WORKSPACE_TOL: float = _env_float("UR5_IK_WORKSPACE_TOL", 0.1)  # residual (m/rad) above which a stationary point is out of reach
IK_LINE_SEARCH_MAX: int = _env_int("UR5_IK_LINE_SEARCH_MAX", 50)
IK_ALPHA0: float = 1.0
IK_BETA: float = 0.5

# Coarse-to-fine subdivision count
IK_COARSE_STEPS: int = _env_int("UR5_IK_COARSE_STEPS", 4)

# Point-to-point joint trajectories
TRAJ_DURATION_S: float = _env_float("UR5_TRAJ_DURATION_S", 2.0)
TRAJ_SAMPLES: int = _env_int("UR5_TRAJ_SAMPLES", 100)
TRAJ_EPS: float = 1e-6

# Extra trailing axes carried on the joint command channel (gripper fingers)
GRIPPER_AXES: int = _env_int("UR5_GRIPPER_AXES", 3)

LOG_LEVEL_DEFAULT: str = "INFO"

# Seed cache persistence file stored in user config directory by default.
_default_cache_file = Path.home() / ".ur5motion" / "ik_cache.json"
CACHE_FILE: str = os.getenv("UR5_CACHE_FILE", str(_default_cache_file))

_DEFAULT_HOME_DEG: list[float] = [30.0, -100.0, -130.0, -40.0, -90.0, -120.0]


# Home posture (degrees); can be overridden via env "UR5_HOME_ANGLES_DEG" (CSV)
def _parse_home_angles() -> list[float]:
    raw = os.getenv("UR5_HOME_ANGLES_DEG")
    if not raw:
        return list(_DEFAULT_HOME_DEG)
    try:
        vals = [float(p.strip()) for p in raw.split(",")]
    except ValueError:
        logger.warning(f"Ignoring malformed UR5_HOME_ANGLES_DEG={raw!r}")
        return list(_DEFAULT_HOME_DEG)
    # Ensure length 6
    if len(vals) != 6:
        logger.warning(f"UR5_HOME_ANGLES_DEG needs 6 values, got {len(vals)}")
        return list(_DEFAULT_HOME_DEG)
    return vals


HOME_ANGLES_DEG: list[float] = _parse_home_angles()
