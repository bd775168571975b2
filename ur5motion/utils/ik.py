"""
IK Solver Functions and Utilities

Damped Gauss-Newton inverse kinematics with a backtracking line search, the
coarse-to-fine wrapper that keeps each Newton solve local, and the cache
seeded variant used for warm starts.
"""

from collections import namedtuple
from collections.abc import Sequence
from enum import Enum
import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ur5motion.config import (
    IK_ALPHA0,
    IK_BETA,
    IK_COARSE_STEPS,
    IK_DAMPING,
    IK_EPS,
    IK_LINE_SEARCH_MAX,
    IK_MAX_ITER,
    IK_WORKSPACE_TOL,
    TRACE,
)
from ur5motion.kinematics import KinematicModel, check_configuration
from ur5motion.utils.errors import InvalidConfigurationError
from ur5motion.utils.ik_cache import ConfigurationCache
from ur5motion.utils.pose import Pose, rpy_to_matrix, spatial_error

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi


class IKStatus(Enum):
    CONVERGED = "converged"
    NON_CONVERGENCE = "non_convergence"
    OUT_OF_WORKSPACE = "out_of_workspace"
    SUBSTEP_FAILURE = "substep_failure"


IKResult = namedtuple('IKResult', 'success q iterations residual status message')


def normalize_angles(q: ArrayLike, reference: ArrayLike | None = None) -> NDArray[np.float64]:
    """
    Wrap every joint angle into (-2*pi, 2*pi].

    Values strictly inside the range are returned unchanged, so a joint at
    -3*pi/2 stays there rather than being folded to +pi/2. Whole turns map
    to 0.

    The range is two turns wide, so every angle has two representatives in
    it. When reference is given, the one nearer the reference is returned.
    """
    # fmod keeps the sign of q; + 0.0 turns -0.0 into 0.0
    wrapped = np.fmod(np.asarray(q, dtype=float), TWO_PI) + 0.0
    if reference is None:
        return wrapped
    diff = wrapped - np.asarray(reference, dtype=float)
    wrapped[(diff < -np.pi) & (wrapped <= 0.0)] += TWO_PI
    wrapped[(diff > np.pi) & (wrapped > 0.0)] -= TWO_PI
    return wrapped


def unwrap_angles(q_solution: ArrayLike, q_current: ArrayLike) -> NDArray[np.float64]:
    """
    Bring solution angles near current by adding/subtracting 2*pi.

    The result may leave (-2*pi, 2*pi]; it is the joint-space goal of a
    motion, not a canonical configuration.
    """
    qs = np.asarray(q_solution, dtype=float)
    qc = np.asarray(q_current, dtype=float)
    diff = qs - qc
    q_unwrapped = qs.copy()
    q_unwrapped[diff > np.pi] -= TWO_PI
    q_unwrapped[diff < -np.pi] += TWO_PI
    return q_unwrapped


def _check_vector3(name: str, v: ArrayLike) -> NDArray[np.float64]:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape[0] != 3:
        raise InvalidConfigurationError(f"{name} must have 3 elements, got {arr.shape[0]}")
    return arr


def _damped_step(jacobian: NDArray, error: NDArray, damping: float) -> NDArray:
    """dq = (J + lambda*I)^-1 e, with I the 6 x n identity."""
    rows, cols = jacobian.shape
    damped = jacobian + damping * np.eye(rows, cols)
    if rows == cols:
        return np.linalg.solve(damped, error)
    return np.linalg.lstsq(damped, error, rcond=None)[0]


def solve_ik(
    model: KinematicModel,
    target_position: Sequence[float],
    target_rpy: Sequence[float],
    seed_q: ArrayLike,
    *,
    max_iter: int = IK_MAX_ITER,
    eps: float = IK_EPS,
    damping: float = IK_DAMPING,
    workspace_tol: float = IK_WORKSPACE_TOL,
    alpha0: float = IK_ALPHA0,
    beta: float = IK_BETA,
    line_search_max: int = IK_LINE_SEARCH_MAX,
) -> IKResult:
    """
    Single-shot IK for small displacements.

    Parameters
    ----------
    model : KinematicModel
        Forward kinematics and world-frame Jacobian provider
    target_position : sequence of 3 floats
        Desired end-effector position
    target_rpy : sequence of 3 floats
        Desired orientation as roll, pitch, yaw (rad)
    seed_q : array_like
        Initial guess; should be close to the answer, since the Newton
        iteration is only locally convergent
    max_iter : int, optional
        Outer iteration budget; the only non-convergence termination
    eps : float, optional
        Convergence threshold on ||J^T e||
    damping : float, optional
        Fixed regularization added to J before inversion
    workspace_tol : float, optional
        Residual ||e|| above which a stationary point is reported as out of
        workspace instead of converged
    line_search_max : int, optional
        Maximum number of step halvings per iteration

    Returns
    -------
    IKResult
        success - True only when converged inside the workspace
        q - last iterate, wrapped into (-2pi, 2pi] on the side nearer the seed
        iterations - outer iterations used
        residual - final ||e||
        status - IKStatus
        message - diagnostic text, None on success

    A near-singular Jacobian is mitigated by the damping, not eliminated:
    it can still produce huge oscillating steps the line search keeps
    rejecting. Running out of line-search attempts, or any non-finite
    value, ends the solve as NON_CONVERGENCE.
    """
    q_seed = check_configuration(model, seed_q)
    q = q_seed.copy()
    p_target = _check_vector3("target_position", target_position)
    R_target = rpy_to_matrix(_check_vector3("target_rpy", target_rpy))

    def _error(q_eval) -> NDArray[np.float64]:
        pose: Pose = model.forward_kinematics(q_eval)
        return spatial_error(pose, p_target, R_target)

    status = IKStatus.NON_CONVERGENCE
    message = None
    niter = 0
    e = _error(q)
    e_norm = float(np.linalg.norm(e))

    while niter < max_iter:
        J = np.asarray(model.jacobian(q), dtype=float)
        grad = J.T @ e
        grad_norm = float(np.linalg.norm(grad))
        if not (np.all(np.isfinite(J)) and np.isfinite(e_norm) and np.isfinite(grad_norm)):
            message = f"non-finite Jacobian or error at iteration {niter}"
            break

        logger.log(TRACE, "ik_iter n=%d err=%.3e grad=%.3e", niter, e_norm, grad_norm)
        if grad_norm < eps:
            if e_norm > workspace_tol:
                status = IKStatus.OUT_OF_WORKSPACE
                message = f"stationary point with residual {e_norm:.4f} > {workspace_tol}; target likely unreachable"
            else:
                status = IKStatus.CONVERGED
            break

        try:
            dq = _damped_step(J, e, damping)
        except np.linalg.LinAlgError as exc:
            message = f"damped Jacobian not invertible at iteration {niter}: {exc}"
            break
        if not np.all(np.isfinite(dq)):
            message = f"non-finite step at iteration {niter}"
            break

        alpha = alpha0
        accepted = False
        for _ in range(line_search_max):
            q1 = q + alpha * dq
            e1 = _error(q1)
            e1_norm = float(np.linalg.norm(e1))
            # Ties are accepted: a flat direction must not stall the iteration
            if np.isfinite(e1_norm) and e1_norm <= e_norm:
                q, e, e_norm = q1, e1, e1_norm
                accepted = True
                break
            alpha *= beta
        if not accepted:
            message = f"line search exhausted {line_search_max} attempts at iteration {niter}"
            break
        niter += 1
    else:
        message = f"no convergence within {max_iter} iterations (residual {e_norm:.3e})"

    success = status is IKStatus.CONVERGED
    if not success:
        logger.debug("IK failed: %s (%s)", status.value, message)
    return IKResult(
        success=success,
        q=normalize_angles(q, q_seed),
        iterations=niter,
        residual=e_norm,
        status=status,
        message=message,
    )


def solve_ik_coarse_to_fine(
    model: KinematicModel,
    target_position: Sequence[float],
    target_rpy: Sequence[float],
    seed_q: ArrayLike,
    *,
    n_steps: int = IK_COARSE_STEPS,
    **solver_kwargs,
) -> IKResult:
    """
    Split a large pose change into n_steps small ones and chain solve_ik.

    Position is interpolated linearly. Orientation is stepped linearly in RPY,
    which is only an approximation of a proper rotation interpolation; it is
    kept because each sub-step is small and the convergence behaviour of the
    chained solves depends on it.

    The first failing sub-step aborts the whole solve. The partial
    configuration is discarded: the result carries q=None.
    """
    if n_steps < 1:
        raise ValueError(f"n_steps must be >= 1, got {n_steps}")
    q = check_configuration(model, seed_q).copy()
    p_target = _check_vector3("target_position", target_position)
    rpy_target = _check_vector3("target_rpy", target_rpy)

    start = model.forward_kinematics(q)
    p_step = (p_target - start.position) / n_steps
    rpy_step = (rpy_target - start.rpy) / n_steps

    p_sofar = start.position.copy()
    rpy_sofar = start.rpy.copy()
    total_iter = 0
    res = None
    for i in range(n_steps):
        p_sofar = p_sofar + p_step
        rpy_sofar = rpy_sofar + rpy_step
        res = solve_ik(model, p_sofar, rpy_sofar, q, **solver_kwargs)
        total_iter += res.iterations
        if not res.success:
            message = f"sub-step {i + 1}/{n_steps} failed: {res.status.value}"
            if res.message:
                message += f" ({res.message})"
            logger.warning(message)
            return IKResult(
                success=False,
                q=None,
                iterations=total_iter,
                residual=res.residual,
                status=IKStatus.SUBSTEP_FAILURE,
                message=message,
            )
        q = res.q

    logger.debug("Coarse-to-fine IK converged in %d iterations over %d steps", total_iter, n_steps)
    return IKResult(
        success=True,
        q=q,
        iterations=total_iter,
        residual=res.residual,
        status=IKStatus.CONVERGED,
        message=None,
    )


def solve_ik_cached(
    model: KinematicModel,
    target_position: Sequence[float],
    target_rpy: Sequence[float],
    cache: ConfigurationCache,
    default_q: ArrayLike,
    *,
    record: bool = True,
    **solver_kwargs,
) -> IKResult:
    """Seed solve_ik with the cached configuration nearest the target position."""
    seed = cache.lookup(target_position, default=default_q)
    logger.debug("Cache seed for %s: %s", list(target_position), seed)
    res = solve_ik(model, target_position, target_rpy, seed, **solver_kwargs)
    if res.success and record:
        cache.record(target_position, res.q)
    return res
