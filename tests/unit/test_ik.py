import numpy as np
import pytest

from ur5motion.utils.errors import InvalidConfigurationError
from ur5motion.utils.ik import IKStatus, normalize_angles, solve_ik, unwrap_angles
from ur5motion.utils.pose import orientation_error

TWO_PI = 2 * np.pi


def _in_range(q):
    q = np.asarray(q)
    return bool(np.all((q > -TWO_PI) & (q <= TWO_PI)))


def test_normalize_angles_range_and_congruence():
    raw = np.array([7.0, -7.0, TWO_PI, -TWO_PI, 1.0, 13 * np.pi, -3 * np.pi / 2])
    out = normalize_angles(raw)
    assert _in_range(out)
    # Same angle modulo a full turn
    assert np.allclose(np.cos(out), np.cos(raw))
    assert np.allclose(np.sin(out), np.sin(raw))
    # In-range values are untouched
    assert out[4] == 1.0
    assert out[6] == -3 * np.pi / 2


def test_normalize_angles_prefers_representative_near_reference():
    raw = np.array([-0.3, 0.3, 6.4, 0.5, TWO_PI])
    ref = np.array([5.5, -5.5, 6.2, 0.4, 6.2])
    out = normalize_angles(raw, ref)
    assert _in_range(out)
    assert np.allclose(out, [TWO_PI - 0.3, 0.3 - TWO_PI, 6.4 - TWO_PI, 0.5, TWO_PI])


def test_unwrap_angles_moves_solution_within_pi_of_current():
    q_solution = np.array([0.1, -0.1, 1.0])
    q_current = np.array([6.2, -6.2, 1.2])
    out = unwrap_angles(q_solution, q_current)
    assert np.allclose(out, [0.1 + TWO_PI, -0.1 - TWO_PI, 1.0])
    assert np.all(np.abs(out - q_current) <= np.pi)


def test_solve_small_displacement_converges(ur5, ur5_home):
    q_goal = ur5_home + np.array([0.02, -0.03, 0.02, 0.01, -0.02, 0.03])
    target = ur5.forward_kinematics(q_goal)

    res = solve_ik(ur5, target.position, target.rpy, ur5_home)

    assert res.success
    assert res.status is IKStatus.CONVERGED
    assert res.iterations <= 20
    assert _in_range(res.q)
    reached = ur5.forward_kinematics(res.q)
    assert np.allclose(reached.position, target.position, atol=1e-6)
    assert np.linalg.norm(orientation_error(reached.rotation, target.rotation)) < 1e-5


def test_solve_at_target_needs_no_iterations(ur5, ur5_home):
    here = ur5.forward_kinematics(ur5_home)
    res = solve_ik(ur5, here.position, here.rpy, ur5_home)
    assert res.success
    assert res.iterations == 0
    assert np.allclose(res.q, ur5_home)


def test_iteration_budget_exhausted_is_non_convergence(ur5, ur5_home):
    target = ur5.forward_kinematics(ur5_home + 0.05)
    res = solve_ik(ur5, target.position, target.rpy, ur5_home, max_iter=1)
    assert not res.success
    assert res.status is IKStatus.NON_CONVERGENCE
    assert res.iterations == 1
    assert "no convergence" in res.message


def test_gantry_converges_in_position_and_orientation(gantry):
    res = solve_ik(gantry, [0.05, -0.02, 0.03], [0.1, -0.05, 0.2], np.zeros(6))
    assert res.success
    pose = gantry.forward_kinematics(res.q)
    assert np.allclose(pose.position, [0.05, -0.02, 0.03], atol=1e-6)
    assert np.allclose(pose.rpy, [0.1, -0.05, 0.2], atol=1e-5)


def test_unreachable_target_reports_out_of_workspace(flat_gantry):
    res = solve_ik(flat_gantry, [0.3, 0.2, 0.5], [0.0, 0.0, 0.0], np.zeros(6))
    assert not res.success
    assert res.status is IKStatus.OUT_OF_WORKSPACE
    assert res.residual > 0.1
    # The huge step taken by the unobservable joint is still wrapped
    assert _in_range(res.q)
    assert np.allclose(res.q[:2], [0.3, 0.2], atol=1e-6)


def test_reachable_target_on_flat_gantry_succeeds(flat_gantry):
    res = solve_ik(flat_gantry, [0.3, 0.2, 0.05], [0.0, 0.0, 0.0], np.zeros(6))
    assert res.success
    assert res.residual <= 0.1


def test_line_search_exhaustion_is_a_failure_not_an_exception(reversed_gantry):
    res = solve_ik(reversed_gantry, [0.3, 0.2, 0.1], [0.0, 0.0, 0.0], np.zeros(6), line_search_max=10)
    assert not res.success
    assert res.status is IKStatus.NON_CONVERGENCE
    assert "line search" in res.message
    assert np.allclose(res.q, 0.0)


def test_non_finite_jacobian_is_non_convergence(nan_model):
    res = solve_ik(nan_model, [0.3, 0.2, 0.0], [0.0, 0.0, 0.0], np.zeros(6))
    assert not res.success
    assert res.status is IKStatus.NON_CONVERGENCE
    assert "non-finite" in res.message
    assert np.all(np.isfinite(res.q))


@pytest.mark.parametrize(
    "seed,position,rpy",
    [
        (np.zeros(5), [0.4, 0.1, 0.3], [0.0, 0.0, 0.0]),
        (np.zeros(7), [0.4, 0.1, 0.3], [0.0, 0.0, 0.0]),
        (np.zeros(6), [0.4, 0.1], [0.0, 0.0, 0.0]),
        (np.zeros(6), [0.4, 0.1, 0.3], [0.0, 0.0]),
    ],
)
def test_dimension_mismatch_fails_fast(ur5, seed, position, rpy):
    with pytest.raises(InvalidConfigurationError):
        solve_ik(ur5, position, rpy, seed)
    # Still a ValueError for callers that do not know the package types
    with pytest.raises(ValueError):
        solve_ik(ur5, position, rpy, seed)
