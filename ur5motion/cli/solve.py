"""
CLI entry point for the ur5motion-solve command.

Solves IK for one target pose on the reference UR5 and optionally prints the
quintic joint trajectory from the seed to the solution.
"""

import argparse
import logging
import sys

import numpy as np

import ur5motion.UR5_ROBOT as UR5_ROBOT
from ur5motion.config import (
    CACHE_FILE,
    IK_COARSE_STEPS,
    LOG_LEVEL_DEFAULT,
    TRACE,
    TRACE_ENABLED,
    TRAJ_DURATION_S,
    TRAJ_SAMPLES,
)
from ur5motion.utils.ik import solve_ik_cached, solve_ik_coarse_to_fine
from ur5motion.utils.ik_cache import ConfigurationCache
from ur5motion.utils.trajectory import plan_joint_quintic

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='UR5 inverse kinematics solver')
    parser.add_argument('position', type=float, nargs=3, metavar=('X', 'Y', 'Z'),
                        help='Target end-effector position (m)')
    parser.add_argument('--rpy', type=float, nargs=3, default=[0.0, 0.0, 0.0],
                        metavar=('R', 'P', 'Y'), help='Target orientation, roll pitch yaw (rad)')
    parser.add_argument('--seed-deg', type=float, nargs=6, default=None,
                        help='Seed configuration in degrees (default: home posture)')
    parser.add_argument('--steps', type=int, default=IK_COARSE_STEPS,
                        help='Coarse-to-fine sub-steps')
    parser.add_argument('--cache', nargs='?', const=CACHE_FILE, default=None,
                        help='Seed from a JSON seed cache instead of coarse-to-fine stepping')
    parser.add_argument('--record', action='store_true',
                        help='Save the solution back into the seed cache')
    parser.add_argument('--trajectory', action='store_true',
                        help='Print the joint trajectory from seed to solution')
    parser.add_argument('--duration', type=float, default=TRAJ_DURATION_S,
                        help='Trajectory duration (s)')
    parser.add_argument('--samples', type=int, default=TRAJ_SAMPLES,
                        help='Trajectory sample count')

    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Enable quiet logging (WARNING level)')
    parser.add_argument('--log-level', choices=['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Set specific log level')
    return parser


def _log_level(args) -> int:
    if args.log_level:
        if args.log_level == 'TRACE':
            return TRACE
        return getattr(logging, args.log_level)
    if args.verbose >= 3:
        return TRACE
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    if args.quiet:
        return logging.WARNING
    if TRACE_ENABLED:
        return TRACE
    return getattr(logging, LOG_LEVEL_DEFAULT)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=_log_level(args),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    model = UR5_ROBOT.model
    seed = UR5_ROBOT.home_q() if args.seed_deg is None else np.deg2rad(args.seed_deg)

    if args.cache is not None:
        cache = ConfigurationCache.load(args.cache)
        res = solve_ik_cached(model, args.position, args.rpy, cache, seed, record=args.record)
        if args.record and res.success:
            cache.save(args.cache)
    else:
        res = solve_ik_coarse_to_fine(model, args.position, args.rpy, seed, n_steps=args.steps)

    print(f"status: {res.status.value} iterations: {res.iterations} residual: {res.residual:.3e}")
    if not res.success:
        if res.message:
            print(f"reason: {res.message}")
        return 1

    print("q_deg: " + " ".join(f"{v:.4f}" for v in np.rad2deg(res.q)))
    if args.trajectory:
        path = plan_joint_quintic(seed, res.q, args.duration, args.samples)
        dt = args.duration / args.samples
        for i, row in enumerate(path):
            print(f"{i * dt:.4f} " + " ".join(f"{v:.6f}" for v in row))
    return 0


def main_entry():
    """Entry point for the ur5motion-solve command."""
    sys.exit(main())


if __name__ == "__main__":
    main_entry()
