from .quintic import JointQuinticTrajectory, quintic_coefficients

__all__ = [
    "JointQuinticTrajectory",
    "quintic_coefficients",
]
