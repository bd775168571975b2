"""
Custom exception types for the ur5motion IK/trajectory pipeline.
Expected solver failures are returned as IKResult values, not raised;
these cover precondition violations only.
"""


class TrajectoryPlanningError(RuntimeError):
    """Trajectory generation/planning failure."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Trajectory Planning Error: {message}")

    def __str__(self):
        return f"Trajectory Planning Error: {self.original_message}"


class InvalidConfigurationError(ValueError):
    """Joint/pose vector whose dimension does not match the kinematic model."""
