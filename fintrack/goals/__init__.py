"""Goal tracking package."""

from fintrack.goals.tracker import (
    DEMO_GOALS,
    GoalError,
    GoalNotFoundError,
    GoalRejectedError,
    GoalTracker,
    demo_goals,
    goal_progress,
)

__all__ = [
    "DEMO_GOALS",
    "GoalError",
    "GoalNotFoundError",
    "GoalRejectedError",
    "GoalTracker",
    "demo_goals",
    "goal_progress",
]
