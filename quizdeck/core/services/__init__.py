"""Stateful stores and read-side services behind the quiz manager."""

from .analytics import AnalyticsAggregator
from .attempt_repository import AttemptRepository
from .leaderboard import Leaderboard
from .presentation import QuizPresenter
from .quiz_repository import QuizRepository
from .user_repository import UserRepository

__all__ = [
    "AnalyticsAggregator",
    "AttemptRepository",
    "Leaderboard",
    "QuizPresenter",
    "QuizRepository",
    "UserRepository",
]
