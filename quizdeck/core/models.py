"""Domain models for the quiz service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Union

from quizdeck.constants.quiz_constants import (
    DEFAULT_PASSING_SCORE,
    DEFAULT_QUESTION_POINTS,
    DEFAULT_TIME_LIMIT_MINUTES,
)

# A single option text for single-choice/true-false, a collection of texts for multi-choice.
AnswerValue = Union[str, list[str], tuple[str, ...], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionType(str, Enum):
    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    TRUE_FALSE = "true-false"

    @classmethod
    def parse(cls, value: str | QuestionType) -> QuestionType:
        """Accept canonical names plus the legacy client names."""
        if isinstance(value, QuestionType):
            return value
        normalized = value.strip().lower()
        legacy = {"multiple": cls.SINGLE_CHOICE, "checkbox": cls.MULTI_CHOICE}
        if normalized in legacy:
            return legacy[normalized]
        return cls(normalized)


class DateRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


@dataclass(slots=True)
class Option:
    """Selectable answer choice. Submissions reference options by ``text``."""

    text: str
    is_correct: bool = False


@dataclass(slots=True)
class Question:
    id: str
    type: QuestionType
    text: str
    options: list[Option]
    points: int = DEFAULT_QUESTION_POINTS
    required: bool = True

    @property
    def effective_points(self) -> int:
        """Points used for scoring; unset or non-positive weights count as 1."""
        if not self.points or self.points <= 0:
            return DEFAULT_QUESTION_POINTS
        return self.points

    def correct_texts(self) -> list[str]:
        return [option.text for option in self.options if option.is_correct]


@dataclass(slots=True)
class Quiz:
    """Aggregate root owning an ordered list of questions."""

    id: str
    title: str
    questions: list[Question]
    created_by: str
    description: str = ""
    time_limit: int = DEFAULT_TIME_LIMIT_MINUTES  # minutes, 0 means unlimited
    randomize_questions: bool = False
    is_public: bool = True
    passing_score: int = DEFAULT_PASSING_SCORE
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True, slots=True)
class Attempt:
    """Immutable record of one scored submission."""

    id: str
    quiz_id: str
    answers: dict[str, AnswerValue]
    score: int
    passed: bool
    time_taken: int | None = None  # seconds
    user_id: str | None = None
    attempt_date: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    password_hash: str
    role: str = "user"
    avatar: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True, slots=True)
class QuestionResult:
    correct: bool
    points_awarded: int


@dataclass(frozen=True, slots=True)
class ScoreResult:
    total_score: int
    passed: bool
    per_question: dict[str, QuestionResult]
    earned_points: int
    total_possible_points: int


@dataclass(frozen=True, slots=True)
class TimeBucket:
    label: str
    start: datetime
    count: int


@dataclass(frozen=True, slots=True)
class ScoreBucket:
    label: str
    low: int
    high: int
    count: int


@dataclass(frozen=True, slots=True)
class QuestionPerformance:
    question_id: str
    label: str
    text: str
    type: QuestionType
    attempts: int
    correct_count: int
    success_rate: int
    difficulty: Difficulty


@dataclass(frozen=True, slots=True)
class AnalyticsSummary:
    date_range: DateRange
    window_start: datetime
    window_end: datetime
    total_attempts: int
    average_score: int
    pass_rate: int
    pass_count: int
    fail_count: int
    average_time: int
    attempts_over_time: list[TimeBucket]
    score_distribution: list[ScoreBucket]
    question_performance: list[QuestionPerformance]
    attempts_change: int | None = None
    score_change: int | None = None
    pass_rate_change: int | None = None
    time_change: int | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    attempt_id: str
    quiz_id: str
    user_id: str | None
    user_name: str
    score: int
    passed: bool
    time_taken: int | None
    attempt_date: datetime
    quiz_title: str | None = None
    user_avatar: str | None = None
