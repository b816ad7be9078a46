"""Request and response payloads. Wire names are camelCase, as the web client expects."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from quizdeck.constants.quiz_constants import (
    DEFAULT_PASSING_SCORE,
    DEFAULT_QUESTION_POINTS,
    DEFAULT_TIME_LIMIT_MINUTES,
    MIN_PASSWORD_LENGTH,
)
from quizdeck.core.models import (
    AnalyticsSummary,
    Attempt,
    LeaderboardEntry,
    Option,
    Question,
    QuestionType,
    Quiz,
    ScoreResult,
    User,
)
from quizdeck.core.services.presentation import PresentedQuiz


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Auth & users ---


class RegisterPayload(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


class LoginPayload(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdatePayload(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    avatar: str | None = None


class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: str
    avatar: str | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            avatar=user.avatar,
            created_at=user.created_at,
        )


class TokenOut(CamelModel):
    token: str
    user: UserOut


# --- Quizzes ---


class OptionPayload(CamelModel):
    text: str = Field(min_length=1)
    is_correct: bool = False


class QuestionPayload(CamelModel):
    id: str | None = None
    type: QuestionType = QuestionType.SINGLE_CHOICE
    text: str = Field(min_length=1)
    points: int = Field(default=DEFAULT_QUESTION_POINTS, ge=1)
    options: list[OptionPayload] = Field(min_length=1)
    required: bool = True

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> QuestionType:
        if isinstance(value, str):
            return QuestionType.parse(value)
        return value

    def to_domain(self) -> Question:
        return Question(
            id=self.id or "",
            type=self.type,
            text=self.text,
            options=[Option(text=o.text, is_correct=o.is_correct) for o in self.options],
            points=self.points,
            required=self.required,
        )


class QuizPayload(CamelModel):
    title: str = Field(min_length=1)
    description: str = ""
    time_limit: int = Field(default=DEFAULT_TIME_LIMIT_MINUTES, ge=0)
    randomize_questions: bool = False
    is_public: bool = True
    passing_score: int = Field(default=DEFAULT_PASSING_SCORE, ge=0, le=100)
    questions: list[QuestionPayload] = Field(min_length=1)

    def to_domain(self) -> Quiz:
        return Quiz(
            id="",
            title=self.title,
            questions=[question.to_domain() for question in self.questions],
            created_by="",
            description=self.description,
            time_limit=self.time_limit,
            randomize_questions=self.randomize_questions,
            is_public=self.is_public,
            passing_score=self.passing_score,
        )


class OptionOut(CamelModel):
    text: str
    is_correct: bool


class QuestionOut(CamelModel):
    id: str
    type: QuestionType
    text: str
    points: int
    options: list[OptionOut]
    required: bool


class QuizSummaryOut(CamelModel):
    id: str
    title: str
    description: str
    time_limit: int
    randomize_questions: bool
    passing_score: int
    created_by: str
    created_at: datetime
    question_count: int

    @classmethod
    def from_domain(cls, quiz: Quiz) -> QuizSummaryOut:
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            time_limit=quiz.time_limit,
            randomize_questions=quiz.randomize_questions,
            passing_score=quiz.passing_score,
            created_by=quiz.created_by,
            created_at=quiz.created_at,
            question_count=len(quiz.questions),
        )


class QuizOut(CamelModel):
    id: str
    title: str
    description: str
    time_limit: int
    randomize_questions: bool
    is_public: bool
    passing_score: int
    created_by: str
    created_at: datetime
    updated_at: datetime
    questions: list[QuestionOut]
    attempts: int | None = None

    @classmethod
    def from_domain(cls, quiz: Quiz, attempts: int | None = None) -> QuizOut:
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            time_limit=quiz.time_limit,
            randomize_questions=quiz.randomize_questions,
            is_public=quiz.is_public,
            passing_score=quiz.passing_score,
            created_by=quiz.created_by,
            created_at=quiz.created_at,
            updated_at=quiz.updated_at,
            questions=[
                QuestionOut(
                    id=q.id,
                    type=q.type,
                    text=q.text,
                    points=q.points,
                    options=[OptionOut(text=o.text, is_correct=o.is_correct) for o in q.options],
                    required=q.required,
                )
                for q in quiz.questions
            ],
            attempts=attempts,
        )


class PresentedQuestionOut(CamelModel):
    id: str
    type: QuestionType
    text: str
    text_html: str
    options: list[str]
    points: int
    required: bool


class PresentedQuizOut(CamelModel):
    id: str
    title: str
    description: str
    time_limit: int
    passing_score: int
    questions: list[PresentedQuestionOut]

    @classmethod
    def from_domain(cls, presented: PresentedQuiz) -> PresentedQuizOut:
        return cls(
            id=presented.id,
            title=presented.title,
            description=presented.description,
            time_limit=presented.time_limit,
            passing_score=presented.passing_score,
            questions=[
                PresentedQuestionOut(
                    id=q.id,
                    type=q.type,
                    text=q.text,
                    text_html=q.text_html,
                    options=q.options,
                    points=q.points,
                    required=q.required,
                )
                for q in presented.questions
            ],
        )


# --- Attempts ---


class AttemptPayload(CamelModel):
    quiz_id: str = Field(min_length=1)
    # Values are left untyped: malformed answers are scored as wrong, never rejected
    answers: dict[str, Any] = Field(default_factory=dict)
    time_taken: int | None = Field(default=None, ge=0)


class QuestionResultOut(CamelModel):
    correct: bool
    points: int


class SubmitResultOut(CamelModel):
    attempt_id: str
    score: int
    passed: bool
    earned_points: int
    total_points: int
    time_taken: int | None
    question_results: dict[str, QuestionResultOut]

    @classmethod
    def from_domain(cls, attempt: Attempt, result: ScoreResult) -> SubmitResultOut:
        return cls(
            attempt_id=attempt.id,
            score=result.total_score,
            passed=result.passed,
            earned_points=result.earned_points,
            total_points=result.total_possible_points,
            time_taken=attempt.time_taken,
            question_results={
                question_id: QuestionResultOut(correct=r.correct, points=r.points_awarded)
                for question_id, r in result.per_question.items()
            },
        )


class AttemptOut(CamelModel):
    id: str
    quiz_id: str
    user_id: str | None
    answers: dict[str, Any]
    score: int
    passed: bool
    time_taken: int | None
    attempt_date: datetime

    @classmethod
    def from_domain(cls, attempt: Attempt) -> AttemptOut:
        return cls(
            id=attempt.id,
            quiz_id=attempt.quiz_id,
            user_id=attempt.user_id,
            answers=dict(attempt.answers),
            score=attempt.score,
            passed=attempt.passed,
            time_taken=attempt.time_taken,
            attempt_date=attempt.attempt_date,
        )


class LeaderboardEntryOut(CamelModel):
    id: str
    quiz_id: str
    quiz_title: str | None
    user_id: str | None
    user_name: str
    user_avatar: str | None
    score: int
    passed: bool
    time_taken: int | None
    attempt_date: datetime

    @classmethod
    def from_domain(cls, entry: LeaderboardEntry) -> LeaderboardEntryOut:
        return cls(
            id=entry.attempt_id,
            quiz_id=entry.quiz_id,
            quiz_title=entry.quiz_title,
            user_id=entry.user_id,
            user_name=entry.user_name,
            user_avatar=entry.user_avatar,
            score=entry.score,
            passed=entry.passed,
            time_taken=entry.time_taken,
            attempt_date=entry.attempt_date,
        )


# --- Analytics ---


class TimeBucketOut(CamelModel):
    date: str
    attempts: int


class ScoreBucketOut(CamelModel):
    range_label: str = Field(alias="range")
    count: int


class QuestionPerformanceOut(CamelModel):
    question_number: str
    correct_percentage: int


class QuestionAnalysisOut(CamelModel):
    id: str
    text: str
    type: QuestionType
    attempts: int
    correct_count: int
    success_rate: int
    difficulty: str


class AnalyticsOut(CamelModel):
    date_range: str
    total_attempts: int
    average_score: int
    pass_rate: int
    pass_count: int
    fail_count: int
    average_time: int
    attempts_over_time: list[TimeBucketOut]
    score_distribution: list[ScoreBucketOut]
    question_performance: list[QuestionPerformanceOut]
    question_analysis: list[QuestionAnalysisOut]
    attempts_change: int | None = None
    score_change: int | None = None
    pass_rate_change: int | None = None
    time_change: int | None = None

    @classmethod
    def from_domain(cls, summary: AnalyticsSummary) -> AnalyticsOut:
        return cls(
            date_range=summary.date_range.value,
            total_attempts=summary.total_attempts,
            average_score=summary.average_score,
            pass_rate=summary.pass_rate,
            pass_count=summary.pass_count,
            fail_count=summary.fail_count,
            average_time=summary.average_time,
            attempts_over_time=[TimeBucketOut(date=b.label, attempts=b.count) for b in summary.attempts_over_time],
            score_distribution=[ScoreBucketOut(range_label=b.label, count=b.count) for b in summary.score_distribution],
            question_performance=[
                QuestionPerformanceOut(question_number=p.label, correct_percentage=p.success_rate)
                for p in summary.question_performance
            ],
            question_analysis=[
                QuestionAnalysisOut(
                    id=p.question_id,
                    text=p.text,
                    type=p.type,
                    attempts=p.attempts,
                    correct_count=p.correct_count,
                    success_rate=p.success_rate,
                    difficulty=p.difficulty.value,
                )
                for p in summary.question_performance
            ],
            attempts_change=summary.attempts_change,
            score_change=summary.score_change,
            pass_rate_change=summary.pass_rate_change,
            time_change=summary.time_change,
        )
