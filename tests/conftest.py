from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quizdeck.core.models import Attempt, Option, Question, QuestionType, Quiz
from quizdeck.core.quiz_manager import QuizManager

NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


def single(question_id: str, correct: str, others: tuple[str, ...] = ("B", "C"), points: int = 1) -> Question:
    options = [Option(text=correct, is_correct=True)] + [Option(text=text) for text in others]
    return Question(id=question_id, type=QuestionType.SINGLE_CHOICE, text=f"Question {question_id}", options=options, points=points)


def multi(question_id: str, correct: tuple[str, ...], wrong: tuple[str, ...] = (), points: int = 1) -> Question:
    options = [Option(text=text, is_correct=True) for text in correct] + [Option(text=text) for text in wrong]
    return Question(id=question_id, type=QuestionType.MULTI_CHOICE, text=f"Question {question_id}", options=options, points=points)


def true_false(question_id: str, answer: bool) -> Question:
    options = [Option(text="True", is_correct=answer), Option(text="False", is_correct=not answer)]
    return Question(id=question_id, type=QuestionType.TRUE_FALSE, text=f"Question {question_id}", options=options)


def make_attempt(
    attempt_id: str,
    score: int,
    *,
    quiz_id: str = "quiz-1",
    passed: bool | None = None,
    time_taken: int | None = None,
    user_id: str | None = None,
    answers: dict | None = None,
    attempt_date: datetime = NOW,
) -> Attempt:
    return Attempt(
        id=attempt_id,
        quiz_id=quiz_id,
        answers=answers or {},
        score=score,
        passed=score >= 70 if passed is None else passed,
        time_taken=time_taken,
        user_id=user_id,
        attempt_date=attempt_date,
    )


@pytest.fixture
def frameworks_quiz() -> Quiz:
    """Two single-choice questions worth 1 point and one multi-choice question worth 2."""
    return Quiz(
        id="quiz-1",
        title="Frontend frameworks",
        created_by="author",
        passing_score=70,
        questions=[
            single("q1", "JSX"),
            single("q2", "Virtual DOM", others=("Shadow DOM", "Real DOM")),
            multi("q3", ("React", "Vue"), wrong=("Django", "Flask"), points=2),
        ],
    )


@pytest.fixture
def manager() -> QuizManager:
    return QuizManager()
