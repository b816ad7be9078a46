"""Answer matching and attempt scoring shared by every caller.

Submitted answers identify options by their display text rather than by a
stable option id. Two options with the same text inside one question are
indistinguishable to the matcher; authoring validation rejects such quizzes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from quizdeck.core.exceptions import InvalidQuizState
from quizdeck.core.models import AnswerValue, Question, QuestionResult, QuestionType, Quiz, ScoreResult


def round_half_up(value: float | int | Decimal) -> int:
    """Round to the nearest integer, ties away from zero (``round`` uses banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(numerator: int, denominator: int) -> int:
    """Integer percentage rounded half-up; exact arithmetic avoids float ties drifting."""
    if denominator == 0:
        raise ZeroDivisionError("percentage of an empty total")
    return round_half_up(Decimal(100 * numerator) / Decimal(denominator))


def _selected_set(submitted: AnswerValue) -> set[str] | None:
    """Return the selected option texts, or ``None`` when the selection is malformed."""
    if submitted is None or isinstance(submitted, (str, bytes)):
        return None
    if not isinstance(submitted, Iterable) or isinstance(submitted, Mapping):
        return None
    selected = list(submitted)
    # A single non-text member spoils the whole selection
    if any(not isinstance(item, str) for item in selected):
        return None
    return set(selected)


def is_correct(question: Question, submitted: AnswerValue) -> bool:
    """Return whether ``submitted`` answers ``question`` correctly. Never raises."""
    correct_texts = question.correct_texts()

    if question.type is QuestionType.MULTI_CHOICE:
        selected = _selected_set(submitted)
        if selected is None or not correct_texts:
            return False
        return set(correct_texts) == selected

    if len(correct_texts) != 1 or not isinstance(submitted, str):
        return False
    return submitted == correct_texts[0]


def score_attempt(quiz: Quiz, answers: Mapping[str, AnswerValue] | None) -> ScoreResult:
    """Score ``answers`` against the quiz's stored question order."""
    if not quiz.questions:
        raise InvalidQuizState("Quiz has no questions to score.")

    answers = answers if isinstance(answers, Mapping) else {}
    total_possible = 0
    earned = 0
    per_question: dict[str, QuestionResult] = {}

    for question in quiz.questions:
        points = question.effective_points
        total_possible += points
        correct = is_correct(question, answers.get(question.id))
        awarded = points if correct else 0
        earned += awarded
        per_question[question.id] = QuestionResult(correct=correct, points_awarded=awarded)

    if total_possible <= 0:
        raise InvalidQuizState("Quiz has no point weight to score.")

    total_score = percentage(earned, total_possible)
    return ScoreResult(
        total_score=total_score,
        passed=total_score >= quiz.passing_score,
        per_question=per_question,
        earned_points=earned,
        total_possible_points=total_possible,
    )
