"""Service for validating and storing quizzes."""

from __future__ import annotations

from dataclasses import replace
from uuid import uuid4

from quizdeck.constants.quiz_constants import (
    DEFAULT_QUESTION_POINTS,
    MAX_OPTIONS_PER_QUESTION,
    TRUE_FALSE_OPTIONS,
)
from quizdeck.core.exceptions import QuizValidationError
from quizdeck.core.models import Option, Question, QuestionType, Quiz, utcnow


class QuizRepository:
    """Keeps authored quizzes in memory, keyed by quiz id."""

    def __init__(self) -> None:
        self._quizzes: dict[str, Quiz] = {}

    def add(self, quiz: Quiz) -> Quiz:
        prepared = self._prepare_quiz(quiz, quiz_id=quiz.id or uuid4().hex)
        if prepared.id in self._quizzes:
            raise QuizValidationError(f"Quiz {prepared.id} already exists.")
        self._quizzes[prepared.id] = prepared
        return prepared

    def get(self, quiz_id: str) -> Quiz | None:
        return self._quizzes.get(quiz_id)

    def update(self, quiz_id: str, quiz: Quiz) -> Quiz:
        existing = self._quizzes.get(quiz_id)
        if existing is None:
            raise KeyError(quiz_id)
        prepared = self._prepare_quiz(quiz, quiz_id=quiz_id)
        # Ownership and creation time never change on update
        prepared = replace(
            prepared,
            created_by=existing.created_by,
            created_at=existing.created_at,
            updated_at=utcnow(),
        )
        self._quizzes[quiz_id] = prepared
        return prepared

    def delete(self, quiz_id: str) -> bool:
        return self._quizzes.pop(quiz_id, None) is not None

    def list_public(self) -> list[Quiz]:
        """Public quizzes, newest first."""
        public = [quiz for quiz in self._quizzes.values() if quiz.is_public]
        return sorted(public, key=lambda q: q.created_at, reverse=True)

    def list_by_author(self, user_id: str) -> list[Quiz]:
        owned = [quiz for quiz in self._quizzes.values() if quiz.created_by == user_id]
        return sorted(owned, key=lambda q: q.created_at, reverse=True)

    def _prepare_quiz(self, quiz: Quiz, quiz_id: str) -> Quiz:
        """Validate and normalize a quiz before storage."""
        title = quiz.title.strip()
        if not title:
            raise QuizValidationError("Quiz title must not be empty.")
        if not quiz.questions:
            raise QuizValidationError("Quiz must contain at least one question.")
        if not 0 <= quiz.passing_score <= 100:
            raise QuizValidationError("Passing score must be between 0 and 100.")
        if quiz.time_limit < 0:
            raise QuizValidationError("Time limit must not be negative.")

        questions = [self._prepare_question(q, position) for position, q in enumerate(quiz.questions, 1)]
        ids = [q.id for q in questions]
        if len(set(ids)) != len(ids):
            raise QuizValidationError("Question ids must be unique within a quiz.")

        return replace(
            quiz,
            id=quiz_id,
            title=title,
            description=(quiz.description or "").strip(),
            questions=questions,
        )

    def _prepare_question(self, question: Question, position: int) -> Question:
        cleaned_text = question.text.strip()
        if not cleaned_text:
            raise QuizValidationError(f"Question {position}: text must not be empty.")

        question_type = QuestionType.parse(question.type)
        options = self._validate_options(question_type, question.options, position)

        points = question.points if question.points and question.points > 0 else DEFAULT_QUESTION_POINTS
        return Question(
            id=str(question.id).strip() if question.id else uuid4().hex,
            type=question_type,
            text=cleaned_text,
            options=options,
            points=points,
            required=question.required,
        )

    @staticmethod
    def _validate_options(question_type: QuestionType, options: list[Option], position: int) -> list[Option]:
        cleaned = [Option(text=option.text.strip(), is_correct=option.is_correct) for option in options]
        if not cleaned:
            raise QuizValidationError(f"Question {position}: at least one option is required.")
        if len(cleaned) > MAX_OPTIONS_PER_QUESTION:
            raise QuizValidationError(
                f"Question {position}: at most {MAX_OPTIONS_PER_QUESTION} options are allowed."
            )
        if any(not option.text for option in cleaned):
            raise QuizValidationError(f"Question {position}: option text cannot be empty.")
        texts = [option.text for option in cleaned]
        if len(set(texts)) != len(texts):
            raise QuizValidationError(f"Question {position}: option texts must be unique.")

        correct_count = sum(1 for option in cleaned if option.is_correct)
        if correct_count == 0:
            raise QuizValidationError(f"Question {position}: mark at least one option as correct.")

        if question_type is QuestionType.TRUE_FALSE:
            if sorted(texts) != sorted(TRUE_FALSE_OPTIONS):
                raise QuizValidationError(
                    f"Question {position}: true/false questions must offer exactly 'True' and 'False'."
                )
        if question_type is not QuestionType.MULTI_CHOICE and correct_count != 1:
            raise QuizValidationError(f"Question {position}: exactly one option must be correct.")
        return cleaned
