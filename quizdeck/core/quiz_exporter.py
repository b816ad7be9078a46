"""Utilities for exporting quizzes to the plain-text format used for imports."""

from __future__ import annotations

from quizdeck.constants.quiz_constants import DEFAULT_QUESTION_POINTS, MAX_OPTIONS_PER_QUESTION, OPTION_LETTERS
from quizdeck.core.exceptions import QuizValidationError
from quizdeck.core.models import Question, QuestionType, Quiz
from quizdeck.core.quiz_importer import ESCAPE_PREFIX, needs_escape


def serialize_quiz(quiz: Quiz) -> str:
    if not quiz.questions:
        raise QuizValidationError("Cannot export an empty quiz.")
    if any(len(question.options) > MAX_OPTIONS_PER_QUESTION for question in quiz.questions):
        raise QuizValidationError(
            f"Questions with more than {MAX_OPTIONS_PER_QUESTION} options cannot be exported."
        )

    blocks = [_serialize_settings(quiz)]
    blocks.extend(_serialize_question(question) for question in quiz.questions)
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_settings(quiz: Quiz) -> str:
    lines = [f"TITLE: {quiz.title}"]
    if quiz.description:
        lines.append(f"DESCRIPTION: {' '.join(quiz.description.splitlines())}")
    lines.append(f"PASSING: {quiz.passing_score}")
    lines.append(f"TIMELIMIT: {quiz.time_limit}")
    lines.append(f"RANDOMIZE: {'yes' if quiz.randomize_questions else 'no'}")
    lines.append(f"PUBLIC: {'yes' if quiz.is_public else 'no'}")
    return "\n".join(lines)


def _serialize_question(question: Question) -> str:
    lines: list[str] = []

    question_lines = _text_lines(question.text)
    lines.append(f"Q: {question_lines[0]}")
    lines.extend(question_lines[1:])

    if question.type is not QuestionType.SINGLE_CHOICE:
        lines.append(f"TYPE: {question.type.value}")
    if question.effective_points != DEFAULT_QUESTION_POINTS:
        lines.append(f"POINTS: {question.effective_points}")
    if not question.required:
        lines.append("OPTIONAL")

    correct_letters: list[str] = []
    for letter, option in zip(OPTION_LETTERS, question.options):
        option_lines = _text_lines(option.text)
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(option_lines[1:])
        if option.is_correct:
            correct_letters.append(letter)

    lines.append(f"CORRECT: {', '.join(correct_letters)}")
    return "\n".join(lines)


def _text_lines(text: str) -> list[str]:
    # A blank line would end the block on import
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        return [text]
    continuation = [ESCAPE_PREFIX + line.strip() if needs_escape(line) else line for line in lines[1:]]
    return [lines[0], *continuation]
