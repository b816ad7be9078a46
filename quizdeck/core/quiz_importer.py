"""Utilities for importing quizzes from a human-friendly text format.

Format (blocks separated by blank lines or '---'). An optional first block
holds quiz settings; every other block is one question:

    TITLE: Frontend basics
    DESCRIPTION: Warm-up quiz (optional)
    PASSING: 70            (optional, percentage)
    TIMELIMIT: 10          (optional, minutes; 0 means unlimited)
    RANDOMIZE: yes         (optional)
    PUBLIC: no             (optional, default yes)

    ---

    Q: Which of these render components? Extra lines until the next
       marker continue the question text (markdown).
    TYPE: multi-choice     (optional: single-choice, multi-choice, true-false)
    POINTS: 2              (optional, default 1)
    OPTIONAL               (optional, answering is not required)
    A: React
    B: Vue
    C: Django
    CORRECT: A, B

True/false questions may omit their options and answer with
``CORRECT: TRUE`` or ``CORRECT: FALSE``.

A continuation line that starts with a backslash is taken literally, minus the
backslash. This lets question and option text hold lines such as ``---`` or
``A: ...`` that would otherwise be read as separators or markers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from quizdeck.constants.quiz_constants import (
    DEFAULT_PASSING_SCORE,
    DEFAULT_QUESTION_POINTS,
    DEFAULT_TIME_LIMIT_MINUTES,
    OPTION_LETTERS,
    TRUE_FALSE_OPTIONS,
)
from quizdeck.core.models import Option, Question, QuestionType

ESCAPE_PREFIX = "\\"
_MARKERS = ("Q:", "TYPE:", "POINTS:", "CORRECT:")

_YES = {"yes", "true", "y", "1"}
_NO = {"no", "false", "n", "0"}


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported quiz settings and questions."""

    questions: list[Question]
    title: str = ""
    description: str = ""
    passing_score: int = DEFAULT_PASSING_SCORE
    time_limit: int = DEFAULT_TIME_LIMIT_MINUTES
    randomize_questions: bool = False
    is_public: bool = True
    source_path: Path | None = field(default=None)


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    imported = parse_quiz_text(text)
    imported.source_path = file_path
    if not imported.title:
        imported.title = file_path.stem
    return imported


def parse_quiz_text(text: str) -> ImportedQuiz:
    blocks = _split_blocks(text)
    imported = ImportedQuiz(questions=[])
    if blocks and _is_settings_block(blocks[0]):
        _apply_settings(imported, blocks.pop(0))
    imported.questions = [_parse_block(block, index) for index, block in enumerate(blocks, start=1)]
    if not imported.questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return imported


def needs_escape(line: str) -> bool:
    """Return whether a text line would be misread as a separator or marker on import."""
    stripped = line.strip()
    upper = stripped.upper()
    if stripped == "---" or upper == "OPTIONAL" or stripped.startswith(ESCAPE_PREFIX):
        return True
    if upper.startswith(_MARKERS):
        return True
    return len(stripped) > 2 and upper[0] in OPTION_LETTERS and stripped[1] == ":"


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _is_settings_block(block: str) -> bool:
    return not any(line.strip().upper().startswith("Q:") for line in block.splitlines())


def _apply_settings(imported: ImportedQuiz, block: str) -> None:
    for raw_line in block.splitlines():
        line = raw_line.strip()
        if ":" not in line:
            raise QuizImportError(f"Expected 'KEY: value' in quiz settings, got '{line}'.")
        key, value = (part.strip() for part in line.split(":", 1))
        key = key.upper()
        if key == "TITLE":
            imported.title = value
        elif key == "DESCRIPTION":
            imported.description = value
        elif key == "PASSING":
            imported.passing_score = _parse_int(value, "PASSING", minimum=0, maximum=100)
        elif key == "TIMELIMIT":
            imported.time_limit = _parse_int(value, "TIMELIMIT", minimum=0)
        elif key == "RANDOMIZE":
            imported.randomize_questions = _parse_flag(value, "RANDOMIZE")
        elif key == "PUBLIC":
            imported.is_public = _parse_flag(value, "PUBLIC")
        else:
            raise QuizImportError(f"Unknown quiz setting '{key}'.")


def _parse_block(block: str, index: int) -> Question:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_raw: str | None = None
    question_type = QuestionType.SINGLE_CHOICE
    points = DEFAULT_QUESTION_POINTS
    required = True
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(ESCAPE_PREFIX):
            line = line[len(ESCAPE_PREFIX):]
            if current_section == "Q":
                question_lines.append(line)
            elif current_section in options:
                options[current_section] = options[current_section] + f"\n{line}"
            else:
                raise QuizImportError(
                    f"Question {index}: escaped text outside of a known section: '{line}'."
                )
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("TYPE:"):
            try:
                question_type = QuestionType.parse(line.split(":", 1)[1])
            except ValueError as exc:
                raise QuizImportError(f"Question {index}: unknown TYPE '{line}'.") from exc
            current_section = None
            continue

        if upper.startswith("POINTS:"):
            points = _parse_int(line.split(":", 1)[1].strip(), "POINTS", minimum=1)
            current_section = None
            continue

        if upper.startswith("CORRECT:"):
            correct_raw = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if upper == "OPTIONAL":
            required = False
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Question {index}: encountered text outside of a known section: '{line}'."
            )

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError(f"Question {index}: question text missing (Q: ...)")
    if correct_raw is None:
        raise QuizImportError(f"Question {index}: CORRECT is required.")

    if question_type is QuestionType.TRUE_FALSE and not options:
        option_list = _true_false_options(correct_raw, index)
    else:
        option_list = _lettered_options(options, correct_raw, question_type, index)

    return Question(
        id=f"q{index}",
        type=question_type,
        text=question_text,
        options=option_list,
        points=points,
        required=required,
    )


def _true_false_options(correct_raw: str, index: int) -> list[Option]:
    answer = correct_raw.strip().lower()
    if answer not in {"true", "false"}:
        raise QuizImportError(f"Question {index}: CORRECT must be TRUE or FALSE.")
    return [Option(text=text, is_correct=text.lower() == answer) for text in TRUE_FALSE_OPTIONS]


def _lettered_options(
    options: dict[str, str],
    correct_raw: str,
    question_type: QuestionType,
    index: int,
) -> list[Option]:
    if not options:
        raise QuizImportError(f"Question {index}: at least one option (A: ...) is required.")
    letters = [letter for letter in OPTION_LETTERS if letter in options]
    expected = list(OPTION_LETTERS[: len(letters)])
    if letters != expected:
        raise QuizImportError(f"Question {index}: options must use consecutive letters starting at A.")

    correct_letters = [part.strip().upper() for part in correct_raw.split(",") if part.strip()]
    if not correct_letters:
        raise QuizImportError(f"Question {index}: CORRECT must name at least one option.")
    unknown = [letter for letter in correct_letters if letter not in options]
    if unknown:
        raise QuizImportError(f"Question {index}: CORRECT refers to unknown option(s) {', '.join(unknown)}.")
    if question_type is not QuestionType.MULTI_CHOICE and len(correct_letters) != 1:
        raise QuizImportError(f"Question {index}: only multi-choice questions may have several correct options.")

    option_list = [
        Option(text=options[letter].strip(), is_correct=letter in correct_letters) for letter in letters
    ]
    if any(not option.text for option in option_list):
        raise QuizImportError(f"Question {index}: option text cannot be empty.")
    return option_list


def _parse_int(raw_value: str, key: str, minimum: int | None = None, maximum: int | None = None) -> int:
    if not raw_value:
        raise QuizImportError(f"{key} must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError(f"{key} must be an integer.") from exc
    if minimum is not None and parsed_value < minimum:
        raise QuizImportError(f"{key} must be at least {minimum}.")
    if maximum is not None and parsed_value > maximum:
        raise QuizImportError(f"{key} must be at most {maximum}.")
    return parsed_value


def _parse_flag(raw_value: str, key: str) -> bool:
    lowered = raw_value.strip().lower()
    if lowered in _YES:
        return True
    if lowered in _NO:
        return False
    raise QuizImportError(f"{key} must be yes or no.")
