"""Service building the taker-facing view of a quiz."""

from __future__ import annotations

import random
from dataclasses import dataclass

from quizdeck.core.markdown_renderer import MarkdownRenderer, renderer
from quizdeck.core.models import Question, QuestionType, Quiz


@dataclass(frozen=True, slots=True)
class PresentedQuestion:
    """Question as shown to a taker: no correctness flags."""

    id: str
    type: QuestionType
    text: str
    text_html: str
    options: list[str]
    points: int
    required: bool


@dataclass(frozen=True, slots=True)
class PresentedQuiz:
    id: str
    title: str
    description: str
    time_limit: int
    passing_score: int
    questions: list[PresentedQuestion]


class QuizPresenter:
    """Shuffles question order per attempt when the quiz asks for it.

    The presentation order is cosmetic. Scoring always walks the quiz's stored
    order and looks answers up by question id.
    """

    def __init__(self, markdown: MarkdownRenderer | None = None) -> None:
        self._markdown = markdown or renderer

    def present(self, quiz: Quiz, seed: int | None = None) -> PresentedQuiz:
        questions = list(quiz.questions)
        if quiz.randomize_questions:
            random.Random(seed).shuffle(questions)
        return PresentedQuiz(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            time_limit=quiz.time_limit,
            passing_score=quiz.passing_score,
            questions=[self._present_question(question) for question in questions],
        )

    def _present_question(self, question: Question) -> PresentedQuestion:
        return PresentedQuestion(
            id=question.id,
            type=question.type,
            text=question.text,
            text_html=self._markdown.render_fragment(question.text),
            options=[option.text for option in question.options],
            points=question.effective_points,
            required=question.required,
        )
