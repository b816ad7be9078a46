"""Business logic shared by every caller of the quiz service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
import logging
from pathlib import Path
from threading import Lock
from uuid import uuid4

from quizdeck.constants.quiz_constants import UNKNOWN_QUIZ_TITLE
from quizdeck.core.exceptions import (
    AuthenticationError,
    NotFoundError,
    QuizDeckError,
    PermissionDeniedError,
    QuizValidationError,
)
from quizdeck.core.models import (
    AnalyticsSummary,
    AnswerValue,
    Attempt,
    DateRange,
    LeaderboardEntry,
    Quiz,
    ScoreResult,
    User,
    utcnow,
)
from quizdeck.core.quiz_exporter import serialize_quiz
from quizdeck.core.quiz_importer import ImportedQuiz, QuizImportError, load_quiz_from_file, parse_quiz_text
from quizdeck.core.scoring import score_attempt
from quizdeck.core.services.analytics import AnalyticsAggregator
from quizdeck.core.services.attempt_repository import AttemptRepository
from quizdeck.core.services.leaderboard import Leaderboard
from quizdeck.core.services.presentation import PresentedQuiz, QuizPresenter
from quizdeck.core.services.quiz_repository import QuizRepository
from quizdeck.core.services.user_repository import UserRepository, verify_password

logger = logging.getLogger(__name__)


def _freeze_answers(answers: Mapping[str, AnswerValue] | None) -> dict[str, AnswerValue]:
    """Copy the submitted answer map so later edits by the caller cannot leak into the record."""
    if not isinstance(answers, Mapping):
        return {}
    frozen: dict[str, AnswerValue] = {}
    for question_id, value in answers.items():
        if isinstance(value, (list, tuple, set, frozenset)):
            frozen[str(question_id)] = tuple(value)
        else:
            frozen[str(question_id)] = value
    return frozen


class QuizManager:
    """Facade over repositories, scoring, analytics and the leaderboard."""

    def __init__(
        self,
        quizzes: QuizRepository | None = None,
        attempts: AttemptRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self._lock = Lock()

        # Services
        self._quizzes = quizzes or QuizRepository()
        self._attempts = attempts or AttemptRepository()
        self._users = users or UserRepository()
        self._analytics = AnalyticsAggregator()
        self._presenter = QuizPresenter()
        self._leaderboard = Leaderboard(
            resolve_name=self._resolve_user_name,
            resolve_quiz_title=self._resolve_quiz_title,
            resolve_avatar=self._resolve_user_avatar,
        )

    # --- Users ---

    def register_user(self, name: str, email: str, password: str, role: str = "user") -> User:
        with self._lock:
            user = self._users.register(name, email, password, role=role)
        logger.info("Registered user %s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        with self._lock:
            user = self._users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user

    def get_user(self, user_id: str, requester: User | None = None) -> User:
        if requester is not None:
            self._require_self_or_admin(user_id, requester)
        with self._lock:
            user = self._users.get(user_id)
        if user is None:
            raise NotFoundError("User")
        return user

    def update_user(
        self,
        user_id: str,
        requester: User,
        name: str | None = None,
        email: str | None = None,
        avatar: str | None = None,
    ) -> User:
        self._require_self_or_admin(user_id, requester)
        with self._lock:
            if self._users.get(user_id) is None:
                raise NotFoundError("User")
            return self._users.update(user_id, name=name, email=email, avatar=avatar)

    # --- Quizzes ---

    def create_quiz(self, quiz: Quiz, author: User) -> Quiz:
        with self._lock:
            stored = self._quizzes.add(replace(quiz, id="", created_by=author.id))
        logger.info("Quiz %s created by %s with %d questions", stored.id, author.id, len(stored.questions))
        return stored

    def update_quiz(self, quiz_id: str, quiz: Quiz, requester: User) -> Quiz:
        with self._lock:
            existing = self._get_quiz_or_raise(quiz_id)
            self._require_owner(existing, requester, "update this quiz")
            return self._quizzes.update(quiz_id, quiz)

    def duplicate_quiz(self, quiz_id: str, requester: User) -> Quiz:
        """Copy a quiz the requester can see into a new quiz they own."""
        original = self.get_quiz(quiz_id, requester)
        now = utcnow()
        copy = replace(original, title=f"{original.title} (Copy)", created_at=now, updated_at=now)
        duplicated = self.create_quiz(copy, requester)
        logger.info("Quiz %s duplicated from %s", duplicated.id, quiz_id)
        return duplicated

    def delete_quiz(self, quiz_id: str, requester: User) -> None:
        with self._lock:
            existing = self._get_quiz_or_raise(quiz_id)
            self._require_owner(existing, requester, "delete this quiz")
            self._quizzes.delete(quiz_id)
            removed = self._attempts.delete_for_quiz(quiz_id)
        logger.info("Quiz %s deleted together with %d attempts", quiz_id, removed)

    def get_quiz(self, quiz_id: str, requester: User | None = None) -> Quiz:
        with self._lock:
            quiz = self._get_quiz_or_raise(quiz_id)
        if not quiz.is_public:
            if requester is None:
                raise AuthenticationError("Not authorized to access this quiz")
            self._require_owner(quiz, requester, "access this quiz")
        return quiz

    def list_public_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._quizzes.list_public()

    def list_user_quizzes(self, user_id: str, requester: User) -> list[tuple[Quiz, int]]:
        """Quizzes authored by ``user_id`` paired with their attempt counts."""
        self._require_self_or_admin(user_id, requester)
        with self._lock:
            counts = self._attempts.count_by_quiz()
            return [(quiz, counts.get(quiz.id, 0)) for quiz in self._quizzes.list_by_author(user_id)]

    def present_quiz(self, quiz_id: str, requester: User | None = None, seed: int | None = None) -> PresentedQuiz:
        quiz = self.get_quiz(quiz_id, requester)
        return self._presenter.present(quiz, seed=seed)

    def import_quiz(self, text: str, author: User) -> Quiz:
        imported = parse_quiz_text(text)
        if not imported.title:
            raise QuizValidationError("Imported quiz needs a TITLE setting.")
        return self._create_imported(imported, author)

    def import_quiz_file(self, file_path: Path, author: User) -> Quiz:
        """Import a quiz file; the file name stands in for a missing TITLE."""
        imported = load_quiz_from_file(file_path)
        quiz = self._create_imported(imported, author)
        logger.info("Imported quiz %s from %s", quiz.id, imported.source_path)
        return quiz

    def import_quiz_directory(self, directory: Path, author: User) -> list[Quiz]:
        """Import every ``*.txt`` quiz in ``directory``, skipping files that fail to load."""
        imported: list[Quiz] = []
        for file_path in sorted(directory.glob("*.txt")):
            try:
                imported.append(self.import_quiz_file(file_path, author))
            except (OSError, UnicodeDecodeError, QuizImportError, QuizDeckError) as exc:
                logger.error("Skipping quiz file %s: %s", file_path, exc)
        return imported

    def _create_imported(self, imported: ImportedQuiz, author: User) -> Quiz:
        quiz = Quiz(
            id="",
            title=imported.title,
            questions=imported.questions,
            created_by=author.id,
            description=imported.description,
            time_limit=imported.time_limit,
            randomize_questions=imported.randomize_questions,
            is_public=imported.is_public,
            passing_score=imported.passing_score,
        )
        return self.create_quiz(quiz, author)

    def export_quiz(self, quiz_id: str, requester: User | None = None) -> str:
        return serialize_quiz(self.get_quiz(quiz_id, requester))

    # --- Attempts ---

    def submit_attempt(
        self,
        quiz_id: str,
        answers: Mapping[str, AnswerValue] | None,
        time_taken: int | None = None,
        user: User | None = None,
    ) -> tuple[Attempt, ScoreResult]:
        if time_taken is not None and time_taken < 0:
            raise QuizValidationError("Time taken must not be negative.")
        with self._lock:
            quiz = self._get_quiz_or_raise(quiz_id)
            if not quiz.is_public and user is None:
                raise AuthenticationError("Not authorized to attempt this quiz")
            frozen_answers = _freeze_answers(answers)
            result = score_attempt(quiz, frozen_answers)
            attempt = Attempt(
                id=uuid4().hex,
                quiz_id=quiz.id,
                answers=frozen_answers,
                score=result.total_score,
                passed=result.passed,
                time_taken=time_taken,
                user_id=user.id if user else None,
            )
            self._attempts.append(attempt)
        logger.info(
            "Attempt %s on quiz %s scored %d%% (%s)",
            attempt.id,
            quiz_id,
            attempt.score,
            "passed" if attempt.passed else "failed",
        )
        return attempt, result

    def get_user_attempts(self, user: User) -> list[Attempt]:
        """The user's attempts, newest first."""
        with self._lock:
            attempts = self._attempts.get_attempts(user_id=user.id)
        return sorted(attempts, key=lambda a: a.attempt_date, reverse=True)

    def get_quiz_attempts(self, quiz_id: str, requester: User) -> list[Attempt]:
        with self._lock:
            quiz = self._get_quiz_or_raise(quiz_id)
            self._require_owner(quiz, requester, "view attempts for this quiz")
            attempts = self._attempts.get_attempts(quiz_id=quiz_id)
        return sorted(attempts, key=lambda a: a.attempt_date, reverse=True)

    # --- Read views ---

    def get_leaderboard(self, quiz_id: str | None = None) -> list[LeaderboardEntry]:
        with self._lock:
            if quiz_id is not None:
                quiz = self._get_quiz_or_raise(quiz_id)
                if not quiz.is_public:
                    raise PermissionDeniedError("Leaderboard not available for private quizzes")
                attempts = self._attempts.get_attempts(quiz_id=quiz_id)
            else:
                public_ids = {quiz.id for quiz in self._quizzes.list_public()}
                attempts = [a for a in self._attempts.get_attempts() if a.quiz_id in public_ids]
            return self._leaderboard.rank(attempts, quiz_id=quiz_id)

    def get_quiz_analytics(
        self,
        quiz_id: str,
        requester: User,
        date_range: DateRange = DateRange.MONTH,
        now: datetime | None = None,
    ) -> AnalyticsSummary:
        with self._lock:
            quiz = self._get_quiz_or_raise(quiz_id)
            self._require_owner(quiz, requester, "view analytics for this quiz")
            attempts = self._attempts.get_attempts(quiz_id=quiz_id)
        return self._analytics.aggregate(quiz, attempts, now or utcnow(), DateRange(date_range))

    # --- Helpers ---

    def _get_quiz_or_raise(self, quiz_id: str) -> Quiz:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz")
        return quiz

    @staticmethod
    def _require_owner(quiz: Quiz, requester: User, action: str) -> None:
        if quiz.created_by != requester.id and not requester.is_admin:
            logger.warning("User %s refused: not authorized to %s (%s)", requester.id, action, quiz.id)
            raise PermissionDeniedError(f"Not authorized to {action}")

    @staticmethod
    def _require_self_or_admin(user_id: str, requester: User) -> None:
        if requester.id != user_id and not requester.is_admin:
            raise PermissionDeniedError("Not authorized")

    # Leaderboard resolvers run while the lock is already held
    def _resolve_user_name(self, user_id: str) -> str | None:
        user = self._users.get(user_id)
        return user.name if user else None

    def _resolve_user_avatar(self, user_id: str) -> str | None:
        user = self._users.get(user_id)
        return user.avatar if user else None

    def _resolve_quiz_title(self, quiz_id: str) -> str:
        quiz = self._quizzes.get(quiz_id)
        return quiz.title if quiz else UNKNOWN_QUIZ_TITLE
