from __future__ import annotations

import pytest

from conftest import make_attempt, multi, single, true_false
from quizdeck.core.exceptions import DuplicateError, QuizValidationError
from quizdeck.core.models import Option, Question, QuestionType, Quiz
from quizdeck.core.services import AttemptRepository, QuizRepository, UserRepository
from quizdeck.core.services.user_repository import verify_password


def _quiz(*questions: Question, **overrides) -> Quiz:
    fields = {"id": "", "title": "Capitals", "created_by": "author", "questions": list(questions)}
    fields.update(overrides)
    return Quiz(**fields)


class TestQuizRepository:
    def test_add_assigns_id_and_strips_text(self):
        repository = QuizRepository()
        stored = repository.add(_quiz(single("q1", " Paris ", others=("Rome",)), title="  Capitals  "))

        assert stored.id
        assert stored.title == "Capitals"
        assert stored.questions[0].options[0].text == "Paris"
        assert repository.get(stored.id) is stored
        assert repository.list_by_author("author") == [stored]

    def test_question_without_id_gets_one(self):
        question = single("", "Paris")
        stored = QuizRepository().add(_quiz(question))
        assert stored.questions[0].id

    @pytest.mark.parametrize(
        ("quiz", "message"),
        [
            (_quiz(single("q1", "A"), title="   "), "title"),
            (_quiz(), "at least one question"),
            (_quiz(single("q1", "A"), passing_score=101), "Passing score"),
            (_quiz(single("q1", "A"), time_limit=-1), "Time limit"),
            (_quiz(single("q1", "A"), single("q1", "B", others=("C",))), "unique"),
        ],
    )
    def test_rejects_invalid_quizzes(self, quiz, message):
        with pytest.raises(QuizValidationError, match=message):
            QuizRepository().add(quiz)

    def test_rejects_duplicate_option_texts(self):
        question = single("q1", "Paris", others=("Paris",))
        with pytest.raises(QuizValidationError, match="option texts must be unique"):
            QuizRepository().add(_quiz(question))

    def test_option_count_is_capped(self):
        QuizRepository().add(_quiz(single("q1", "A", others=tuple(f"opt{i}" for i in range(15)))))

        question = single("q1", "A", others=tuple(f"opt{i}" for i in range(16)))
        with pytest.raises(QuizValidationError, match="at most 16 options"):
            QuizRepository().add(_quiz(question))

    def test_rejects_question_without_correct_option(self):
        question = Question(id="q1", type=QuestionType.MULTI_CHOICE, text="?", options=[Option(text="A")])
        with pytest.raises(QuizValidationError, match="at least one option as correct"):
            QuizRepository().add(_quiz(question))

    def test_single_choice_needs_exactly_one_correct(self):
        question = Question(
            id="q1",
            type=QuestionType.SINGLE_CHOICE,
            text="?",
            options=[Option(text="A", is_correct=True), Option(text="B", is_correct=True)],
        )
        with pytest.raises(QuizValidationError, match="exactly one option"):
            QuizRepository().add(_quiz(question))

    def test_multi_choice_allows_several_correct(self):
        stored = QuizRepository().add(_quiz(multi("q1", ("React", "Vue"), wrong=("Django",))))
        assert stored.questions[0].correct_texts() == ["React", "Vue"]

    def test_true_false_options_are_fixed(self):
        QuizRepository().add(_quiz(true_false("q1", answer=True)))

        bad = Question(
            id="q1",
            type=QuestionType.TRUE_FALSE,
            text="?",
            options=[Option(text="Yes", is_correct=True), Option(text="No")],
        )
        with pytest.raises(QuizValidationError, match="true/false"):
            QuizRepository().add(_quiz(bad))

    def test_update_keeps_owner_and_creation_time(self):
        repository = QuizRepository()
        stored = repository.add(_quiz(single("q1", "Paris")))

        updated = repository.update(stored.id, _quiz(single("q1", "Rome"), title="Renamed", created_by="intruder"))

        assert updated.title == "Renamed"
        assert updated.created_by == "author"
        assert updated.created_at == stored.created_at
        assert updated.updated_at >= stored.updated_at

    def test_update_unknown_quiz_raises(self):
        with pytest.raises(KeyError):
            QuizRepository().update("missing", _quiz(single("q1", "A")))

    def test_listing_public_and_by_author(self):
        repository = QuizRepository()
        public = repository.add(_quiz(single("q1", "A"), title="Public"))
        private = repository.add(_quiz(single("q1", "A"), title="Private", is_public=False))
        repository.add(_quiz(single("q1", "A"), title="Other", created_by="someone"))

        assert private not in repository.list_public()
        assert public in repository.list_public()
        assert {quiz.title for quiz in repository.list_by_author("author")} == {"Public", "Private"}

    def test_delete(self):
        repository = QuizRepository()
        stored = repository.add(_quiz(single("q1", "A")))
        assert repository.delete(stored.id) is True
        assert repository.delete(stored.id) is False
        assert repository.get(stored.id) is None


class TestAttemptRepository:
    def test_appends_in_submission_order(self):
        repository = AttemptRepository()
        for attempt_id in ("a1", "a2", "a3"):
            repository.append(make_attempt(attempt_id, 50))
        assert [a.id for a in repository.get_attempts()] == ["a1", "a2", "a3"]

    def test_duplicate_id_is_rejected(self):
        repository = AttemptRepository()
        repository.append(make_attempt("a1", 50))
        with pytest.raises(ValueError):
            repository.append(make_attempt("a1", 90))
        assert repository.get_attempts()[0].score == 50

    def test_filters_and_counts(self):
        repository = AttemptRepository()
        repository.append(make_attempt("a1", 50, user_id="u1"))
        repository.append(make_attempt("a2", 50, user_id="u2"))
        repository.append(make_attempt("a3", 50, quiz_id="quiz-2", user_id="u1"))

        assert [a.id for a in repository.get_attempts(user_id="u1")] == ["a1", "a3"]
        assert [a.id for a in repository.get_attempts(quiz_id="quiz-1", user_id="u1")] == ["a1"]
        assert repository.count_by_quiz() == {"quiz-1": 2, "quiz-2": 1}

    def test_snapshot_is_detached(self):
        repository = AttemptRepository()
        repository.append(make_attempt("a1", 50))
        snapshot = repository.get_attempts()
        snapshot.clear()
        assert len(repository.get_attempts()) == 1

    def test_delete_for_quiz(self):
        repository = AttemptRepository()
        repository.append(make_attempt("a1", 50))
        repository.append(make_attempt("a2", 50, quiz_id="quiz-2"))
        assert repository.delete_for_quiz("quiz-1") == 1
        assert [a.id for a in repository.get_attempts()] == ["a2"]


class TestUserRepository:
    def test_register_hashes_password_and_normalizes_email(self):
        repository = UserRepository()
        user = repository.register("Ada", " Ada@Example.com ", "secret1")

        assert user.email == "ada@example.com"
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)
        assert not verify_password("wrong", user.password_hash)
        assert repository.get_by_email("ADA@example.com") is user

    def test_duplicate_email_is_rejected(self):
        repository = UserRepository()
        repository.register("Ada", "ada@example.com", "secret1")
        with pytest.raises(DuplicateError):
            repository.register("Other", "ADA@example.com", "secret2")

    def test_update_profile(self):
        repository = UserRepository()
        user = repository.register("Ada", "ada@example.com", "secret1")
        repository.register("Bob", "bob@example.com", "secret1")

        with pytest.raises(DuplicateError):
            repository.update(user.id, email="bob@example.com")

        updated = repository.update(user.id, name="Ada L.", email="ada@example.org", avatar="a.png")
        assert (updated.name, updated.email, updated.avatar) == ("Ada L.", "ada@example.org", "a.png")
