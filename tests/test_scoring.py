from __future__ import annotations

import itertools

import pytest

from conftest import multi, single, true_false
from quizdeck.core.exceptions import InvalidQuizState
from quizdeck.core.models import Option, Question, QuestionType, Quiz
from quizdeck.core.scoring import is_correct, round_half_up, score_attempt


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.5, 1), (1.5, 2), (2.5, 3), (74.5, 75), (74.49, 74), (100 / 3, 33), (200 / 3, 67)],
    )
    def test_ties_round_up(self, value, expected):
        assert round_half_up(value) == expected


class TestSingleChoice:
    def test_correct_option_text_matches(self):
        question = single("q", "Paris", others=("Rome", "Berlin"))
        assert is_correct(question, "Paris")

    def test_every_other_option_is_wrong(self):
        question = single("q", "Paris", others=("Rome", "Berlin"))
        assert not is_correct(question, "Rome")
        assert not is_correct(question, "Berlin")

    def test_match_is_exact(self):
        question = single("q", "Paris")
        assert not is_correct(question, "paris")
        assert not is_correct(question, " Paris")

    def test_absent_answer_is_wrong(self):
        assert not is_correct(single("q", "Paris"), None)

    def test_no_correct_option_is_always_wrong(self):
        question = Question(
            id="q",
            type=QuestionType.SINGLE_CHOICE,
            text="?",
            options=[Option(text="A"), Option(text="B")],
        )
        assert not is_correct(question, "A")
        assert not is_correct(question, None)

    def test_several_correct_options_is_always_wrong(self):
        question = Question(
            id="q",
            type=QuestionType.SINGLE_CHOICE,
            text="?",
            options=[Option(text="A", is_correct=True), Option(text="B", is_correct=True)],
        )
        assert not is_correct(question, "A")

    @pytest.mark.parametrize("malformed", [["Paris"], {"Paris"}, 3, {"text": "Paris"}, True])
    def test_malformed_answers_are_wrong_not_errors(self, malformed):
        assert not is_correct(single("q", "Paris"), malformed)

    def test_true_false(self):
        question = true_false("q", answer=False)
        assert is_correct(question, "False")
        assert not is_correct(question, "True")


class TestMultiChoice:
    def test_any_permutation_of_correct_set(self):
        question = multi("q", ("React", "Vue", "Svelte"), wrong=("Django",))
        for permutation in itertools.permutations(["React", "Vue", "Svelte"]):
            assert is_correct(question, list(permutation))

    def test_strict_subset_is_wrong(self):
        question = multi("q", ("React", "Vue"), wrong=("Django",))
        assert not is_correct(question, ["React"])

    def test_strict_superset_is_wrong(self):
        question = multi("q", ("React", "Vue"), wrong=("Django",))
        assert not is_correct(question, ["React", "Vue", "Django"])

    def test_one_wrong_member_is_wrong(self):
        question = multi("q", ("React", "Vue"), wrong=("Django",))
        assert not is_correct(question, ["React", "Django"])

    def test_bare_string_counts_as_empty_selection(self):
        question = multi("q", ("React",), wrong=("Django",))
        assert not is_correct(question, "React")

    @pytest.mark.parametrize("malformed", [None, 5, {"React": True}])
    def test_malformed_answers_are_wrong(self, malformed):
        assert not is_correct(multi("q", ("React",)), malformed)

    @pytest.mark.parametrize("extra", [None, 7, b"Vue", ["Vue"], {"text": "Vue"}])
    def test_non_text_member_spoils_correct_selection(self, extra):
        question = multi("q", ("React", "Vue"), wrong=("Django",))
        assert not is_correct(question, ["React", "Vue", extra])

    def test_tuple_answers_are_accepted(self):
        assert is_correct(multi("q", ("React", "Vue")), ("Vue", "React"))

    def test_no_correct_option_is_always_wrong(self):
        question = Question(
            id="q",
            type=QuestionType.MULTI_CHOICE,
            text="?",
            options=[Option(text="A"), Option(text="B")],
        )
        assert not is_correct(question, [])


class TestScoreAttempt:
    def test_mixed_quiz_scenario(self, frameworks_quiz):
        result = score_attempt(frameworks_quiz, {"q1": "JSX", "q2": "Real DOM", "q3": ["React"]})

        assert result.earned_points == 1
        assert result.total_possible_points == 4
        assert result.total_score == 25
        assert result.passed is False
        assert result.per_question["q1"].correct is True
        assert result.per_question["q1"].points_awarded == 1
        assert result.per_question["q2"].points_awarded == 0
        assert result.per_question["q3"].correct is False

    def test_weighted_points_awarded(self, frameworks_quiz):
        result = score_attempt(frameworks_quiz, {"q3": ["Vue", "React"]})
        assert result.per_question["q3"].points_awarded == 2
        assert result.total_score == 50

    def test_passing_boundary_is_inclusive(self):
        questions = [single(f"q{i}", "yes") for i in range(10)]
        quiz = Quiz(id="z", title="t", questions=questions, created_by="a", passing_score=70)
        answers = {f"q{i}": "yes" for i in range(7)}

        result = score_attempt(quiz, answers)

        assert result.total_score == 70
        assert result.passed is True

    def test_half_points_round_up(self):
        quiz = Quiz(
            id="z",
            title="t",
            created_by="a",
            questions=[single(f"q{i}", "yes") for i in range(8)],
        )
        # 3 of 8 is 37.5%
        result = score_attempt(quiz, {"q0": "yes", "q1": "yes", "q2": "yes"})
        assert result.total_score == 38

    def test_unset_points_count_as_one(self):
        question = single("q1", "yes")
        question.points = 0
        quiz = Quiz(id="z", title="t", created_by="a", questions=[question, single("q2", "yes")])
        result = score_attempt(quiz, {"q1": "yes"})
        assert result.total_possible_points == 2
        assert result.per_question["q1"].points_awarded == 1

    def test_empty_quiz_is_invalid(self):
        quiz = Quiz(id="z", title="t", created_by="a", questions=[])
        with pytest.raises(InvalidQuizState):
            score_attempt(quiz, {})

    def test_scoring_is_deterministic(self, frameworks_quiz):
        answers = {"q1": "JSX", "q2": "Virtual DOM", "q3": ["Vue", "React"]}
        assert score_attempt(frameworks_quiz, answers) == score_attempt(frameworks_quiz, answers)

    def test_unknown_question_ids_are_ignored(self, frameworks_quiz):
        result = score_attempt(frameworks_quiz, {"nope": "JSX", "q1": "JSX"})
        assert set(result.per_question) == {"q1", "q2", "q3"}
        assert result.earned_points == 1

    @pytest.mark.parametrize(
        "answers",
        [None, {}, "garbage", {"q1": ["JSX"], "q3": "React"}, {"q1": "JSX", "q2": "Virtual DOM", "q3": ["React", "Vue"]}],
    )
    def test_score_stays_within_bounds(self, frameworks_quiz, answers):
        result = score_attempt(frameworks_quiz, answers)
        assert 0 <= result.total_score <= 100
