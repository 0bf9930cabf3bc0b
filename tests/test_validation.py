"""Tests for ballot validation."""

import pytest
from tests.conftest import make_configuration, rank, select, subject, text

from evoting.models import Answers
from evoting.validation import (
    MESSAGES,
    ballot_is_valid,
    is_rank_answer_valid,
    is_select_answer_valid,
    is_text_answer_valid,
)


def question(configuration, question_id):
    return configuration.get_element(question_id)


class TestSelectValidation:
    def setup_method(self):
        self.configuration = make_configuration(
            subject("s1", select("q1", ["A", "B", "C", "D"], min_n=1, max_n=3))
        )
        self.question = question(self.configuration, "q1")
        self.answers = Answers.empty_for(self.configuration)

    def select(self, *indices):
        for i in indices:
            self.answers.select_answers["q1"][i] = True

    @pytest.mark.parametrize("selected, expected", [
        ((), False),
        ((0,), True),
        ((0, 1), True),
        ((0, 1, 2), True),
        ((0, 1, 2, 3), False),
    ])
    def test_valid_iff_within_bounds(self, selected, expected):
        self.select(*selected)
        assert is_select_answer_valid(self.question, self.answers) is expected

    def test_too_few_singular_message(self):
        assert not is_select_answer_valid(self.question, self.answers)
        assert self.answers.errors["q1"] == "Please select at least 1 answer."

    def test_too_few_plural_message(self):
        configuration = make_configuration(subject("s1", select("q1", ["A", "B", "C"], min_n=2, max_n=3)))
        answers = Answers.empty_for(configuration)
        assert not is_select_answer_valid(question(configuration, "q1"), answers)
        assert answers.errors["q1"] == "Please select at least 2 answers."

    def test_too_many_message(self):
        self.select(0, 1, 2, 3)
        is_select_answer_valid(self.question, self.answers)
        assert self.answers.errors["q1"] == "Please select at most 3 answers."

    def test_valid_clears_error(self):
        self.answers.errors["q1"] = "stale"
        self.select(0)
        assert is_select_answer_valid(self.question, self.answers)
        assert self.answers.errors["q1"] == ""

    def test_custom_translator(self):
        calls = []

        def t(key, **params):
            calls.append((key, params))
            return key

        is_select_answer_valid(self.question, self.answers, t)
        assert self.answers.errors["q1"] == "minSelectError"
        assert ("minSelectError", {"min": 1, "singularPlural": "singularAnswer"}) in calls


class TestTextValidation:
    def make(self, **kwargs):
        configuration = make_configuration(subject("s1", text("q1", **kwargs)))
        return question(configuration, "q1"), Answers.empty_for(configuration)

    def test_empty_answer_never_fails_regex(self):
        q, answers = self.make(inputs=2, regex="^[0-9]+$")
        assert is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == ""

    def test_answer_failing_regex(self):
        q, answers = self.make(regex="^[0-9]+$")
        answers.text_answers["q1"] = ["abc"]
        assert not is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == MESSAGES["regexpCheck"].format(regexp="^[0-9]+$")

    def test_regex_is_a_search(self):
        q, answers = self.make(regex="[0-9]")
        answers.text_answers["q1"] = ["abc1"]
        assert is_text_answer_valid(q, answers)

    def test_answer_too_long(self):
        q, answers = self.make(max_length=5)
        answers.text_answers["q1"] = ["abcdef"]
        assert not is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == "Answers must be at most 5 characters long."

    def test_answer_at_max_length(self):
        q, answers = self.make(max_length=5)
        answers.text_answers["q1"] = ["abcde"]
        assert is_text_answer_valid(q, answers)

    def test_too_long_even_if_matching(self):
        q, answers = self.make(max_length=3, regex="^a+$")
        answers.text_answers["q1"] = ["aaaa"]
        assert not is_text_answer_valid(q, answers)

    def test_too_few_answers(self):
        q, answers = self.make(inputs=3, min_n=2)
        answers.text_answers["q1"] = ["one", "", ""]
        assert not is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == "Please fill in at least 2 answers."

    def test_max_n_not_enforced(self):
        q, answers = self.make(inputs=3, max_n=1)
        answers.text_answers["q1"] = ["one", "two", "three"]
        assert is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == ""

    def test_last_failure_wins(self):
        q, answers = self.make(inputs=2, min_n=2, max_length=3, regex="^[a-z]+$")
        # the first answer is too long, but the count check comes last
        answers.text_answers["q1"] = ["abcdef", ""]
        assert not is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == "Please fill in at least 2 answers."

    def test_regex_overwrites_length_error(self):
        q, answers = self.make(max_length=3, regex="^[a-z]+$")
        answers.text_answers["q1"] = ["ABCDEF"]
        is_text_answer_valid(q, answers)
        assert answers.errors["q1"] == MESSAGES["regexpCheck"].format(regexp="^[a-z]+$")


class TestRankValidation:
    def setup_method(self):
        self.configuration = make_configuration(subject("s1", rank("rank1", ["A", "B", "C"])))
        self.question = question(self.configuration, "rank1")
        self.answers = Answers.empty_for(self.configuration)

    def test_default_order_is_valid(self):
        assert is_rank_answer_valid(self.question, self.answers)

    def test_any_permutation_is_valid(self):
        self.answers.rank_answers["rank1"] = [2, 0, 1]
        assert is_rank_answer_valid(self.question, self.answers)

    def test_repeated_position_is_invalid(self):
        self.answers.rank_answers["rank1"] = [0, 0, 1]
        assert not is_rank_answer_valid(self.question, self.answers)
        assert self.answers.errors["rank1"] == MESSAGES["rankError"]

    def test_incomplete_ranking_is_invalid(self):
        self.answers.rank_answers["rank1"] = [0, 1]
        assert not is_rank_answer_valid(self.question, self.answers)


class TestBallotIsValid:
    def setup_method(self):
        self.configuration = make_configuration(
            subject(
                "s1",
                select("q1", ["Yes", "No"]),
                subject("s2", subject("s3", text("deep", min_n=1))),
            ),
            subject("s4", rank("rank1", ["A", "B"])),
        )
        self.answers = Answers.empty_for(self.configuration)
        self.answers.select_answers["q1"][0] = True
        self.answers.text_answers["deep"][0] = "filled"

    def test_all_valid(self):
        is_valid, new_answers = ballot_is_valid(self.configuration, self.answers)
        assert is_valid
        assert all(message == "" for message in new_answers.errors.values())

    def test_deeply_nested_invalid_question_invalidates_ballot(self):
        self.answers.text_answers["deep"][0] = ""
        is_valid, new_answers = ballot_is_valid(self.configuration, self.answers)
        assert not is_valid
        assert new_answers.errors["deep"] != ""
        assert new_answers.errors["q1"] == ""

    def test_every_error_slot_is_refreshed(self):
        self.answers.select_answers["q1"][0] = False
        self.answers.text_answers["deep"][0] = ""
        is_valid, new_answers = ballot_is_valid(self.configuration, self.answers)
        assert not is_valid
        assert new_answers.errors["q1"] != ""
        assert new_answers.errors["deep"] != ""

    def test_stale_errors_cleared(self):
        self.answers.errors["q1"] = "stale"
        self.answers.errors["rank1"] = "stale"
        _, new_answers = ballot_is_valid(self.configuration, self.answers)
        assert new_answers.errors["q1"] == ""
        assert new_answers.errors["rank1"] == ""

    def test_input_answers_untouched(self):
        self.answers.text_answers["deep"][0] = ""
        ballot_is_valid(self.configuration, self.answers)
        assert self.answers.errors["deep"] == ""

    def test_invalid_rank_invalidates_ballot(self):
        self.answers.rank_answers["rank1"] = [1, 1]
        is_valid, _ = ballot_is_valid(self.configuration, self.answers)
        assert not is_valid
