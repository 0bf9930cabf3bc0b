"""Tests for core data models."""

from tests.conftest import make_configuration, rank, select, subject, text

from evoting.models import Answers, Results


class TestAnswers:
    def setup_method(self):
        self.configuration = make_configuration(
            subject("s1", select("q1", ["A", "B", "C"]), subject("s2", text("q2", inputs=2))),
            subject("s3", rank("rank1", ["X", "Y"])),
        )

    def test_empty_for(self):
        answers = Answers.empty_for(self.configuration)
        assert answers.select_answers == {"q1": [False, False, False]}
        assert answers.rank_answers == {"rank1": [0, 1]}
        assert answers.text_answers == {"q2": ["", ""]}
        assert answers.errors == {"q1": "", "q2": "", "rank1": ""}

    def test_copy_is_deep(self):
        answers = Answers.empty_for(self.configuration)
        copied = answers.copy()
        copied.select_answers["q1"][0] = True
        copied.errors["q1"] = "error"
        assert answers.select_answers["q1"][0] is False
        assert answers.errors["q1"] == ""

    def test_to_ballot(self):
        answers = Answers.empty_for(self.configuration)
        answers.select_answers["q1"][1] = True
        answers.text_answers["q2"][0] = "hello"
        assert answers.to_ballot() == {
            "SelectResultIDs": ["q1"],
            "SelectResult": [[False, True, False]],
            "RankResultIDs": ["rank1"],
            "RankResult": [[0, 1]],
            "TextResultIDs": ["q2"],
            "TextResult": [["hello", ""]],
        }


class TestResults:
    RAW = {
        "SelectResultIDs": ["q1"],
        "SelectResult": [[True, False]],
        "RankResultIDs": ["r1"],
        "RankResult": [[1, 0]],
        "TextResultIDs": ["t1"],
        "TextResult": [["foo"]],
    }

    def test_from_dict(self):
        result = Results.from_dict(self.RAW)
        assert result.select_result_ids == ("q1",)
        assert result.select_result == ((True, False),)
        assert result.rank_result == ((1, 0),)
        assert result.text_result == (("foo",),)
        assert result.is_complete

    def test_round_trip(self):
        assert Results.from_dict(self.RAW).to_dict() == self.RAW

    def test_null_ids_make_record_incomplete(self):
        result = Results.from_dict({**self.RAW, "RankResultIDs": None, "RankResult": None})
        assert result.rank_result_ids is None
        assert result.rank_result == ()
        assert not result.is_complete

    def test_ballot_payload_parses_as_results(self):
        configuration = make_configuration(subject("s1", select("q1", ["A", "B"])))
        answers = Answers.empty_for(configuration)
        answers.select_answers["q1"][0] = True
        result = Results.from_dict(answers.to_ballot())
        assert result.select_result_ids == ("q1",)
        assert result.select_result == ((True, False),)
