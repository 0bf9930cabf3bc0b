"""Counting of select (multiple-choice) questions."""

from evoting.counting import register_counter
from evoting.counting.base import ResultCounter, Tally
from evoting.models import SelectQuestion


@register_counter
class SelectCounter(ResultCounter):
    """Count, per choice, the ballots that selected it.

    Ballots arrive as 0/1 vectors, one entry per choice, so a choice's count
    is the column sum.
    """

    QUESTION_TYPE = SelectQuestion

    @property
    def name(self) -> str:
        return "Select"

    def count(self, question: SelectQuestion, ballots: list[list[int]]) -> Tally:
        counts = [0] * len(question.choices)
        for ballot in ballots:
            for index, selected in enumerate(ballot[:len(counts)]):
                counts[index] += selected
        return self.make_tally(question.id, list(question.choices), counts, len(ballots))
