"""Counting of rank questions."""

from evoting.counting import register_counter
from evoting.counting.base import ResultCounter, Tally
from evoting.models import RankQuestion


@register_counter
class RankCounter(ResultCounter):
    """Count, per choice, the ballots that ranked it first.

    Each ballot gives the position of every choice (0 = first). The tally
    percentages are first-place shares; details["position_sums"] holds the
    summed positions per choice (lower = preferred overall).
    """

    QUESTION_TYPE = RankQuestion

    @property
    def name(self) -> str:
        return "Rank"

    def count(self, question: RankQuestion, ballots: list[list[int]]) -> Tally:
        n = len(question.choices)
        first_places = [0] * n
        position_sums = [0] * n

        for ballot in ballots:
            for index, position in enumerate(ballot[:n]):
                position_sums[index] += position
                if position == 0:
                    first_places[index] += 1

        return self.make_tally(
            question.id, list(question.choices), first_places, len(ballots),
            position_sums=position_sums,
        )
