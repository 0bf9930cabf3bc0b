"""Counting of free-text questions."""

from evoting.counting import register_counter
from evoting.counting.base import ResultCounter, Tally
from evoting.models import TextQuestion


def normalize_text_answer(answer: str) -> str:
    """Collapse whitespace and case so equivalent answers count together."""
    return " ".join(answer.split()).upper()


@register_counter
class TextCounter(ResultCounter):
    """Count distinct free-text answers.

    Answers are normalized with normalize_text_answer; empty ones are
    dropped. A ballot counts at most once for a given answer, even if it
    wrote it in several inputs. Candidates are ordered by descending count,
    ties kept in order of first appearance.
    """

    QUESTION_TYPE = TextQuestion

    @property
    def name(self) -> str:
        return "Text"

    def count(self, question: TextQuestion, ballots: list[list[str]]) -> Tally:
        counts: dict[str, int] = {}
        for ballot in ballots:
            distinct = dict.fromkeys(
                normalized
                for normalized in map(normalize_text_answer, ballot)
                if normalized
            )
            for answer in distinct:
                counts[answer] = counts.get(answer, 0) + 1

        ordered = sorted(counts, key=lambda a: counts[a], reverse=True)
        return self.make_tally(
            question.id, ordered, [counts[a] for a in ordered], len(ballots),
        )
