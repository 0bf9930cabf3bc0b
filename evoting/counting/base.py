"""Abstract base class for per-question result counters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from evoting.models import Question


def percentage(count: int, total: int) -> int:
    """Share of count in total, in percent, rounded half up to an integer.

    Returns 0 when there is nothing to count.
    """
    if total == 0:
        return 0
    exact = Decimal(count * 100) / Decimal(total)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass
class Tally:
    """Counted results of one question.

    Attributes:
        question_id: Identifier of the counted question
        candidates: Labels of what was counted (choices, or distinct texts)
        counts: Number of ballots for each candidate
        percentages: counts as integer percentages of total_ballots
        total_ballots: Number of ballots that answered the question
        details: Counter-specific extras
    """
    question_id: str
    candidates: list[str]
    counts: list[int]
    percentages: list[int]
    total_ballots: int
    details: dict[str, Any] = field(default_factory=dict)

    def to_export(self) -> list[dict[str, str]]:
        """Rows of the downloadable results document."""
        return [
            {"Candidate": candidate, "Percentage": f"{percent}%"}
            for candidate, percent in zip(self.candidates, self.percentages)
        ]


class ResultCounter(ABC):
    """Abstract base class for counting one kind of question.

    Each counter turns the grouped per-ballot answers of a question into a
    Tally. Counters are registered via the @register_counter decorator in
    evoting/counting/__init__.py.
    """

    QUESTION_TYPE: type

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this counter."""
        pass

    def handles(self, question: Question) -> bool:
        return isinstance(question, self.QUESTION_TYPE)

    @abstractmethod
    def count(self, question: Question, ballots: list[list]) -> Tally:
        """Count one question.

        Args:
            question: The question being counted
            ballots: One raw answer per ballot, in arrival order

        Returns:
            Tally for the question
        """
        pass

    @staticmethod
    def make_tally(question_id: str, candidates: list[str], counts: list[int],
                   total: int, **details) -> Tally:
        return Tally(
            question_id=question_id,
            candidates=candidates,
            counts=counts,
            percentages=[percentage(c, total) for c in counts],
            total_ballots=total,
            details=details,
        )
