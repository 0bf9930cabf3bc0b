"""Core data models for ballot configurations, answers and results."""

import copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Self

ID = str


@dataclass(frozen=True)
class SelectQuestion:
    """A multiple-choice question.

    Attributes:
        id: Identifier, unique within the whole configuration
        title: Question text
        choices: Candidate labels, in display order
        min_n: Minimum number of selected choices (inclusive)
        max_n: Maximum number of selected choices (inclusive)
    """
    id: ID
    title: str
    choices: tuple[str, ...]
    min_n: int
    max_n: int


@dataclass(frozen=True)
class RankQuestion:
    """A question where the voter orders every choice."""
    id: ID
    title: str
    choices: tuple[str, ...]
    min_n: int
    max_n: int


@dataclass(frozen=True)
class TextQuestion:
    """A free-text question.

    Attributes:
        choices: Labels of the text inputs shown to the voter
        min_n: Minimum number of non-empty answers
        max_n: Maximum number of non-empty answers
        max_length: Maximum length of a single answer
        regex: Pattern every non-empty answer must match ("" = no check)
    """
    id: ID
    title: str
    choices: tuple[str, ...]
    min_n: int
    max_n: int
    max_length: int
    regex: str = ""


@dataclass(frozen=True)
class Subject:
    """A titled section of the ballot.

    Attributes:
        order: Identifiers of the direct elements, in display order
        elements: Mapping of identifier -> element for every id in order
    """
    id: ID
    title: str
    order: tuple[ID, ...]
    elements: Mapping[ID, "SubjectElement"] = field(hash=False)

    def iter_elements(self) -> Iterator["SubjectElement"]:
        """Yield the direct elements in display order."""
        for element_id in self.order:
            yield self.elements[element_id]


SubjectElement = Subject | SelectQuestion | RankQuestion | TextQuestion
Question = SelectQuestion | RankQuestion | TextQuestion


@dataclass(frozen=True)
class Configuration:
    """A parsed, immutable ballot configuration.

    Example:
        >>> configuration = Configuration(
        ...     main_title="Board election",
        ...     scaffold=(Subject(
        ...         id="s1", title="Board", order=("q1",),
        ...         elements={"q1": SelectQuestion(
        ...             id="q1", title="President", choices=("Alice", "Bob"),
        ...             min_n=1, max_n=1,
        ...         )},
        ...     ),),
        ... )
    """
    main_title: str
    scaffold: tuple[Subject, ...]

    def iter_questions(self) -> Iterator[Question]:
        """Yield every question, depth-first in display order."""
        def walk(subject: Subject) -> Iterator[Question]:
            for element in subject.iter_elements():
                match element:
                    case Subject():
                        yield from walk(element)
                    case SelectQuestion() | RankQuestion() | TextQuestion():
                        yield element

        for subject in self.scaffold:
            yield from walk(subject)

    def get_element(self, element_id: ID) -> SubjectElement | None:
        """Find an element (subject or question) anywhere in the tree."""
        def walk(subject: Subject) -> SubjectElement | None:
            if subject.id == element_id:
                return subject
            for element in subject.iter_elements():
                if isinstance(element, Subject):
                    found = walk(element)
                    if found is not None:
                        return found
                elif element.id == element_id:
                    return element
            return None

        for subject in self.scaffold:
            found = walk(subject)
            if found is not None:
                return found
        return None


@dataclass
class Answers:
    """A voter's in-progress answers, keyed by question identifier.

    Attributes:
        select_answers: question_id -> one bool per choice
        rank_answers: question_id -> position given to each choice (0 = first)
        text_answers: question_id -> one string per text input
        errors: question_id -> current error message ("" = no error)
    """
    select_answers: dict[ID, list[bool]] = field(default_factory=dict)
    rank_answers: dict[ID, list[int]] = field(default_factory=dict)
    text_answers: dict[ID, list[str]] = field(default_factory=dict)
    errors: dict[ID, str] = field(default_factory=dict)

    @classmethod
    def empty_for(cls, configuration: Configuration) -> Self:
        """Build the blank answer sheet for a configuration."""
        answers = cls()
        for question in configuration.iter_questions():
            match question:
                case SelectQuestion():
                    answers.select_answers[question.id] = [False] * len(question.choices)
                case RankQuestion():
                    answers.rank_answers[question.id] = list(range(len(question.choices)))
                case TextQuestion():
                    answers.text_answers[question.id] = [""] * len(question.choices)
            answers.errors[question.id] = ""
        return answers

    def copy(self) -> Self:
        return copy.deepcopy(self)

    def to_ballot(self) -> dict[str, Any]:
        """Convert to the payload submitted when casting a ballot."""
        return {
            "SelectResultIDs": list(self.select_answers),
            "SelectResult": [list(v) for v in self.select_answers.values()],
            "RankResultIDs": list(self.rank_answers),
            "RankResult": [list(v) for v in self.rank_answers.values()],
            "TextResultIDs": list(self.text_answers),
            "TextResult": [list(v) for v in self.text_answers.values()],
        }


@dataclass(frozen=True)
class Results:
    """One decrypted ballot, as returned by the backend.

    Each question kind comes as a pair of parallel lists: the question
    identifiers and the raw answer for each of them. An id list is None
    when the backend sent null for it.
    """
    select_result_ids: tuple[ID, ...] | None = ()
    select_result: tuple[tuple[bool, ...], ...] = ()
    rank_result_ids: tuple[ID, ...] | None = ()
    rank_result: tuple[tuple[int, ...], ...] = ()
    text_result_ids: tuple[ID, ...] | None = ()
    text_result: tuple[tuple[str, ...], ...] = ()

    @property
    def is_complete(self) -> bool:
        return (
            self.select_result_ids is not None
            and self.rank_result_ids is not None
            and self.text_result_ids is not None
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        def ids(key: str) -> tuple[ID, ...] | None:
            value = data.get(key)
            return None if value is None else tuple(value)

        def rows(key: str) -> tuple[tuple, ...]:
            return tuple(tuple(row) for row in data.get(key) or ())

        return cls(
            select_result_ids=ids("SelectResultIDs"),
            select_result=rows("SelectResult"),
            rank_result_ids=ids("RankResultIDs"),
            rank_result=rows("RankResult"),
            text_result_ids=ids("TextResultIDs"),
            text_result=rows("TextResult"),
        )

    def to_dict(self) -> dict[str, Any]:
        def ids(value: tuple[ID, ...] | None) -> list[ID] | None:
            return None if value is None else list(value)

        return {
            "SelectResultIDs": ids(self.select_result_ids),
            "SelectResult": [list(r) for r in self.select_result],
            "RankResultIDs": ids(self.rank_result_ids),
            "RankResult": [list(r) for r in self.rank_result],
            "TextResultIDs": ids(self.text_result_ids),
            "TextResult": [list(r) for r in self.text_result],
        }
