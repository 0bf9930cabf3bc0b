"""Orchestrator: group ballots by question, count them, build the export."""

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Import counters to register them
from evoting.counting import rank  # noqa: F401
from evoting.counting import select  # noqa: F401
from evoting.counting import text  # noqa: F401

from evoting.counting import Tally, get_counter
from evoting.models import (
    ID,
    Configuration,
    Question,
    RankQuestion,
    Results,
    SelectQuestion,
    Subject,
    TextQuestion,
)

logger = logging.getLogger(__name__)

# Sink: (filename, data) -> None, e.g. a browser download or a file write
Sink = Callable[[str, bytes], None]


@dataclass
class GroupedResults:
    """Per-question raw answers, one entry per ballot in arrival order.

    Attributes:
        select: question_id -> per-ballot 0/1 vectors
        rank: question_id -> per-ballot position vectors
        text: question_id -> per-ballot text answers
    """
    select: dict[ID, list[list[int]]] = field(default_factory=dict)
    rank: dict[ID, list[list[int]]] = field(default_factory=dict)
    text: dict[ID, list[list[str]]] = field(default_factory=dict)

    def for_question(self, question: Question) -> list[list] | None:
        """The grouped ballots of a question, or None if it got no answer."""
        match question:
            case SelectQuestion():
                return self.select.get(question.id)
            case RankQuestion():
                return self.rank.get(question.id)
            case TextQuestion():
                return self.text.get(question.id)


def _group_by_id(grouped: dict[ID, list], ids: Sequence[ID], answers: Sequence,
                 to_number: bool = False) -> None:
    for index, question_id in enumerate(ids):
        answer = list(answers[index])
        # Selects become 0/1 so that ballots can be summed
        if to_number:
            answer = [1 if a else 0 for a in answer]
        grouped.setdefault(question_id, []).append(answer)


def group_results_by_id(results: Iterable[Results]) -> GroupedResults:
    """Group every ballot's answers by question identifier.

    Ballots with a null identifier list are skipped entirely.
    """
    grouped = GroupedResults()
    for index, result in enumerate(results):
        if not result.is_complete:
            logger.warning("Skipping ballot %d: incomplete result record", index)
            continue
        _group_by_id(grouped.select, result.select_result_ids, result.select_result, to_number=True)
        _group_by_id(grouped.rank, result.rank_result_ids, result.rank_result)
        _group_by_id(grouped.text, result.text_result_ids, result.text_result)
    return grouped


def count_results(configuration: Configuration, results: Sequence[Results]) -> dict[ID, Tally]:
    """Count every question that received answers.

    Returns:
        question_id -> Tally, in configuration order
    """
    grouped = group_results_by_id(results)
    tallies = {}
    for question in configuration.iter_questions():
        ballots = grouped.for_question(question)
        if ballots is not None:
            counter = get_counter(question)
            tallies[question.id] = counter.count(question, ballots)
            logger.debug("Counted %d ballots for %s (%s)", len(ballots), question.id, counter.name)
    return tallies


def _subject_entries(subject: Subject, tallies: dict[ID, Tally],
                     entries: list[dict[str, Any]]) -> None:
    entries.append({"Title": subject.title})
    for element in subject.iter_elements():
        if isinstance(element, Subject):
            _subject_entries(element, tallies, entries)
        elif element.id in tallies:
            entries.append({
                "Title": element.title,
                "Results": tallies[element.id].to_export(),
            })


def build_export(configuration: Configuration, results: Sequence[Results]) -> dict[str, Any]:
    """Build the downloadable results document.

    Returns:
        {"Title", "NumberOfVotes", "Results"} where Results holds one entry
        per subject, followed by an entry for each of its answered questions
        (nested subjects in place), in display order.
    """
    tallies = count_results(configuration, results)
    entries: list[dict[str, Any]] = []
    for subject in configuration.scaffold:
        _subject_entries(subject, tallies, entries)

    return {
        "Title": configuration.main_title,
        "NumberOfVotes": len(results),
        "Results": entries,
    }


def export_results(configuration: Configuration, results: Sequence[Results], sink: Sink,
                   filename: str = "result.json") -> dict[str, Any]:
    """Build the results document and hand it to a sink as JSON bytes."""
    data = build_export(configuration, results)
    sink(filename, json.dumps(data, indent=2).encode("utf-8"))
    logger.info("Exported %d ballots to %s", data["NumberOfVotes"], filename)
    return data


def write_to_directory(directory: str | Path) -> Sink:
    """Return a sink writing files into the given directory."""
    directory = Path(directory)

    def sink(filename: str, data: bytes) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        (directory / filename).write_bytes(data)

    return sink
