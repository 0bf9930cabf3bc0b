"""Ballot validation: check a voter's answers against the configuration."""

import re
from collections.abc import Callable

from evoting.models import (
    Answers,
    Configuration,
    RankQuestion,
    SelectQuestion,
    Subject,
    TextQuestion,
)

# Translator: (message key, **params) -> display text
Translator = Callable[..., str]

MESSAGES = {
    "singularAnswer": "answer",
    "pluralAnswers": "answers",
    "minSelectError": "Please select at least {min} {singularPlural}.",
    "maxSelectError": "Please select at most {max} {singularPlural}.",
    "minTextError": "Please fill in at least {minText} {singularPlural}.",
    "maxTextChars": "Answers must be at most {maxLength} characters long.",
    "regexpCheck": "Answers must match the pattern {regexp}.",
    "rankError": "Please rank every choice exactly once.",
}


def default_translate(key: str, **params) -> str:
    """Render a message from the built-in English catalog."""
    return MESSAGES[key].format(**params)


def _answers_word(n: int, t: Translator) -> str:
    return t("pluralAnswers") if n > 1 else t("singularAnswer")


def is_select_answer_valid(
    question: SelectQuestion, answers: Answers, t: Translator = default_translate
) -> bool:
    """Check the number of selected choices is within [MinN, MaxN].

    Updates the question's error slot in place.
    """
    selected = sum(1 for answer in answers.select_answers.get(question.id, []) if answer)
    error = ""
    is_valid = True

    if selected < question.min_n:
        error = t("minSelectError", min=question.min_n,
                  singularPlural=_answers_word(question.min_n, t))
        is_valid = False

    if selected > question.max_n:
        error = t("maxSelectError", max=question.max_n,
                  singularPlural=_answers_word(question.max_n, t))
        is_valid = False

    answers.errors[question.id] = error
    return is_valid


def text_answer_matches(question: TextQuestion, answer: str) -> bool:
    """Whether a single text answer passes the question's pattern.

    Empty answers and questions without a pattern always pass.
    """
    if not question.regex or answer == "":
        return True
    return re.search(question.regex, answer) is not None


def is_text_answer_valid(
    question: TextQuestion, answers: Answers, t: Translator = default_translate
) -> bool:
    """Check length, pattern and minimum count of a text question's answers.

    The question has a single error slot: when several checks fail, the
    last failure detected is the one reported (count check last).
    """
    text_answers = answers.text_answers.get(question.id, [])
    filled = sum(1 for answer in text_answers if answer != "")
    error = ""
    is_valid = True

    for answer in text_answers:
        if len(answer) > question.max_length:
            error = t("maxTextChars", maxLength=question.max_length)
            is_valid = False

        if not text_answer_matches(question, answer):
            error = t("regexpCheck", regexp=question.regex)
            is_valid = False

    if filled < question.min_n:
        error = t("minTextError", minText=question.min_n,
                  singularPlural=_answers_word(question.min_n, t))
        is_valid = False

    answers.errors[question.id] = error
    return is_valid


def is_rank_answer_valid(
    question: RankQuestion, answers: Answers, t: Translator = default_translate
) -> bool:
    """Check a ranking gives every choice a distinct position.

    Ranking rules beyond this structural check are not enforced: any
    permutation of positions 0..n-1 is accepted.
    """
    ranking = answers.rank_answers.get(question.id, [])
    is_valid = sorted(ranking) == list(range(len(question.choices)))
    answers.errors[question.id] = "" if is_valid else t("rankError")
    return is_valid


def is_subject_valid(subject: Subject, answers: Answers, t: Translator = default_translate) -> bool:
    """Validate every element of a subject, recursing into nested subjects.

    All elements are visited even after a failure so that every error slot
    is refreshed.
    """
    is_valid = True
    for element in subject.iter_elements():
        match element:
            case Subject():
                element_is_valid = is_subject_valid(element, answers, t)
            case SelectQuestion():
                element_is_valid = is_select_answer_valid(element, answers, t)
            case TextQuestion():
                element_is_valid = is_text_answer_valid(element, answers, t)
            case RankQuestion():
                element_is_valid = is_rank_answer_valid(element, answers, t)
        is_valid = is_valid and element_is_valid
    return is_valid


def ballot_is_valid(
    configuration: Configuration, answers: Answers, t: Translator | None = None
) -> tuple[bool, Answers]:
    """Validate a whole ballot.

    Args:
        configuration: The ballot's configuration
        answers: The voter's current answers (left untouched)
        t: Translation function for error messages (English by default)

    Returns:
        (is_valid, new_answers) where new_answers is a copy of answers with
        every question's error slot recomputed.
    """
    t = t or default_translate
    new_answers = answers.copy()
    is_valid = True
    for subject in configuration.scaffold:
        subject_is_valid = is_subject_valid(subject, new_answers, t)
        is_valid = is_valid and subject_is_valid
    return is_valid, new_answers
