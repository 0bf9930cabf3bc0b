"""Counters turning grouped ballots into per-question tallies."""

from .base import ResultCounter, Tally, percentage

# Counter registry - import counter modules here to register them
_counters: list[type[ResultCounter]] = []


def register_counter(counter_class: type[ResultCounter]) -> type[ResultCounter]:
    """Decorator to register a counter class."""
    _counters.append(counter_class)
    return counter_class


def get_all_counters() -> list[ResultCounter]:
    """Return instances of all registered counters."""
    return [counter_class() for counter_class in _counters]


def get_counter(question) -> ResultCounter:
    """Return the counter for the given question."""
    for counter in get_all_counters():
        if counter.handles(question):
            return counter
    raise TypeError(f"No counter registered for {type(question).__name__}")


__all__ = [
    "ResultCounter",
    "Tally",
    "get_all_counters",
    "get_counter",
    "percentage",
    "register_counter",
]
