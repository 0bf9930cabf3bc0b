"""Abstract base class for configuration element parsers."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from evoting.models import ID, SubjectElement

# Nesting deeper than this is rejected rather than recursed into.
MAX_DEPTH = 64


class MalformedConfiguration(ValueError):
    """Raised when a raw configuration cannot be turned into a valid tree.

    The whole configuration is rejected; a partially parsed tree is never
    returned.
    """
    pass


@dataclass
class ParseContext:
    """State shared by all element parsers while parsing one configuration.

    Attributes:
        seen_ids: Every identifier parsed so far, across the whole tree
        depth: Current subject nesting depth (1 = scaffold subject)
    """
    seen_ids: set[ID] = field(default_factory=set)
    depth: int = 0

    def claim_id(self, element_id: ID) -> None:
        if element_id in self.seen_ids:
            raise MalformedConfiguration(f"Duplicate identifier {element_id!r}")
        self.seen_ids.add(element_id)


class ElementParser(ABC):
    """Abstract base class for parsing one kind of subject element.

    A raw subject lists its children in one array per kind (e.g. "Selects",
    "Texts"). Each parser handles the array named by its KEY and converts
    elements of type ELEMENT_TYPE back into that form. Parsers are
    registered via the @register_element_parser decorator in
    evoting/parsers/__init__.py.
    """

    KEY: str
    ELEMENT_TYPE: type

    @abstractmethod
    def parse(self, raw: dict[str, Any], context: ParseContext) -> SubjectElement:
        """Parse one raw element.

        Args:
            raw: The element's JSON object
            context: Parse state shared across the configuration

        Returns:
            The typed element

        Raises:
            MalformedConfiguration: If the element is invalid
        """
        pass

    @abstractmethod
    def to_dict(self, element: SubjectElement) -> dict[str, Any]:
        """Serialize an element back into its raw JSON form."""
        pass

    def handles(self, element: SubjectElement) -> bool:
        return isinstance(element, self.ELEMENT_TYPE)


def require(raw: Any, key: str, kind: type, where: str = "element") -> Any:
    """Fetch a required field, checking its JSON type."""
    if not isinstance(raw, dict):
        raise MalformedConfiguration(f"Expected an object for {where}, got {type(raw).__name__}")
    if raw.get(key) is None:
        raise MalformedConfiguration(f"Missing field {key!r} in {where}")
    value = raw[key]
    # bool is an int subclass but never a valid count
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MalformedConfiguration(f"Field {key!r} in {where} has the wrong type")
    return value


def require_strings(raw: dict[str, Any], key: str, where: str) -> tuple[str, ...]:
    values = require(raw, key, list, where)
    if not all(isinstance(v, str) for v in values):
        raise MalformedConfiguration(f"Field {key!r} in {where} must only contain strings")
    return tuple(values)


def check_bounds(min_n: int, max_n: int, where: str) -> None:
    if min_n < 0:
        raise MalformedConfiguration(f"MinN must not be negative in {where}")
    if min_n > max_n:
        raise MalformedConfiguration(f"MinN ({min_n}) is greater than MaxN ({max_n}) in {where}")


def check_regex(pattern: str, where: str) -> None:
    try:
        re.compile(pattern)
    except re.error as e:
        raise MalformedConfiguration(f"Invalid Regex in {where}: {e}") from e
