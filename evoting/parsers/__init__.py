"""Parsers turning raw ballot configurations into typed trees."""

from .base import ElementParser, MalformedConfiguration

# Element parser registry - import parser modules to register them
_element_parsers: list[type[ElementParser]] = []


def register_element_parser(parser_class: type[ElementParser]) -> type[ElementParser]:
    """Decorator to register an element parser class."""
    _element_parsers.append(parser_class)
    return parser_class


def get_all_element_parsers() -> list[ElementParser]:
    """Return instances of all registered element parsers."""
    return [parser_class() for parser_class in _element_parsers]


def detect_element_parser(element) -> ElementParser:
    """Return the parser able to serialize the given element."""
    for parser in get_all_element_parsers():
        if parser.handles(element):
            return parser
    raise TypeError(f"No parser registered for {type(element).__name__}")


__all__ = [
    "ElementParser",
    "MalformedConfiguration",
    "detect_element_parser",
    "get_all_element_parsers",
    "register_element_parser",
]
