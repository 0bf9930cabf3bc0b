"""Parser for subjects, the nested sections of a ballot."""

from typing import Any

from evoting.models import Subject
from evoting.parsers import (
    detect_element_parser,
    get_all_element_parsers,
    register_element_parser,
)
from evoting.parsers.base import (
    MAX_DEPTH,
    ElementParser,
    MalformedConfiguration,
    ParseContext,
    require,
    require_strings,
)


@register_element_parser
class SubjectParser(ElementParser):
    """Parser for a subject and, recursively, everything below it.

    A raw subject looks like:

        {"ID": "s1", "Title": "Board", "Order": ["q1", "s2"],
         "Subjects": [...], "Selects": [...], "Ranks": [...], "Texts": [...]}

    Every registered parser (this one included) gets to parse the array
    named by its KEY. Order must list each direct element exactly once.
    """

    KEY = "Subjects"
    ELEMENT_TYPE = Subject

    def parse(self, raw: dict[str, Any], context: ParseContext) -> Subject:
        element_id = require(raw, "ID", str, "subject")
        where = f"subject {element_id!r}"
        title = require(raw, "Title", str, where)
        order = require_strings(raw, "Order", where)
        context.claim_id(element_id)

        if context.depth >= MAX_DEPTH:
            raise MalformedConfiguration(f"Subjects are nested more than {MAX_DEPTH} levels deep")

        context.depth += 1
        try:
            elements = self._parse_elements(raw, context, where)
        finally:
            context.depth -= 1

        if len(set(order)) != len(order):
            raise MalformedConfiguration(f"Order of {where} lists an element twice")
        unknown = [i for i in order if i not in elements]
        if unknown:
            raise MalformedConfiguration(f"Order of {where} refers to unknown elements {unknown}")
        unlisted = [i for i in elements if i not in order]
        if unlisted:
            raise MalformedConfiguration(f"Elements {unlisted} of {where} are missing from Order")

        return Subject(id=element_id, title=title, order=order, elements=elements)

    @staticmethod
    def _parse_elements(raw: dict[str, Any], context: ParseContext, where: str) -> dict:
        elements = {}
        for parser in get_all_element_parsers():
            items = raw.get(parser.KEY) or []
            if not isinstance(items, list):
                raise MalformedConfiguration(f"Field {parser.KEY!r} in {where} must be a list")
            for item in items:
                element = parser.parse(item, context)
                elements[element.id] = element
        return elements

    def to_dict(self, element: Subject) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ID": element.id,
            "Title": element.title,
            "Order": list(element.order),
        }
        for parser in get_all_element_parsers():
            data[parser.KEY] = []
        for child in element.iter_elements():
            parser = detect_element_parser(child)
            data[parser.KEY].append(parser.to_dict(child))
        return data
