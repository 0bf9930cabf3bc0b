"""Parsers for the three question kinds."""

from typing import Any

from evoting.models import RankQuestion, SelectQuestion, TextQuestion
from evoting.parsers import register_element_parser
from evoting.parsers.base import (
    ElementParser,
    MalformedConfiguration,
    ParseContext,
    check_bounds,
    check_regex,
    require,
    require_strings,
)


def _parse_common(raw: dict[str, Any], context: ParseContext, kind: str) -> dict[str, Any]:
    """Parse the fields shared by every question kind."""
    element_id = require(raw, "ID", str, kind)
    where = f"{kind} {element_id!r}"
    fields = {
        "id": element_id,
        "title": require(raw, "Title", str, where),
        "choices": require_strings(raw, "Choices", where),
        "min_n": require(raw, "MinN", int, where),
        "max_n": require(raw, "MaxN", int, where),
    }
    check_bounds(fields["min_n"], fields["max_n"], where)
    context.claim_id(element_id)
    return fields


def _common_dict(question: SelectQuestion | RankQuestion | TextQuestion) -> dict[str, Any]:
    return {
        "ID": question.id,
        "Title": question.title,
        "MinN": question.min_n,
        "MaxN": question.max_n,
        "Choices": list(question.choices),
    }


@register_element_parser
class SelectParser(ElementParser):
    KEY = "Selects"
    ELEMENT_TYPE = SelectQuestion

    def parse(self, raw: dict[str, Any], context: ParseContext) -> SelectQuestion:
        return SelectQuestion(**_parse_common(raw, context, "select"))

    def to_dict(self, element: SelectQuestion) -> dict[str, Any]:
        return _common_dict(element)


@register_element_parser
class RankParser(ElementParser):
    KEY = "Ranks"
    ELEMENT_TYPE = RankQuestion

    def parse(self, raw: dict[str, Any], context: ParseContext) -> RankQuestion:
        return RankQuestion(**_parse_common(raw, context, "rank"))

    def to_dict(self, element: RankQuestion) -> dict[str, Any]:
        return _common_dict(element)


@register_element_parser
class TextParser(ElementParser):
    """Parser for free-text questions.

    On top of the common fields, a text question needs MaxLength and may
    carry a Regex. An absent or empty Regex disables the pattern check.
    """

    KEY = "Texts"
    ELEMENT_TYPE = TextQuestion

    def parse(self, raw: dict[str, Any], context: ParseContext) -> TextQuestion:
        fields = _parse_common(raw, context, "text")
        where = f"text {fields['id']!r}"
        max_length = require(raw, "MaxLength", int, where)
        regex = raw.get("Regex") or ""
        if not isinstance(regex, str):
            raise MalformedConfiguration(f"Field 'Regex' in {where} has the wrong type")
        check_regex(regex, where)
        return TextQuestion(**fields, max_length=max_length, regex=regex)

    def to_dict(self, element: TextQuestion) -> dict[str, Any]:
        data = _common_dict(element)
        data["MaxLength"] = element.max_length
        data["Regex"] = element.regex
        return data

