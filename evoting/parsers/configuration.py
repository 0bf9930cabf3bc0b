"""Entry points: raw configuration JSON <-> Configuration."""

import json
import logging
from typing import Any

# Import element parsers to register them
from evoting.parsers import questions  # noqa: F401
from evoting.parsers import subject  # noqa: F401

from evoting.models import Configuration
from evoting.parsers.base import MalformedConfiguration, ParseContext, require
from evoting.parsers.subject import SubjectParser

logger = logging.getLogger(__name__)


def parse_configuration(raw: dict[str, Any] | str | bytes) -> Configuration:
    """Parse a raw ballot configuration.

    Args:
        raw: The decoded JSON object, or the JSON text itself

    Returns:
        The typed, immutable Configuration

    Raises:
        MalformedConfiguration: If a required field is missing, an identifier
            is used twice, MinN > MaxN for a question, or Order and the
            declared elements disagree
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedConfiguration(f"Invalid JSON: {e}") from e

    main_title = require(raw, "MainTitle", str, "configuration")
    scaffold = require(raw, "Scaffold", list, "configuration")

    context = ParseContext()
    parser = SubjectParser()
    subjects = tuple(parser.parse(item, context) for item in scaffold)

    logger.debug(
        "Parsed configuration %r: %d subjects, %d identifiers",
        main_title, len(subjects), len(context.seen_ids),
    )
    return Configuration(main_title=main_title, scaffold=subjects)


def configuration_to_dict(configuration: Configuration) -> dict[str, Any]:
    """Serialize a Configuration back into its raw JSON form."""
    parser = SubjectParser()
    return {
        "MainTitle": configuration.main_title,
        "Scaffold": [parser.to_dict(s) for s in configuration.scaffold],
    }
