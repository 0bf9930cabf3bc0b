"""Shared test helpers."""

from evoting.models import Configuration, Results
from evoting.parsers.configuration import parse_configuration


def select(id: str, choices: list[str], min_n: int = 1, max_n: int = 1, title: str = "") -> dict:
    return {"ID": id, "Title": title or id, "MinN": min_n, "MaxN": max_n, "Choices": choices}


def rank(id: str, choices: list[str], title: str = "") -> dict:
    n = len(choices)
    return {"ID": id, "Title": title or id, "MinN": n, "MaxN": n, "Choices": choices}


def text(id: str, inputs: int = 1, min_n: int = 0, max_n: int | None = None,
         max_length: int = 20, regex: str = "", title: str = "") -> dict:
    return {
        "ID": id,
        "Title": title or id,
        "MinN": min_n,
        "MaxN": inputs if max_n is None else max_n,
        "MaxLength": max_length,
        "Regex": regex,
        "Choices": [f"Answer {i + 1}" for i in range(inputs)],
    }


def subject(id: str, *elements: dict, title: str = "") -> dict:
    """Build a raw subject; elements are placed in Order as given.

    The kind of each element is told apart by its fields: "Order" for
    subjects, "MaxLength" for texts, and an identifier starting with "rank"
    for ranks.
    """
    raw = {"ID": id, "Title": title or id, "Order": [e["ID"] for e in elements],
           "Subjects": [], "Selects": [], "Ranks": [], "Texts": []}
    for element in elements:
        if "Order" in element:
            raw["Subjects"].append(element)
        elif "MaxLength" in element:
            raw["Texts"].append(element)
        elif element["ID"].startswith("rank"):
            raw["Ranks"].append(element)
        else:
            raw["Selects"].append(element)
    return raw


def make_configuration(*subjects: dict, title: str = "Election") -> Configuration:
    """Parse a configuration built from raw subjects."""
    return parse_configuration({"MainTitle": title, "Scaffold": list(subjects)})


def make_results(select_ids: list[str] = (), selects: list[list[bool]] = (),
                 rank_ids: list[str] = (), ranks: list[list[int]] = (),
                 text_ids: list[str] = (), texts: list[list[str]] = ()) -> Results:
    """Build one ballot's Results from parallel id/answer lists."""
    return Results.from_dict({
        "SelectResultIDs": list(select_ids),
        "SelectResult": list(selects),
        "RankResultIDs": list(rank_ids),
        "RankResult": list(ranks),
        "TextResultIDs": list(text_ids),
        "TextResult": list(texts),
    })
