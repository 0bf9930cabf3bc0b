"""Generate mock backend data for local front-end development.

Builds a set of elections in every status, each with a ballot
configuration, decrypted ballots, per-node DKG statuses and a node proxy
mapping. Names and answers come from faker with a fixed seed, so the
output is reproducible.

Usage:
    python scripts/mock_elections.py
    python scripts/mock_elections.py -o mock/elections.json --ballots 20
"""

import argparse
import json
import sys
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from evoting.aggregate import build_export
from evoting.lifecycle import NodeStatus, Status
from evoting.models import Answers, Results
from evoting.parsers.configuration import parse_configuration

DEFAULT_OUTPUT = Path(__file__).parent.parent / "mock" / "elections.json"

SEED = 20220101
ROSTER_SIZE = 4


def make_configuration(fake: Faker, prefix: str) -> dict:
    """A configuration with one select, one rank, one text and a nested subject."""
    def question_id(n: int) -> str:
        return f"{prefix}q{n}"

    select = {
        "ID": question_id(1),
        "Title": f"Who should chair the {fake.word()} committee?",
        "MinN": 1,
        "MaxN": 1,
        "Choices": [fake.name() for _ in range(3)],
    }
    rank = {
        "ID": question_id(2),
        "Title": "Rank the proposed venues",
        "MinN": 3,
        "MaxN": 3,
        "Choices": [fake.city() for _ in range(3)],
    }
    text = {
        "ID": question_id(3),
        "Title": "Suggest a name for the new building",
        "MinN": 0,
        "MaxN": 2,
        "MaxLength": 30,
        "Regex": "^[A-Za-z ]*$",
        "Choices": ["First idea", "Second idea"],
    }
    nested = {
        "ID": f"{prefix}s2",
        "Title": "Building",
        "Order": [text["ID"]],
        "Texts": [text],
    }
    return {
        "MainTitle": fake.catch_phrase(),
        "Scaffold": [{
            "ID": f"{prefix}s1",
            "Title": fake.bs().capitalize(),
            "Order": [select["ID"], rank["ID"], nested["ID"]],
            "Subjects": [nested],
            "Selects": [select],
            "Ranks": [rank],
        }],
    }


def make_ballot(fake: Faker, raw_configuration: dict) -> dict:
    """A random valid ballot for the configuration."""
    configuration = parse_configuration(raw_configuration)
    answers = Answers.empty_for(configuration)

    for selections in answers.select_answers.values():
        selections[fake.random_int(0, len(selections) - 1)] = True
    for question_id, ranking in answers.rank_answers.items():
        answers.rank_answers[question_id] = fake.random_sample(ranking, len(ranking))
    for texts in answers.text_answers.values():
        texts[0] = fake.random_element(["Aurora", "Beacon", "Cornerstone", ""])

    return answers.to_ballot()


def make_mock_data(fake: Faker, ballots: int) -> dict:
    roster = [f"node{i}:{2000 + i}" for i in range(ROSTER_SIZE)]
    proxies = {node: f"https://example{i}.com" for i, node in enumerate(roster)}
    configurations = [make_configuration(fake, "a"), make_configuration(fake, "b")]

    elections = []
    dkg = {}
    for status in Status:
        for configuration in configurations:
            election_id = fake.hexify("^" * 16)
            results = []
            if status == Status.RESULT_AVAILABLE:
                results = [make_ballot(fake, configuration) for _ in range(ballots)]
            elections.append({
                "ElectionID": election_id,
                "Status": int(status),
                "Pubkey": fake.hexify("^" * 64),
                "Result": results,
                "Roster": roster,
                "Configuration": configuration,
                "BallotSize": 174,
                "ChunksPerBallot": 6,
            })

            node_status = NodeStatus.NOT_INITIALIZED
            if status == Status.INITIALIZED:
                node_status = NodeStatus.INITIALIZED
            elif status not in (Status.INITIAL, Status.CANCELED):
                node_status = NodeStatus.SETUP
            dkg[election_id] = {node: int(node_status) for node in roster}

    return {"Elections": elections, "DKG": dkg, "Proxies": proxies}


def main():
    parser = argparse.ArgumentParser(
        description="Generate mock elections for local development")
    parser.add_argument("-o", "--output", default=str(DEFAULT_OUTPUT),
                        help=f"Output path (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--ballots", type=int, default=10,
                        help="Ballots per election with available results")
    args = parser.parse_args()

    fake = Faker("en_US")
    Faker.seed(SEED)

    data = make_mock_data(fake, args.ballots)
    print(f"Generated {len(data['Elections'])} elections")

    for election in data["Elections"]:
        if election["Result"]:
            export = build_export(
                parse_configuration(election["Configuration"]),
                [Results.from_dict(r) for r in election["Result"]],
            )
            print(f"  {election['ElectionID']}: {export['NumberOfVotes']} ballots counted")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    print(f"Written to {output_path}")


if __name__ == "__main__":
    main()
