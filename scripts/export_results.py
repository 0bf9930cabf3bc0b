"""Download an election's results document.

Fetches the election from the backend, counts its ballots and writes the
results document (result.json) to a directory.

Usage:
    python scripts/export_results.py 36kSJ0tH
    python scripts/export_results.py 36kSJ0tH -o exports --proxy http://localhost:9081
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from evoting.aggregate import export_results, write_to_directory
from evoting.client import BackendClient, BackendError, NetworkError
from evoting.config import ClientSettings


async def fetch_and_export(election_id: str, settings: ClientSettings, output: Path) -> dict:
    async with BackendClient(settings) as client:
        election = await client.get_election(election_id)
    return export_results(election.configuration, election.results, write_to_directory(output))


def main():
    parser = argparse.ArgumentParser(
        description="Export an election's results as JSON")
    parser.add_argument("election_id", help="Identifier of the election")
    parser.add_argument("-o", "--output", default=".",
                        help="Directory to write result.json into (default: .)")
    parser.add_argument("--proxy", help="Proxy base URL (default: $EVOTING_PROXY_URL)")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = ClientSettings.from_env()
    if args.proxy:
        settings.proxy_url = args.proxy.rstrip("/")

    try:
        data = asyncio.run(fetch_and_export(args.election_id, settings, Path(args.output)))
    except (BackendError, NetworkError) as e:
        print(f"Export failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"{data['Title']}: {data['NumberOfVotes']} votes written to "
          f"{Path(args.output) / 'result.json'}")


if __name__ == "__main__":
    main()
