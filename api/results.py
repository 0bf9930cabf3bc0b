"""Serverless function returning the results document of an election."""

import asyncio
import json
import sys
from pathlib import Path

# Add the project root to the path so we can import evoting modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from evoting.aggregate import build_export
from evoting.client import BackendClient, BackendError, NetworkError
from evoting.config import ClientSettings
from evoting.models import Results
from evoting.parsers.base import MalformedConfiguration
from evoting.parsers.configuration import parse_configuration


def handler(request):
    """Handle incoming requests for an election's results.

    Accepts:
    - POST with JSON body: {"election_id": "..."} to fetch the election
      from the backend
    - POST with JSON body: {"configuration": {...}, "results": [...]} to
      count results already at hand

    Returns the results document (Title, NumberOfVotes, Results) as JSON.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        data = json.loads(request.body.decode("utf-8"))

        if "configuration" in data:
            configuration = parse_configuration(data["configuration"])
            results = [Results.from_dict(r) for r in data.get("results") or []]
        elif data.get("election_id"):
            election = asyncio.run(fetch_election(data["election_id"]))
            configuration, results = election.configuration, election.results
        else:
            return create_response(
                {"error": "Missing 'election_id' or 'configuration' in request body"},
                status=400,
            )

        return create_response(build_export(configuration, results))

    except MalformedConfiguration as e:
        return create_response(
            {"error": f"Invalid configuration: {e}"},
            status=400,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except BackendError as e:
        return create_response(
            {"error": e.message},
            status=404 if e.status_code == 404 else 502,
        )
    except NetworkError as e:
        return create_response(
            {"error": str(e)},
            status=502,
        )
    except Exception as e:
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


async def fetch_election(election_id: str):
    async with BackendClient(ClientSettings.from_env()) as client:
        return await client.get_election(election_id)


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
