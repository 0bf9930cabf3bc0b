"""Tests for the results serverless function."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from api.results import handler
from tests.conftest import make_configuration, select, subject

from evoting.client import BackendError, NetworkError
from evoting.election import ElectionInfo
from evoting.lifecycle import Status

CONFIGURATION = {
    "MainTitle": "Referendum",
    "Scaffold": [subject("s1", select("q1", ["Yes", "No"], title="Q1"), title="Q1")],
}

RESULTS = [
    {"SelectResultIDs": ["q1"], "SelectResult": [[True, False]],
     "RankResultIDs": [], "RankResult": [], "TextResultIDs": [], "TextResult": []},
    {"SelectResultIDs": ["q1"], "SelectResult": [[False, True]],
     "RankResultIDs": [], "RankResult": [], "TextResultIDs": [], "TextResult": []},
]


def make_request(method="POST", body=None):
    request = MagicMock()
    request.method = method
    request.body = json.dumps(body).encode("utf-8") if body is not None else b""
    return request


class TestResultsHandler:
    def test_configuration_and_results(self):
        response = handler(make_request(body={"configuration": CONFIGURATION, "results": RESULTS}))
        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["Title"] == "Referendum"
        assert body["NumberOfVotes"] == 2
        assert body["Results"][1]["Results"] == [
            {"Candidate": "Yes", "Percentage": "50%"},
            {"Candidate": "No", "Percentage": "50%"},
        ]

    def test_fetches_election(self):
        election = ElectionInfo(
            election_id="e1",
            status=Status.RESULT_AVAILABLE,
            pubkey="",
            roster=[],
            configuration=make_configuration(CONFIGURATION["Scaffold"][0], title="Fetched"),
        )
        with patch("api.results.fetch_election", AsyncMock(return_value=election)) as fetch:
            response = handler(make_request(body={"election_id": "e1"}))
        fetch.assert_awaited_once_with("e1")
        assert response["statusCode"] == 200
        assert json.loads(response["body"])["Title"] == "Fetched"

    def test_election_not_found(self):
        fetch = AsyncMock(side_effect=BackendError(404, "election not found"))
        with patch("api.results.fetch_election", fetch):
            response = handler(make_request(body={"election_id": "missing"}))
        assert response["statusCode"] == 404
        assert "election not found" in json.loads(response["body"])["error"]

    def test_backend_unreachable(self):
        fetch = AsyncMock(side_effect=NetworkError("Error contacting proxy"))
        with patch("api.results.fetch_election", fetch):
            response = handler(make_request(body={"election_id": "e1"}))
        assert response["statusCode"] == 502

    def test_malformed_configuration(self):
        configuration = {"MainTitle": "Broken", "Scaffold": [{"ID": "s1"}]}
        response = handler(make_request(body={"configuration": configuration}))
        assert response["statusCode"] == 400
        assert "Invalid configuration" in json.loads(response["body"])["error"]

    def test_missing_fields(self):
        response = handler(make_request(body={}))
        assert response["statusCode"] == 400

    def test_invalid_json(self):
        request = make_request()
        request.body = b"{not json"
        response = handler(request)
        assert response["statusCode"] == 400
        assert "Invalid JSON" in json.loads(response["body"])["error"]

    def test_get_not_allowed(self):
        assert handler(make_request(method="GET"))["statusCode"] == 405

    def test_cors_preflight(self):
        response = handler(make_request(method="OPTIONS"))
        assert response["statusCode"] == 204
        assert response["headers"]["Access-Control-Allow-Methods"] == "POST, OPTIONS"
