"""Async HTTP client for the e-voting backend proxies."""

import logging
from typing import Any

import httpx

from evoting.config import ClientSettings
from evoting.election import ElectionInfo, LightElectionInfo
from evoting.lifecycle import Action, NodeStatus
from evoting.models import Answers
from evoting.parsers.base import MalformedConfiguration

logger = logging.getLogger(__name__)


class NetworkError(Exception):
    """The backend could not be reached."""
    pass


class BackendError(Exception):
    """The backend answered with an error status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Backend error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("Message") or body.get("Title") or str(body)
    return str(body)


class BackendClient:
    """Client for the proxy endpoints used by the front end.

    Use as an async context manager:

        async with BackendClient(settings) as client:
            election = await client.get_election("36kSJ0tH")

    Errors are never retried: HTTP error statuses raise BackendError and
    transport failures raise NetworkError.
    """

    def __init__(self, settings: ClientSettings | None = None,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or ClientSettings.from_env()
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.settings.timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, json: Any = None) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(e.response.status_code, _error_message(e.response)) from e
        except httpx.RequestError as e:
            raise NetworkError(f"Error contacting {url}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(response.status_code, "Response is not valid JSON") from e

    def _url(self, path: str, proxy: str | None = None) -> str:
        return f"{(proxy or self.settings.proxy_url).rstrip('/')}{path}"

    async def get_elections(self) -> list[LightElectionInfo]:
        data = await self._request("GET", self._url("/evoting/elections"))
        return [LightElectionInfo.from_dict(e) for e in (data or {}).get("Elections", [])]

    async def get_election(self, election_id: str) -> ElectionInfo:
        """Fetch an election record.

        Raises:
            MalformedConfiguration: If its configuration is invalid
            BackendError: If the record itself cannot be read
        """
        data = await self._request("GET", self._url(f"/evoting/elections/{election_id}"))
        try:
            return ElectionInfo.from_dict(data)
        except MalformedConfiguration:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(200, f"Unexpected election record: {e!r}") from e

    async def get_proxies(self) -> dict[str, str]:
        """Fetch the roster node -> proxy URL mapping."""
        data = await self._request("GET", self._url("/evoting/proxies"))
        return dict((data or {}).get("Proxies", {}))

    async def get_dkg_status(self, proxy: str, election_id: str) -> NodeStatus:
        """Fetch the DKG status of the node behind the given proxy."""
        data = await self._request(
            "GET", self._url(f"/evoting/services/dkg/actors/{election_id}", proxy)
        )
        try:
            return NodeStatus(data["Status"])
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(200, f"Unexpected DKG status response: {data!r}") from e

    async def perform_action(self, election_id: str, action: Action,
                             proxy: str | None = None) -> None:
        """Ask the backend to perform an administrative action.

        DKG actions (initialize, setup, beginDecryption) go to a node's
        proxy when one is given; the others go to the default proxy.
        """
        action = Action(action)
        match action:
            case Action.INITIALIZE:
                await self._request("POST", self._url("/evoting/services/dkg/actors", proxy),
                                    json={"ElectionID": election_id})
            case Action.SETUP:
                await self._request(
                    "PUT", self._url(f"/evoting/services/dkg/actors/{election_id}", proxy),
                    json={"Action": "setup"},
                )
            case Action.BEGIN_DECRYPTION:
                await self._request(
                    "PUT", self._url(f"/evoting/services/dkg/actors/{election_id}", proxy),
                    json={"Action": "computePubshares"},
                )
            case Action.SHUFFLE:
                await self._request(
                    "PUT", self._url(f"/evoting/services/shuffle/{election_id}"),
                    json={"Action": "shuffle"},
                )
            case Action.OPEN | Action.CLOSE | Action.CANCEL | Action.COMBINE_SHARES:
                await self._request(
                    "PUT", self._url(f"/evoting/elections/{election_id}"),
                    json={"Action": action.value},
                )

    async def cast_ballot(self, election_id: str, answers: Answers, user_id: str = "") -> None:
        await self._request(
            "POST", self._url(f"/evoting/elections/{election_id}/vote"),
            json={"Ballot": answers.to_ballot(), "UserID": user_id},
        )
