"""Election records as returned by the backend."""

from dataclasses import dataclass, field
from typing import Any, Self

from evoting.lifecycle import ElectionLifecycle, Status
from evoting.models import Configuration, Results
from evoting.parsers.configuration import parse_configuration


@dataclass
class ElectionInfo:
    """Full election record.

    Attributes:
        election_id: Election identifier
        status: Status confirmed by the backend
        pubkey: The election's public key (hex)
        roster: Addresses of the nodes running the election
        configuration: The parsed ballot configuration
        results: One record per decrypted ballot, in arrival order
        ballot_size: Size of an encoded ballot in bytes
        chunks_per_ballot: Number of ciphertext chunks per ballot
    """
    election_id: str
    status: Status
    pubkey: str
    roster: list[str]
    configuration: Configuration
    results: list[Results] = field(default_factory=list)
    ballot_size: int = 0
    chunks_per_ballot: int = 0

    @property
    def title(self) -> str:
        return self.configuration.main_title

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Build from the backend's JSON.

        Raises:
            MalformedConfiguration: If the embedded configuration is invalid
            KeyError, ValueError: If the record itself is incomplete
        """
        return cls(
            election_id=data["ElectionID"],
            status=Status(data["Status"]),
            pubkey=data.get("Pubkey") or "",
            roster=list(data.get("Roster") or []),
            configuration=parse_configuration(data["Configuration"]),
            results=[Results.from_dict(r) for r in data.get("Result") or []],
            ballot_size=data.get("BallotSize", 0),
            chunks_per_ballot=data.get("ChunksPerBallot", 0),
        )

    def lifecycle(self) -> ElectionLifecycle:
        """Start tracking this election's lifecycle."""
        return ElectionLifecycle(self.election_id, self.status, self.roster)


@dataclass
class LightElectionInfo:
    """Summary shown in election lists."""
    election_id: str
    title: str
    status: Status
    pubkey: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            election_id=data["ElectionID"],
            title=data.get("Title", ""),
            status=Status(data["Status"]),
            pubkey=data.get("Pubkey") or "",
        )
