"""Election lifecycle: statuses, administrative actions and DKG progress.

The backend is authoritative for an election's status. This module decides
which actions are legal locally, tracks the action currently in flight, and
reconciles server responses, dropping those that are older than the local
state.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import IntEnum, StrEnum

logger = logging.getLogger(__name__)


class Status(IntEnum):
    """Election status. Values are the backend's wire codes."""
    INITIAL = 0
    OPEN = 1
    CLOSED = 2
    SHUFFLED_BALLOTS = 3
    PUB_SHARES_SUBMITTED = 4
    RESULT_AVAILABLE = 5
    CANCELED = 6
    INITIALIZED = 7
    ONGOING_SETUP = 8
    SETUP = 9
    ONGOING_SHUFFLE = 10
    ONGOING_DECRYPTION = 11


class NodeStatus(IntEnum):
    """DKG progress of one roster node. Values are the backend's wire codes."""
    NOT_INITIALIZED = -1
    INITIALIZED = 0
    SETUP = 1
    FAILED = 2


class Action(StrEnum):
    INITIALIZE = "initialize"
    SETUP = "setup"
    OPEN = "open"
    CLOSE = "close"
    SHUFFLE = "shuffle"
    BEGIN_DECRYPTION = "beginDecryption"
    COMBINE_SHARES = "combineShares"
    CANCEL = "cancel"


class OngoingAction(IntEnum):
    """Action whose request is in flight; NONE when idle."""
    NONE = -1
    INITIALIZING = 0
    SETTING_UP = 1
    OPENING = 2
    CLOSING = 3
    CANCELING = 4
    SHUFFLING = 5
    DECRYPTING = 6
    COMBINING = 7


class UserRole(StrEnum):
    ADMIN = "admin"
    OPERATOR = "operator"
    VOTER = "voter"


@dataclass(frozen=True)
class UserContext:
    """The authenticated user, passed explicitly to authorization checks."""
    role: UserRole
    user_id: str = ""

    @property
    def can_manage_elections(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.OPERATOR)


TERMINAL_STATUSES = frozenset({Status.RESULT_AVAILABLE, Status.CANCELED})

# The action moving an election out of each status, besides cancelation
FORWARD_ACTIONS = {
    Status.INITIAL: Action.INITIALIZE,
    Status.INITIALIZED: Action.SETUP,
    Status.SETUP: Action.OPEN,
    Status.OPEN: Action.CLOSE,
    Status.CLOSED: Action.SHUFFLE,
    Status.SHUFFLED_BALLOTS: Action.BEGIN_DECRYPTION,
    Status.PUB_SHARES_SUBMITTED: Action.COMBINE_SHARES,
}

ONGOING_ACTIONS = {
    Action.INITIALIZE: OngoingAction.INITIALIZING,
    Action.SETUP: OngoingAction.SETTING_UP,
    Action.OPEN: OngoingAction.OPENING,
    Action.CLOSE: OngoingAction.CLOSING,
    Action.CANCEL: OngoingAction.CANCELING,
    Action.SHUFFLE: OngoingAction.SHUFFLING,
    Action.BEGIN_DECRYPTION: OngoingAction.DECRYPTING,
    Action.COMBINE_SHARES: OngoingAction.COMBINING,
}

# Statuses the backend may report once an action has been accepted
EXPECTED_STATUSES = {
    Action.INITIALIZE: {Status.INITIALIZED},
    Action.SETUP: {Status.ONGOING_SETUP, Status.SETUP},
    Action.OPEN: {Status.OPEN},
    Action.CLOSE: {Status.CLOSED},
    Action.SHUFFLE: {Status.ONGOING_SHUFFLE, Status.SHUFFLED_BALLOTS},
    Action.BEGIN_DECRYPTION: {Status.ONGOING_DECRYPTION, Status.PUB_SHARES_SUBMITTED},
    Action.COMBINE_SHARES: {Status.RESULT_AVAILABLE},
    Action.CANCEL: {Status.CANCELED},
}


class IllegalActionError(ValueError):
    """Raised when an action is not allowed in the current state."""
    pass


def legal_actions(status: Status, user: UserContext) -> list[Action]:
    """Actions the user may issue on an election in the given status.

    Only admins and operators manage elections. Every non-terminal status
    allows its forward action (if any) and cancelation.
    """
    if not user.can_manage_elections or status in TERMINAL_STATUSES:
        return []
    actions = []
    forward = FORWARD_ACTIONS.get(status)
    if forward is not None:
        actions.append(forward)
    actions.append(Action.CANCEL)
    return actions


@dataclass(frozen=True)
class PendingAction:
    """Handle on an issued action, needed to report its outcome."""
    election_id: str
    action: Action
    revision: int


@dataclass(frozen=True)
class StatusRequest:
    """Token captured when a status fetch is issued."""
    election_id: str
    revision: int


class DkgStatusMap(Mapping[str, NodeStatus]):
    """DKG status of each roster node.

    Nodes are updated independently. Every poll round takes a revision from
    next_revision(); a node's response is dropped if a later round already
    updated that node.
    """

    def __init__(self, roster: Iterable[str] = ()):
        self._statuses = {node: NodeStatus.NOT_INITIALIZED for node in roster}
        self._revisions = {node: -1 for node in self._statuses}
        self._last_revision = -1
        self.errors: dict[str, str] = {}

    def __getitem__(self, node: str) -> NodeStatus:
        return self._statuses[node]

    def __iter__(self) -> Iterator[str]:
        return iter(self._statuses)

    def __len__(self) -> int:
        return len(self._statuses)

    def next_revision(self) -> int:
        self._last_revision += 1
        return self._last_revision

    def _accept(self, node: str, revision: int | None) -> bool:
        if node not in self._statuses:
            raise KeyError(f"{node} is not in the roster")
        if revision is None:
            revision = self.next_revision()
        if revision < self._revisions[node]:
            logger.debug("Dropping stale DKG response from %s (revision %d)", node, revision)
            return False
        self._revisions[node] = revision
        return True

    def update(self, node: str, status: NodeStatus | int, revision: int | None = None) -> bool:
        """Record a node's status. Returns False if the response was stale."""
        if not self._accept(node, revision):
            return False
        self._statuses[node] = NodeStatus(status)
        self.errors.pop(node, None)
        return True

    def record_failure(self, node: str, message: str, revision: int | None = None) -> bool:
        """Record that a node could not be queried; its status is kept."""
        if not self._accept(node, revision):
            return False
        self.errors[node] = message
        return True

    def counts(self) -> dict[NodeStatus, int]:
        counts = {status: 0 for status in NodeStatus}
        for status in self._statuses.values():
            counts[status] += 1
        return counts

    @property
    def all_setup(self) -> bool:
        return bool(self._statuses) and all(
            s == NodeStatus.SETUP for s in self._statuses.values()
        )

    @property
    def failed_nodes(self) -> list[str]:
        return [node for node, s in self._statuses.items() if s == NodeStatus.FAILED]


class ElectionLifecycle:
    """Local view of one election's lifecycle.

    Attributes:
        election_id: The election tracked
        status: Last status confirmed by the backend
        ongoing_action: The action in flight, or OngoingAction.NONE
        revision: Incremented on every local state change
        dkg: DKG status of the roster nodes
    """

    def __init__(self, election_id: str, status: Status | int = Status.INITIAL,
                 roster: Iterable[str] = ()):
        self.election_id = election_id
        self.status = Status(status)
        self.ongoing_action = OngoingAction.NONE
        self.revision = 0
        self.dkg = DkgStatusMap(roster)
        self.closed = False
        self._pending: PendingAction | None = None

    @property
    def pending(self) -> PendingAction | None:
        return self._pending

    def legal_actions(self, user: UserContext) -> list[Action]:
        """Actions the user may issue now; none while another is in flight."""
        if self.closed or self._pending is not None:
            return []
        return legal_actions(self.status, user)

    def begin(self, action: Action, user: UserContext) -> PendingAction:
        """Mark an action as in flight, before its request is sent.

        Raises:
            IllegalActionError: If the action is not legal now; no request
                should be sent then
        """
        action = Action(action)
        if self.closed:
            raise IllegalActionError("The election session is closed")
        if self._pending is not None:
            raise IllegalActionError(
                f"Cannot {action}: {self._pending.action} is already in progress"
            )
        if action not in legal_actions(self.status, user):
            raise IllegalActionError(
                f"Cannot {action} an election in status {self.status.name}"
            )

        self.revision += 1
        self._pending = PendingAction(self.election_id, action, self.revision)
        self.ongoing_action = ONGOING_ACTIONS[action]
        logger.info("Election %s: %s issued", self.election_id, action)
        return self._pending

    def _is_in_flight(self, pending: PendingAction) -> bool:
        return not self.closed and pending == self._pending

    def _settle(self, status: Status) -> None:
        self.status = status
        self._pending = None
        self.ongoing_action = OngoingAction.NONE
        self.revision += 1

    def complete(self, pending: PendingAction, status: Status | int) -> bool:
        """Reconcile with the status the backend confirmed for an action.

        Returns:
            True if applied. A confirmation for an action that is no longer
            in flight is logged and ignored. A status other than the ones the
            action leads to is still applied, as the backend is authoritative.
        """
        status = Status(status)
        if not self._is_in_flight(pending):
            logger.info(
                "Election %s: ignoring confirmation of %s (revision %d), not in flight",
                pending.election_id, pending.action, pending.revision,
            )
            return False
        if status not in EXPECTED_STATUSES[pending.action]:
            logger.warning(
                "Election %s: backend reported %s after %s, resyncing",
                self.election_id, status.name, pending.action,
            )
        self._settle(status)
        return True

    def fail(self, pending: PendingAction) -> bool:
        """Clear an action whose request failed; the status is unchanged."""
        if not self._is_in_flight(pending):
            return False
        logger.info("Election %s: %s failed", self.election_id, pending.action)
        self._settle(self.status)
        return True

    def status_request(self) -> StatusRequest:
        """Capture the state a status fetch is issued against."""
        return StatusRequest(self.election_id, self.revision)

    def observe_status(self, request: StatusRequest, status: Status | int) -> bool:
        """Apply a fetched status unless local state changed since the fetch.

        Returns:
            True if the response was current (whether or not it changed the
            status), False if it was dropped as stale.
        """
        if (self.closed or request.election_id != self.election_id
                or request.revision != self.revision):
            logger.debug(
                "Election %s: dropping stale status %s (revision %d, now %d)",
                request.election_id, Status(status).name, request.revision, self.revision,
            )
            return False
        status = Status(status)
        if status != self.status:
            self.status = status
            self.revision += 1
        return True

    def close(self) -> None:
        """Tear down: later responses are ignored and nothing stays in flight."""
        self.closed = True
        self._pending = None
        self.ongoing_action = OngoingAction.NONE
