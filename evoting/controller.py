"""Sessions tying the core to the backend: election administration and ballots."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from evoting.client import BackendClient, BackendError, NetworkError
from evoting.lifecycle import Action, ElectionLifecycle, Status, UserContext
from evoting.models import Answers, Configuration, RankQuestion, SelectQuestion, TextQuestion
from evoting.validation import Translator, ballot_is_valid, default_translate, text_answer_matches

logger = logging.getLogger(__name__)


class ElectionController:
    """Issues actions and polls status for one election.

    The controller owns the tasks it starts: close() cancels them and
    closes the lifecycle, so late responses are discarded and no action is
    left in flight.
    """

    def __init__(self, client: BackendClient, lifecycle: ElectionLifecycle, user: UserContext):
        self.client = client
        self.lifecycle = lifecycle
        self.user = user
        self._tasks: set[asyncio.Task] = set()

    @property
    def election_id(self) -> str:
        return self.lifecycle.election_id

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine as a task owned by this controller."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_action(self, action: Action, proxy: str | None = None) -> Status:
        """Issue an action and reconcile with the status the backend reports.

        Raises:
            IllegalActionError: If the action is not legal now (no request
                is sent)
            BackendError, NetworkError: If the request fails; the ongoing
                action is reset first
        """
        pending = self.lifecycle.begin(action, self.user)
        try:
            await self.client.perform_action(self.election_id, pending.action, proxy)
            election = await self.client.get_election(self.election_id)
            self.lifecycle.complete(pending, election.status)
        finally:
            # no-op once completed
            self.lifecycle.fail(pending)
        return self.lifecycle.status

    async def refresh_status(self) -> bool:
        """Fetch the election's status; returns False if it arrived stale."""
        request = self.lifecycle.status_request()
        election = await self.client.get_election(request.election_id)
        return self.lifecycle.observe_status(request, election.status)

    async def refresh_dkg(self, proxies: dict[str, str] | None = None) -> dict[str, str]:
        """Poll every roster node's DKG status concurrently.

        Each node is updated on its own: a node that cannot be queried gets
        its failure recorded and does not affect the others.

        Args:
            proxies: Node address -> proxy URL; the settings' mapping is used
                when omitted

        Returns:
            Node address -> error message, for the nodes that failed
        """
        dkg = self.lifecycle.dkg
        nodes = list(dkg)
        if proxies is None:
            proxies = self.client.settings.node_proxies
        revision = dkg.next_revision()

        outcomes = await asyncio.gather(
            *(
                self.client.get_dkg_status(
                    proxies.get(node) or self.client.settings.proxy_for(node),
                    self.election_id,
                )
                for node in nodes
            ),
            return_exceptions=True,
        )

        errors = {}
        for node, outcome in zip(nodes, outcomes):
            if self.lifecycle.closed:
                break
            if isinstance(outcome, (BackendError, NetworkError)):
                logger.warning("DKG status of %s unavailable: %s", node, outcome)
                dkg.record_failure(node, str(outcome), revision)
                errors[node] = str(outcome)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                dkg.update(node, outcome, revision)
        return errors

    async def close(self) -> None:
        """Tear the session down, cancelling the tasks it owns."""
        self.lifecycle.close()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class BallotSession:
    """A voter filling in one ballot.

    Holds the voter's Answers for the duration of the session; input
    handlers mutate them, validate() refreshes every error slot.
    """

    def __init__(self, configuration: Configuration, translate: Translator | None = None):
        self.configuration = configuration
        self.answers = Answers.empty_for(configuration)
        self.t = translate or default_translate
        self._questions = {q.id: q for q in configuration.iter_questions()}

    def _question(self, question_id: str, kind: type):
        question = self._questions.get(question_id)
        if not isinstance(question, kind):
            raise KeyError(f"No {kind.__name__} with identifier {question_id!r}")
        return question

    def set_select(self, question_id: str, index: int, checked: bool) -> None:
        self._question(question_id, SelectQuestion)
        self.answers.select_answers[question_id][index] = bool(checked)
        self.answers.errors[question_id] = ""

    def set_text(self, question_id: str, index: int, value: str) -> None:
        """Store a trimmed text answer and re-check the question's pattern."""
        question = self._question(question_id, TextQuestion)
        text_answers = self.answers.text_answers[question_id]
        text_answers[index] = value.strip()
        self.answers.errors[question_id] = ""

        for answer in text_answers:
            if not text_answer_matches(question, answer):
                self.answers.errors[question_id] = self.t("regexpCheck", regexp=question.regex)

    def set_rank(self, question_id: str, ranking: list[int]) -> None:
        self._question(question_id, RankQuestion)
        self.answers.rank_answers[question_id] = list(ranking)
        self.answers.errors[question_id] = ""

    def validate(self) -> bool:
        is_valid, self.answers = ballot_is_valid(self.configuration, self.answers, self.t)
        return is_valid

    async def submit(self, client: BackendClient, election_id: str, user_id: str = "") -> bool:
        """Cast the ballot if it is valid.

        Returns:
            False without contacting the backend if the ballot is invalid

        Raises:
            BackendError, NetworkError: If casting fails
        """
        if not self.validate():
            return False
        await client.cast_ballot(election_id, self.answers, user_id)
        logger.info("Ballot cast for election %s", election_id)
        return True
