"""
Recommendation fetch orchestration.

Turns completed quiz answers into a backend request and tracks the request's
lifecycle as a FetchState (IDLE -> LOADING -> SUCCESS | FAILURE).

The request itself runs through a *runner*: by default a daemon thread, so
the Tk main loop never blocks on the network. Tests and the terminal front
end pass ``inline_runner`` to resolve the request before ``fetch`` returns.

Only the most recently started request may write its outcome. Every
``fetch`` and ``cancel`` bumps a generation counter; a response carrying an
older generation is dropped.
"""

import dataclasses
import threading
from typing import Callable, Optional

from printer_buddy.schemas.quiz import FetchState, QuizAnswers
from printer_buddy.services.api_client import GatewayError, PrinterAPIClient
from printer_buddy.utils.logger import log

Task = Callable[[], None]
Runner = Callable[[Task], None]

FAILURE_PREFIX = "Failed to get recommendations"


def thread_runner(task: Task) -> None:
    threading.Thread(target=task, name="RecommendationFetch", daemon=True).start()


def inline_runner(task: Task) -> None:
    task()


class RecommendationOrchestrator:
    """
    Owns the FetchState for one quiz session.

    Args:
        client: Gateway used for the request (created from config if omitted)
        runner: How to execute the blocking request
        on_change: Called with the new FetchState after every transition.
            May be invoked from the runner's thread.
    """

    def __init__(
        self,
        client: Optional[PrinterAPIClient] = None,
        runner: Runner = thread_runner,
        on_change: Optional[Callable[[FetchState], None]] = None,
    ):
        self._client = client
        self._runner = runner
        self._on_change = on_change
        self._lock = threading.Lock()
        self._generation = 0
        self._state = FetchState.idle()

    @property
    def client(self) -> PrinterAPIClient:
        if self._client is None:
            self._client = PrinterAPIClient()
        return self._client

    @property
    def state(self) -> FetchState:
        with self._lock:
            return self._state

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def fetch(self, answers: QuizAnswers) -> FetchState:
        """
        Start a recommendation request for ``answers``.

        LOADING is set before the runner is invoked. If a request is already in
        flight it is superseded and its outcome will be discarded.

        Incomplete answers never reach the network: the call is a no-op and
        returns an IDLE state.
        """
        if not answers.is_complete():
            log.warning("Recommendation fetch requested without skill level and use case; ignoring")
            return FetchState.idle()

        snapshot = dataclasses.replace(answers)
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = FetchState.loading()
            state = self._state
        log.info(
            f"Fetching recommendations (request #{generation}): "
            f"{snapshot.skill_level.value}/{snapshot.use_case.value}, "
            f"${snapshot.budget_min}-${snapshot.budget_max}"
        )
        self._notify(state)

        self._runner(lambda: self._execute(generation, snapshot))
        return self.state

    def cancel(self, notify: bool = True) -> None:
        """Drop any in-flight request and return to IDLE."""
        with self._lock:
            self._generation += 1
            changed = not self._state.is_idle
            self._state = FetchState.idle()
            state = self._state
        if changed and notify:
            self._notify(state)

    def _execute(self, generation: int, answers: QuizAnswers) -> None:
        try:
            results = self.client.post_recommendation_request(answers)
            outcome = FetchState.success(results)
        except GatewayError as e:
            log.error(f"Recommendation request #{generation} failed: {e} ({type(e).__name__})")
            outcome = FetchState.failure(f"{FAILURE_PREFIX}: {e}")
        except Exception as e:
            log.exception(f"Unexpected error in recommendation request #{generation}")
            outcome = FetchState.failure(f"{FAILURE_PREFIX}: {e}")
        self._resolve(generation, outcome)

    def _resolve(self, generation: int, outcome: FetchState) -> None:
        with self._lock:
            if generation != self._generation:
                log.debug(f"Discarding superseded recommendation response #{generation}")
                return
            self._state = outcome
        self._notify(outcome)

    def _notify(self, state: FetchState) -> None:
        if self._on_change is not None:
            self._on_change(state)
