"""
QuizSession: the state container a quiz view renders from.

Owns the current step, the answers accumulator and (through the
orchestrator) the fetch state. Views read those, call the setters as the
user makes selections, and call advance/retreat/reset from the navigation
buttons. Nothing here is process-global; each open quiz has its own session.
"""

import dataclasses
import threading
from typing import Callable, List, Optional, Union

from printer_buddy.schemas.quiz import (
    FetchState,
    QuizAnswers,
    QuizStep,
    SkillLevel,
    UseCase,
    coerce_skill_level,
    coerce_use_case,
)
from printer_buddy.services.api_client import PrinterAPIClient
from printer_buddy.services.quiz import state_machine
from printer_buddy.services.quiz.orchestrator import (
    RecommendationOrchestrator,
    Runner,
    thread_runner,
)
from printer_buddy.utils.logger import log

Listener = Callable[["QuizSession"], None]


class QuizSession:
    """
    One run through the recommendation quiz.

    Transitions are serialized by a lock, so two advance requests racing
    from the same step apply one after the other. Listeners are called after
    every change, possibly from the fetch worker thread; Tk views should
    re-dispatch with ``widget.after(0, ...)``.
    """

    def __init__(
        self,
        client: Optional[PrinterAPIClient] = None,
        runner: Runner = thread_runner,
    ):
        self._lock = threading.RLock()
        self._step = state_machine.FIRST_STEP
        self._answers = QuizAnswers()
        self._listeners: List[Listener] = []
        self._closed = False
        self._orchestrator = RecommendationOrchestrator(
            client=client, runner=runner, on_change=self._on_fetch_change
        )

    # =========================================================================
    # Read API
    # =========================================================================

    @property
    def step(self) -> QuizStep:
        with self._lock:
            return self._step

    @property
    def answers(self) -> QuizAnswers:
        """A copy of the current answers; mutate through the setters."""
        with self._lock:
            return dataclasses.replace(self._answers)

    @property
    def fetch_state(self) -> FetchState:
        return self._orchestrator.state

    @property
    def client(self) -> PrinterAPIClient:
        """Gateway shared with the orchestrator, for detail lookups from results."""
        return self._orchestrator.client

    @property
    def closed(self) -> bool:
        return self._closed

    def can_advance(self) -> bool:
        with self._lock:
            return state_machine.can_advance(self._step, self._answers)

    # =========================================================================
    # Navigation
    # =========================================================================

    def advance(self) -> QuizStep:
        """
        Move to the next step.

        No-op on RESULTS, and when the current step's answers are not yet
        valid. Entering RESULTS starts one recommendation fetch.
        """
        with self._lock:
            if self._closed:
                return self._step
            if not state_machine.can_advance(self._step, self._answers):
                log.debug(f"Advance refused on {self._step.name}: step incomplete")
                return self._step
            target = state_machine.next_step(self._step)
            if target == self._step:
                return self._step
            self._step = target
            entered_results = target == QuizStep.RESULTS
            answers = dataclasses.replace(self._answers)

        log.debug(f"Quiz advanced to {target.name}")
        self._notify()
        if entered_results:
            self._orchestrator.fetch(answers)
        return target

    def retreat(self) -> QuizStep:
        """Move to the previous step. Answers and fetch state are untouched."""
        with self._lock:
            if self._closed:
                return self._step
            target = state_machine.previous_step(self._step)
            if target == self._step:
                return self._step
            self._step = target

        log.debug(f"Quiz moved back to {target.name}")
        self._notify()
        return target

    def reset(self) -> QuizStep:
        """
        Start over from RESULTS: first step, default answers, IDLE fetch.

        Any in-flight request is discarded. From other steps this is a no-op.
        """
        with self._lock:
            if self._closed or self._step != QuizStep.RESULTS:
                return self._step
            self._step = state_machine.FIRST_STEP
            self._answers = QuizAnswers()
            self._orchestrator.cancel(notify=False)

        log.info("Quiz reset")
        self._notify()
        return self._step

    def fetch_recommendations(self) -> FetchState:
        """Re-send the current answers. Used by the "Try Again" control."""
        with self._lock:
            if self._closed:
                return self._orchestrator.state
            answers = dataclasses.replace(self._answers)
        return self._orchestrator.fetch(answers)

    def close(self) -> None:
        """Tear down the session. Responses that arrive afterwards are dropped."""
        with self._lock:
            self._closed = True
            self._listeners.clear()
        self._orchestrator.cancel()

    # =========================================================================
    # Answer setters
    # =========================================================================

    def set_skill_level(self, value: Union[SkillLevel, str, None]) -> None:
        self._update(skill_level=coerce_skill_level(value))

    def set_use_case(self, value: Union[UseCase, str, None]) -> None:
        self._update(use_case=coerce_use_case(value))

    def set_budget_min(self, value: float) -> None:
        self._update(budget_min=int(round(value)))

    def set_budget_max(self, value: float) -> None:
        self._update(budget_max=int(round(value)))

    def set_prefer_enclosure(self, value: bool) -> None:
        self._update(prefer_enclosure=bool(value))

    def set_prefer_auto_leveling(self, value: bool) -> None:
        self._update(prefer_auto_leveling=bool(value))

    def apply_preset(self, minimum: int, maximum: int) -> None:
        """Replace both budget bounds at once."""
        with self._lock:
            if self._closed:
                return
            state_machine.apply_preset(self._answers, minimum, maximum)
        self._notify()

    def _update(self, **changes) -> None:
        with self._lock:
            if self._closed:
                return
            for name, value in changes.items():
                setattr(self._answers, name, value)
        self._notify()

    # =========================================================================
    # Change notification
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _on_fetch_change(self, state: FetchState) -> None:
        log.debug(f"Fetch state is now {state.status.name}")
        self._notify()

    def _notify(self) -> None:
        with self._lock:
            if self._closed:
                return
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)
