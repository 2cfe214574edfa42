"""
Unit tests for RecommendationOrchestrator.

Tests cover:
- IDLE -> LOADING -> SUCCESS | FAILURE ordering
- Empty result lists are a success
- Gateway and unexpected errors become FAILURE with a prefixed message
- Superseded and cancelled requests never write their outcome
- Incomplete answers never reach the client
"""

from unittest.mock import MagicMock

import pytest

from printer_buddy.schemas.catalog import PrinterSummary
from printer_buddy.schemas.quiz import (
    FetchState,
    FetchStatus,
    QuizAnswers,
    RecommendationResult,
    SkillLevel,
    UseCase,
)
from printer_buddy.services.api_client import DecodeError, HTTPStatusError, NetworkError
from printer_buddy.services.quiz.orchestrator import (
    FAILURE_PREFIX,
    RecommendationOrchestrator,
    inline_runner,
)


# =============================================================================
# Test Fixtures
# =============================================================================

class DeferredRunner:
    """Runner that queues tasks so tests decide when each request resolves."""

    def __init__(self):
        self.tasks = []

    def __call__(self, task):
        self.tasks.append(task)

    def run(self, index):
        self.tasks[index]()


def make_result(printer_id=1, score=87, reasons=("Matches your budget",)):
    printer = PrinterSummary(id=printer_id, name="Bambu Lab A1", manufacturer="Bambu Lab", price=399.0)
    return RecommendationResult(printer=printer, match_score=score, reasons=reasons)


@pytest.fixture
def answers():
    return QuizAnswers(skill_level=SkillLevel.BEGINNER, use_case=UseCase.HOBBY)


@pytest.fixture
def client():
    mock = MagicMock()
    mock.post_recommendation_request.return_value = [make_result()]
    return mock


@pytest.fixture
def transitions():
    return []


@pytest.fixture
def orchestrator(client, transitions):
    return RecommendationOrchestrator(client=client, runner=inline_runner, on_change=transitions.append)


# =============================================================================
# Lifecycle
# =============================================================================

class TestFetchLifecycle:
    """Tests for state ordering of a single request."""

    def test_starts_idle(self, orchestrator):
        assert orchestrator.state.is_idle

    def test_success_after_loading(self, orchestrator, answers, transitions):
        state = orchestrator.fetch(answers)

        assert state.is_success
        assert [t.status for t in transitions] == [FetchStatus.LOADING, FetchStatus.SUCCESS]
        assert state.results[0].match_score == 87
        assert state.results[0].reasons == ("Matches your budget",)

    def test_loading_set_before_runner_invoked(self, client, answers):
        seen = []
        orchestrator = None

        def runner(task):
            seen.append(orchestrator.state.status)
            task()

        orchestrator = RecommendationOrchestrator(client=client, runner=runner)
        orchestrator.fetch(answers)
        assert seen == [FetchStatus.LOADING]

    def test_empty_results_are_success(self, orchestrator, client, answers, transitions):
        client.post_recommendation_request.return_value = []

        state = orchestrator.fetch(answers)

        assert state.is_success
        assert state.results == ()
        assert not state.is_failure
        assert transitions[-1] == FetchState.success([])

    def test_client_receives_answer_snapshot(self, orchestrator, client, answers):
        orchestrator.fetch(answers)
        sent = client.post_recommendation_request.call_args[0][0]
        assert sent == answers
        assert sent is not answers

    def test_incomplete_answers_do_not_call_client(self, orchestrator, client, transitions):
        state = orchestrator.fetch(QuizAnswers(skill_level=SkillLevel.PRO))

        assert state.is_idle
        assert transitions == []
        client.post_recommendation_request.assert_not_called()


# =============================================================================
# Failures
# =============================================================================

class TestFetchFailures:
    """Tests for error-to-FAILURE mapping."""

    @pytest.mark.parametrize("error", [
        HTTPStatusError("/printers/recommend", 500),
        NetworkError("/printers/recommend", "Could not connect to http://localhost:8000"),
        DecodeError("/printers/recommend", "Unexpected response format: 'printer'"),
    ])
    def test_gateway_errors_become_failure(self, orchestrator, client, answers, transitions, error):
        client.post_recommendation_request.side_effect = error

        state = orchestrator.fetch(answers)

        assert state.is_failure
        assert state.message.startswith(f"{FAILURE_PREFIX}: ")
        assert str(error) in state.message
        assert [t.status for t in transitions] == [FetchStatus.LOADING, FetchStatus.FAILURE]

    def test_http_500_message(self, orchestrator, client, answers):
        client.post_recommendation_request.side_effect = HTTPStatusError("/printers/recommend", 500)
        state = orchestrator.fetch(answers)
        assert state.message == "Failed to get recommendations: Server returned HTTP 500"

    def test_unexpected_error_becomes_failure(self, orchestrator, client, answers):
        client.post_recommendation_request.side_effect = RuntimeError("boom")
        state = orchestrator.fetch(answers)
        assert state.is_failure
        assert "boom" in state.message

    def test_retry_after_failure_sends_same_answers(self, orchestrator, client, answers):
        client.post_recommendation_request.side_effect = [
            HTTPStatusError("/printers/recommend", 500),
            [make_result()],
        ]

        assert orchestrator.fetch(answers).is_failure
        assert orchestrator.fetch(answers).is_success

        first, second = client.post_recommendation_request.call_args_list
        assert first[0][0].to_payload() == second[0][0].to_payload()


# =============================================================================
# Superseded Requests
# =============================================================================

class TestLastRequestWins:
    """Tests for the generation guard."""

    def test_superseded_response_is_discarded(self, client, answers, transitions):
        runner = DeferredRunner()
        client.post_recommendation_request.side_effect = [
            [make_result(printer_id=1)],
            [make_result(printer_id=2)],
        ]
        orchestrator = RecommendationOrchestrator(client=client, runner=runner, on_change=transitions.append)

        orchestrator.fetch(answers)
        orchestrator.fetch(answers)

        runner.run(1)
        assert orchestrator.state.results[0].id == 2

        # The first request resolves late and must not overwrite
        runner.run(0)
        assert orchestrator.state.results[0].id == 2
        assert [t.status for t in transitions] == [
            FetchStatus.LOADING, FetchStatus.LOADING, FetchStatus.SUCCESS
        ]

    def test_late_failure_does_not_replace_success(self, client, answers):
        runner = DeferredRunner()
        client.post_recommendation_request.side_effect = [
            HTTPStatusError("/printers/recommend", 502),
            [make_result()],
        ]
        orchestrator = RecommendationOrchestrator(client=client, runner=runner)

        orchestrator.fetch(answers)
        orchestrator.fetch(answers)
        runner.run(1)
        runner.run(0)

        assert orchestrator.state.is_success

    def test_cancel_discards_in_flight_request(self, client, answers, transitions):
        runner = DeferredRunner()
        orchestrator = RecommendationOrchestrator(client=client, runner=runner, on_change=transitions.append)

        orchestrator.fetch(answers)
        orchestrator.cancel()
        runner.run(0)

        assert orchestrator.state.is_idle
        assert [t.status for t in transitions] == [FetchStatus.LOADING, FetchStatus.IDLE]

    def test_cancel_when_idle_does_not_notify(self, orchestrator, transitions):
        orchestrator.cancel()
        assert transitions == []

    def test_each_fetch_bumps_generation(self, orchestrator, answers):
        start = orchestrator.generation
        orchestrator.fetch(answers)
        orchestrator.fetch(answers)
        assert orchestrator.generation == start + 2
