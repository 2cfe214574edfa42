"""
Recommendation quiz engine.

The quiz walks the user through five steps, gates progress on each step's
answers, and asks the backend for scored printers when the results step is
entered.

Usage:
    from printer_buddy.services.quiz import QuizSession

    session = QuizSession()
    session.set_skill_level("beginner")
    session.advance()
"""

from printer_buddy.services.quiz.orchestrator import (
    RecommendationOrchestrator,
    inline_runner,
    thread_runner,
)
from printer_buddy.services.quiz.session import QuizSession
from printer_buddy.services.quiz.state_machine import (
    apply_preset,
    can_advance,
    next_step,
    previous_step,
)

__all__ = [
    "QuizSession",
    "RecommendationOrchestrator",
    "apply_preset",
    "can_advance",
    "inline_runner",
    "next_step",
    "previous_step",
    "thread_runner",
]
