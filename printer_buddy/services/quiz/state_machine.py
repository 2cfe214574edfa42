"""
Step sequencing and gating for the recommendation quiz.

Pure functions over QuizStep and QuizAnswers. They hold no state; the
QuizSession owns the current step and answers and calls into these.
"""

from printer_buddy.schemas.quiz import QuizAnswers, QuizStep

FIRST_STEP = QuizStep.SKILL_LEVEL
LAST_STEP = QuizStep.RESULTS


def can_advance(step: QuizStep, answers: QuizAnswers) -> bool:
    """
    Whether the user may leave ``step`` going forward.

    On RESULTS this gates "Start Over", which is always allowed.
    """
    if step == QuizStep.SKILL_LEVEL:
        return answers.skill_level is not None
    if step == QuizStep.USE_CASE:
        return answers.use_case is not None
    if step == QuizStep.BUDGET:
        return answers.has_valid_budget()
    return True


def next_step(step: QuizStep) -> QuizStep:
    """The following step. RESULTS is terminal and maps to itself."""
    if step == LAST_STEP:
        return QuizStep(step)
    return QuizStep(step + 1)


def previous_step(step: QuizStep) -> QuizStep:
    """The preceding step. SKILL_LEVEL maps to itself."""
    if step == FIRST_STEP:
        return QuizStep(step)
    return QuizStep(step - 1)


def apply_preset(answers: QuizAnswers, minimum: int, maximum: int) -> None:
    """
    Overwrite both budget bounds in one assignment.

    Setting them one at a time can briefly leave ``budget_min >= budget_max``
    when the new range does not overlap the old one.

    Raises:
        ValueError: If ``minimum`` is not below ``maximum``
    """
    if minimum >= maximum:
        raise ValueError(f"Preset minimum {minimum} must be below maximum {maximum}")
    answers.budget_min, answers.budget_max = int(minimum), int(maximum)
