"""
Quiz schemas: the answers collected by the recommendation quiz and the
results the backend returns for them.

Wire format (``POST /printers/recommend``):

    request:  {"skill_level": "beginner", "use_case": "hobby",
               "budget_min": 100, "budget_max": 1000,
               "prefer_enclosure": false, "prefer_auto_leveling": true}
    response: [{"printer": {...}, "match_score": 87, "reasons": ["..."]}]
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from printer_buddy.schemas.catalog import PrinterSummary, _as_int


# --- Enumerations ---

class QuizStep(IntEnum):
    """Ordered quiz steps. Traversal moves one position at a time."""
    SKILL_LEVEL = 0
    USE_CASE = 1
    BUDGET = 2
    PREFERENCES = 3
    RESULTS = 4

    @property
    def title(self) -> str:
        return _STEP_TITLES[self]


_STEP_TITLES = {
    QuizStep.SKILL_LEVEL: "Experience",
    QuizStep.USE_CASE: "Purpose",
    QuizStep.BUDGET: "Budget",
    QuizStep.PREFERENCES: "Features",
    QuizStep.RESULTS: "Results",
}


class SkillLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    PRO = "pro"


class UseCase(Enum):
    HOBBY = "hobby"
    ENGINEERING = "engineering"
    ART = "art"
    PRODUCTION = "production"


# --- Answers Accumulator ---

DEFAULT_BUDGET_MIN = 100
DEFAULT_BUDGET_MAX = 1000


@dataclass
class QuizAnswers:
    """
    The in-progress record of the user's selections.

    Mutated in place as the user moves through the quiz, recreated from
    defaults on reset.
    """
    skill_level: Optional[SkillLevel] = None
    use_case: Optional[UseCase] = None
    budget_min: int = DEFAULT_BUDGET_MIN
    budget_max: int = DEFAULT_BUDGET_MAX
    prefer_enclosure: bool = False
    prefer_auto_leveling: bool = True

    def is_complete(self) -> bool:
        """True when both required selections have been made."""
        return self.skill_level is not None and self.use_case is not None

    def has_valid_budget(self) -> bool:
        return self.budget_min < self.budget_max

    def to_payload(self) -> Dict[str, Any]:
        """
        Serialize to the recommendation request body.

        Raises:
            ValueError: If skill level or use case has not been selected
        """
        if not self.is_complete():
            raise ValueError("Skill level and use case are required")
        return {
            "skill_level": self.skill_level.value,
            "use_case": self.use_case.value,
            "budget_min": self.budget_min,
            "budget_max": self.budget_max,
            "prefer_enclosure": self.prefer_enclosure,
            "prefer_auto_leveling": self.prefer_auto_leveling,
        }


def coerce_skill_level(value: Union[SkillLevel, str, None]) -> Optional[SkillLevel]:
    if value is None or isinstance(value, SkillLevel):
        return value
    return SkillLevel(value)


def coerce_use_case(value: Union[UseCase, str, None]) -> Optional[UseCase]:
    if value is None or isinstance(value, UseCase):
        return value
    return UseCase(value)


# --- Recommendation Output ---

@dataclass(frozen=True)
class RecommendationResult:
    """One scored printer returned by the recommendation backend."""
    printer: PrinterSummary
    match_score: int
    reasons: Tuple[str, ...] = ()

    @property
    def id(self) -> int:
        return self.printer.id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecommendationResult":
        if not isinstance(data, dict):
            raise TypeError(f"Expected object, got {type(data).__name__}")
        if "printer" not in data:
            raise KeyError("Missing required field 'printer'")
        if "match_score" not in data:
            raise KeyError("Missing required field 'match_score'")

        score = _as_int(data["match_score"], "match_score")
        if not 0 <= score <= 100:
            raise ValueError(f"Field 'match_score' out of range: {score}")

        reasons = data.get("reasons") or []
        if not isinstance(reasons, list) or not all(isinstance(r, str) for r in reasons):
            raise TypeError("Field 'reasons' must be a list of strings")

        return cls(
            printer=PrinterSummary.from_dict(data["printer"]),
            match_score=score,
            reasons=tuple(reasons),
        )


# --- Fetch Lifecycle ---

class FetchStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class FetchState:
    """
    Lifecycle of one recommendation request.

    Exactly one status is active. ``results`` is only populated on SUCCESS
    and ``message`` only on FAILURE; use the constructors below rather than
    building instances by hand.
    """
    status: FetchStatus = FetchStatus.IDLE
    results: Tuple[RecommendationResult, ...] = field(default=())
    message: Optional[str] = None

    def __post_init__(self):
        if self.results and self.status is not FetchStatus.SUCCESS:
            raise ValueError(f"{self.status.name} state cannot carry results")
        if self.status is FetchStatus.FAILURE:
            if not self.message:
                raise ValueError("FAILURE state requires a message")
        elif self.message is not None:
            raise ValueError(f"{self.status.name} state cannot carry a message")

    @classmethod
    def idle(cls) -> "FetchState":
        return cls(FetchStatus.IDLE)

    @classmethod
    def loading(cls) -> "FetchState":
        return cls(FetchStatus.LOADING)

    @classmethod
    def success(cls, results: Sequence[RecommendationResult]) -> "FetchState":
        return cls(FetchStatus.SUCCESS, results=tuple(results))

    @classmethod
    def failure(cls, message: str) -> "FetchState":
        return cls(FetchStatus.FAILURE, message=message)

    @property
    def is_idle(self) -> bool:
        return self.status is FetchStatus.IDLE

    @property
    def is_loading(self) -> bool:
        return self.status is FetchStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status is FetchStatus.FAILURE
