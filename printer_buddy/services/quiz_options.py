"""
Display lookup tables for the recommendation quiz.

Option names, descriptions, icons, step headers and budget presets are data,
kept in ``data/quiz_options.yaml`` and consulted by the views. The quiz
engine itself never branches on them.

Usage:
    from printer_buddy.services.quiz_options import get_quiz_options

    options = get_quiz_options()
    for preset in options.budget_presets:
        print(preset.label, preset.minimum, preset.maximum)
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from printer_buddy.schemas.quiz import QuizStep, SkillLevel, UseCase
from printer_buddy.utils.logger import log


@dataclass(frozen=True)
class OptionInfo:
    """How one selectable answer is presented."""
    value: str
    name: str
    description: str = ""
    icon: str = ""


@dataclass(frozen=True)
class StepHeader:
    title: str
    subtitle: str = ""


@dataclass(frozen=True)
class BudgetPreset:
    label: str
    minimum: int
    maximum: int

    def matches(self, budget_min: int, budget_max: int) -> bool:
        """True when the current budget is exactly this preset."""
        return self.minimum == budget_min and self.maximum == budget_max


@dataclass(frozen=True)
class SliderRange:
    start: int
    end: int


DEFAULT_PRESETS: Tuple[BudgetPreset, ...] = (
    BudgetPreset("Budget", 100, 400),
    BudgetPreset("Mid-Range", 400, 1000),
    BudgetPreset("Premium", 1000, 3000),
    BudgetPreset("Pro", 2000, 6000),
)


class QuizOptions:
    """
    Loader for the quiz display tables.

    Missing or malformed entries fall back to plain names derived from the
    enum values, so the quiz stays usable if the data file is damaged.
    """

    DEFAULT_PATH = Path(__file__).parent.parent / "data" / "quiz_options.yaml"

    def __init__(self, yaml_path: Optional[Path] = None):
        self.yaml_path = yaml_path or self.DEFAULT_PATH
        self._raw_data: Dict[str, Any] = {}
        self._loaded = False

    def load(self) -> bool:
        """
        Load the tables from YAML.

        Returns:
            True if loaded successfully, False otherwise (defaults stay in use).
        """
        try:
            with open(self.yaml_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                log.error(f"Quiz options file has unexpected layout: {self.yaml_path}")
                return False
            self._raw_data = data
            self._loaded = True
            log.info(f"Loaded quiz options from {self.yaml_path}")
            return True
        except FileNotFoundError:
            log.error(f"Quiz options not found: {self.yaml_path}")
            return False
        except yaml.YAMLError as e:
            log.error(f"Failed to parse quiz options: {e}")
            return False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._raw_data.get(name)
        return section if isinstance(section, dict) else {}

    def _option(self, section: str, value: str) -> OptionInfo:
        entry = self._section(section).get(value)
        if not isinstance(entry, dict):
            return OptionInfo(value=value, name=value.replace("_", " ").title())
        return OptionInfo(
            value=value,
            name=str(entry.get("name") or value.title()),
            description=str(entry.get("description") or ""),
            icon=str(entry.get("icon") or ""),
        )

    # =========================================================================
    # Lookups
    # =========================================================================

    def step_header(self, step: QuizStep) -> StepHeader:
        entry = self._section("steps").get(step.name.lower())
        if not isinstance(entry, dict):
            return StepHeader(title=step.title)
        return StepHeader(
            title=str(entry.get("title") or step.title),
            subtitle=str(entry.get("subtitle") or ""),
        )

    def skill_level(self, level: SkillLevel) -> OptionInfo:
        return self._option("skill_levels", level.value)

    def use_case(self, use_case: UseCase) -> OptionInfo:
        return self._option("use_cases", use_case.value)

    def feature(self, name: str) -> OptionInfo:
        """Toggle text for ``prefer_enclosure`` / ``prefer_auto_leveling``."""
        return self._option("features", name)

    @property
    def skill_levels(self) -> List[OptionInfo]:
        return [self.skill_level(level) for level in SkillLevel]

    @property
    def use_cases(self) -> List[OptionInfo]:
        return [self.use_case(use_case) for use_case in UseCase]

    @property
    def budget_presets(self) -> Tuple[BudgetPreset, ...]:
        raw = self._section("budget").get("presets")
        if not isinstance(raw, list):
            return DEFAULT_PRESETS

        presets = []
        for item in raw:
            try:
                preset = BudgetPreset(str(item["label"]), int(item["min"]), int(item["max"]))
            except (KeyError, TypeError, ValueError) as e:
                log.warning(f"Skipping malformed budget preset {item!r}: {e}")
                continue
            if preset.minimum >= preset.maximum:
                log.warning(f"Skipping budget preset '{preset.label}': min must be below max")
                continue
            presets.append(preset)
        return tuple(presets) or DEFAULT_PRESETS

    def _slider(self, key: str, default: SliderRange) -> SliderRange:
        entry = self._section("budget").get(key)
        try:
            return SliderRange(int(entry["from"]), int(entry["to"]))
        except (KeyError, TypeError, ValueError):
            return default

    @property
    def min_slider(self) -> SliderRange:
        return self._slider("min_slider", SliderRange(100, 5000))

    @property
    def max_slider(self) -> SliderRange:
        return self._slider("max_slider", SliderRange(200, 6000))

    @property
    def budget_step(self) -> int:
        step = self._section("budget").get("step", 50)
        return step if isinstance(step, int) and step > 0 else 50


@lru_cache(maxsize=1)
def get_quiz_options() -> QuizOptions:
    """Shared, loaded QuizOptions instance."""
    options = QuizOptions()
    options.load()
    return options
