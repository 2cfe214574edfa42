"""
Display helpers shared by the desktop cards and the terminal tables.
"""

from dataclasses import dataclass
from typing import List

from printer_buddy.schemas.quiz import RecommendationResult


@dataclass
class MatchBadge:
    """Badge configuration based on match score."""
    text: str
    fg_color: str
    text_color: str = "white"


def get_match_badge(match_score: int) -> MatchBadge:
    """
    Get badge based on the backend's match score (0-100).

    - 80+: Best Match
    - 60-79: Strong Match
    - 40-59: Compatible
    - <40: Partial Match
    """
    if match_score >= 80:
        return MatchBadge("★ Best Match", "#854d0e", "#fbbf24")  # Gold on dark
    elif match_score >= 60:
        return MatchBadge("Strong Match", "#1e40af")
    elif match_score >= 40:
        return MatchBadge("Compatible", "#4b5563")
    else:
        return MatchBadge("Partial Match", "#6b7280")


def format_price(price: float) -> str:
    return f"${price:,.0f}"


def feature_tags(result: RecommendationResult) -> List[str]:
    """Short feature labels shown under the printer name."""
    printer = result.printer
    tags = [printer.printer_type.upper()]
    if printer.motion_system:
        tags.append(printer.motion_system_display)
    if printer.enclosure:
        tags.append("Enclosed")
    if printer.auto_leveling:
        tags.append("Auto-Level")
    if printer.multi_color:
        tags.append("Multi-Color")
    return tags
