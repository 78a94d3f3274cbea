"""
Wellness dimensions and the wellbeing score.

The wellbeing score is the plain arithmetic mean of the five dimension
scores (each 0-100). Trend and average calculations elsewhere depend on this
exact formula, so it is never weighted or rounded here.
"""

from enum import Enum
from typing import Dict, Mapping


class WellnessDimension(str, Enum):
    """The five subjective dimensions scored at each check-in."""

    SLEEP = "sleep"
    ENERGY = "energy"
    CLARITY = "clarity"
    MOOD = "mood"
    GUT = "gut"

    @property
    def label(self) -> str:
        return DIMENSION_LABELS[self]


DIMENSION_LABELS: Dict[WellnessDimension, str] = {
    WellnessDimension.SLEEP: "Sleep",
    WellnessDimension.ENERGY: "Energy",
    WellnessDimension.CLARITY: "Clarity",
    WellnessDimension.MOOD: "Mood",
    WellnessDimension.GUT: "Gut",
}

# Used when a dimension has not been scored yet
NEUTRAL_SCORE = 50


class WellbeingScore:
    """Aggregate wellbeing calculator."""

    @staticmethod
    def calculate(sleep: int, energy: int, clarity: int, mood: int, gut: int) -> float:
        """Arithmetic mean of the five dimension scores, unrounded."""
        return (sleep + energy + clarity + mood + gut) / 5.0

    @staticmethod
    def from_scores(scores: Mapping[WellnessDimension, int]) -> float:
        """Mean over a dimension mapping; missing dimensions count as neutral."""
        return WellbeingScore.calculate(
            sleep=scores.get(WellnessDimension.SLEEP, NEUTRAL_SCORE),
            energy=scores.get(WellnessDimension.ENERGY, NEUTRAL_SCORE),
            clarity=scores.get(WellnessDimension.CLARITY, NEUTRAL_SCORE),
            mood=scores.get(WellnessDimension.MOOD, NEUTRAL_SCORE),
            gut=scores.get(WellnessDimension.GUT, NEUTRAL_SCORE),
        )
