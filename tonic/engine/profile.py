"""User profile data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .wellbeing import NEUTRAL_SCORE, WellnessDimension


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class HealthGoal(str, Enum):
    """Goals a user can select during onboarding."""

    ENERGY = "energy"
    SLEEP = "sleep"
    STRESS_ANXIETY = "stress_anxiety"
    FOCUS = "focus"
    GUT_HEALTH = "gut_health"
    IMMUNE_SUPPORT = "immune_support"
    MUSCLE_RECOVERY = "muscle_recovery"
    SKIN_HAIR_NAILS = "skin_hair_nails"
    HEART_HEALTH = "heart_health"
    LONGEVITY = "longevity"

    @property
    def label(self) -> str:
        return GOAL_LABELS[self]

    @property
    def short_label(self) -> str:
        return GOAL_SHORT_LABELS[self]


GOAL_LABELS: Dict[HealthGoal, str] = {
    HealthGoal.ENERGY: "More energy",
    HealthGoal.SLEEP: "Better sleep",
    HealthGoal.STRESS_ANXIETY: "Stress & anxiety relief",
    HealthGoal.FOCUS: "Mental clarity & focus",
    HealthGoal.GUT_HEALTH: "Gut health & digestion",
    HealthGoal.IMMUNE_SUPPORT: "Immune support",
    HealthGoal.MUSCLE_RECOVERY: "Muscle growth & recovery",
    HealthGoal.SKIN_HAIR_NAILS: "Skin, hair & nails",
    HealthGoal.HEART_HEALTH: "Heart health",
    HealthGoal.LONGEVITY: "Longevity",
}

GOAL_SHORT_LABELS: Dict[HealthGoal, str] = {
    HealthGoal.ENERGY: "Energy",
    HealthGoal.SLEEP: "Sleep",
    HealthGoal.STRESS_ANXIETY: "Stress",
    HealthGoal.FOCUS: "Focus",
    HealthGoal.GUT_HEALTH: "Gut",
    HealthGoal.IMMUNE_SUPPORT: "Immunity",
    HealthGoal.MUSCLE_RECOVERY: "Muscle",
    HealthGoal.SKIN_HAIR_NAILS: "Skin",
    HealthGoal.HEART_HEALTH: "Heart",
    HealthGoal.LONGEVITY: "Longevity",
}


def goal_label(goal_key: str) -> str:
    """Label for a goal key; unknown keys are humanized instead of rejected."""
    try:
        return HealthGoal(goal_key).label
    except ValueError:
        return goal_key.replace("_", " ").capitalize()


class DietType(str, Enum):
    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KETO = "keto"
    PALEO = "paleo"
    PESCATARIAN = "pescatarian"
    HALAL = "halal"
    MEDITERRANEAN = "mediterranean"
    LOW_CARB = "low_carb"
    OTHER = "other"


class ExerciseFrequency(str, Enum):
    NONE = "none"
    ONE_TO_TWO = "1-2_weekly"
    THREE_TO_FOUR = "3-4_weekly"
    FIVE_PLUS = "5+_weekly"


class AlcoholIntake(str, Enum):
    NONE = "none"
    ONE_TO_THREE = "1-3_drinks"
    FOUR_TO_SEVEN = "4-7_drinks"
    EIGHT_PLUS = "8+_drinks"


class StressLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass
class UserProfile:
    """Demographic and lifestyle snapshot used to generate a plan."""

    name: str = ""
    age: int = 30
    sex: Sex = Sex.PREFER_NOT_TO_SAY
    is_pregnant: bool = False
    is_breastfeeding: bool = False
    height_inches: Optional[int] = None
    weight_lbs: Optional[int] = None

    health_goals: List[HealthGoal] = field(default_factory=list)
    current_supplements: List[str] = field(default_factory=list)
    medications: List[str] = field(default_factory=list)
    allergies: List[str] = field(default_factory=list)

    diet_type: DietType = DietType.OMNIVORE
    exercise_frequency: ExerciseFrequency = ExerciseFrequency.NONE
    coffee_cups_daily: int = 0
    tea_cups_daily: int = 0
    energy_drinks_daily: int = 0
    alcohol_weekly: AlcoholIntake = AlcoholIntake.NONE
    stress_level: StressLevel = StressLevel.MODERATE

    # Baselines (0-100)
    baseline_sleep: int = NEUTRAL_SCORE
    baseline_energy: int = NEUTRAL_SCORE
    baseline_clarity: int = NEUTRAL_SCORE
    baseline_mood: int = NEUTRAL_SCORE
    baseline_gut: int = NEUTRAL_SCORE

    @property
    def goal_keys(self) -> List[str]:
        return [g.value if isinstance(g, HealthGoal) else str(g) for g in self.health_goals]

    @property
    def caffeine_servings(self) -> int:
        return self.coffee_cups_daily + self.tea_cups_daily + self.energy_drinks_daily

    @property
    def is_plant_based(self) -> bool:
        return self.diet_type in (DietType.VEGAN, DietType.VEGETARIAN)

    @property
    def conditions(self) -> List[str]:
        """Condition keywords checked against catalog contraindications."""
        conditions = []
        if self.is_pregnant:
            conditions.append("pregnancy")
        if self.is_breastfeeding:
            conditions.append("breastfeeding")
        return conditions

    def baselines(self) -> Dict[WellnessDimension, int]:
        return {
            WellnessDimension.SLEEP: self.baseline_sleep,
            WellnessDimension.ENERGY: self.baseline_energy,
            WellnessDimension.CLARITY: self.baseline_clarity,
            WellnessDimension.MOOD: self.baseline_mood,
            WellnessDimension.GUT: self.baseline_gut,
        }
