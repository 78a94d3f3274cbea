from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
import uuid


class SupplementTier(str, Enum):
    CORE = "core"  # Works across multiple goals
    TARGETED = "targeted"  # Focused on a specific goal
    SUPPORTING = "supporting"  # Rounds out the plan

    @property
    def sort_order(self) -> int:
        return TIER_SORT_ORDER[self]


TIER_SORT_ORDER: Dict[SupplementTier, int] = {
    SupplementTier.CORE: 0,
    SupplementTier.TARGETED: 1,
    SupplementTier.SUPPORTING: 2,
}


class SupplementTiming(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    BEDTIME = "bedtime"
    WITH_FOOD = "with_food"
    EMPTY_STOMACH = "empty_stomach"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def sort_order(self) -> int:
        return TIMING_SORT_ORDER[self]


TIMING_SORT_ORDER: Dict[SupplementTiming, int] = {
    SupplementTiming.EMPTY_STOMACH: 0,
    SupplementTiming.MORNING: 1,
    SupplementTiming.WITH_FOOD: 2,
    SupplementTiming.AFTERNOON: 3,
    SupplementTiming.EVENING: 4,
    SupplementTiming.BEDTIME: 5,
}


class SupplementFrequency(str, Enum):
    DAILY = "daily"
    EVERY_OTHER_DAY = "every_other_day"
    WEEKLY = "weekly"
    AS_NEEDED = "as_needed"


@dataclass
class PlanSupplement:
    """One line of a supplement plan."""
    name: str
    dosage: str
    timing: SupplementTiming
    dosage_mg: Optional[float] = None  # In the catalog's dosage unit
    supplement_id: Optional[str] = None
    frequency: SupplementFrequency = SupplementFrequency.DAILY
    tier: SupplementTier = SupplementTier.SUPPORTING
    matched_goals: List[str] = field(default_factory=list)
    goal_overlap_score: int = 0  # Summed goal weight across matched goals
    is_included: bool = True
    reasoning: Optional[str] = None
    research_note: Optional[str] = None
    category: str = ""
    sort_order: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplement_id": self.supplement_id,
            "name": self.name,
            "dosage": self.dosage,
            "dosage_mg": self.dosage_mg,
            "timing": self.timing.value,
            "frequency": self.frequency.value,
            "tier": self.tier.value,
            "matched_goals": list(self.matched_goals),
            "goal_overlap_score": self.goal_overlap_score,
            "is_included": self.is_included,
            "reasoning": self.reasoning,
            "research_note": self.research_note,
            "category": self.category,
            "sort_order": self.sort_order,
        }


@dataclass
class SupplementPlan:
    """A generated supplement plan."""
    supplements: List[PlanSupplement] = field(default_factory=list)
    ai_reasoning: Optional[str] = None
    version: int = 1
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def included_supplements(self) -> List[PlanSupplement]:
        return [s for s in self.supplements if s.is_included]

    @property
    def supplement_names(self) -> List[str]:
        return [s.name for s in self.included_supplements]

    def find(self, plan_supplement_id: str) -> Optional[PlanSupplement]:
        return next((s for s in self.supplements if s.id == plan_supplement_id), None)

    def remove_supplement(self, plan_supplement_id: str) -> bool:
        """Exclude a supplement from the plan without deleting its history."""
        supplement = self.find(plan_supplement_id)
        if supplement is None:
            return False
        supplement.is_included = False
        return True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "version": self.version,
            "is_active": self.is_active,
            "ai_reasoning": self.ai_reasoning,
            "supplements": [s.to_dict() for s in self.supplements],
        }
