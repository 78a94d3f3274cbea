"""
Check-in Insight Generator

Picks at most one short insight to show after a daily check-in. Rules run in
priority order and the first candidate that was not shown recently wins:

1. Personal best (pb_{dimension})
2. Supplement consistency milestone (supp_{slug}_{days})
3. Above baseline (above_baseline_{dimension})
4. Above 7-day average (above_avg_{dimension})
5. Consecutive improvement (improving_{dimension}_{days})
6. Full adherence (full_adherence)
7. Fun fact, supplement tip, daily tip (fun_fact_*, supp_tip_*)

Key prefixes are stable: the feed and the recent-insight window depend on them.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Set

from .catalog import SupplementCatalog, get_catalog, slugify
from .checkin import DailyCheckIn, UserStreak
from .knowledge import DAILY_TIPS, SUPPLEMENT_FUN_FACTS
from .plan import SupplementPlan
from .wellbeing import WellnessDimension

logger = logging.getLogger(__name__)


# =============================================================================
# THRESHOLDS
# =============================================================================

PERSONAL_BEST_MIN_HISTORY = 3
CONSISTENCY_MILESTONES = (3, 5, 7, 14, 21, 30)
MIN_ONSET_MILESTONE = 3
ABOVE_BASELINE_MARGIN = 15  # points on the 0-100 scale
ABOVE_AVERAGE_MARGIN = 10.0
IMPROVING_MIN_RUN = 3
FULL_ADHERENCE_MIN_PLAN = 2


# =============================================================================
# INSIGHT TYPES
# =============================================================================

class InsightType:
    CORRELATION = "correlation"
    TREND = "trend"
    RECOMMENDATION = "recommendation"
    MILESTONE = "milestone"


INSIGHT_TITLES = {
    InsightType.CORRELATION: "Correlation",
    InsightType.TREND: "Trend",
    InsightType.RECOMMENDATION: "Tip",
    InsightType.MILESTONE: "Milestone",
}

# Checked in order; "supp_tip_" must come before "supp_"
KEY_PREFIX_TYPES = (
    ("supp_tip_", InsightType.RECOMMENDATION),
    ("fun_fact_", InsightType.RECOMMENDATION),
    ("pb_", InsightType.MILESTONE),
    ("supp_", InsightType.MILESTONE),
    ("full_adherence", InsightType.MILESTONE),
    ("above_baseline_", InsightType.TREND),
    ("above_avg_", InsightType.TREND),
    ("improving_", InsightType.TREND),
)


def insight_category(key: str) -> str:
    """Display category for an insight key."""
    for prefix, insight_type in KEY_PREFIX_TYPES:
        if key.startswith(prefix):
            return insight_type
    return InsightType.RECOMMENDATION


@dataclass
class CheckInInsight:
    key: str
    message: str
    dimension: Optional[WellnessDimension] = None

    @property
    def category(self) -> str:
        return insight_category(self.key)

    @property
    def title(self) -> str:
        if self.key.startswith("pb_"):
            return "Personal best"
        if self.key == "full_adherence":
            return "Perfect adherence"
        return INSIGHT_TITLES[self.category]

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "message": self.message,
            "dimension": self.dimension.value if self.dimension else None,
            "category": self.category,
            "title": self.title,
        }


@dataclass
class TakenSupplement:
    name: str
    plan_supplement_id: str


@dataclass
class InsightContext:
    """Everything the generator looks at for one check-in."""
    today_scores: Dict[WellnessDimension, int]
    baselines: Dict[WellnessDimension, int] = field(default_factory=dict)
    trailing_averages: Dict[WellnessDimension, float] = field(default_factory=dict)
    recent_check_ins: List[DailyCheckIn] = field(default_factory=list)  # Newest first, today excluded
    streak: Optional[UserStreak] = None
    supplements_taken_today: List[TakenSupplement] = field(default_factory=list)
    plan: Optional[SupplementPlan] = None
    recently_shown_keys: Set[str] = field(default_factory=set)
    check_in_date: date = field(default_factory=date.today)

    @property
    def scored_check_ins(self) -> List[DailyCheckIn]:
        """Recent check-ins where the scores were submitted."""
        return [c for c in self.recent_check_ins if c.wellbeing_completed]


class CheckInInsightGenerator:
    """Priority-ordered rule cascade with anti-repetition."""

    def __init__(self, catalog: Optional[SupplementCatalog] = None):
        self.catalog = catalog if catalog is not None else get_catalog()

    @property
    def rules(self) -> List[Callable[[InsightContext], Optional[CheckInInsight]]]:
        return [
            self.personal_best,
            self.supplement_consistency,
            self.above_baseline,
            self.above_trailing_average,
            self.consecutive_improvement,
            self.full_adherence,
            self.supplement_fun_fact,
            self.supplement_tip,
            self.daily_tip,
        ]

    def generate(self, context: InsightContext) -> Optional[CheckInInsight]:
        """
        First insight whose key is not in `context.recently_shown_keys`.

        Returns None when every candidate was shown recently.
        """
        for rule in self.rules:
            insight = rule(context)
            if insight is None:
                continue
            if insight.key in context.recently_shown_keys:
                logger.debug(f"Skipping recently shown insight {insight.key}")
                continue
            logger.debug(f"Selected insight {insight.key}")
            return insight

        logger.info("All insight candidates were shown recently")
        return None

    # =========================================================================
    # Milestones
    # =========================================================================

    def personal_best(self, context: InsightContext) -> Optional[CheckInInsight]:
        history = context.scored_check_ins
        if len(history) < PERSONAL_BEST_MIN_HISTORY:
            return None

        best_dimension = None
        best_score = -1
        for dimension in WellnessDimension:
            today = context.today_scores.get(dimension)
            if today is None:
                continue
            historical_max = max(c.score(dimension) for c in history)
            if today > historical_max and today > best_score:
                best_score = today
                best_dimension = dimension

        if best_dimension is None:
            return None
        return CheckInInsight(
            key=f"pb_{best_dimension.value}",
            message=(
                f"Personal best! Your {best_dimension.label.lower()} hit {best_score}, "
                f"your highest yet."
            ),
            dimension=best_dimension,
        )

    def milestones_for(self, name: str) -> List[int]:
        """Consistency milestones for a supplement, including its onset day."""
        milestones = set(CONSISTENCY_MILESTONES)
        onset = self.catalog.onset(name)
        if onset and onset[0] >= MIN_ONSET_MILESTONE:
            milestones.add(onset[0])
        return sorted(milestones)

    def supplement_consistency(self, context: InsightContext) -> Optional[CheckInInsight]:
        for taken in context.supplements_taken_today:
            days = _consecutive_taken_days(taken.plan_supplement_id, context)
            reached = [m for m in self.milestones_for(taken.name) if days >= m]
            if not reached:
                continue

            milestone = reached[-1]
            message = f"You've been consistent with {taken.name} for {milestone} days."
            supplement = self.catalog.supplement(taken.name)
            if supplement and supplement.onset_min_days == milestone and supplement.onset_description:
                message = f"{message} This is around when benefits start to show: {supplement.onset_description.lower()}."
            elif supplement and supplement.notes:
                message = f"{message} {supplement.notes}"

            return CheckInInsight(key=f"supp_{slugify(taken.name)}_{milestone}", message=message)
        return None

    def full_adherence(self, context: InsightContext) -> Optional[CheckInInsight]:
        if context.plan is None:
            return None
        included = context.plan.included_supplements
        if len(included) < FULL_ADHERENCE_MIN_PLAN:
            return None

        taken_ids = {t.plan_supplement_id for t in context.supplements_taken_today}
        if not all(s.id in taken_ids for s in included):
            return None
        return CheckInInsight(
            key="full_adherence",
            message=f"Perfect adherence. You took all {len(included)} supplements today!",
        )

    # =========================================================================
    # Trends
    # =========================================================================

    def above_baseline(self, context: InsightContext) -> Optional[CheckInInsight]:
        best_dimension = None
        best_delta = 0
        for dimension in WellnessDimension:
            today = context.today_scores.get(dimension)
            baseline = context.baselines.get(dimension)
            if today is None or baseline is None:
                continue
            delta = today - baseline
            if delta >= ABOVE_BASELINE_MARGIN and delta > best_delta:
                best_delta = delta
                best_dimension = dimension

        if best_dimension is None:
            return None
        return CheckInInsight(
            key=f"above_baseline_{best_dimension.value}",
            message=(
                f"Your {best_dimension.label.lower()} is {best_delta} points above "
                f"your baseline today."
            ),
            dimension=best_dimension,
        )

    def above_trailing_average(self, context: InsightContext) -> Optional[CheckInInsight]:
        best_dimension = None
        best_delta = 0.0
        for dimension in WellnessDimension:
            today = context.today_scores.get(dimension)
            average = context.trailing_averages.get(dimension)
            if today is None or average is None:
                continue
            delta = today - average
            if delta >= ABOVE_AVERAGE_MARGIN and delta > best_delta:
                best_delta = delta
                best_dimension = dimension

        if best_dimension is None:
            return None
        return CheckInInsight(
            key=f"above_avg_{best_dimension.value}",
            message=(
                f"Your {best_dimension.label.lower()} is running {round(best_delta)} points "
                f"above your 7-day average today."
            ),
            dimension=best_dimension,
        )

    def consecutive_improvement(self, context: InsightContext) -> Optional[CheckInInsight]:
        best_dimension = None
        best_run = 0
        for dimension in WellnessDimension:
            today = context.today_scores.get(dimension)
            if today is None:
                continue

            run = 1
            previous_score = today
            expected_day = context.check_in_date - timedelta(days=1)
            for check_in in context.scored_check_ins:
                score = check_in.score(dimension)
                if check_in.check_in_date != expected_day or score >= previous_score:
                    break
                run += 1
                previous_score = score
                expected_day -= timedelta(days=1)

            if run >= IMPROVING_MIN_RUN and run > best_run:
                best_run = run
                best_dimension = dimension

        if best_dimension is None:
            return None
        return CheckInInsight(
            key=f"improving_{best_dimension.value}_{best_run}",
            message=f"Your {best_dimension.label.lower()} has been climbing for {best_run} days straight.",
            dimension=best_dimension,
        )

    # =========================================================================
    # Fallbacks
    # =========================================================================

    def supplement_fun_fact(self, context: InsightContext) -> Optional[CheckInInsight]:
        for taken in context.supplements_taken_today:
            facts = SUPPLEMENT_FUN_FACTS.get(taken.name)
            if not facts:
                continue
            index = context.check_in_date.toordinal() % len(facts)
            return CheckInInsight(key=f"fun_fact_{slugify(taken.name)}_{index}", message=facts[index])
        return None

    def supplement_tip(self, context: InsightContext) -> Optional[CheckInInsight]:
        for taken in context.supplements_taken_today:
            supplement = self.catalog.supplement(taken.name)
            if supplement and supplement.notes:
                return CheckInInsight(
                    key=f"supp_tip_{slugify(taken.name)}",
                    message=f"{taken.name} tip: {supplement.notes}",
                )
        return None

    def daily_tip(self, context: InsightContext) -> Optional[CheckInInsight]:
        if not DAILY_TIPS:
            return None
        index = context.check_in_date.toordinal() % len(DAILY_TIPS)
        return CheckInInsight(key=f"supp_tip_daily_{index}", message=DAILY_TIPS[index])


def _consecutive_taken_days(plan_supplement_id: str, context: InsightContext) -> int:
    """Today plus each directly preceding calendar day the supplement was taken."""
    days = 1
    expected_day = context.check_in_date - timedelta(days=1)
    for check_in in context.recent_check_ins:
        if check_in.check_in_date != expected_day or not check_in.was_taken(plan_supplement_id):
            break
        days += 1
        expected_day -= timedelta(days=1)
    return days


def to_insight_record(insight: CheckInInsight, data_points_used: Optional[int] = None) -> dict:
    """Feed record fields for a generated insight."""
    return {
        "key": insight.key,
        "type": insight.category,
        "title": insight.title,
        "body": insight.message,
        "dimension": insight.dimension.value if insight.dimension else None,
        "data_points_used": data_points_used,
        "is_read": False,
        "is_dismissed": False,
    }
