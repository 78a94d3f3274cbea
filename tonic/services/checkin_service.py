"""
Daily check-in flow.

Saves the day's scores and supplement logs, advances the streak, then builds
the insight context from stored history and records whichever insight the
generator picks.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from tonic.config import get_settings
from tonic.engine.catalog import SupplementCatalog, get_catalog
from tonic.engine.checkin import DailyCheckIn, UserStreak, trailing_averages
from tonic.engine.insights import (
    CheckInInsight,
    CheckInInsightGenerator,
    InsightContext,
    TakenSupplement,
    to_insight_record,
)
from tonic.engine.tracker import RecentInsightTracker, SqlInsightKeyStore
from tonic.engine.wellbeing import WellnessDimension
from tonic.services.data_store import DataStore

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30


@dataclass
class CheckInResult:
    check_in: DailyCheckIn
    streak: UserStreak
    insight: Optional[CheckInInsight] = None


class CheckInService:
    def __init__(self, db: Session, user_id: str, catalog: Optional[SupplementCatalog] = None):
        self.db = db
        self.user_id = user_id
        self.store = DataStore(db, user_id)
        self.catalog = catalog if catalog is not None else get_catalog()
        self.settings = get_settings()
        self.tracker = RecentInsightTracker(
            SqlInsightKeyStore(db, user_id),
            max_count=self.settings.recent_insight_window,
        )

    def _today_check_in(self, day: date) -> DailyCheckIn:
        return self.store.get_check_in(day) or DailyCheckIn(check_in_date=day)

    def log_supplement(self, plan_supplement_id: str, taken: bool, day: Optional[date] = None) -> DailyCheckIn:
        """Record whether a plan supplement was taken, creating the day's check-in if needed."""
        day = day or date.today()
        check_in = self._today_check_in(day)
        check_in.log_supplement(plan_supplement_id, taken)
        return self.store.save_check_in(check_in).to_domain()

    def submit(
        self,
        scores: Dict[WellnessDimension, int],
        day: Optional[date] = None,
        notes: Optional[str] = None,
        taken_supplement_ids: Optional[List[str]] = None,
    ) -> CheckInResult:
        """
        Complete the day's check-in.

        Args:
            scores: Score (0-100) per wellness dimension
            day: Check-in date, defaults to today
            notes: Optional free-text notes
            taken_supplement_ids: Plan supplement ids taken today; when given,
                every included plan supplement gets a log entry

        Returns:
            CheckInResult with the saved check-in, updated streak and insight
        """
        day = day or date.today()
        plan = self.store.get_active_plan()

        # Step 1: Save scores and logs
        check_in = self._today_check_in(day)
        check_in.sleep_score = scores.get(WellnessDimension.SLEEP, check_in.sleep_score)
        check_in.energy_score = scores.get(WellnessDimension.ENERGY, check_in.energy_score)
        check_in.clarity_score = scores.get(WellnessDimension.CLARITY, check_in.clarity_score)
        check_in.mood_score = scores.get(WellnessDimension.MOOD, check_in.mood_score)
        check_in.gut_score = scores.get(WellnessDimension.GUT, check_in.gut_score)
        check_in.wellbeing_completed = True
        if notes is not None:
            check_in.notes = notes

        if taken_supplement_ids is not None and plan is not None:
            taken_ids = set(taken_supplement_ids)
            for item in plan.included_supplements:
                check_in.log_supplement(item.id, item.id in taken_ids)

        check_in = self.store.save_check_in(check_in).to_domain()

        # Step 2: Streak
        streak = self.store.get_streak()
        streak.record_check_in(day)
        self.store.save_streak(streak)

        # Step 3: Insight
        context = self.build_context(check_in, streak, plan)
        insight = CheckInInsightGenerator(self.catalog).generate(context)
        if insight is not None:
            self.tracker.record(insight.key)
            self.store.save_insights([
                to_insight_record(insight, data_points_used=len(context.scored_check_ins) + 1)
            ])
            logger.info(f"Check-in insight for user {self.user_id} on {day}: {insight.key}")

        return CheckInResult(check_in=check_in, streak=streak, insight=insight)

    def build_context(self, check_in: DailyCheckIn, streak: UserStreak, plan=None) -> InsightContext:
        """Assemble the generator's view of today from stored history."""
        day = check_in.check_in_date
        history = self.store.get_check_ins(limit=HISTORY_LIMIT, before=day)

        profile = self.store.get_profile()
        taken = []
        if plan is not None:
            taken = [
                TakenSupplement(name=item.name, plan_supplement_id=item.id)
                for item in plan.included_supplements
                if check_in.was_taken(item.id)
            ]

        return InsightContext(
            today_scores=check_in.scores(),
            baselines=profile.baselines() if profile else {},
            trailing_averages=trailing_averages(history, day, self.settings.trailing_average_days),
            recent_check_ins=history,
            streak=streak,
            supplements_taken_today=taken,
            plan=plan,
            recently_shown_keys=self.tracker.recent_keys(),
            check_in_date=day,
        )
