"""
Persistence for one user's profile, plans, check-ins, streak and insights.

Engines never touch the database; callers load plain engine objects from
here, run the engines and hand the results back.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tonic.engine.checkin import DailyCheckIn, UserStreak
from tonic.engine.plan import SupplementPlan
from tonic.engine.profile import UserProfile
from tonic.models import (
    CheckInRecord,
    Insight,
    PlanRecord,
    PlanSupplementRecord,
    StreakRecord,
    User,
)

logger = logging.getLogger(__name__)


class DataStore:
    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    # =========================================================================
    # Profile
    # =========================================================================

    def get_user(self) -> Optional[User]:
        return self.db.query(User).filter(User.id == self.user_id).first()

    def get_profile(self) -> Optional[UserProfile]:
        user = self.get_user()
        return user.to_profile() if user else None

    def save_profile(self, profile: UserProfile) -> User:
        user = self.get_user()
        if user is None:
            user = User(id=self.user_id, name=profile.name or "")
            self.db.add(user)
        user.apply_profile(profile)
        self.db.commit()
        self.db.refresh(user)
        return user

    # =========================================================================
    # Plans
    # =========================================================================

    def _active_plan_record(self) -> Optional[PlanRecord]:
        return self.db.query(PlanRecord).filter(
            PlanRecord.user_id == self.user_id,
            PlanRecord.is_active == True
        ).order_by(PlanRecord.version.desc()).first()

    def get_active_plan(self) -> Optional[SupplementPlan]:
        record = self._active_plan_record()
        return record.to_domain() if record else None

    def save_plan(self, plan: SupplementPlan) -> SupplementPlan:
        """
        Store a plan.

        A plan that is already stored is updated in place (lines are added or
        re-flagged, never deleted). A new plan becomes the active one: earlier
        plans are deactivated and the version number is bumped.
        """
        existing = self.db.query(PlanRecord).filter(PlanRecord.id == plan.id).first()
        if existing is not None:
            self._update_plan(existing, plan)
            self.db.commit()
            return existing.to_domain()

        latest_version = self.db.query(func.max(PlanRecord.version)).filter(
            PlanRecord.user_id == self.user_id
        ).scalar() or 0

        self.db.query(PlanRecord).filter(
            PlanRecord.user_id == self.user_id,
            PlanRecord.is_active == True
        ).update({PlanRecord.is_active: False})

        plan.version = latest_version + 1
        plan.is_active = True
        record = PlanRecord.from_domain(plan, self.user_id)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Saved plan v{plan.version} for user {self.user_id} with {len(plan.supplements)} supplements")
        return record.to_domain()

    def _update_plan(self, record: PlanRecord, plan: SupplementPlan) -> None:
        record.ai_reasoning = plan.ai_reasoning
        record.is_active = plan.is_active
        rows = {row.id: row for row in record.supplements}
        for item in plan.supplements:
            row = rows.get(item.id)
            if row is None:
                record.supplements.append(PlanSupplementRecord.from_domain(item))
                continue
            row.is_included = item.is_included
            row.dosage = item.dosage
            row.dosage_mg = item.dosage_mg
            row.timing = item.timing.value
            row.tier = item.tier.value
            row.sort_order = item.sort_order

    # =========================================================================
    # Check-ins
    # =========================================================================

    def _check_in_record(self, day: date) -> Optional[CheckInRecord]:
        return self.db.query(CheckInRecord).filter(
            CheckInRecord.user_id == self.user_id,
            CheckInRecord.check_in_date == day
        ).first()

    def get_check_in(self, day: date) -> Optional[DailyCheckIn]:
        record = self._check_in_record(day)
        return record.to_domain() if record else None

    def get_check_ins(self, limit: int = 30, before: Optional[date] = None) -> List[DailyCheckIn]:
        """Most recent check-ins, newest first."""
        query = self.db.query(CheckInRecord).filter(CheckInRecord.user_id == self.user_id)
        if before is not None:
            query = query.filter(CheckInRecord.check_in_date < before)
        records = query.order_by(CheckInRecord.check_in_date.desc()).limit(limit).all()
        return [r.to_domain() for r in records]

    def save_check_in(self, check_in: DailyCheckIn) -> CheckInRecord:
        """Insert or update the check-in for its date (one per day)."""
        record = self._check_in_record(check_in.check_in_date)
        if record is None:
            record = CheckInRecord(id=check_in.id, user_id=self.user_id)
            self.db.add(record)
        record.apply_domain(check_in)
        self.db.commit()
        self.db.refresh(record)
        return record

    # =========================================================================
    # Streak
    # =========================================================================

    def get_streak(self) -> UserStreak:
        record = self.db.query(StreakRecord).filter(StreakRecord.user_id == self.user_id).first()
        return record.to_domain() if record else UserStreak()

    def save_streak(self, streak: UserStreak) -> StreakRecord:
        record = self.db.query(StreakRecord).filter(StreakRecord.user_id == self.user_id).first()
        if record is None:
            record = StreakRecord(user_id=self.user_id)
            self.db.add(record)
        record.apply_domain(streak)
        self.db.commit()
        return record

    # =========================================================================
    # Insights
    # =========================================================================

    def save_insights(self, records: List[dict]) -> List[Insight]:
        insights = [Insight(user_id=self.user_id, **fields) for fields in records]
        self.db.add_all(insights)
        self.db.commit()
        for insight in insights:
            self.db.refresh(insight)
        return insights

    def get_insights(self, include_dismissed: bool = False, limit: int = 50) -> List[Insight]:
        query = self.db.query(Insight).filter(Insight.user_id == self.user_id)
        if not include_dismissed:
            query = query.filter(Insight.is_dismissed == False)
        return query.order_by(Insight.created_at.desc()).limit(limit).all()

    def get_insight(self, insight_id: str) -> Optional[Insight]:
        return self.db.query(Insight).filter(
            Insight.id == insight_id,
            Insight.user_id == self.user_id
        ).first()
