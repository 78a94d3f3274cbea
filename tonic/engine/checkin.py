from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
import uuid

from .wellbeing import NEUTRAL_SCORE, WellbeingScore, WellnessDimension


@dataclass
class SupplementLog:
    """Whether one plan supplement was taken on a check-in day."""
    plan_supplement_id: str
    taken: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    logged_at: Optional[datetime] = None


@dataclass
class DailyCheckIn:
    """One calendar day of scores (0-100) and supplement logs."""
    check_in_date: date
    sleep_score: int = NEUTRAL_SCORE
    energy_score: int = NEUTRAL_SCORE
    clarity_score: int = NEUTRAL_SCORE
    mood_score: int = NEUTRAL_SCORE
    gut_score: int = NEUTRAL_SCORE
    supplement_logs: List[SupplementLog] = field(default_factory=list)
    wellbeing_completed: bool = False  # False while scores are still defaulted
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def wellbeing_score(self) -> float:
        return WellbeingScore.calculate(
            sleep=self.sleep_score,
            energy=self.energy_score,
            clarity=self.clarity_score,
            mood=self.mood_score,
            gut=self.gut_score,
        )

    def score(self, dimension: WellnessDimension) -> int:
        return {
            WellnessDimension.SLEEP: self.sleep_score,
            WellnessDimension.ENERGY: self.energy_score,
            WellnessDimension.CLARITY: self.clarity_score,
            WellnessDimension.MOOD: self.mood_score,
            WellnessDimension.GUT: self.gut_score,
        }[dimension]

    def scores(self) -> Dict[WellnessDimension, int]:
        return {dimension: self.score(dimension) for dimension in WellnessDimension}

    def was_taken(self, plan_supplement_id: str) -> bool:
        return any(
            log.plan_supplement_id == plan_supplement_id and log.taken
            for log in self.supplement_logs
        )

    def log_supplement(self, plan_supplement_id: str, taken: bool) -> SupplementLog:
        """Set the taken flag for a plan supplement, adding a log if needed."""
        for log in self.supplement_logs:
            if log.plan_supplement_id == plan_supplement_id:
                log.taken = taken
                log.logged_at = datetime.utcnow()
                return log

        log = SupplementLog(
            plan_supplement_id=plan_supplement_id,
            taken=taken,
            logged_at=datetime.utcnow(),
        )
        self.supplement_logs.append(log)
        return log


@dataclass
class UserStreak:
    """Consecutive check-in day counter."""
    current_streak: int = 0
    longest_streak: int = 0
    last_check_in_date: Optional[date] = None

    def record_check_in(self, day: Optional[date] = None) -> None:
        """
        Register a check-in on `day` (defaults to today).

        A gap of exactly one day extends the streak, a larger gap restarts
        it at 1 and a repeat on the same day changes nothing.
        """
        if day is None:
            day = date.today()
        if isinstance(day, datetime):
            day = day.date()

        if self.last_check_in_date is None:
            self.current_streak = 1
        else:
            days_diff = (day - self.last_check_in_date).days
            if days_diff == 0:
                return
            if days_diff == 1:
                self.current_streak += 1
            elif days_diff > 1:
                self.current_streak = 1
            else:
                # Backdated check-in; the streak only moves forward
                return

        self.longest_streak = max(self.longest_streak, self.current_streak)
        self.last_check_in_date = day


def trailing_averages(
    check_ins: List[DailyCheckIn],
    as_of: date,
    days: int = 7
) -> Dict[WellnessDimension, float]:
    """
    Average each dimension over completed check-ins in the `days` before `as_of`.

    `as_of` itself is excluded. Returns an empty dict when there is no
    qualifying history, which leaves average-based insights inapplicable.
    """
    window_start = as_of - timedelta(days=days)
    recent = [
        c for c in check_ins
        if window_start <= c.check_in_date < as_of and c.wellbeing_completed
    ]
    if not recent:
        return {}

    count = float(len(recent))
    return {
        dimension: sum(c.score(dimension) for c in recent) / count
        for dimension in WellnessDimension
    }
