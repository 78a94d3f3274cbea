from sqlalchemy import Column, String, DateTime, Integer, Date, Boolean, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, date
import uuid

from tonic.db.database import Base
from tonic.engine.checkin import DailyCheckIn, SupplementLog, UserStreak


class CheckInRecord(Base):
    """Daily wellness scores and supplement logs. One row per user per day."""
    __tablename__ = "daily_checkins"
    __table_args__ = (
        UniqueConstraint("user_id", "check_in_date", name="uq_checkin_user_date"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False, default=date.today)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Wellness dimensions (0-100)
    sleep_score = Column(Integer, default=50)
    energy_score = Column(Integer, default=50)
    clarity_score = Column(Integer, default=50)
    mood_score = Column(Integer, default=50)
    gut_score = Column(Integer, default=50)
    wellbeing_completed = Column(Boolean, default=False)

    notes = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="check_ins")
    supplement_logs = relationship("SupplementLogRecord", back_populates="check_in", cascade="all, delete-orphan")

    def to_domain(self) -> DailyCheckIn:
        return DailyCheckIn(
            id=self.id,
            check_in_date=self.check_in_date,
            sleep_score=self.sleep_score,
            energy_score=self.energy_score,
            clarity_score=self.clarity_score,
            mood_score=self.mood_score,
            gut_score=self.gut_score,
            wellbeing_completed=bool(self.wellbeing_completed),
            notes=self.notes,
            supplement_logs=[log.to_domain() for log in self.supplement_logs],
        )

    def apply_domain(self, check_in: DailyCheckIn) -> None:
        """Copy scores and logs from an engine check-in onto this row."""
        self.check_in_date = check_in.check_in_date
        self.sleep_score = check_in.sleep_score
        self.energy_score = check_in.energy_score
        self.clarity_score = check_in.clarity_score
        self.mood_score = check_in.mood_score
        self.gut_score = check_in.gut_score
        self.wellbeing_completed = check_in.wellbeing_completed
        self.notes = check_in.notes

        existing = {log.plan_supplement_id: log for log in self.supplement_logs}
        for log in check_in.supplement_logs:
            row = existing.get(log.plan_supplement_id)
            if row is None:
                self.supplement_logs.append(SupplementLogRecord(
                    id=log.id,
                    plan_supplement_id=log.plan_supplement_id,
                    taken=log.taken,
                    logged_at=log.logged_at,
                ))
            else:
                row.taken = log.taken
                row.logged_at = log.logged_at

    def to_dict(self):
        check_in = self.to_domain()
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": str(self.check_in_date),
            "sleep_score": self.sleep_score,
            "energy_score": self.energy_score,
            "clarity_score": self.clarity_score,
            "mood_score": self.mood_score,
            "gut_score": self.gut_score,
            "wellbeing_score": check_in.wellbeing_score,
            "wellbeing_completed": bool(self.wellbeing_completed),
            "notes": self.notes,
            "supplement_logs": [
                {"plan_supplement_id": log.plan_supplement_id, "taken": bool(log.taken)}
                for log in self.supplement_logs
            ],
            "created_at": self.created_at.isoformat() if self.created_at else None
        }


class SupplementLogRecord(Base):
    __tablename__ = "supplement_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    check_in_id = Column(String, ForeignKey("daily_checkins.id"), nullable=False, index=True)
    plan_supplement_id = Column(String, nullable=False)
    taken = Column(Boolean, default=False)
    logged_at = Column(DateTime, nullable=True)

    check_in = relationship("CheckInRecord", back_populates="supplement_logs")

    def to_domain(self) -> SupplementLog:
        return SupplementLog(
            id=self.id,
            plan_supplement_id=self.plan_supplement_id,
            taken=bool(self.taken),
            logged_at=self.logged_at,
        )


class StreakRecord(Base):
    __tablename__ = "streaks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    current_streak = Column(Integer, default=0)
    longest_streak = Column(Integer, default=0)
    last_check_in_date = Column(Date, nullable=True)

    user = relationship("User", back_populates="streak")

    def to_domain(self) -> UserStreak:
        return UserStreak(
            current_streak=self.current_streak or 0,
            longest_streak=self.longest_streak or 0,
            last_check_in_date=self.last_check_in_date,
        )

    def apply_domain(self, streak: UserStreak) -> None:
        self.current_streak = streak.current_streak
        self.longest_streak = streak.longest_streak
        self.last_check_in_date = streak.last_check_in_date

    def to_dict(self):
        return {
            "current_streak": self.current_streak or 0,
            "longest_streak": self.longest_streak or 0,
            "last_check_in_date": str(self.last_check_in_date) if self.last_check_in_date else None,
        }
