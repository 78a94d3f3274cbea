from sqlalchemy import Column, String, DateTime, JSON, Integer, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from tonic.db.database import Base
from tonic.engine.profile import (
    AlcoholIntake,
    DietType,
    ExerciseFrequency,
    HealthGoal,
    Sex,
    StressLevel,
    UserProfile,
)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Demographics (imperial units)
    age = Column(Integer, nullable=False, default=30)
    sex = Column(String, nullable=False, default=Sex.PREFER_NOT_TO_SAY.value)
    is_pregnant = Column(Boolean, default=False)
    is_breastfeeding = Column(Boolean, default=False)
    height_inches = Column(Integer, nullable=True)
    weight_lbs = Column(Integer, nullable=True)

    # Onboarding answers
    health_goals = Column(JSON, default=list)  # ["sleep", "focus"]
    current_supplements = Column(JSON, default=list)
    medications = Column(JSON, default=list)
    allergies = Column(JSON, default=list)

    # Lifestyle
    diet_type = Column(String, default=DietType.OMNIVORE.value)
    exercise_frequency = Column(String, default=ExerciseFrequency.NONE.value)
    coffee_cups_daily = Column(Integer, default=0)
    tea_cups_daily = Column(Integer, default=0)
    energy_drinks_daily = Column(Integer, default=0)
    alcohol_weekly = Column(String, default=AlcoholIntake.NONE.value)
    stress_level = Column(String, default=StressLevel.MODERATE.value)

    # Baseline wellness scores (0-100)
    baseline_sleep = Column(Integer, default=50)
    baseline_energy = Column(Integer, default=50)
    baseline_clarity = Column(Integer, default=50)
    baseline_mood = Column(Integer, default=50)
    baseline_gut = Column(Integer, default=50)

    # Relationships
    plans = relationship("PlanRecord", back_populates="user", cascade="all, delete-orphan")
    check_ins = relationship("CheckInRecord", back_populates="user", cascade="all, delete-orphan")
    streak = relationship("StreakRecord", back_populates="user", uselist=False, cascade="all, delete-orphan")
    insights = relationship("Insight", back_populates="user", cascade="all, delete-orphan")

    def to_profile(self) -> UserProfile:
        """Engine-side profile for this user."""
        goals = []
        for goal in self.health_goals or []:
            try:
                goals.append(HealthGoal(goal))
            except ValueError:
                continue  # Goals removed from the app since onboarding

        return UserProfile(
            name=self.name,
            age=self.age if self.age is not None else 30,
            sex=Sex(self.sex) if self.sex else Sex.PREFER_NOT_TO_SAY,
            is_pregnant=bool(self.is_pregnant),
            is_breastfeeding=bool(self.is_breastfeeding),
            height_inches=self.height_inches,
            weight_lbs=self.weight_lbs,
            health_goals=goals,
            current_supplements=list(self.current_supplements or []),
            medications=list(self.medications or []),
            allergies=list(self.allergies or []),
            diet_type=DietType(self.diet_type) if self.diet_type else DietType.OMNIVORE,
            exercise_frequency=ExerciseFrequency(self.exercise_frequency or ExerciseFrequency.NONE.value),
            coffee_cups_daily=self.coffee_cups_daily or 0,
            tea_cups_daily=self.tea_cups_daily or 0,
            energy_drinks_daily=self.energy_drinks_daily or 0,
            alcohol_weekly=AlcoholIntake(self.alcohol_weekly or AlcoholIntake.NONE.value),
            stress_level=StressLevel(self.stress_level or StressLevel.MODERATE.value),
            baseline_sleep=self.baseline_sleep if self.baseline_sleep is not None else 50,
            baseline_energy=self.baseline_energy if self.baseline_energy is not None else 50,
            baseline_clarity=self.baseline_clarity if self.baseline_clarity is not None else 50,
            baseline_mood=self.baseline_mood if self.baseline_mood is not None else 50,
            baseline_gut=self.baseline_gut if self.baseline_gut is not None else 50,
        )

    def apply_profile(self, profile: UserProfile) -> None:
        """Copy an engine profile onto this row."""
        self.name = profile.name or self.name
        self.age = profile.age
        self.sex = Sex(profile.sex).value
        self.is_pregnant = profile.is_pregnant
        self.is_breastfeeding = profile.is_breastfeeding
        self.height_inches = profile.height_inches
        self.weight_lbs = profile.weight_lbs
        self.health_goals = profile.goal_keys
        self.current_supplements = list(profile.current_supplements)
        self.medications = list(profile.medications)
        self.allergies = list(profile.allergies)
        self.diet_type = DietType(profile.diet_type).value
        self.exercise_frequency = ExerciseFrequency(profile.exercise_frequency).value
        self.coffee_cups_daily = profile.coffee_cups_daily
        self.tea_cups_daily = profile.tea_cups_daily
        self.energy_drinks_daily = profile.energy_drinks_daily
        self.alcohol_weekly = AlcoholIntake(profile.alcohol_weekly).value
        self.stress_level = StressLevel(profile.stress_level).value
        self.baseline_sleep = profile.baseline_sleep
        self.baseline_energy = profile.baseline_energy
        self.baseline_clarity = profile.baseline_clarity
        self.baseline_mood = profile.baseline_mood
        self.baseline_gut = profile.baseline_gut

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "sex": self.sex,
            "is_pregnant": self.is_pregnant,
            "is_breastfeeding": self.is_breastfeeding,
            "height_inches": self.height_inches,
            "weight_lbs": self.weight_lbs,
            "health_goals": self.health_goals or [],
            "current_supplements": self.current_supplements or [],
            "medications": self.medications or [],
            "allergies": self.allergies or [],
            "diet_type": self.diet_type,
            "exercise_frequency": self.exercise_frequency,
            "coffee_cups_daily": self.coffee_cups_daily,
            "tea_cups_daily": self.tea_cups_daily,
            "energy_drinks_daily": self.energy_drinks_daily,
            "alcohol_weekly": self.alcohol_weekly,
            "stress_level": self.stress_level,
            "baselines": {
                "sleep": self.baseline_sleep,
                "energy": self.baseline_energy,
                "clarity": self.baseline_clarity,
                "mood": self.baseline_mood,
                "gut": self.baseline_gut,
            },
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
