from typing import List, Optional, Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field

from tonic.db import get_db
from tonic.engine.profile import (
    AlcoholIntake,
    DietType,
    ExerciseFrequency,
    HealthGoal,
    Sex,
    StressLevel,
    UserProfile,
)
from tonic.models import User
from tonic.services.data_store import DataStore

router = APIRouter()


class UserCreate(BaseModel):
    name: str
    email: Optional[EmailStr] = None
    age: int = Field(ge=0, le=120)
    sex: Sex = Sex.PREFER_NOT_TO_SAY
    is_pregnant: bool = False
    is_breastfeeding: bool = False
    height_inches: Optional[int] = None
    weight_lbs: Optional[int] = None
    # Onboarding answers
    health_goals: List[HealthGoal] = []
    current_supplements: List[str] = []
    medications: List[str] = []
    allergies: List[str] = []
    # Lifestyle quiz
    diet_type: DietType = DietType.OMNIVORE
    exercise_frequency: ExerciseFrequency = ExerciseFrequency.NONE
    coffee_cups_daily: int = Field(default=0, ge=0)
    tea_cups_daily: int = Field(default=0, ge=0)
    energy_drinks_daily: int = Field(default=0, ge=0)
    alcohol_weekly: AlcoholIntake = AlcoholIntake.NONE
    stress_level: StressLevel = StressLevel.MODERATE
    # Baselines (0-100)
    baseline_sleep: int = Field(default=50, ge=0, le=100)
    baseline_energy: int = Field(default=50, ge=0, le=100)
    baseline_clarity: int = Field(default=50, ge=0, le=100)
    baseline_mood: int = Field(default=50, ge=0, le=100)
    baseline_gut: int = Field(default=50, ge=0, le=100)


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    age: Optional[int] = Field(default=None, ge=0, le=120)
    sex: Optional[Sex] = None
    is_pregnant: Optional[bool] = None
    is_breastfeeding: Optional[bool] = None
    height_inches: Optional[int] = None
    weight_lbs: Optional[int] = None
    health_goals: Optional[List[HealthGoal]] = None
    current_supplements: Optional[List[str]] = None
    medications: Optional[List[str]] = None
    allergies: Optional[List[str]] = None
    diet_type: Optional[DietType] = None
    exercise_frequency: Optional[ExerciseFrequency] = None
    coffee_cups_daily: Optional[int] = Field(default=None, ge=0)
    tea_cups_daily: Optional[int] = Field(default=None, ge=0)
    energy_drinks_daily: Optional[int] = Field(default=None, ge=0)
    alcohol_weekly: Optional[AlcoholIntake] = None
    stress_level: Optional[StressLevel] = None
    baseline_sleep: Optional[int] = Field(default=None, ge=0, le=100)
    baseline_energy: Optional[int] = Field(default=None, ge=0, le=100)
    baseline_clarity: Optional[int] = Field(default=None, ge=0, le=100)
    baseline_mood: Optional[int] = Field(default=None, ge=0, le=100)
    baseline_gut: Optional[int] = Field(default=None, ge=0, le=100)


class UserResponse(BaseModel):
    id: str
    name: str
    email: Optional[str]
    age: int
    sex: str
    is_pregnant: bool
    is_breastfeeding: bool
    height_inches: Optional[int]
    weight_lbs: Optional[int]
    health_goals: List[str]
    current_supplements: List[str]
    medications: List[str]
    allergies: List[str]
    diet_type: str
    exercise_frequency: str
    coffee_cups_daily: int
    tea_cups_daily: int
    energy_drinks_daily: int
    alcohol_weekly: str
    stress_level: str
    baselines: Dict[str, int]


def get_user_or_404(user_id: str, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("", response_model=UserResponse)
def create_user(user_data: UserCreate, db: Session = Depends(get_db)):
    """Create a user from onboarding answers."""
    if user_data.email and db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    fields = user_data.model_dump(exclude={"email"})
    user = User(name=user_data.name, email=user_data.email)
    user.apply_profile(UserProfile(**fields))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user.to_dict()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return get_user_or_404(user_id, db).to_dict()


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(user_id: str, user_data: UserUpdate, db: Session = Depends(get_db)):
    """Update profile fields. Plans are not regenerated automatically."""
    user = get_user_or_404(user_id, db)
    updates = user_data.model_dump(exclude_unset=True)

    if "email" in updates:
        user.email = updates.pop("email")

    profile = user.to_profile()
    for field, value in updates.items():
        if value is not None:
            setattr(profile, field, value)

    user = DataStore(db, user_id).save_profile(profile)
    return user.to_dict()
