from typing import List, Optional
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel

from tonic.api.users import get_user_or_404
from tonic.db import get_db
from tonic.engine.wellbeing import WellnessDimension
from tonic.services.checkin_service import CheckInService
from tonic.services.data_store import DataStore

router = APIRouter()


class CheckInCreate(BaseModel):
    sleep_score: int  # 0-100
    energy_score: int
    clarity_score: int
    mood_score: int
    gut_score: int
    check_in_date: Optional[date] = None  # Defaults to today
    notes: Optional[str] = None
    taken_supplement_ids: Optional[List[str]] = None


class SupplementLogUpdate(BaseModel):
    taken: bool
    check_in_date: Optional[date] = None


class InsightPayload(BaseModel):
    key: str
    message: str
    dimension: Optional[str]
    category: str
    title: str


class StreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_check_in_date: Optional[str]


class CheckInResponse(BaseModel):
    id: str
    date: str
    sleep_score: int
    energy_score: int
    clarity_score: int
    mood_score: int
    gut_score: int
    wellbeing_score: float
    wellbeing_completed: bool
    notes: Optional[str]
    supplement_logs: List[dict]


class CheckInSubmitResponse(BaseModel):
    check_in: CheckInResponse
    streak: StreakResponse
    insight: Optional[InsightPayload]


def _check_in_payload(check_in) -> dict:
    return {
        "id": check_in.id,
        "date": str(check_in.check_in_date),
        "sleep_score": check_in.sleep_score,
        "energy_score": check_in.energy_score,
        "clarity_score": check_in.clarity_score,
        "mood_score": check_in.mood_score,
        "gut_score": check_in.gut_score,
        "wellbeing_score": check_in.wellbeing_score,
        "wellbeing_completed": check_in.wellbeing_completed,
        "notes": check_in.notes,
        "supplement_logs": [
            {"plan_supplement_id": log.plan_supplement_id, "taken": log.taken}
            for log in check_in.supplement_logs
        ],
    }


def _streak_payload(streak) -> dict:
    return {
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "last_check_in_date": str(streak.last_check_in_date) if streak.last_check_in_date else None,
    }


@router.post("/{user_id}", response_model=CheckInSubmitResponse)
def submit_checkin(user_id: str, checkin_data: CheckInCreate, db: Session = Depends(get_db)):
    """
    Complete a daily check-in.

    Scores are on a 0-100 scale for sleep, energy, clarity, mood and gut.
    Advances the streak and returns at most one insight.
    """
    get_user_or_404(user_id, db)

    scores = {
        WellnessDimension.SLEEP: checkin_data.sleep_score,
        WellnessDimension.ENERGY: checkin_data.energy_score,
        WellnessDimension.CLARITY: checkin_data.clarity_score,
        WellnessDimension.MOOD: checkin_data.mood_score,
        WellnessDimension.GUT: checkin_data.gut_score,
    }
    for dimension, score in scores.items():
        if not 0 <= score <= 100:
            raise HTTPException(status_code=400, detail=f"{dimension.label} score must be between 0 and 100")

    result = CheckInService(db, user_id).submit(
        scores=scores,
        day=checkin_data.check_in_date,
        notes=checkin_data.notes,
        taken_supplement_ids=checkin_data.taken_supplement_ids,
    )

    return {
        "check_in": _check_in_payload(result.check_in),
        "streak": _streak_payload(result.streak),
        "insight": result.insight.to_dict() if result.insight else None,
    }


@router.put("/{user_id}/supplements/{plan_supplement_id}", response_model=CheckInResponse)
def log_supplement(
    user_id: str,
    plan_supplement_id: str,
    log_data: SupplementLogUpdate,
    db: Session = Depends(get_db)
):
    """Mark a plan supplement as taken (or not) for the day."""
    get_user_or_404(user_id, db)
    plan = DataStore(db, user_id).get_active_plan()
    if plan is None or plan.find(plan_supplement_id) is None:
        raise HTTPException(status_code=404, detail="Plan supplement not found")

    check_in = CheckInService(db, user_id).log_supplement(
        plan_supplement_id, log_data.taken, day=log_data.check_in_date
    )
    return _check_in_payload(check_in)


@router.get("/{user_id}", response_model=List[CheckInResponse])
def get_checkin_history(
    user_id: str,
    limit: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db)
):
    """Check-in history, newest first."""
    get_user_or_404(user_id, db)
    return [_check_in_payload(c) for c in DataStore(db, user_id).get_check_ins(limit=limit)]


@router.get("/{user_id}/streak", response_model=StreakResponse)
def get_streak(user_id: str, db: Session = Depends(get_db)):
    get_user_or_404(user_id, db)
    return _streak_payload(DataStore(db, user_id).get_streak())
