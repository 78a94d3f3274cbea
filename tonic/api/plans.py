from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel

from tonic.api.users import get_user_or_404
from tonic.db import get_db
from tonic.engine.catalog import get_catalog
from tonic.engine.recommender import RecommendationEngine
from tonic.services.data_store import DataStore

router = APIRouter()


class PlanSupplementResponse(BaseModel):
    id: str
    supplement_id: Optional[str]
    name: str
    dosage: str
    dosage_mg: Optional[float]
    timing: str
    frequency: str
    tier: str
    matched_goals: List[str]
    goal_overlap_score: int
    is_included: bool
    reasoning: Optional[str]
    research_note: Optional[str]
    category: str
    sort_order: int


class PlanResponse(BaseModel):
    id: str
    created_at: str
    version: int
    is_active: bool
    ai_reasoning: Optional[str]
    supplements: List[PlanSupplementResponse]


class AddSupplementRequest(BaseModel):
    name: str  # Catalog name or id


@router.post("/{user_id}", response_model=PlanResponse)
def generate_plan(user_id: str, db: Session = Depends(get_db)):
    """
    Generate a new plan from the user's profile.

    The previous active plan is kept for history but deactivated.
    """
    user = get_user_or_404(user_id, db)
    plan = RecommendationEngine(get_catalog()).generate_plan(user.to_profile())
    saved = DataStore(db, user_id).save_plan(plan)
    return saved.to_dict()


@router.get("/{user_id}", response_model=PlanResponse)
def get_active_plan(user_id: str, db: Session = Depends(get_db)):
    get_user_or_404(user_id, db)
    plan = DataStore(db, user_id).get_active_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No active plan")
    return plan.to_dict()


@router.post("/{user_id}/supplements", response_model=PlanSupplementResponse)
def add_supplement(user_id: str, request: AddSupplementRequest, db: Session = Depends(get_db)):
    """
    Add a catalog supplement to the active plan.

    Supplements blocked by the user's medications, allergies or conditions
    are refused with 409. Re-adding a removed supplement re-includes it.
    """
    user = get_user_or_404(user_id, db)
    store = DataStore(db, user_id)
    plan = store.get_active_plan()
    if plan is None:
        raise HTTPException(status_code=404, detail="No active plan")

    catalog = get_catalog()
    supplement = catalog.find(request.name)
    if supplement is None:
        raise HTTPException(status_code=404, detail=f"Unknown supplement: {request.name}")

    profile = user.to_profile()
    engine = RecommendationEngine(catalog)
    excluded = engine.find_excluded_supplements(profile.medications, profile.allergies, profile)
    if supplement.name in excluded:
        raise HTTPException(
            status_code=409,
            detail=f"{supplement.name} isn't safe with your medications, allergies or conditions"
        )

    item = engine.build_plan_supplement(supplement, profile, plan.supplements)
    existing = plan.find(item.id)
    if existing is not None:
        existing.is_included = True
    else:
        plan.supplements.append(item)

    store.save_plan(plan)
    return item.to_dict()


@router.delete("/{user_id}/supplements/{plan_supplement_id}", response_model=PlanSupplementResponse)
def remove_supplement(user_id: str, plan_supplement_id: str, db: Session = Depends(get_db)):
    """Exclude a supplement from the active plan. Its history is kept."""
    get_user_or_404(user_id, db)
    store = DataStore(db, user_id)
    plan = store.get_active_plan()
    if plan is None or not plan.remove_supplement(plan_supplement_id):
        raise HTTPException(status_code=404, detail="Plan supplement not found")

    store.save_plan(plan)
    return plan.find(plan_supplement_id).to_dict()
