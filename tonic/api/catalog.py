from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tonic.engine.catalog import get_catalog
from tonic.engine.profile import HealthGoal, UserProfile, goal_label
from tonic.engine.recommender import RecommendationEngine

router = APIRouter()


class ExclusionCheckRequest(BaseModel):
    medications: List[str] = []
    allergies: List[str] = []
    is_pregnant: bool = False
    is_breastfeeding: bool = False


@router.get("/supplements")
def list_supplements(category: Optional[str] = None):
    """All catalog supplements, optionally filtered by category."""
    supplements = get_catalog().supplements
    if category:
        supplements = [s for s in supplements if s.category == category]
    return {"supplements": [s.to_dict() for s in supplements]}


@router.get("/goals/{goal}")
def get_goal_supplements(goal: str):
    """Supplements mapped to a health goal, with their weights."""
    try:
        goal_key = HealthGoal(goal).value
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown goal: {goal}")

    entries = get_catalog().goal_mappings(goal_key)
    return {
        "goal": goal_key,
        "label": goal_label(goal_key),
        "supplements": [{"name": e.name, "weight": e.weight} for e in entries],
    }


@router.post("/exclusions")
def check_exclusions(request: ExclusionCheckRequest):
    """
    Which supplements would be excluded for these medications and allergies.

    Lets the client warn before a user adds something manually.
    """
    profile = UserProfile(
        medications=request.medications,
        allergies=request.allergies,
        is_pregnant=request.is_pregnant,
        is_breastfeeding=request.is_breastfeeding,
    )
    engine = RecommendationEngine(get_catalog())
    excluded = engine.find_excluded_supplements(request.medications, request.allergies, profile)
    return {
        "medication_keywords": sorted(engine.extract_medication_keywords(profile)),
        "excluded": sorted(excluded),
    }
