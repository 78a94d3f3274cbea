from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel

from tonic.api.users import get_user_or_404
from tonic.db import get_db
from tonic.services.data_store import DataStore

router = APIRouter()


class InsightResponse(BaseModel):
    id: str
    key: Optional[str]
    type: str
    title: str
    body: str
    dimension: Optional[str]
    data_points_used: Optional[int]
    is_read: bool
    is_dismissed: bool
    created_at: Optional[str]


@router.get("/{user_id}", response_model=List[InsightResponse])
def get_insights(
    user_id: str,
    include_dismissed: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """Insight feed, newest first."""
    get_user_or_404(user_id, db)
    insights = DataStore(db, user_id).get_insights(include_dismissed=include_dismissed, limit=limit)
    return [i.to_dict() for i in insights]


def _get_insight_or_404(user_id: str, insight_id: str, db: Session):
    get_user_or_404(user_id, db)
    insight = DataStore(db, user_id).get_insight(insight_id)
    if not insight:
        raise HTTPException(status_code=404, detail="Insight not found")
    return insight


@router.post("/{user_id}/{insight_id}/read", response_model=InsightResponse)
def mark_read(user_id: str, insight_id: str, db: Session = Depends(get_db)):
    insight = _get_insight_or_404(user_id, insight_id, db)
    insight.is_read = True
    db.commit()
    db.refresh(insight)
    return insight.to_dict()


@router.post("/{user_id}/{insight_id}/dismiss", response_model=InsightResponse)
def dismiss(user_id: str, insight_id: str, db: Session = Depends(get_db)):
    insight = _get_insight_or_404(user_id, insight_id, db)
    insight.is_dismissed = True
    db.commit()
    db.refresh(insight)
    return insight.to_dict()
