from sqlalchemy import Column, String, DateTime, Integer, Float, Boolean, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from tonic.db.database import Base
from tonic.engine.plan import (
    PlanSupplement,
    SupplementFrequency,
    SupplementPlan,
    SupplementTier,
    SupplementTiming,
)


class PlanRecord(Base):
    """A stored supplement plan. Only one plan per user is active at a time."""
    __tablename__ = "plans"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    version = Column(Integer, default=1)
    is_active = Column(Boolean, default=True)
    ai_reasoning = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="plans")
    supplements = relationship(
        "PlanSupplementRecord",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanSupplementRecord.sort_order",
    )

    @classmethod
    def from_domain(cls, plan: SupplementPlan, user_id: str) -> "PlanRecord":
        record = cls(
            id=plan.id,
            user_id=user_id,
            created_at=plan.created_at,
            version=plan.version,
            is_active=plan.is_active,
            ai_reasoning=plan.ai_reasoning,
        )
        record.supplements = [PlanSupplementRecord.from_domain(s) for s in plan.supplements]
        return record

    def to_domain(self) -> SupplementPlan:
        return SupplementPlan(
            id=self.id,
            created_at=self.created_at,
            version=self.version,
            is_active=self.is_active,
            ai_reasoning=self.ai_reasoning,
            supplements=[s.to_domain() for s in self.supplements],
        )

    def to_dict(self):
        return self.to_domain().to_dict()


class PlanSupplementRecord(Base):
    """One line of a stored plan. Removal flips is_included; rows are never deleted."""
    __tablename__ = "plan_supplements"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    plan_id = Column(String, ForeignKey("plans.id"), nullable=False, index=True)
    supplement_id = Column(String, nullable=True)
    name = Column(String, nullable=False)
    dosage = Column(String, nullable=False)
    dosage_mg = Column(Float, nullable=True)
    timing = Column(String, nullable=False)
    frequency = Column(String, default=SupplementFrequency.DAILY.value)
    tier = Column(String, default=SupplementTier.SUPPORTING.value)
    matched_goals = Column(JSON, default=list)
    goal_overlap_score = Column(Integer, default=0)
    is_included = Column(Boolean, default=True)
    reasoning = Column(Text, nullable=True)
    research_note = Column(Text, nullable=True)
    category = Column(String, default="")
    sort_order = Column(Integer, default=0)

    plan = relationship("PlanRecord", back_populates="supplements")

    @classmethod
    def from_domain(cls, item: PlanSupplement) -> "PlanSupplementRecord":
        return cls(
            id=item.id,
            supplement_id=item.supplement_id,
            name=item.name,
            dosage=item.dosage,
            dosage_mg=item.dosage_mg,
            timing=item.timing.value,
            frequency=item.frequency.value,
            tier=item.tier.value,
            matched_goals=list(item.matched_goals),
            goal_overlap_score=item.goal_overlap_score,
            is_included=item.is_included,
            reasoning=item.reasoning,
            research_note=item.research_note,
            category=item.category,
            sort_order=item.sort_order,
        )

    def to_domain(self) -> PlanSupplement:
        return PlanSupplement(
            id=self.id,
            supplement_id=self.supplement_id,
            name=self.name,
            dosage=self.dosage,
            dosage_mg=self.dosage_mg,
            timing=SupplementTiming(self.timing),
            frequency=SupplementFrequency(self.frequency or SupplementFrequency.DAILY.value),
            tier=SupplementTier(self.tier or SupplementTier.SUPPORTING.value),
            matched_goals=list(self.matched_goals or []),
            goal_overlap_score=self.goal_overlap_score or 0,
            is_included=bool(self.is_included),
            reasoning=self.reasoning,
            research_note=self.research_note,
            category=self.category or "",
            sort_order=self.sort_order or 0,
        )
