from sqlalchemy import Column, String, DateTime, Integer, Boolean, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from tonic.db.database import Base


class Insight(Base):
    """An insight shown in the user's feed."""
    __tablename__ = "insights"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    key = Column(String, nullable=True)  # Generator key, e.g. "pb_sleep"
    type = Column(String, nullable=False)  # correlation, trend, recommendation, milestone
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    dimension = Column(String, nullable=True)
    data_points_used = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False)
    is_dismissed = Column(Boolean, default=False)

    user = relationship("User", back_populates="insights")

    def to_dict(self):
        return {
            "id": self.id,
            "key": self.key,
            "type": self.type,
            "title": self.title,
            "body": self.body,
            "dimension": self.dimension,
            "data_points_used": self.data_points_used,
            "is_read": bool(self.is_read),
            "is_dismissed": bool(self.is_dismissed),
            "created_at": self.created_at.isoformat() if self.created_at else None
        }


class RecentInsightKey(Base):
    """Recently shown insight keys, oldest first by id."""
    __tablename__ = "recent_insight_keys"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    key = Column(String, nullable=False)
    shown_at = Column(DateTime, default=datetime.utcnow)
