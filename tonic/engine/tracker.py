from abc import ABC, abstractmethod
from typing import List, Set

from sqlalchemy.orm import Session

from tonic.models import RecentInsightKey

DEFAULT_MAX_COUNT = 5


class InsightKeyStore(ABC):
    """Ordered storage for shown insight keys, oldest first."""

    @abstractmethod
    def load(self) -> List[str]:
        """Return stored keys, oldest first."""
        pass

    @abstractmethod
    def append(self, key: str) -> None:
        """Store a newly shown key."""
        pass

    @abstractmethod
    def trim(self, max_count: int) -> None:
        """Drop all but the newest `max_count` keys."""
        pass


class InMemoryInsightKeyStore(InsightKeyStore):
    def __init__(self, keys: List[str] = None):
        self._keys: List[str] = list(keys or [])

    def load(self) -> List[str]:
        return list(self._keys)

    def append(self, key: str) -> None:
        self._keys.append(key)

    def trim(self, max_count: int) -> None:
        if len(self._keys) > max_count:
            self._keys = self._keys[-max_count:]


class SqlInsightKeyStore(InsightKeyStore):
    """Per-user keys in the recent_insight_keys table; survives restarts."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _rows(self) -> List[RecentInsightKey]:
        return self.db.query(RecentInsightKey).filter(
            RecentInsightKey.user_id == self.user_id
        ).order_by(RecentInsightKey.id).all()

    def load(self) -> List[str]:
        return [row.key for row in self._rows()]

    def append(self, key: str) -> None:
        self.db.add(RecentInsightKey(user_id=self.user_id, key=key))
        self.db.commit()

    def trim(self, max_count: int) -> None:
        rows = self._rows()
        if len(rows) <= max_count:
            return
        for row in rows[:len(rows) - max_count]:
            self.db.delete(row)
        self.db.commit()


class RecentInsightTracker:
    """
    Bounded window of recently shown insight keys.

    The insight generator skips any key in this window, so the same insight
    is not repeated within the last `max_count` check-ins.
    """

    def __init__(self, store: InsightKeyStore, max_count: int = DEFAULT_MAX_COUNT):
        self.store = store
        self.max_count = max_count

    def record(self, key: str) -> None:
        self.store.append(key)
        self.store.trim(self.max_count)

    def recent_keys(self) -> Set[str]:
        return set(self.store.load()[-self.max_count:])
