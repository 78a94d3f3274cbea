from .user import User
from .plan import PlanRecord, PlanSupplementRecord
from .checkin import CheckInRecord, SupplementLogRecord, StreakRecord
from .insight import Insight, RecentInsightKey
