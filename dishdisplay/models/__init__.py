from .diner_profile import DinerProfile
from .restaurant import Restaurant
from .visit import DinerVisit
from .review import DinerReview
from .period import LeaderboardPeriod, PeriodStatus
from .points import DinerPoints, EarnedFrom

__all__ = [
    "DinerProfile",
    "Restaurant",
    "DinerVisit",
    "DinerReview",
    "LeaderboardPeriod",
    "PeriodStatus",
    "DinerPoints",
    "EarnedFrom",
]
