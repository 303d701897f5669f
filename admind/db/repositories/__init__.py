from admind.db.repositories.ads import AdsRepository
from admind.db.repositories.growth_metrics import GrowthMetricsRepository
from admind.db.repositories.meetings import MeetingsRepository
from admind.db.repositories.profiles import ProfilesRepository

__all__ = [
    "AdsRepository",
    "GrowthMetricsRepository",
    "MeetingsRepository",
    "ProfilesRepository",
]
