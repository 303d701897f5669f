from enum import Enum


class AdPlatformEnum(str, Enum):
    facebook = "facebook"
    google = "google"
    instagram = "instagram"
    linkedin = "linkedin"
    twitter = "twitter"


class AdStatusEnum(str, Enum):
    draft = "draft"
    active = "active"
    paused = "paused"
    completed = "completed"


class MeetingTypeEnum(str, Enum):
    consultation = "consultation"
    strategy = "strategy"
    review = "review"
    demo = "demo"
    followup = "followup"


class MeetingStatusEnum(str, Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no-show"


class GrowthMetricNameEnum(str, Enum):
    revenue = "revenue"
    conversions = "conversions"
